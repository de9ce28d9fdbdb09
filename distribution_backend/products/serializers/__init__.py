from .product import ProductSerializer
from .product_batch import ProductBatchSerializer

__all__ = ["ProductSerializer", "ProductBatchSerializer"]

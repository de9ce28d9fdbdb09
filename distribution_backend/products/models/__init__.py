"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .supplier import Supplier
from .product import Product
from .product_batch import ProductBatch
from .stock_movement import StockMovement

__all__ = [
    "Supplier",
    "Product",
    "ProductBatch",
    "StockMovement",
]

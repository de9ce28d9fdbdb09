# products/apps.py

"""
PRODUCTS APP CONFIG

Catalogue + batch-level inventory:
- Supplier / Product / ProductBatch
- StockMovement audit trail
- Batch ledger service (the only writer of batch quantities)
"""

from django.apps import AppConfig


class ProductsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "products"
    verbose_name = "Products & Batches"

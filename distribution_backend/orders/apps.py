# orders/apps.py

"""
ORDERS APP CONFIG

Order fulfillment core:
- FEFO allocation across expiry-dated batches
- Atomic order commit (items, batch decrements, customer credit)
- Lifecycle + compensation (cancellation, payments, returns)
"""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
    verbose_name = "Order Fulfillment"

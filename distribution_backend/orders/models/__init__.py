"""
PATH: orders/models/__init__.py

Orders models export surface.
"""

from .display_sequence import DisplaySequence
from .order import Order
from .order_item import OrderItem
from .payment import Payment
from .order_return import OrderReturn, ReturnItem
from .delivery import Delivery, Vehicle

__all__ = [
    "DisplaySequence",
    "Order",
    "OrderItem",
    "Payment",
    "OrderReturn",
    "ReturnItem",
    "Delivery",
    "Vehicle",
]

# orders/services/requests.py

"""
Typed command payloads handed from the API boundary to the services.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True)
class OrderLineRequest:
    """
    One requested line.

    batch_id set   -> commit against that batch (operator confirmed a quote)
    batch_id unset -> FEFO-allocate inside the order transaction
    unit_price     -> only meaningful with batch_id; defaults to batch selling_price
    """

    product_id: UUID
    quantity: int
    discount: Decimal = Decimal("0.00")
    batch_id: UUID | None = None
    unit_price: Decimal | None = None


@dataclass(frozen=True)
class ReturnLineRequest:
    product_id: UUID
    batch_id: UUID
    quantity: int
    reason: str

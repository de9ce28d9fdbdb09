# products/services/batch_ledger.py

"""
BATCH LEDGER

Purpose:
- Single write path for ProductBatch.current_quantity.
- FEFO-ordered view of the batches that can still supply a product.
- Every quantity change leaves an immutable StockMovement row.

CONCURRENCY RULES:
- consume() is a compare-and-decrement:
    UPDATE ... SET current_quantity = current_quantity - q
    WHERE id = ? AND is_active AND current_quantity >= q
  Zero rows updated means another writer got there first; the caller's
  transaction must abort (InsufficientStockError).
- restock() / adjust() are blind atomic increments (F expressions).
- No read-modify-write of quantities happens in Python.

Integer-only quantities (StockMovement.quantity is PositiveIntegerField).
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import F, Sum

from products.models import ProductBatch, StockMovement

logger = logging.getLogger(__name__)


# ============================================================
# DOMAIN ERRORS
# ============================================================

class BatchLedgerError(Exception):
    pass


class BatchNotFoundError(BatchLedgerError):
    pass


class InsufficientStockError(BatchLedgerError):
    """
    Raised when stock cannot cover a request.

    Carries enough context for the API envelope:
    product_id and/or batch_id, required and available quantities.
    """

    code = "INSUFFICIENT_STOCK"

    def __init__(self, message, *, product_id=None, batch_id=None, required=0, available=0):
        super().__init__(message)
        self.message = message
        self.product_id = product_id
        self.batch_id = batch_id
        self.required = int(required)
        self.available = int(available)

    @property
    def details(self) -> dict:
        data = {"required": self.required, "available": self.available}
        if self.product_id is not None:
            data["product_id"] = str(self.product_id)
        if self.batch_id is not None:
            data["batch_id"] = str(self.batch_id)
        return data


def _to_int_qty(value) -> int:
    """
    Quantity normalizer.
    HARD RULE: quantities are integer units in this system.
    """
    if isinstance(value, bool):
        raise ValueError("quantity must be a whole integer unit")

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        s = value.strip()
        if s.lstrip("-").isdecimal():
            return int(s)

    raise ValueError("quantity must be a whole integer unit")


# ============================================================
# READS
# ============================================================

def fefo_ordering():
    """
    Earliest expiry first; undated batches last.
    Ties: oldest receipt, then creation time, then id (deterministic).
    """
    return (
        F("expiry_date").asc(nulls_last=True),
        "received_date",
        "created_at",
        "id",
    )


def list_active_batches(product_id, *, for_update: bool = False) -> list[ProductBatch]:
    """
    Active batches of a product that still hold stock, in FEFO order.

    for_update=True row-locks the batches (must run inside transaction.atomic).
    """
    qs = ProductBatch.objects.filter(
        product_id=product_id,
        is_active=True,
        current_quantity__gt=0,
    ).select_related("supplier")

    if for_update:
        qs = qs.select_for_update(of=("self",))

    return list(qs.order_by(*fefo_ordering()))


def product_total_stock(product_id) -> int:
    total = (
        ProductBatch.objects.filter(
            product_id=product_id,
            is_active=True,
            current_quantity__gt=0,
        )
        .aggregate(total=Sum("current_quantity"))
        .get("total")
    )
    return int(total or 0)


# ============================================================
# WRITES
# ============================================================

def _record_movement(*, batch_id, product_id, direction, reason, quantity, order=None, user=None):
    return StockMovement.objects.create(
        batch_id=batch_id,
        product_id=product_id,
        direction=direction,
        reason=reason,
        quantity=quantity,
        order=order,
        performed_by=user,
    )


def _batch_product_id(batch_id):
    product_id = (
        ProductBatch.objects.filter(pk=batch_id)
        .values_list("product_id", flat=True)
        .first()
    )
    if product_id is None:
        raise BatchNotFoundError(f"Batch {batch_id} not found")
    return product_id


@transaction.atomic
def consume(batch_id, quantity, *, order=None, user=None) -> StockMovement:
    """
    Take quantity units out of one batch, or fail without touching it.
    """
    qty = _to_int_qty(quantity)
    if qty <= 0:
        raise ValueError("quantity must be greater than zero")

    updated = ProductBatch.objects.filter(
        pk=batch_id,
        is_active=True,
        current_quantity__gte=qty,
    ).update(current_quantity=F("current_quantity") - qty)

    if not updated:
        row = (
            ProductBatch.objects.filter(pk=batch_id)
            .values("product_id", "current_quantity", "is_active", "batch_number")
            .first()
        )
        if row is None:
            raise BatchNotFoundError(f"Batch {batch_id} not found")

        available = max(int(row["current_quantity"] or 0), 0) if row["is_active"] else 0
        logger.warning(
            "Batch decrement rejected",
            extra={
                "batch_id": str(batch_id),
                "required": qty,
                "available": available,
            },
        )
        raise InsufficientStockError(
            f"Insufficient stock in batch {row['batch_number']}. "
            f"Requested: {qty}, Available: {available}",
            product_id=row["product_id"],
            batch_id=batch_id,
            required=qty,
            available=available,
        )

    return _record_movement(
        batch_id=batch_id,
        product_id=_batch_product_id(batch_id),
        direction=StockMovement.Direction.OUT,
        reason=StockMovement.Reason.ORDER,
        quantity=qty,
        order=order,
        user=user,
    )


@transaction.atomic
def restock(batch_id, quantity, *, reason, order=None, user=None) -> StockMovement:
    """
    Put quantity units back into one batch (cancellation / return).
    """
    qty = _to_int_qty(quantity)
    if qty <= 0:
        raise ValueError("quantity must be greater than zero")

    if reason not in (StockMovement.Reason.CANCELLATION, StockMovement.Reason.RETURN):
        raise ValueError(f"restock reason must be CANCELLATION or RETURN, got {reason}")

    updated = ProductBatch.objects.filter(pk=batch_id).update(
        current_quantity=F("current_quantity") + qty
    )
    if not updated:
        raise BatchNotFoundError(f"Batch {batch_id} not found")

    return _record_movement(
        batch_id=batch_id,
        product_id=_batch_product_id(batch_id),
        direction=StockMovement.Direction.IN,
        reason=reason,
        quantity=qty,
        order=order,
        user=user,
    )


@transaction.atomic
def adjust(batch_id, delta, *, user=None) -> StockMovement:
    """
    Manual stock correction.

    delta:
      +N -> IN adjustment
      -N -> OUT adjustment (may drive current_quantity negative)
    """
    amount = _to_int_qty(delta)
    if amount == 0:
        raise ValueError("delta cannot be 0")

    updated = ProductBatch.objects.filter(pk=batch_id).update(
        current_quantity=F("current_quantity") + amount
    )
    if not updated:
        raise BatchNotFoundError(f"Batch {batch_id} not found")

    logger.info(
        "Batch adjusted",
        extra={"batch_id": str(batch_id), "delta": amount},
    )

    return _record_movement(
        batch_id=batch_id,
        product_id=_batch_product_id(batch_id),
        direction=StockMovement.Direction.IN if amount > 0 else StockMovement.Direction.OUT,
        reason=StockMovement.Reason.ADJUSTMENT,
        quantity=abs(amount),
        user=user,
    )

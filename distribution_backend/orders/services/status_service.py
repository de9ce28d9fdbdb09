# orders/services/status_service.py

"""
ORDER STATUS SERVICE

Drives Order.status through orders.services.order_lifecycle and applies
the side effects of each move in the same transaction as the status write.

-> cancelled
   - every OrderItem's batch is restocked (movement reason CANCELLATION)
   - credit orders not fully paid release their outstanding amount
     (total_amount - paid so far, clamped at zero)
   - payments are NOT refunded; a note flags manual refund processing
-> delivered
   - the attached Delivery (if any) is closed with today's date and its
     vehicle is made available again

Terminal states reject every further transition, so side effects can
never be applied twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from customers.services import credit
from orders.models import Delivery, Order, Vehicle
from products.models import StockMovement
from products.services import batch_ledger

from .exceptions import OrderNotFoundError, OrderValidationError
from .order_lifecycle import KNOWN_STATES, validate_transition

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class StatusChange:
    order: Order
    previous_status: str
    status: str
    inventory_restored: bool = False
    credit_released: Decimal = ZERO


def lock_order(order_id) -> Order:
    """
    Row-lock an order for the rest of the current transaction.
    """
    order = Order.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise OrderNotFoundError(f"Order {order_id} not found")
    return order


def _paid_total(order: Order) -> Decimal:
    total = order.payments.aggregate(total=Sum("amount")).get("total")
    return Decimal(total or ZERO)


def _append_note(existing: str, text: str, *, separator: str = "\n") -> str:
    existing = existing or ""
    if not existing:
        return text
    return f"{existing}{separator}{text}"


# ============================================================
# SIDE EFFECTS
# ============================================================

def _cancel(order: Order, *, user=None) -> Decimal:
    for item in order.items.all():
        batch_ledger.restock(
            item.batch_id,
            item.quantity,
            reason=StockMovement.Reason.CANCELLATION,
            order=order,
            user=user,
        )

    released = ZERO
    paid = _paid_total(order)

    if (
        order.payment_type == Order.PAYMENT_TYPE_CREDIT
        and order.payment_status != Order.PAYMENT_STATUS_PAID
    ):
        released = max(Decimal(order.total_amount) - paid, ZERO)
        if released > ZERO:
            credit.release(customer_id=order.customer_id, amount=released)

    payment_count = order.payments.count()
    if payment_count:
        order.notes = _append_note(
            order.notes,
            f"Order cancelled with {payment_count} payments recorded. "
            f"Manual refund processing required.",
        )
        logger.warning(
            "Cancelled order has payments; manual refund required",
            extra={
                "order_id": str(order.id),
                "order_code": order.code,
                "payment_count": payment_count,
                "paid_total": str(paid),
            },
        )

    return released


def _mark_delivered(order: Order) -> None:
    delivery = (
        Delivery.objects.select_for_update()
        .filter(order=order)
        .first()
    )
    if delivery is None:
        return

    delivery.status = Delivery.STATUS_DELIVERED
    delivery.delivery_date = timezone.localdate()
    delivery.save(update_fields=["status", "delivery_date"])

    if delivery.vehicle_id:
        Vehicle.objects.filter(pk=delivery.vehicle_id).update(
            status=Vehicle.STATUS_AVAILABLE
        )


# ============================================================
# PUBLIC OPERATIONS
# ============================================================

@transaction.atomic
def update_order_status(*, order_id, new_status: str, user=None) -> StatusChange:
    target = (new_status or "").strip().lower()
    if target not in KNOWN_STATES:
        raise OrderValidationError(
            f"Unknown status: {new_status!r}",
            details={"allowed": ", ".join(sorted(KNOWN_STATES))},
        )

    order = lock_order(order_id)
    previous = order.status

    validate_transition(order=order, target_status=target)

    inventory_restored = False
    released = ZERO

    if target == Order.STATUS_CANCELLED:
        released = _cancel(order, user=user)
        inventory_restored = True
    elif target == Order.STATUS_DELIVERED:
        _mark_delivered(order)

    order.status = target
    order.save(update_fields=["status", "notes", "updated_at"])

    logger.info(
        "Order status changed",
        extra={
            "order_id": str(order.id),
            "order_code": order.code,
            "from_status": previous,
            "to_status": target,
            "inventory_restored": inventory_restored,
        },
    )

    return StatusChange(
        order=order,
        previous_status=previous,
        status=target,
        inventory_restored=inventory_restored,
        credit_released=released,
    )


@transaction.atomic
def add_order_notes(*, order_id, note: str) -> Order:
    """
    Append a timestamped note: "[YYYY-MM-DD HH:MM:SS] text",
    separated from earlier notes by a blank line.
    """
    text = (note or "").strip()
    if not text:
        raise OrderValidationError("note cannot be empty")

    order = lock_order(order_id)

    stamp = timezone.localtime().strftime("%Y-%m-%d %H:%M:%S")
    order.notes = _append_note(order.notes, f"[{stamp}] {text}", separator="\n\n")
    order.save(update_fields=["notes", "updated_at"])

    return order

# orders/services/payment_service.py

"""
ORDER PAYMENT SERVICE

Purpose:
- Record money received against an order (append-only Payment rows).
- Recompute Order.payment_status from the cumulative paid total.
- Reduce customer credit on credit orders.

Rules:
- amount > 0, method in cash / cheque / bank_transfer, order not cancelled
- |paid - total| <= PAYMENT_TOLERANCE -> paid
- paid > total                       -> paid (overpayment logged, not rejected)
- paid > 0                           -> partial
- payment_status never moves backwards
- credit release covers only what was still outstanding before this
  payment, and the balance is clamped at zero
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.db import transaction
from django.db.models import Sum

from customers.services import credit
from orders.models import Order, Payment

from .exceptions import OrderValidationError
from .identifiers import PREFIX_PAYMENT, next_code
from .status_service import lock_order

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

PAYMENT_METHODS = {value for value, _label in Payment.METHOD_CHOICES}


@dataclass(frozen=True)
class PaymentResult:
    payment: Payment
    payment_status: str
    total_paid: Decimal
    overpaid: bool = False
    credit_released: Decimal = ZERO


def _money(value) -> Decimal:
    try:
        return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise OrderValidationError(f"Invalid amount: {value!r}") from exc


def payment_tolerance() -> Decimal:
    fulfillment = getattr(settings, "FULFILLMENT", {}) or {}
    return Decimal(str(fulfillment.get("PAYMENT_TOLERANCE", "0.01")))


def resolve_payment_status(*, total_paid: Decimal, total_amount: Decimal) -> str:
    """
    Pure status rule (no monotonicity; see record_payment).
    """
    total_paid = Decimal(total_paid)
    total_amount = Decimal(total_amount)

    if abs(total_paid - total_amount) <= payment_tolerance():
        return Order.PAYMENT_STATUS_PAID
    if total_paid > total_amount:
        return Order.PAYMENT_STATUS_PAID
    if total_paid > ZERO:
        return Order.PAYMENT_STATUS_PARTIAL
    return Order.PAYMENT_STATUS_PENDING


def _paid_total(order: Order) -> Decimal:
    total = Payment.objects.filter(order=order).aggregate(total=Sum("amount")).get("total")
    return Decimal(total or ZERO)


@transaction.atomic
def record_payment(
    *,
    order_id,
    amount,
    method: str,
    reference_number: str = "",
    notes: str = "",
    received_by=None,
) -> PaymentResult:
    amount = _money(amount)
    if amount <= ZERO:
        raise OrderValidationError("Payment amount must be greater than zero")

    method = (method or "").strip().lower()
    if method not in PAYMENT_METHODS:
        raise OrderValidationError(
            f"Unknown payment method: {method!r}",
            details={"allowed": ", ".join(sorted(PAYMENT_METHODS))},
        )

    order = lock_order(order_id)

    if order.status == Order.STATUS_CANCELLED:
        raise OrderValidationError(
            f"Order {order.code} is cancelled; payments cannot be recorded",
            details={"status": order.status},
        )

    total_amount = Decimal(order.total_amount)
    paid_before = _paid_total(order)

    payment = Payment.objects.create(
        code=next_code(PREFIX_PAYMENT),
        order=order,
        amount=amount,
        method=method,
        reference_number=(reference_number or "").strip(),
        notes=(notes or "").strip(),
        received_by=received_by,
    )

    total_paid = paid_before + amount
    overpaid = total_paid - total_amount > payment_tolerance()

    status = resolve_payment_status(total_paid=total_paid, total_amount=total_amount)
    if Order.PAYMENT_STATUS_RANK[status] < Order.PAYMENT_STATUS_RANK[order.payment_status]:
        status = order.payment_status

    if status != order.payment_status:
        order.payment_status = status
        order.save(update_fields=["payment_status", "updated_at"])

    released = ZERO
    if order.payment_type == Order.PAYMENT_TYPE_CREDIT:
        outstanding_before = max(total_amount - paid_before, ZERO)
        released = min(amount, outstanding_before)
        if released > ZERO:
            credit.release(customer_id=order.customer_id, amount=released)

    if overpaid:
        logger.warning(
            "Order overpaid",
            extra={
                "order_id": str(order.id),
                "order_code": order.code,
                "total_amount": str(total_amount),
                "total_paid": str(total_paid),
            },
        )

    logger.info(
        "Payment recorded",
        extra={
            "order_id": str(order.id),
            "payment_code": payment.code,
            "amount": str(amount),
            "method": method,
            "payment_status": status,
        },
    )

    return PaymentResult(
        payment=payment,
        payment_status=status,
        total_paid=total_paid,
        overpaid=overpaid,
        credit_released=released,
    )

# orders/services/order_transaction.py

"""
ORDER TRANSACTION MANAGER (APPLICATION SERVICE)

Purpose:
- Turn a cart of lines into a durable Order + OrderItems.
- Decrement every touched batch through the batch ledger.
- Charge customer credit for credit orders.

Hard rules:
- ONE transaction: order row, items, batch decrements, movements and credit
  succeed together or roll back together.
- The allocator's quote is never trusted: every line is re-validated by the
  ledger's compare-and-decrement. A failed decrement aborts the whole order
  with InsufficientStockError naming the batch.
- Lines without a batch are FEFO-allocated here with the batch rows locked,
  then committed exactly like quoted lines.
- Money values are computed server-side (2dp, ROUND_HALF_UP).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import transaction

from customers.models import Customer
from customers.services import credit
from orders.models import Order, OrderItem
from products.models import ProductBatch
from products.services import batch_ledger

from .exceptions import (
    BatchNotFoundError,
    CustomerNotFoundError,
    OrderValidationError,
)
from .fefo_allocator import allocate
from .identifiers import PREFIX_ORDER, PREFIX_ORDER_ITEM, next_code, next_codes
from .requests import OrderLineRequest

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

PAYMENT_TYPES = {value for value, _label in Order.PAYMENT_TYPE_CHOICES}


def _money(value, *, field: str, index: int | None = None) -> Decimal:
    try:
        return Decimal(str(value if value is not None else "0")).quantize(
            TWOPLACES, rounding=ROUND_HALF_UP
        )
    except (InvalidOperation, ValueError) as exc:
        raise OrderValidationError(
            f"Invalid {field}: {value!r}",
            details=_line_details(index),
        ) from exc


def _line_details(index: int | None, **extra) -> dict:
    details = {} if index is None else {"line": index}
    details.update({k: str(v) for k, v in extra.items()})
    return details


@dataclass(frozen=True)
class _CommittedLine:
    product_id: object
    batch_id: object
    quantity: int
    unit_price: Decimal
    discount: Decimal


# ============================================================
# BOUNDARY VALIDATION (NO WRITES)
# ============================================================

def _validate_line(index: int, line: OrderLineRequest) -> tuple[int, Decimal]:
    quantity = line.quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise OrderValidationError(
            "quantity must be a whole number greater than zero",
            details=_line_details(index, product_id=line.product_id),
        )

    discount = _money(line.discount, field="discount", index=index)
    if discount < ZERO:
        raise OrderValidationError(
            "discount cannot be negative",
            details=_line_details(index, product_id=line.product_id),
        )

    if line.unit_price is not None and line.batch_id is None:
        raise OrderValidationError(
            "unit_price can only be given together with batch_id",
            details=_line_details(index, product_id=line.product_id),
        )

    return quantity, discount


def _plan_quoted_line(index: int, line: OrderLineRequest, quantity: int, discount: Decimal) -> _CommittedLine:
    batch = ProductBatch.objects.filter(pk=line.batch_id).only(
        "id", "product_id", "selling_price"
    ).first()
    if batch is None:
        raise BatchNotFoundError(
            f"Batch {line.batch_id} not found",
            details=_line_details(index, batch_id=line.batch_id),
        )

    if str(batch.product_id) != str(line.product_id):
        raise OrderValidationError(
            "Batch does not belong to product",
            details=_line_details(index, batch_id=line.batch_id, product_id=line.product_id),
        )

    if line.unit_price is not None:
        unit_price = _money(line.unit_price, field="unit_price", index=index)
    else:
        unit_price = _money(batch.selling_price, field="unit_price", index=index)

    if unit_price <= ZERO:
        raise OrderValidationError(
            "unit_price must be greater than zero",
            details=_line_details(index, batch_id=line.batch_id),
        )

    if discount > unit_price * quantity:
        raise OrderValidationError(
            "discount cannot exceed the line amount",
            details=_line_details(index, batch_id=line.batch_id),
        )

    return _CommittedLine(
        product_id=batch.product_id,
        batch_id=batch.id,
        quantity=quantity,
        unit_price=unit_price,
        discount=discount,
    )


def _load_customer(customer_id) -> Customer:
    customer = Customer.objects.filter(pk=customer_id).first()
    if customer is None:
        raise CustomerNotFoundError(f"Customer {customer_id} not found")
    if not customer.is_active:
        raise OrderValidationError(
            "Customer is inactive",
            details={"customer_id": str(customer_id)},
        )
    return customer


# ============================================================
# ORDER CREATION
# ============================================================

@transaction.atomic
def create_order(
    *,
    customer_id,
    sales_rep,
    payment_type: str,
    lines: list[OrderLineRequest],
    notes: str = "",
    delivery_date=None,
) -> Order:
    """
    Create an order from quoted and/or unallocated lines.

    Returns the persisted Order (items available via order.items).
    """
    payment_type = (payment_type or "").strip().lower()
    if payment_type not in PAYMENT_TYPES:
        raise OrderValidationError(
            f"Unknown payment_type: {payment_type!r}",
            details={"allowed": ", ".join(sorted(PAYMENT_TYPES))},
        )

    if not lines:
        raise OrderValidationError("Order must contain at least one line")

    customer = _load_customer(customer_id)

    validated = [(idx, line, *_validate_line(idx, line)) for idx, line in enumerate(lines)]

    quoted = {
        idx: _plan_quoted_line(idx, line, quantity, discount)
        for idx, line, quantity, discount in validated
        if line.batch_id is not None
    }

    # -----------------------------
    # Writes start here
    # -----------------------------
    order = Order.objects.create(
        code=next_code(PREFIX_ORDER),
        customer=customer,
        sales_rep=sales_rep,
        payment_type=payment_type,
        notes=(notes or "").strip(),
        delivery_date=delivery_date,
    )

    committed: list[_CommittedLine] = []

    for idx, line, quantity, discount in validated:
        if idx in quoted:
            planned = [quoted[idx]]
        else:
            allocation = allocate(line.product_id, quantity, discount, for_update=True)
            planned = [
                _CommittedLine(
                    product_id=allocation.product_id,
                    batch_id=al.batch_id,
                    quantity=al.quantity,
                    unit_price=al.unit_price,
                    discount=al.discount,
                )
                for al in allocation.lines
            ]

        # Decrement now so later lines for the same product see the new quantities.
        for item in planned:
            batch_ledger.consume(item.batch_id, item.quantity, order=order, user=sales_rep)

        committed.extend(planned)

    codes = next_codes(PREFIX_ORDER_ITEM, len(committed))
    for code, item in zip(codes, committed):
        OrderItem.objects.create(
            code=code,
            order=order,
            product_id=item.product_id,
            batch_id=item.batch_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            discount=item.discount,
        )

    gross = sum((item.unit_price * item.quantity for item in committed), ZERO)
    discount_total = sum((item.discount for item in committed), ZERO)
    total = gross - discount_total

    order.total_amount = total
    order.discount_amount = discount_total
    order.final_amount = total
    order.save(update_fields=["total_amount", "discount_amount", "final_amount", "updated_at"])

    if payment_type == Order.PAYMENT_TYPE_CREDIT:
        credit.charge(customer_id=customer.pk, amount=total)

    logger.info(
        "Order created",
        extra={
            "order_id": str(order.id),
            "order_code": order.code,
            "customer_id": str(customer.pk),
            "payment_type": payment_type,
            "total_amount": str(total),
            "item_count": len(committed),
        },
    )

    return order

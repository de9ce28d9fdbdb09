# orders/services/return_service.py

"""
ORDER RETURN SERVICE

Rules:
- Only delivered orders can be returned, and only once per order.
- Every returned (product, batch) pair must appear on the order.
- Requested quantity per pair (duplicate request lines are summed) must
  not exceed ordered - already returned.
- Returned value is the net (after discount) share of the OrderItem
  total_price snapshot, never the current batch price. Returning every
  unit of an item gives back exactly its total_price.
- Any failing line aborts the whole return: nothing is written.

Effects (one transaction):
- OrderReturn + ReturnItems
- batch restock per returned line (movement reason RETURN)
- Order.final_amount = total_amount - total_return_amount
- credit orders not fully paid release total_return_amount (clamped at zero)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction
from django.db.models import Sum

from customers.services import credit
from orders.models import Order, OrderReturn, ReturnItem
from products.models import StockMovement
from products.services import batch_ledger

from .exceptions import (
    DuplicateReturnError,
    InvalidOrderStateError,
    OrderValidationError,
)
from .identifiers import PREFIX_RETURN, PREFIX_RETURN_ITEM, next_code, next_codes
from .requests import ReturnLineRequest
from .status_service import lock_order

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

RETURN_REASONS = {value for value, _label in ReturnItem.REASON_CHOICES}


@dataclass(frozen=True)
class _ReturnPortion:
    product_id: object
    batch_id: object
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    reason: str


def net_value_of_units(item, units: int) -> Decimal:
    """
    Net value (after the item's discount) of the first `units` units of an
    OrderItem. Returning every unit gives back exactly item.total_price;
    rounding pennies land on the last unit.
    """
    quantity = int(item.quantity)
    if units >= quantity:
        return Decimal(item.total_price)
    if units <= 0:
        return ZERO
    share = Decimal(item.total_price) * units / quantity
    return share.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _pair(product_id, batch_id) -> tuple[str, str]:
    return (str(product_id), str(batch_id))


def _validate_lines(items: list[ReturnLineRequest]) -> dict:
    """
    Group request lines by (product, batch), keeping request order.
    Each value: [total_quantity, [(quantity, reason), ...]]
    """
    if not items:
        raise OrderValidationError("Return must contain at least one item")

    grouped: dict = {}
    for idx, line in enumerate(items):
        qty = line.quantity
        if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
            raise OrderValidationError(
                "quantity must be a whole number greater than zero",
                details={"line": idx},
            )

        reason = (line.reason or "").strip().lower()
        if reason not in RETURN_REASONS:
            raise OrderValidationError(
                f"Unknown return reason: {line.reason!r}",
                details={"line": idx, "allowed": ", ".join(sorted(RETURN_REASONS))},
            )

        entry = grouped.setdefault(_pair(line.product_id, line.batch_id), [0, []])
        entry[0] += qty
        entry[1].append((qty, reason))

    return grouped


def _already_returned(order: Order) -> dict:
    rows = (
        ReturnItem.objects.filter(order_return__order=order)
        .values("product_id", "batch_id")
        .annotate(total=Sum("quantity"))
    )
    return {_pair(r["product_id"], r["batch_id"]): int(r["total"] or 0) for r in rows}


def _plan_portions(order: Order, grouped) -> list[_ReturnPortion]:
    order_items = {}
    for item in order.items.order_by("code"):
        order_items.setdefault(_pair(item.product_id, item.batch_id), []).append(item)

    returned = _already_returned(order)
    portions: list[_ReturnPortion] = []

    for key, (requested, lines) in grouped.items():
        items = order_items.get(key)
        if not items:
            raise OrderValidationError(
                "Returned product/batch is not part of this order",
                details={"product_id": key[0], "batch_id": key[1]},
            )

        ordered = sum(int(i.quantity) for i in items)
        returnable = ordered - returned.get(key, 0)
        if requested > returnable:
            raise OrderValidationError(
                f"Return quantity exceeds returnable quantity. "
                f"Requested: {requested}, Returnable: {returnable}",
                details={
                    "product_id": key[0],
                    "batch_id": key[1],
                    "requested": requested,
                    "returnable": returnable,
                },
            )

        # Walk the order items for this pair so each portion keeps the
        # prices of the item it came from. slot = [item, units already returned]
        capacity = [[item, 0] for item in items]
        skip = returned.get(key, 0)
        for slot in capacity:
            used = min(int(slot[0].quantity), skip)
            slot[1] += used
            skip -= used

        for qty, reason in lines:
            remaining = qty
            for slot in capacity:
                if remaining <= 0:
                    break
                item = slot[0]
                take = min(int(item.quantity) - slot[1], remaining)
                if take <= 0:
                    continue
                portions.append(
                    _ReturnPortion(
                        product_id=item.product_id,
                        batch_id=item.batch_id,
                        quantity=take,
                        unit_price=Decimal(item.unit_price),
                        total_price=(
                            net_value_of_units(item, slot[1] + take)
                            - net_value_of_units(item, slot[1])
                        ),
                        reason=reason,
                    )
                )
                slot[1] += take
                remaining -= take

    return portions


@transaction.atomic
def process_return(
    *,
    order_id,
    processed_by,
    reason: str,
    items: list[ReturnLineRequest],
) -> OrderReturn:
    reason_text = (reason or "").strip()
    if not reason_text:
        raise OrderValidationError("Return reason is required")

    grouped = _validate_lines(items)

    order = lock_order(order_id)

    if order.status != Order.STATUS_DELIVERED:
        raise InvalidOrderStateError(
            f"Order {order.code} is '{order.status}'; only delivered orders can be returned",
            details={"status": order.status},
        )

    if OrderReturn.objects.filter(order=order).exists():
        raise DuplicateReturnError(
            f"Order {order.code} already has a return",
            details={"order_id": str(order.id)},
        )

    portions = _plan_portions(order, grouped)
    total_return = sum((p.total_price for p in portions), ZERO)

    # -----------------------------
    # Writes start here
    # -----------------------------
    order_return = OrderReturn.objects.create(
        code=next_code(PREFIX_RETURN),
        order=order,
        processed_by=processed_by,
        reason=reason_text,
        total_amount=total_return,
    )

    codes = next_codes(PREFIX_RETURN_ITEM, len(portions))
    for code, portion in zip(codes, portions):
        ReturnItem.objects.create(
            code=code,
            order_return=order_return,
            product_id=portion.product_id,
            batch_id=portion.batch_id,
            quantity=portion.quantity,
            unit_price=portion.unit_price,
            total_price=portion.total_price,
            reason=portion.reason,
        )
        batch_ledger.restock(
            portion.batch_id,
            portion.quantity,
            reason=StockMovement.Reason.RETURN,
            order=order,
            user=processed_by,
        )

    order.final_amount = Decimal(order.total_amount) - total_return
    order.save(update_fields=["final_amount", "updated_at"])

    if (
        order.payment_type == Order.PAYMENT_TYPE_CREDIT
        and order.payment_status != Order.PAYMENT_STATUS_PAID
        and total_return > ZERO
    ):
        credit.release(customer_id=order.customer_id, amount=total_return)

    logger.info(
        "Order return processed",
        extra={
            "order_id": str(order.id),
            "order_code": order.code,
            "return_code": order_return.code,
            "total_return_amount": str(total_return),
            "item_count": len(portions),
        },
    )

    return order_return

# orders/services/fefo_allocator.py

"""
FEFO ALLOCATOR

Purpose:
- Split a requested quantity of one product across its batches,
  earliest expiry first (batch_ledger.list_active_batches order).
- Price each line at its own batch selling_price.
- Spread a line-level discount over the split lines.

Rules:
- Read only. No quantities change here; the order transaction re-checks
  every line with the ledger's compare-and-decrement at commit time.
- Greedy: take min(remaining, batch.current_quantity) from each batch in order.
- Not enough supply in total -> InsufficientStockError, no partial result.
- Discount is apportioned pro-rata to each line's gross amount, rounded to
  cents, remainder on the last line (line discounts sum exactly to the input).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from uuid import UUID

from products.models import Product
from products.services.batch_ledger import list_active_batches

from .exceptions import (
    InsufficientStockError,
    OrderValidationError,
    ProductNotFoundError,
)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(value) -> Decimal:
    try:
        return Decimal(str(value if value is not None else "0")).quantize(
            TWOPLACES, rounding=ROUND_HALF_UP
        )
    except (InvalidOperation, ValueError) as exc:
        raise OrderValidationError(f"Invalid amount: {value!r}") from exc


def _to_int_qty(value) -> int:
    if isinstance(value, bool):
        raise OrderValidationError("quantity must be a whole integer unit")

    if isinstance(value, int):
        return value

    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())

    raise OrderValidationError("quantity must be a whole integer unit")


# ============================================================
# RESULT TYPES
# ============================================================

@dataclass(frozen=True)
class AllocationLine:
    batch_id: UUID
    batch_number: str
    expiry_date: date | None
    quantity: int
    unit_price: Decimal
    discount: Decimal = ZERO
    supplier_name: str = ""

    @property
    def gross_amount(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def total_price(self) -> Decimal:
        return self.gross_amount - self.discount


@dataclass(frozen=True)
class Allocation:
    product_id: UUID
    lines: list[AllocationLine] = field(default_factory=list)
    discount: Decimal = ZERO

    @property
    def split_across_batches(self) -> bool:
        return len(self.lines) > 1

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def gross_amount(self) -> Decimal:
        return sum((line.gross_amount for line in self.lines), ZERO)

    @property
    def net_amount(self) -> Decimal:
        return self.gross_amount - self.discount


# ============================================================
# DISCOUNT APPORTIONMENT
# ============================================================

def apportion_discount(gross_amounts: list[Decimal], discount: Decimal) -> list[Decimal]:
    """
    Split discount over lines in proportion to their gross amounts.

    The last line absorbs the rounding remainder. No line ends up with a
    discount larger than its own gross amount.
    """
    if not gross_amounts:
        return []

    discount = _money(discount)
    total = sum(gross_amounts, ZERO)
    if discount == ZERO or total == ZERO:
        return [ZERO for _ in gross_amounts]

    shares = [
        (discount * gross / total).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
        for gross in gross_amounts[:-1]
    ]
    shares.append(discount - sum(shares, ZERO))

    # Rounding can push the last share a few cents past its own gross;
    # hand the excess back to earlier lines that still have room.
    excess = shares[-1] - gross_amounts[-1]
    if excess > ZERO:
        shares[-1] = gross_amounts[-1]
        for idx in range(len(shares) - 1):
            room = gross_amounts[idx] - shares[idx]
            take = min(room, excess)
            shares[idx] += take
            excess -= take
            if excess <= ZERO:
                break

    return shares


# ============================================================
# ALLOCATION
# ============================================================

def allocate(product_id, quantity, discount=0, *, for_update: bool = False) -> Allocation:
    """
    Plan which batches supply `quantity` units of a product.

    for_update=True row-locks the candidate batches; only the order
    transaction uses it (inside transaction.atomic).
    """
    qty = _to_int_qty(quantity)
    if qty <= 0:
        raise OrderValidationError(
            "quantity must be greater than zero",
            details={"product_id": str(product_id)},
        )

    discount = _money(discount)
    if discount < ZERO:
        raise OrderValidationError(
            "discount cannot be negative",
            details={"product_id": str(product_id)},
        )

    if not Product.objects.filter(pk=product_id).exists():
        raise ProductNotFoundError(f"Product {product_id} not found")

    batches = list_active_batches(product_id, for_update=for_update)
    available = sum(int(b.current_quantity or 0) for b in batches)

    if available < qty:
        raise InsufficientStockError(
            f"Insufficient stock for product {product_id}. "
            f"Requested: {qty}, Available: {available}",
            product_id=product_id,
            required=qty,
            available=available,
        )

    picks = []
    remaining = qty
    for batch in batches:
        if remaining <= 0:
            break

        take = min(remaining, int(batch.current_quantity))
        if take <= 0:
            continue

        picks.append((batch, take))
        remaining -= take

    gross_amounts = [_money(batch.selling_price) * take for batch, take in picks]
    gross_total = sum(gross_amounts, ZERO)
    if discount > gross_total:
        raise OrderValidationError(
            "discount cannot exceed the line amount",
            details={
                "product_id": str(product_id),
                "discount": str(discount),
                "gross_amount": str(gross_total),
            },
        )

    shares = apportion_discount(gross_amounts, discount)

    lines = [
        AllocationLine(
            batch_id=batch.id,
            batch_number=batch.batch_number,
            expiry_date=batch.expiry_date,
            quantity=take,
            unit_price=_money(batch.selling_price),
            discount=share,
            supplier_name=batch.supplier.name if batch.supplier_id else "",
        )
        for (batch, take), share in zip(picks, shares)
    ]

    return Allocation(product_id=product_id, lines=lines, discount=discount)

# customers/services/credit.py

"""
CUSTOMER CREDIT LEDGER

Single write path for Customer.credit_balance.

GUARANTEES:
- Every write is one conditional UPDATE (no read-modify-write in Python)
- Releases are clamped: balance = GREATEST(balance - amount, 0)
- Amounts are money-quantized (2dp, ROUND_HALF_UP)

Callers are expected to run inside their own transaction.atomic block.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import DecimalField, F, Value
from django.db.models.functions import Greatest

from customers.models import Customer

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


class CreditError(Exception):
    pass


class CustomerNotFound(CreditError):
    pass


def _money(value) -> Decimal:
    return Decimal(str(value or "0")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _current_balance(customer_id) -> Decimal:
    balance = (
        Customer.objects.filter(pk=customer_id)
        .values_list("credit_balance", flat=True)
        .first()
    )
    return _money(balance)


def charge(*, customer_id, amount) -> Decimal:
    """
    Increase the customer's outstanding credit by amount.
    Returns the new balance.
    """
    amount = _money(amount)
    if amount < ZERO:
        raise CreditError("Charge amount cannot be negative")

    updated = Customer.objects.filter(pk=customer_id).update(
        credit_balance=F("credit_balance") + amount
    )
    if not updated:
        raise CustomerNotFound(f"Customer {customer_id} not found")

    balance = _current_balance(customer_id)
    limit = (
        Customer.objects.filter(pk=customer_id)
        .values_list("credit_limit", flat=True)
        .first()
    )
    if limit is not None and _money(limit) > ZERO and balance > _money(limit):
        logger.warning(
            "Customer credit balance exceeds credit limit",
            extra={
                "customer_id": str(customer_id),
                "balance": str(balance),
                "credit_limit": str(limit),
            },
        )

    logger.info(
        "Customer credit charged",
        extra={"customer_id": str(customer_id), "amount": str(amount), "balance": str(balance)},
    )
    return balance


def release(*, customer_id, amount) -> Decimal:
    """
    Decrease the customer's outstanding credit by amount, never below zero.
    Returns the new balance.
    """
    amount = _money(amount)
    if amount < ZERO:
        raise CreditError("Release amount cannot be negative")

    if amount == ZERO:
        return _current_balance(customer_id)

    updated = Customer.objects.filter(pk=customer_id).update(
        credit_balance=Greatest(
            F("credit_balance") - amount,
            Value(ZERO, output_field=DecimalField(max_digits=12, decimal_places=2)),
            output_field=DecimalField(max_digits=12, decimal_places=2),
        )
    )
    if not updated:
        raise CustomerNotFound(f"Customer {customer_id} not found")

    balance = _current_balance(customer_id)
    logger.info(
        "Customer credit released",
        extra={"customer_id": str(customer_id), "amount": str(amount), "balance": str(balance)},
    )
    return balance

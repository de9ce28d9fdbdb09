# orders/services/identifiers.py

"""
DISPLAY CODES

Human-readable codes are <prefix><n>, e.g. O1001, OI1001, P1001, R1001, RI1001.

Rules:
- n comes from a DisplaySequence row per prefix
- increment = row lock + F("last_value") + n UPDATE (no MAX(code) scans)
- the first value handed out is FULFILLMENT["CODE_SEQUENCE_START"] (default 1001)
"""

from __future__ import annotations

from django.conf import settings
from django.db import transaction
from django.db.models import F

from orders.models import DisplaySequence

PREFIX_ORDER = "O"
PREFIX_ORDER_ITEM = "OI"
PREFIX_PAYMENT = "P"
PREFIX_RETURN = "R"
PREFIX_RETURN_ITEM = "RI"


def _sequence_start() -> int:
    fulfillment = getattr(settings, "FULFILLMENT", {}) or {}
    return int(fulfillment.get("CODE_SEQUENCE_START", 1001))


@transaction.atomic
def next_codes(prefix: str, count: int = 1) -> list[str]:
    """
    Reserve `count` consecutive codes for prefix.
    """
    if count <= 0:
        return []

    DisplaySequence.objects.select_for_update().get_or_create(
        key=prefix,
        defaults={"last_value": _sequence_start() - 1},
    )
    DisplaySequence.objects.filter(key=prefix).update(
        last_value=F("last_value") + count
    )
    last = DisplaySequence.objects.values_list("last_value", flat=True).get(key=prefix)

    first = int(last) - count + 1
    return [f"{prefix}{n}" for n in range(first, int(last) + 1)]


def next_code(prefix: str) -> str:
    return next_codes(prefix, 1)[0]

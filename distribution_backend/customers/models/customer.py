# customers/models/customer.py

"""
CUSTOMER (RETAILER ACCOUNT)

GUARANTEES:
- credit_balance is never negative (DB check + clamped service writes)
- credit_balance is mutated ONLY via customers.services.credit
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Customer(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    contact_person = models.CharField(max_length=255, blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")
    address = models.TextField(blank=True, default="")
    city = models.CharField(max_length=128, blank=True, default="")
    area = models.CharField(max_length=128, blank=True, default="")

    credit_limit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    # Outstanding amount owed on credit orders (service-managed only)
    credit_balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="customer_name_idx"),
            models.Index(fields=["city", "area"], name="customer_city_area_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(credit_balance__gte=0),
                name="chk_customer_credit_balance_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(credit_limit__gte=0),
                name="chk_customer_credit_limit_gte_zero",
            ),
        ]

    def clean(self):
        if self.credit_limit is not None and Decimal(self.credit_limit) < 0:
            raise ValidationError({"credit_limit": "credit_limit cannot be negative"})

        if self.credit_balance is not None and Decimal(self.credit_balance) < 0:
            raise ValidationError({"credit_balance": "credit_balance cannot be negative"})

    @property
    def available_credit(self) -> Decimal:
        return Decimal(self.credit_limit or 0) - Decimal(self.credit_balance or 0)

    def __str__(self):
        return self.name

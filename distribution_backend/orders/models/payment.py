# orders/models/payment.py

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone


class Payment(models.Model):
    """
    Money received against an order (append-only).

    payment_status on the order is recomputed from the sum of these rows.
    """

    METHOD_CASH = "cash"
    METHOD_CHEQUE = "cheque"
    METHOD_BANK_TRANSFER = "bank_transfer"

    METHOD_CHOICES = [
        (METHOD_CASH, "Cash"),
        (METHOD_CHEQUE, "Cheque"),
        (METHOD_BANK_TRANSFER, "Bank Transfer"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(max_length=32, unique=True)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="payments",
    )

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    method = models.CharField(max_length=16, choices=METHOD_CHOICES)
    reference_number = models.CharField(max_length=128, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments_received",
    )

    payment_date = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["payment_date", "code"]
        indexes = [
            models.Index(fields=["order", "payment_date"], name="payment_order_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="chk_payment_amount_gt_zero",
            ),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Payment records are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Payment records are immutable and cannot be deleted")

    def __str__(self):
        return f"{self.code} | {self.method} | {self.amount}"

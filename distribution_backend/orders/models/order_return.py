# orders/models/order_return.py

"""
ORDER RETURN (AT MOST ONE PER ORDER)

GUARANTEES:
- One-to-one with Order (DB-enforced)
- Return + ReturnItems are written together by orders.services.return_service
- Immutable after creation
- ReturnItem.unit_price is the OrderItem snapshot, never the current batch price
- ReturnItem.total_price is the net value refunded (the returned share of
  OrderItem.total_price, discount included)
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone


class OrderReturn(models.Model):
    STATUS_PROCESSED = "processed"

    STATUS_CHOICES = [
        (STATUS_PROCESSED, "Processed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(max_length=32, unique=True)

    order = models.OneToOneField(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="order_return",
    )

    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_returns",
    )

    reason = models.TextField()
    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PROCESSED,
    )

    return_date = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-return_date"]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("OrderReturn records are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("OrderReturn records are immutable and cannot be deleted")

    def __str__(self):
        return f"{self.code} | {self.total_amount}"


class ReturnItem(models.Model):
    REASON_DAMAGED = "damaged"
    REASON_EXPIRED = "expired"
    REASON_UNWANTED = "unwanted"
    REASON_WRONG_ITEM = "wrong_item"

    REASON_CHOICES = [
        (REASON_DAMAGED, "Damaged"),
        (REASON_EXPIRED, "Expired"),
        (REASON_UNWANTED, "Unwanted"),
        (REASON_WRONG_ITEM, "Wrong Item"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(max_length=32, unique=True)

    order_return = models.ForeignKey(
        OrderReturn,
        on_delete=models.PROTECT,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="return_items",
    )
    batch = models.ForeignKey(
        "products.ProductBatch",
        on_delete=models.PROTECT,
        related_name="return_items",
    )

    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)

    reason = models.CharField(max_length=16, choices=REASON_CHOICES)

    class Meta:
        ordering = ["code"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_returnitem_quantity_gt_zero",
            ),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("ReturnItem records are immutable")

        if self.total_price is None:
            self.total_price = Decimal(self.unit_price) * int(self.quantity or 0)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("ReturnItem records are immutable and cannot be deleted")

    def __str__(self):
        return f"{self.code} | {self.quantity} x {self.unit_price}"

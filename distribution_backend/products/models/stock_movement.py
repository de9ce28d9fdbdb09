# products/models/stock_movement.py

"""
INVENTORY AUDIT TRAIL

Immutable ledger entry for every batch quantity change.

GUARANTEES:
- Append-only (no updates, no deletes)
- Direction validated against reason
- Order-linked reasons must reference an order
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .product import Product
from .product_batch import ProductBatch


class StockMovement(models.Model):
    class Direction(models.TextChoices):
        IN = "IN", "Stock In"
        OUT = "OUT", "Stock Out"

    class Reason(models.TextChoices):
        ORDER = "ORDER", "Order Allocation"
        CANCELLATION = "CANCELLATION", "Order Cancellation"
        RETURN = "RETURN", "Order Return"
        ADJUSTMENT = "ADJUSTMENT", "Manual Adjustment"

    REASON_TO_DIRECTION = {
        Reason.ORDER: Direction.OUT,
        Reason.CANCELLATION: Direction.IN,
        Reason.RETURN: Direction.IN,
        Reason.ADJUSTMENT: None,
    }

    ORDER_REASONS = {Reason.ORDER, Reason.CANCELLATION, Reason.RETURN}

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="stock_movements"
    )
    batch = models.ForeignKey(
        ProductBatch, on_delete=models.PROTECT, related_name="stock_movements"
    )

    direction = models.CharField(max_length=3, choices=Direction.choices)
    reason = models.CharField(max_length=20, choices=Reason.choices)

    quantity = models.PositiveIntegerField()

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["batch", "created_at"], name="movement_batch_created_idx"),
            models.Index(fields=["order", "created_at"], name="movement_order_created_idx"),
            models.Index(fields=["reason"], name="movement_reason_idx"),
        ]

    def clean(self):
        if not self.quantity or self.quantity <= 0:
            raise ValidationError("quantity must be greater than zero")

        if self.batch_id and self.product_id:
            batch_product_id = (
                ProductBatch.objects.filter(id=self.batch_id)
                .values_list("product_id", flat=True)
                .first()
            )
            if batch_product_id and batch_product_id != self.product_id:
                raise ValidationError("Batch does not belong to product")

        expected = self.REASON_TO_DIRECTION.get(self.reason)
        if expected and self.direction != expected:
            raise ValidationError(f"{self.reason} requires direction={expected}")

        if self.reason in self.ORDER_REASONS and not self.order_id:
            raise ValidationError(f"{self.reason} movements must reference an order")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.reason} | {self.direction} {self.quantity}"

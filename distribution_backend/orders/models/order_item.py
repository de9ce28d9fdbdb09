# orders/models/order_item.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class OrderItem(models.Model):
    """
    One (product, batch) line of an order.

    A FEFO split is stored as sibling items for the same product,
    one per batch drawn from.

    GUARANTEES:
    - unit_price is a snapshot of the batch price at allocation time
    - total_price = quantity * unit_price - discount
    - Immutable after creation (returns are tracked in ReturnItem)
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(max_length=32, unique=True)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    batch = models.ForeignKey(
        "products.ProductBatch",
        on_delete=models.PROTECT,
        related_name="order_items",
    )

    quantity = models.PositiveIntegerField()

    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    discount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total_price = models.DecimalField(max_digits=12, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "code"]
        indexes = [
            models.Index(fields=["order", "product", "batch"], name="orderitem_prod_batch_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_orderitem_quantity_gt_zero",
            ),
            models.CheckConstraint(
                condition=Q(discount__gte=0),
                name="chk_orderitem_discount_gte_zero",
            ),
        ]

    @property
    def gross_amount(self) -> Decimal:
        return Decimal(self.unit_price) * int(self.quantity or 0)

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("OrderItem records are immutable")

        if not self.quantity or self.quantity <= 0:
            raise ValidationError({"quantity": "quantity must be greater than zero"})

        self.total_price = self.gross_amount - Decimal(self.discount or 0)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("OrderItem records are immutable and cannot be deleted")

    def __str__(self):
        return f"{self.code} | {self.quantity} x {self.unit_price}"

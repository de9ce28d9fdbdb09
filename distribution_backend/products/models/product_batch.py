# products/models/product_batch.py

"""
PRODUCT BATCH (EXPIRY-DATED STOCK LOT)

Represents ONE received lot of a product.

GUARANTEES:
- initial_quantity is immutable after creation
- current_quantity is mutated ONLY via products.services.batch_ledger
  (conditional UPDATEs); save() on an existing row never writes it
- current_quantity is signed: manual corrections may drive it negative,
  allocation never does
- (product, batch_number) is unique
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from .product import Product
from .supplier import Supplier


class ProductBatch(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="batches",
    )

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="batches",
    )

    batch_number = models.CharField(
        max_length=128,
        help_text="Supplier / delivery batch reference",
    )

    manufacturing_date = models.DateField(null=True, blank=True)
    expiry_date = models.DateField(null=True, blank=True)
    received_date = models.DateField(default=timezone.localdate)

    cost_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    selling_price = models.DecimalField(max_digits=12, decimal_places=2)

    initial_quantity = models.PositiveIntegerField(
        help_text="Quantity received (immutable)"
    )
    current_quantity = models.IntegerField(
        default=0,
        help_text="Quantity on hand (ledger-managed only)",
    )

    is_active = models.BooleanField(default=True)
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["expiry_date", "received_date", "created_at"]
        indexes = [
            models.Index(
                fields=["product", "is_active", "expiry_date"],
                name="batch_product_active_exp_idx",
            ),
            models.Index(fields=["expiry_date"], name="batch_expiry_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "batch_number"],
                name="unique_batch_number_per_product",
            ),
            models.CheckConstraint(
                condition=Q(selling_price__gte=0),
                name="chk_batch_selling_price_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(cost_price__gte=0),
                name="chk_batch_cost_price_gte_zero",
            ),
        ]

    # -------------------------------------------------
    # VALIDATION
    # -------------------------------------------------

    def clean(self):
        if not (self.batch_number or "").strip():
            raise ValidationError({"batch_number": "batch_number is required"})

        if self.selling_price is None or Decimal(self.selling_price) < 0:
            raise ValidationError({"selling_price": "selling_price cannot be negative"})

        if self.cost_price is not None and Decimal(self.cost_price) < 0:
            raise ValidationError({"cost_price": "cost_price cannot be negative"})

        if (
            self.manufacturing_date
            and self.expiry_date
            and self.expiry_date < self.manufacturing_date
        ):
            raise ValidationError(
                {"expiry_date": "expiry_date cannot be before manufacturing_date"}
            )

    # -------------------------------------------------
    # IMMUTABILITY
    # -------------------------------------------------

    def save(self, *args, **kwargs):
        if self._state.adding:
            if self.current_quantity in (None, 0) and self.initial_quantity:
                self.current_quantity = self.initial_quantity
        else:
            original = ProductBatch.objects.only("initial_quantity").get(pk=self.pk)
            if self.initial_quantity != original.initial_quantity:
                raise ValidationError({"initial_quantity": "initial_quantity is immutable"})

            # An edit never writes current_quantity: the value held by this
            # instance may predate ledger updates committed since it was loaded.
            update_fields = kwargs.get("update_fields")
            if update_fields is None:
                update_fields = [
                    f.name
                    for f in self._meta.concrete_fields
                    if not f.primary_key
                ]
            kwargs["update_fields"] = [
                name for name in update_fields if name != "current_quantity"
            ]

        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        from products.models.stock_movement import StockMovement

        if StockMovement.objects.filter(batch=self).exists():
            raise ValidationError("Cannot delete ProductBatch: it has StockMovement audit history.")
        return super().delete(*args, **kwargs)

    # -------------------------------------------------
    # READ-ONLY HELPERS
    # -------------------------------------------------

    def is_expired(self, today=None) -> bool:
        if self.expiry_date is None:
            return False
        return self.expiry_date < (today or timezone.localdate())

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | Batch {self.batch_number}"

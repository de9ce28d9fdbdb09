# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    Represents a distributable product.

    STOCK MODEL (IMPORTANT):
    - Product itself does NOT store stock
    - Stock lives in ProductBatch
    - Total stock = sum of current_quantity over ACTIVE batches with stock left
    - unit_price is the list price; order lines snapshot the batch selling_price
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=128, unique=True)
    name = models.CharField(max_length=255)

    # List price (informational; allocation prices come from batches)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)

    reorder_level = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="product_name_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if self.unit_price is None or Decimal(self.unit_price) <= 0:
            raise ValidationError("Unit price must be greater than zero")

    @property
    def total_stock(self) -> int:
        from products.services.batch_ledger import product_total_stock

        return product_total_stock(self.pk)

    @property
    def is_below_reorder_level(self) -> bool:
        return self.total_stock <= int(self.reorder_level or 0)

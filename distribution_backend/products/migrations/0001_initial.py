"""
======================================================
PATH: products/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Supplier, Product, ProductBatch, StockMovement

The StockMovement -> Order link is added in 0002 (orders depends on products).
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Supplier",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("contact_person", models.CharField(max_length=255, blank=True, default="")),
                ("phone", models.CharField(max_length=32, blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                ("sku", models.CharField(max_length=128, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("unit_price", models.DecimalField(max_digits=12, decimal_places=2)),
                ("reorder_level", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["name"], name="product_name_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ProductBatch",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                (
                    "batch_number",
                    models.CharField(
                        max_length=128,
                        help_text="Supplier / delivery batch reference",
                    ),
                ),
                ("manufacturing_date", models.DateField(null=True, blank=True)),
                ("expiry_date", models.DateField(null=True, blank=True)),
                (
                    "received_date",
                    models.DateField(default=django.utils.timezone.localdate),
                ),
                (
                    "cost_price",
                    models.DecimalField(
                        max_digits=12, decimal_places=2, default=Decimal("0.00")
                    ),
                ),
                ("selling_price", models.DecimalField(max_digits=12, decimal_places=2)),
                (
                    "initial_quantity",
                    models.PositiveIntegerField(help_text="Quantity received (immutable)"),
                ),
                (
                    "current_quantity",
                    models.IntegerField(
                        default=0,
                        help_text="Quantity on hand (ledger-managed only)",
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "product",
                    models.ForeignKey(
                        to="products.product",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="batches",
                    ),
                ),
                (
                    "supplier",
                    models.ForeignKey(
                        to="products.supplier",
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="batches",
                    ),
                ),
            ],
            options={
                "ordering": ["expiry_date", "received_date", "created_at"],
                "indexes": [
                    models.Index(
                        fields=["product", "is_active", "expiry_date"],
                        name="batch_product_active_exp_idx",
                    ),
                    models.Index(fields=["expiry_date"], name="batch_expiry_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["product", "batch_number"],
                        name="unique_batch_number_per_product",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(selling_price__gte=0),
                        name="chk_batch_selling_price_gte_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(cost_price__gte=0),
                        name="chk_batch_cost_price_gte_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                (
                    "direction",
                    models.CharField(
                        max_length=3,
                        choices=[("IN", "Stock In"), ("OUT", "Stock Out")],
                    ),
                ),
                (
                    "reason",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("ORDER", "Order Allocation"),
                            ("CANCELLATION", "Order Cancellation"),
                            ("RETURN", "Order Return"),
                            ("ADJUSTMENT", "Manual Adjustment"),
                        ],
                    ),
                ),
                ("quantity", models.PositiveIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "batch",
                    models.ForeignKey(
                        to="products.productbatch",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        to="products.product",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        to=settings.AUTH_USER_MODEL,
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_movements",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(
                        fields=["batch", "created_at"], name="movement_batch_created_idx"
                    ),
                    models.Index(fields=["reason"], name="movement_reason_idx"),
                ],
            },
        ),
    ]

"""
======================================================
PATH: orders/migrations/0001_initial.py
======================================================
MIGRATION: CREATE fulfillment tables

DisplaySequence, Order, OrderItem, Payment, OrderReturn, ReturnItem,
Vehicle, Delivery.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


def _uuid_pk():
    return (
        "id",
        models.UUIDField(
            primary_key=True,
            default=uuid.uuid4,
            editable=False,
            serialize=False,
        ),
    )


def _money(**kwargs):
    return models.DecimalField(max_digits=12, decimal_places=2, **kwargs)


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("customers", "0001_initial"),
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="DisplaySequence",
            fields=[
                (
                    "key",
                    models.CharField(max_length=8, primary_key=True, serialize=False),
                ),
                ("last_value", models.PositiveBigIntegerField(default=0)),
            ],
            options={
                "ordering": ["key"],
            },
        ),
        migrations.CreateModel(
            name="Vehicle",
            fields=[
                _uuid_pk(),
                ("name", models.CharField(max_length=128)),
                ("registration_number", models.CharField(max_length=32, unique=True)),
                (
                    "status",
                    models.CharField(
                        max_length=16,
                        choices=[
                            ("available", "Available"),
                            ("on_route", "On Route"),
                            ("maintenance", "Maintenance"),
                        ],
                        default="available",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                _uuid_pk(),
                (
                    "code",
                    models.CharField(
                        max_length=32,
                        unique=True,
                        help_text="Human-readable order code (O1001, O1002, ...)",
                    ),
                ),
                ("order_date", models.DateField(default=django.utils.timezone.localdate)),
                ("delivery_date", models.DateField(null=True, blank=True)),
                (
                    "payment_type",
                    models.CharField(
                        max_length=16,
                        choices=[
                            ("cash", "Cash"),
                            ("credit", "Credit"),
                            ("cheque", "Cheque"),
                        ],
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        max_length=16,
                        choices=[
                            ("pending", "Pending"),
                            ("partial", "Partial"),
                            ("paid", "Paid"),
                        ],
                        default="pending",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        max_length=16,
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("delivered", "Delivered"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                    ),
                ),
                ("total_amount", _money(default=Decimal("0.00"))),
                ("discount_amount", _money(default=Decimal("0.00"))),
                (
                    "final_amount",
                    _money(
                        default=Decimal("0.00"),
                        help_text="total_amount minus returned value",
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "customer",
                    models.ForeignKey(
                        to="customers.customer",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                    ),
                ),
                (
                    "sales_rep",
                    models.ForeignKey(
                        to=settings.AUTH_USER_MODEL,
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="order_status_idx"),
                    models.Index(fields=["payment_status"], name="order_payment_status_idx"),
                    models.Index(
                        fields=["customer", "order_date"], name="order_customer_date_idx"
                    ),
                    models.Index(fields=["order_date"], name="order_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                _uuid_pk(),
                ("code", models.CharField(max_length=32, unique=True)),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price", _money()),
                ("discount", _money(default=Decimal("0.00"))),
                ("total_price", _money()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        to="orders.order",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        to="products.product",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order_items",
                    ),
                ),
                (
                    "batch",
                    models.ForeignKey(
                        to="products.productbatch",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order_items",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "code"],
                "indexes": [
                    models.Index(
                        fields=["order", "product", "batch"],
                        name="orderitem_prod_batch_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity__gt=0),
                        name="chk_orderitem_quantity_gt_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(discount__gte=0),
                        name="chk_orderitem_discount_gte_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                _uuid_pk(),
                ("code", models.CharField(max_length=32, unique=True)),
                ("amount", _money()),
                (
                    "method",
                    models.CharField(
                        max_length=16,
                        choices=[
                            ("cash", "Cash"),
                            ("cheque", "Cheque"),
                            ("bank_transfer", "Bank Transfer"),
                        ],
                    ),
                ),
                ("reference_number", models.CharField(max_length=128, blank=True, default="")),
                ("notes", models.TextField(blank=True, default="")),
                ("payment_date", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "order",
                    models.ForeignKey(
                        to="orders.order",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                    ),
                ),
                (
                    "received_by",
                    models.ForeignKey(
                        to=settings.AUTH_USER_MODEL,
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="payments_received",
                    ),
                ),
            ],
            options={
                "ordering": ["payment_date", "code"],
                "indexes": [
                    models.Index(
                        fields=["order", "payment_date"], name="payment_order_date_idx"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(amount__gt=0),
                        name="chk_payment_amount_gt_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderReturn",
            fields=[
                _uuid_pk(),
                ("code", models.CharField(max_length=32, unique=True)),
                ("reason", models.TextField()),
                ("total_amount", _money(default=Decimal("0.00"))),
                (
                    "status",
                    models.CharField(
                        max_length=16,
                        choices=[("processed", "Processed")],
                        default="processed",
                    ),
                ),
                ("return_date", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "order",
                    models.OneToOneField(
                        to="orders.order",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order_return",
                    ),
                ),
                (
                    "processed_by",
                    models.ForeignKey(
                        to=settings.AUTH_USER_MODEL,
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="order_returns",
                    ),
                ),
            ],
            options={
                "ordering": ["-return_date"],
            },
        ),
        migrations.CreateModel(
            name="ReturnItem",
            fields=[
                _uuid_pk(),
                ("code", models.CharField(max_length=32, unique=True)),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price", _money()),
                ("total_price", _money()),
                (
                    "reason",
                    models.CharField(
                        max_length=16,
                        choices=[
                            ("damaged", "Damaged"),
                            ("expired", "Expired"),
                            ("unwanted", "Unwanted"),
                            ("wrong_item", "Wrong Item"),
                        ],
                    ),
                ),
                (
                    "order_return",
                    models.ForeignKey(
                        to="orders.orderreturn",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="items",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        to="products.product",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="return_items",
                    ),
                ),
                (
                    "batch",
                    models.ForeignKey(
                        to="products.productbatch",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="return_items",
                    ),
                ),
            ],
            options={
                "ordering": ["code"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity__gt=0),
                        name="chk_returnitem_quantity_gt_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Delivery",
            fields=[
                _uuid_pk(),
                ("scheduled_date", models.DateField(null=True, blank=True)),
                ("delivery_date", models.DateField(null=True, blank=True)),
                (
                    "status",
                    models.CharField(
                        max_length=16,
                        choices=[
                            ("scheduled", "Scheduled"),
                            ("in_progress", "In Progress"),
                            ("delivered", "Delivered"),
                            ("failed", "Failed"),
                        ],
                        default="scheduled",
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "order",
                    models.OneToOneField(
                        to="orders.order",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="delivery",
                    ),
                ),
                (
                    "driver",
                    models.ForeignKey(
                        to=settings.AUTH_USER_MODEL,
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="deliveries",
                    ),
                ),
                (
                    "vehicle",
                    models.ForeignKey(
                        to="orders.vehicle",
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="deliveries",
                    ),
                ),
            ],
            options={
                "ordering": ["scheduled_date"],
                "verbose_name_plural": "deliveries",
            },
        ),
    ]

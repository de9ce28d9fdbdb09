"""
======================================================
PATH: customers/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Customer

Purpose:
- Retailer accounts with a non-negative running credit balance.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Customer",
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
                ("address", models.TextField(blank=True, default="")),
                ("city", models.CharField(max_length=128, blank=True, default="")),
                ("area", models.CharField(max_length=128, blank=True, default="")),
                (
                    "credit_limit",
                    models.DecimalField(
                        max_digits=12, decimal_places=2, default=Decimal("0.00")
                    ),
                ),
                (
                    "credit_balance",
                    models.DecimalField(
                        max_digits=12, decimal_places=2, default=Decimal("0.00")
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["name"], name="customer_name_idx"),
                    models.Index(fields=["city", "area"], name="customer_city_area_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(credit_balance__gte=0),
                        name="chk_customer_credit_balance_gte_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(credit_limit__gte=0),
                        name="chk_customer_credit_limit_gte_zero",
                    ),
                ],
            },
        ),
    ]

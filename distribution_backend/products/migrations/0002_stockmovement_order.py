"""
======================================================
PATH: products/migrations/0002_stockmovement_order.py
======================================================
MIGRATION: LINK StockMovement -> orders.Order

Split from 0001 because orders.0001 depends on products.
"""

from __future__ import annotations

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    dependencies = [
        ("products", "0001_initial"),
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="stockmovement",
            name="order",
            field=models.ForeignKey(
                to="orders.order",
                null=True,
                blank=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="stock_movements",
            ),
        ),
        migrations.AddIndex(
            model_name="stockmovement",
            index=models.Index(
                fields=["order", "created_at"], name="movement_order_created_idx"
            ),
        ),
    ]

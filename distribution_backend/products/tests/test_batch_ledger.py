# products/tests/test_batch_ledger.py

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from products.models import Product, ProductBatch, StockMovement, Supplier
from products.services import batch_ledger
from products.services.batch_ledger import InsufficientStockError

User = get_user_model()


def _batch(product, number, quantity, *, expiry=None, received=None, price="10.00", **extra):
    return ProductBatch.objects.create(
        product=product,
        batch_number=number,
        expiry_date=expiry,
        received_date=received or date(2024, 6, 1),
        selling_price=Decimal(price),
        initial_quantity=quantity,
        **extra,
    )


class BatchLedgerTests(TestCase):
    """
    GUARANTEES:
    - FEFO order: earliest expiry first, undated batches last
    - consume() never drives a batch below zero
    - every quantity change leaves a StockMovement row
    - adjust() is the only path that may go negative
    """

    def setUp(self):
        self.user = User.objects.create_user(username="stock", password="pass12345")
        self.product = Product.objects.create(
            sku="SKU-AMOX",
            name="Amoxicillin 500mg",
            unit_price=Decimal("12.00"),
        )

    # ==================================================
    # FEFO ORDERING
    # ==================================================

    def test_active_batches_are_listed_earliest_expiry_first(self):
        later = _batch(self.product, "B-LATE", 4, expiry=date(2025, 3, 1))
        undated = _batch(self.product, "B-NODATE", 4)
        early = _batch(self.product, "B-EARLY", 4, expiry=date(2025, 1, 1))

        rows = batch_ledger.list_active_batches(self.product.id)

        self.assertEqual([b.id for b in rows], [early.id, later.id, undated.id])

    def test_same_expiry_breaks_tie_on_received_date(self):
        newer = _batch(self.product, "B-NEW", 3, expiry=date(2025, 1, 1), received=date(2024, 9, 1))
        older = _batch(self.product, "B-OLD", 3, expiry=date(2025, 1, 1), received=date(2024, 8, 1))

        rows = batch_ledger.list_active_batches(self.product.id)

        self.assertEqual([b.id for b in rows], [older.id, newer.id])

    def test_inactive_and_empty_batches_are_skipped(self):
        _batch(self.product, "B-OFF", 5, expiry=date(2025, 1, 1), is_active=False)
        empty = _batch(self.product, "B-EMPTY", 2, expiry=date(2025, 1, 2))
        live = _batch(self.product, "B-LIVE", 5, expiry=date(2025, 2, 1))
        ProductBatch.objects.filter(pk=empty.pk).update(current_quantity=0)

        rows = batch_ledger.list_active_batches(self.product.id)

        self.assertEqual([b.id for b in rows], [live.id])
        self.assertEqual(batch_ledger.product_total_stock(self.product.id), 5)
        self.assertEqual(self.product.total_stock, 5)

    # ==================================================
    # CONSUME
    # ==================================================

    def test_negative_adjustment_decrements_and_writes_out_movement(self):
        batch = _batch(self.product, "B1", 10, expiry=date(2025, 1, 1))

        movement = batch_ledger.adjust(batch.id, -3, user=self.user)
        batch.refresh_from_db()

        self.assertEqual(batch.current_quantity, 7)
        self.assertEqual(movement.direction, StockMovement.Direction.OUT)
        self.assertEqual(movement.reason, StockMovement.Reason.ADJUSTMENT)
        self.assertEqual(movement.quantity, 3)

    def test_consume_more_than_available_raises_and_leaves_batch_untouched(self):
        batch = _batch(self.product, "B1", 4, expiry=date(2025, 1, 1))

        with self.assertRaises(InsufficientStockError) as ctx:
            batch_ledger.consume(batch.id, 5)

        batch.refresh_from_db()
        self.assertEqual(batch.current_quantity, 4)
        self.assertEqual(ctx.exception.required, 5)
        self.assertEqual(ctx.exception.available, 4)
        self.assertEqual(ctx.exception.details["batch_id"], str(batch.id))
        self.assertFalse(StockMovement.objects.filter(batch=batch).exists())

    def test_consume_inactive_batch_reports_zero_available(self):
        batch = _batch(self.product, "B1", 4, expiry=date(2025, 1, 1), is_active=False)

        with self.assertRaises(InsufficientStockError) as ctx:
            batch_ledger.consume(batch.id, 1)

        self.assertEqual(ctx.exception.available, 0)

    def test_consume_rejects_non_positive_quantity(self):
        batch = _batch(self.product, "B1", 4)

        with self.assertRaises(ValueError):
            batch_ledger.consume(batch.id, 0)

    # ==================================================
    # RESTOCK / ADJUST
    # ==================================================

    def test_restock_only_accepts_cancellation_or_return(self):
        batch = _batch(self.product, "B1", 4)

        with self.assertRaises(ValueError):
            batch_ledger.restock(batch.id, 2, reason=StockMovement.Reason.ADJUSTMENT)

    def test_adjust_can_drive_quantity_negative(self):
        batch = _batch(self.product, "B1", 2)

        batch_ledger.adjust(batch.id, -5, user=self.user)
        batch.refresh_from_db()

        self.assertEqual(batch.current_quantity, -3)
        self.assertEqual(batch_ledger.product_total_stock(self.product.id), 0)

    def test_adjust_rejects_zero_delta(self):
        batch = _batch(self.product, "B1", 2)

        with self.assertRaises(ValueError):
            batch_ledger.adjust(batch.id, 0)

    # ==================================================
    # MODEL INVARIANTS
    # ==================================================

    def test_current_quantity_starts_at_initial_quantity(self):
        batch = _batch(self.product, "B1", 9)
        self.assertEqual(batch.current_quantity, 9)

    def test_initial_quantity_is_immutable(self):
        batch = _batch(self.product, "B1", 9)
        batch.initial_quantity = 12

        with self.assertRaises(ValidationError):
            batch.save()

    def test_editing_a_stale_instance_keeps_ledger_quantity(self):
        batch = _batch(self.product, "B1", 10)
        stale = ProductBatch.objects.get(pk=batch.pk)

        batch_ledger.consume(batch.id, 5, user=self.user)

        stale.selling_price = Decimal("14.00")
        stale.save()

        batch.refresh_from_db()
        self.assertEqual(batch.selling_price, Decimal("14.00"))
        self.assertEqual(batch.current_quantity, 5)

    def test_movements_are_immutable(self):
        batch = _batch(self.product, "B1", 9)
        movement = batch_ledger.adjust(batch.id, 1)

        with self.assertRaises(ValidationError):
            movement.delete()

        with self.assertRaises(ValidationError):
            batch.delete()


class ProductBatchesEndpointTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="viewer", password="pass12345")
        self.client.force_authenticate(user=self.user)

        self.supplier = Supplier.objects.create(name="Acme Pharma")
        self.product = Product.objects.create(
            sku="SKU-PARA",
            name="Paracetamol",
            unit_price=Decimal("4.00"),
            reorder_level=20,
        )
        today = date.today()
        self.late = _batch(self.product, "P-2", 10, expiry=today + timedelta(days=90))
        self.early = _batch(
            self.product,
            "P-1",
            5,
            expiry=today + timedelta(days=30),
            supplier=self.supplier,
        )

    def test_batches_endpoint_lists_fefo_order_with_supplier(self):
        res = self.client.get(f"/api/products/products/{self.product.id}/batches/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([row["batch_number"] for row in res.data], ["P-1", "P-2"])
        self.assertEqual(res.data[0]["supplier_name"], "Acme Pharma")
        self.assertEqual(res.data[1]["supplier_name"], "")

    def test_product_list_reports_total_stock(self):
        res = self.client.get("/api/products/products/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        row = res.data["results"][0]
        self.assertEqual(row["total_stock"], 15)
        self.assertTrue(row["is_below_reorder_level"])

    def test_requires_authentication(self):
        res = APIClient().get("/api/products/products/")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

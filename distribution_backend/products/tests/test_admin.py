# products/tests/test_admin.py

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import mock

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.test import RequestFactory, TestCase

from products.admin import ProductBatchAdmin, ProductBatchAdminForm
from products.models import Product, ProductBatch, StockMovement

User = get_user_model()


class ProductBatchAdminTests(TestCase):
    """
    GUARANTEES:
    - the change form never carries current_quantity
    - adjust_by goes through the batch ledger and leaves an ADJUSTMENT movement
    """

    def setUp(self):
        self.user = User.objects.create_superuser(
            username="admin", email="admin@example.com", password="pass12345"
        )
        self.product = Product.objects.create(
            sku="SKU-PARA",
            name="Paracetamol 500mg",
            unit_price=Decimal("4.00"),
        )
        self.batch = ProductBatch.objects.create(
            product=self.product,
            batch_number="P-01",
            expiry_date=date(2025, 6, 1),
            received_date=date(2024, 6, 1),
            selling_price=Decimal("4.00"),
            initial_quantity=20,
        )
        self.model_admin = ProductBatchAdmin(ProductBatch, admin.site)

        self.request = RequestFactory().post("/")
        self.request.user = self.user

    def _form(self, adjust_by):
        form = ProductBatchAdminForm(instance=self.batch)
        form.cleaned_data = {"adjust_by": adjust_by}
        return form

    def test_form_excludes_current_quantity(self):
        self.assertNotIn("current_quantity", ProductBatchAdminForm.base_fields)
        self.assertIn("adjust_by", ProductBatchAdminForm.base_fields)

    def test_adjust_by_writes_adjustment_movement(self):
        with mock.patch.object(ProductBatchAdmin, "message_user") as message_user:
            self.model_admin.save_model(self.request, self.batch, self._form(-3), change=True)

        self.batch.refresh_from_db()
        self.assertEqual(self.batch.current_quantity, 17)

        movement = StockMovement.objects.get(batch=self.batch)
        self.assertEqual(movement.reason, StockMovement.Reason.ADJUSTMENT)
        self.assertEqual(movement.direction, StockMovement.Direction.OUT)
        self.assertEqual(movement.quantity, 3)
        message_user.assert_called_once()

    def test_save_without_adjustment_leaves_stock_alone(self):
        self.batch.selling_price = Decimal("4.50")

        self.model_admin.save_model(self.request, self.batch, self._form(None), change=True)

        self.batch.refresh_from_db()
        self.assertEqual(self.batch.selling_price, Decimal("4.50"))
        self.assertEqual(self.batch.current_quantity, 20)
        self.assertFalse(StockMovement.objects.exists())

# orders/tests/test_payments.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings

from orders.models import Order, Payment
from orders.services.exceptions import OrderValidationError
from orders.services.order_transaction import create_order
from orders.services.payment_service import record_payment, resolve_payment_status
from orders.services.status_service import update_order_status
from orders.tests.helpers import line, make_customer, make_product, make_stock, make_user


class PaymentServiceTests(TestCase):
    """
    GUARANTEES:
    - payment_status follows the cumulative paid total and never moves back
    - overpayment is accepted and flagged
    - credit release is capped by what was still outstanding
    """

    def setUp(self):
        self.user = make_user()
        self.customer = make_customer(balance="0.00")
        self.product = make_product()
        make_stock(self.product)

        # 5 units, all from B1: total 50.00
        self.order = create_order(
            customer_id=self.customer.id,
            sales_rep=self.user,
            payment_type=Order.PAYMENT_TYPE_CREDIT,
            lines=[line(self.product, 5)],
        )

    def _pay(self, amount, method="cash"):
        return record_payment(
            order_id=self.order.id,
            amount=Decimal(amount),
            method=method,
            received_by=self.user,
        )

    def _balance(self):
        self.customer.refresh_from_db()
        return self.customer.credit_balance

    # ==================================================
    # STATUS PROGRESSION
    # ==================================================

    def test_partial_then_paid(self):
        first = self._pay("20.00")
        self.assertEqual(first.payment_status, Order.PAYMENT_STATUS_PARTIAL)
        self.assertEqual(first.payment.code, "P1001")

        second = self._pay("30.00", method="bank_transfer")
        self.assertEqual(second.payment_status, Order.PAYMENT_STATUS_PAID)
        self.assertEqual(second.total_paid, Decimal("50.00"))
        self.assertFalse(second.overpaid)

        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_STATUS_PAID)
        self.assertEqual(self._balance(), Decimal("0.00"))

    def test_within_tolerance_counts_as_paid(self):
        result = self._pay("49.99")
        self.assertEqual(result.payment_status, Order.PAYMENT_STATUS_PAID)

    @override_settings(FULFILLMENT={"PAYMENT_TOLERANCE": "0.00", "CODE_SEQUENCE_START": 1001})
    def test_tolerance_is_configurable(self):
        result = self._pay("49.99")
        self.assertEqual(result.payment_status, Order.PAYMENT_STATUS_PARTIAL)

    def test_overpayment_is_flagged_and_credit_release_is_capped(self):
        result = self._pay("80.00", method="cheque")

        self.assertEqual(result.payment_status, Order.PAYMENT_STATUS_PAID)
        self.assertTrue(result.overpaid)
        self.assertEqual(result.credit_released, Decimal("50.00"))
        self.assertEqual(self._balance(), Decimal("0.00"))

    def test_payment_after_paid_keeps_status(self):
        self._pay("50.00")
        result = self._pay("5.00")

        self.assertEqual(result.payment_status, Order.PAYMENT_STATUS_PAID)
        self.assertEqual(result.credit_released, Decimal("0.00"))

    def test_resolve_payment_status_rules(self):
        self.assertEqual(
            resolve_payment_status(total_paid=Decimal("0"), total_amount=Decimal("10.00")),
            Order.PAYMENT_STATUS_PENDING,
        )
        self.assertEqual(
            resolve_payment_status(total_paid=Decimal("4.00"), total_amount=Decimal("10.00")),
            Order.PAYMENT_STATUS_PARTIAL,
        )
        self.assertEqual(
            resolve_payment_status(total_paid=Decimal("10.01"), total_amount=Decimal("10.00")),
            Order.PAYMENT_STATUS_PAID,
        )

    # ==================================================
    # REJECTIONS
    # ==================================================

    def test_non_positive_amount_is_rejected(self):
        with self.assertRaises(OrderValidationError):
            self._pay("0.00")

        self.assertFalse(Payment.objects.exists())

    def test_unknown_method_is_rejected(self):
        with self.assertRaises(OrderValidationError):
            self._pay("10.00", method="crypto")

    def test_cancelled_order_rejects_payment(self):
        update_order_status(order_id=self.order.id, new_status="cancelled")

        with self.assertRaises(OrderValidationError):
            self._pay("10.00")

    def test_payments_are_immutable(self):
        payment = self._pay("10.00").payment
        payment.amount = Decimal("1.00")

        with self.assertRaises(ValidationError):
            payment.save()


class CashOrderPaymentTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.customer = make_customer(balance="15.00")
        self.product = make_product()
        make_stock(self.product)
        self.order = create_order(
            customer_id=self.customer.id,
            sales_rep=self.user,
            payment_type=Order.PAYMENT_TYPE_CASH,
            lines=[line(self.product, 2)],
        )

    def test_cash_payment_does_not_touch_credit(self):
        result = record_payment(order_id=self.order.id, amount=Decimal("20.00"), method="cash")

        self.assertEqual(result.payment_status, Order.PAYMENT_STATUS_PAID)
        self.assertEqual(result.credit_released, Decimal("0.00"))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.credit_balance, Decimal("15.00"))

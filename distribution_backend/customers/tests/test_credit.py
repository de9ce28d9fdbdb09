# customers/tests/test_credit.py

import uuid
from decimal import Decimal

from django.test import TestCase

from customers.models import Customer
from customers.services import credit


class CustomerCreditTests(TestCase):
    """
    GUARANTEES:
    - charge() adds to credit_balance
    - release() subtracts and never goes below zero
    - unknown customers raise CustomerNotFound
    """

    def setUp(self):
        self.customer = Customer.objects.create(
            name="Green Valley Pharmacy",
            city="Kumasi",
            credit_limit=Decimal("500.00"),
            credit_balance=Decimal("25.00"),
        )

    def test_charge_increases_balance(self):
        balance = credit.charge(customer_id=self.customer.id, amount="100.005")

        self.customer.refresh_from_db()
        self.assertEqual(balance, Decimal("125.01"))
        self.assertEqual(self.customer.credit_balance, Decimal("125.01"))

    def test_charge_over_limit_is_allowed(self):
        credit.charge(customer_id=self.customer.id, amount=Decimal("600.00"))

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.credit_balance, Decimal("625.00"))
        self.assertEqual(self.customer.available_credit, Decimal("-125.00"))

    def test_release_is_clamped_at_zero(self):
        balance = credit.release(customer_id=self.customer.id, amount=Decimal("40.00"))

        self.customer.refresh_from_db()
        self.assertEqual(balance, Decimal("0.00"))
        self.assertEqual(self.customer.credit_balance, Decimal("0.00"))

    def test_release_partial(self):
        credit.release(customer_id=self.customer.id, amount=Decimal("10.00"))

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.credit_balance, Decimal("15.00"))

    def test_negative_amounts_are_rejected(self):
        with self.assertRaises(credit.CreditError):
            credit.charge(customer_id=self.customer.id, amount=Decimal("-1.00"))

        with self.assertRaises(credit.CreditError):
            credit.release(customer_id=self.customer.id, amount=Decimal("-1.00"))

    def test_unknown_customer(self):
        with self.assertRaises(credit.CustomerNotFound):
            credit.charge(customer_id=uuid.uuid4(), amount=Decimal("5.00"))

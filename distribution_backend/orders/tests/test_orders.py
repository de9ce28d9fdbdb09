# orders/tests/test_orders.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from orders.models import Order, OrderItem
from orders.services.exceptions import (
    BatchNotFoundError,
    CustomerNotFoundError,
    InsufficientStockError,
    NotFoundError,
    OrderValidationError,
)
from orders.services.order_transaction import create_order
from orders.tests.helpers import (
    line,
    make_batch,
    make_customer,
    make_product,
    make_stock,
    make_user,
    quantities,
)
from products.models import StockMovement


class CreateOrderTests(TestCase):
    """
    GUARANTEES:
    - order, items, batch decrements and credit charge commit together
    - a failed decrement rolls the whole order back
    - initial - current == quantity sold, per batch
    - totals are computed server-side
    """

    def setUp(self):
        self.user = make_user()
        self.customer = make_customer(balance="25.00")
        self.product = make_product()
        self.b1, self.b2 = make_stock(self.product)

    def _create(self, lines, *, payment_type=Order.PAYMENT_TYPE_CASH, customer=None):
        return create_order(
            customer_id=(customer or self.customer).id,
            sales_rep=self.user,
            payment_type=payment_type,
            lines=lines,
        )

    # ==================================================
    # FEFO LINES
    # ==================================================

    def test_fefo_order_drains_earliest_batch_first(self):
        order = self._create([line(self.product, 8)])

        self.assertEqual(quantities(self.b1, self.b2), [0, 7])

        items = list(order.items.order_by("code"))
        self.assertEqual(
            [(i.code, i.batch_id, i.quantity, i.unit_price) for i in items],
            [
                ("OI1001", self.b1.id, 5, Decimal("10.00")),
                ("OI1002", self.b2.id, 3, Decimal("12.00")),
            ],
        )
        self.assertEqual(order.code, "O1001")
        self.assertEqual(order.total_amount, Decimal("86.00"))
        self.assertEqual(order.final_amount, Decimal("86.00"))
        self.assertTrue(order.split_across_batches)
        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertEqual(order.payment_status, Order.PAYMENT_STATUS_PENDING)

    def test_every_decrement_is_recorded_against_the_order(self):
        order = self._create([line(self.product, 8)])

        movements = StockMovement.objects.filter(order=order)
        self.assertEqual(movements.count(), 2)
        self.assertTrue(
            all(m.reason == StockMovement.Reason.ORDER for m in movements)
        )

        for batch in (self.b1, self.b2):
            batch.refresh_from_db()
            sold = sum(i.quantity for i in OrderItem.objects.filter(batch=batch))
            self.assertEqual(batch.initial_quantity - batch.current_quantity, sold)

    def test_two_lines_for_same_product_see_each_others_decrements(self):
        order = self._create([line(self.product, 4), line(self.product, 4)])

        self.assertEqual(quantities(self.b1, self.b2), [0, 7])
        self.assertEqual(order.items.count(), 3)

    def test_line_discount_reduces_total(self):
        order = self._create([line(self.product, 8, discount=Decimal("10.00"))])

        self.assertEqual(order.discount_amount, Decimal("10.00"))
        self.assertEqual(order.total_amount, Decimal("76.00"))
        self.assertEqual(
            sum(i.total_price for i in order.items.all()),
            Decimal("76.00"),
        )

    def test_codes_are_sequential(self):
        first = self._create([line(self.product, 1)])
        second = self._create([line(self.product, 1)])

        self.assertEqual((first.code, second.code), ("O1001", "O1002"))
        self.assertEqual(second.items.get().code, "OI1002")

    # ==================================================
    # QUOTED LINES
    # ==================================================

    def test_quoted_line_commits_against_given_batch(self):
        order = self._create([line(self.product, 2, batch_id=self.b2.id)])

        self.assertEqual(quantities(self.b1, self.b2), [5, 8])
        self.assertEqual(order.total_amount, Decimal("24.00"))
        self.assertFalse(order.split_across_batches)

    def test_quoted_unit_price_overrides_batch_price(self):
        order = self._create(
            [line(self.product, 2, batch_id=self.b2.id, unit_price=Decimal("11.50"))]
        )
        self.assertEqual(order.total_amount, Decimal("23.00"))

    def test_stale_quote_rolls_back_everything(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            self._create(
                [
                    line(self.product, 3, batch_id=self.b2.id),
                    line(self.product, 6, batch_id=self.b1.id),
                ],
                payment_type=Order.PAYMENT_TYPE_CREDIT,
            )

        self.assertEqual(ctx.exception.batch_id, self.b1.id)
        self.assertEqual(ctx.exception.available, 5)
        self.assertEqual(quantities(self.b1, self.b2), [5, 10])
        self.assertFalse(Order.objects.exists())
        self.assertFalse(StockMovement.objects.exists())

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.credit_balance, Decimal("25.00"))

    def test_fefo_line_consumes_stock_seen_by_later_quoted_line(self):
        with self.assertRaises(InsufficientStockError):
            self._create(
                [
                    line(self.product, 3),
                    line(self.product, 3, batch_id=self.b1.id),
                ]
            )

        self.assertEqual(quantities(self.b1, self.b2), [5, 10])

    def test_fefo_shortage_rolls_back(self):
        with self.assertRaises(InsufficientStockError):
            self._create([line(self.product, 16)])

        self.assertEqual(quantities(self.b1, self.b2), [5, 10])
        self.assertFalse(Order.objects.exists())

    # ==================================================
    # CREDIT
    # ==================================================

    def test_credit_order_charges_customer(self):
        self._create([line(self.product, 8)], payment_type=Order.PAYMENT_TYPE_CREDIT)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.credit_balance, Decimal("111.00"))

    def test_cash_order_leaves_credit_alone(self):
        self._create([line(self.product, 8)])

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.credit_balance, Decimal("25.00"))

    # ==================================================
    # VALIDATION
    # ==================================================

    def test_unit_price_without_batch_is_rejected(self):
        with self.assertRaises(OrderValidationError):
            self._create([line(self.product, 1, unit_price=Decimal("9.00"))])

    def test_batch_of_another_product_is_rejected(self):
        other = make_product(sku="SKU-002", name="Cetirizine")
        foreign = make_batch(other, "C1", 10)

        with self.assertRaises(OrderValidationError):
            self._create([line(self.product, 1, batch_id=foreign.id)])

        self.assertEqual(quantities(foreign), [10])

    def test_discount_above_line_amount_is_rejected(self):
        with self.assertRaises(OrderValidationError):
            self._create([line(self.product, 1, batch_id=self.b1.id, discount=Decimal("10.01"))])

    def test_empty_order_is_rejected(self):
        with self.assertRaises(OrderValidationError):
            self._create([])

    def test_unknown_payment_type_is_rejected(self):
        with self.assertRaises(OrderValidationError):
            self._create([line(self.product, 1)], payment_type="barter")

    def test_inactive_customer_is_rejected(self):
        dormant = make_customer("Closed Shop", is_active=False)

        with self.assertRaises(OrderValidationError):
            self._create([line(self.product, 1)], customer=dormant)

        self.assertEqual(quantities(self.b1), [5])

    def test_missing_customer(self):
        with self.assertRaises(CustomerNotFoundError):
            create_order(
                customer_id=uuid.uuid4(),
                sales_rep=self.user,
                payment_type=Order.PAYMENT_TYPE_CASH,
                lines=[line(self.product, 1)],
            )

    def test_unknown_quoted_batch_is_not_found(self):
        with self.assertRaises(BatchNotFoundError) as ctx:
            self._create(
                [line(self.product, 1, batch_id=uuid.uuid4())],
                payment_type=Order.PAYMENT_TYPE_CREDIT,
            )

        self.assertIsInstance(ctx.exception, NotFoundError)
        self.assertEqual(ctx.exception.code, "NOT_FOUND")
        self.assertFalse(Order.objects.exists())
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.credit_balance, Decimal("25.00"))

    # ==================================================
    # IMMUTABILITY
    # ==================================================

    def test_order_identity_fields_are_immutable(self):
        order = self._create([line(self.product, 1)])
        order.payment_type = Order.PAYMENT_TYPE_CREDIT

        with self.assertRaises(ValidationError):
            order.save()

    def test_order_items_are_immutable(self):
        order = self._create([line(self.product, 1)])
        item = order.items.get()
        item.quantity = 2

        with self.assertRaises(ValidationError):
            item.save()

# orders/tests/test_api.py

import uuid

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from orders.models import Order
from orders.tests.helpers import make_customer, make_product, make_stock, make_user, quantities

ALLOCATE_URL = "/api/orders/allocate/"
ORDERS_URL = "/api/orders/orders/"


def order_url(order_id, action=""):
    base = f"{ORDERS_URL}{order_id}/"
    return f"{base}{action}/" if action else base


class OrdersApiTests(TestCase):
    """
    GUARANTEES:
    - every endpoint answers domain failures with {"error": {"code", "message", ...}}
    - VALIDATION_ERROR 400, NOT_FOUND 404, conflicts 409
    """

    def setUp(self):
        self.client = APIClient()
        self.user = make_user()
        self.client.force_authenticate(user=self.user)

        self.customer = make_customer()
        self.product = make_product()
        self.b1, self.b2 = make_stock(self.product)

    def _create_order(self, quantity=8, **overrides):
        payload = {
            "customer_id": str(self.customer.id),
            "payment_type": "credit",
            "items": [{"product_id": str(self.product.id), "quantity": quantity}],
        }
        payload.update(overrides)
        return self.client.post(ORDERS_URL, payload, format="json")

    # ==================================================
    # AUTH / OPS
    # ==================================================

    def test_requires_authentication(self):
        res = APIClient().get(ORDERS_URL)
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_health_check(self):
        res = APIClient().get("/api/health/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data, {"status": "ok", "db": "ok"})

    # ==================================================
    # ALLOCATION QUOTE
    # ==================================================

    def test_allocate_returns_fefo_split(self):
        res = self.client.post(
            ALLOCATE_URL,
            {"product_id": str(self.product.id), "quantity": 8},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["split_across_batches"])
        self.assertEqual(
            [(row["batch_number"], row["quantity"]) for row in res.data["lines"]],
            [("B1", 5), ("B2", 3)],
        )
        self.assertEqual(res.data["lines"][0]["expiry_date"], "2025-01-01")
        self.assertEqual(res.data["gross_amount"], "86.00")
        self.assertEqual(quantities(self.b1, self.b2), [5, 10])

    def test_allocate_insufficient_stock(self):
        res = self.client.post(
            ALLOCATE_URL,
            {"product_id": str(self.product.id), "quantity": 20},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"]["code"], "INSUFFICIENT_STOCK")
        self.assertEqual(res.data["error"]["required"], 20)
        self.assertEqual(res.data["error"]["available"], 15)

    def test_allocate_bad_payload(self):
        res = self.client.post(
            ALLOCATE_URL,
            {"product_id": "not-a-uuid", "quantity": 0},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "VALIDATION_ERROR")
        self.assertIn("product_id", res.data["error"]["fields"])
        self.assertIn("quantity", res.data["error"]["fields"])

    def test_allocate_unknown_product(self):
        res = self.client.post(
            ALLOCATE_URL,
            {"product_id": str(uuid.uuid4()), "quantity": 1},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["error"]["code"], "NOT_FOUND")

    # ==================================================
    # ORDER CREATION / READS
    # ==================================================

    def test_create_order(self):
        res = self._create_order()

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["code"], "O1001")
        self.assertEqual(res.data["total_amount"], "86.00")
        self.assertTrue(res.data["split_across_batches"])
        self.assertEqual(len(res.data["items"]), 2)
        self.assertEqual(quantities(self.b1, self.b2), [0, 7])

    def test_create_order_with_stale_quote(self):
        res = self._create_order(
            items=[
                {
                    "product_id": str(self.product.id),
                    "batch_id": str(self.b1.id),
                    "quantity": 6,
                }
            ]
        )

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"]["code"], "INSUFFICIENT_STOCK")
        self.assertEqual(res.data["error"]["batch_id"], str(self.b1.id))
        self.assertFalse(Order.objects.exists())

    def test_create_order_unknown_customer(self):
        res = self._create_order(customer_id=str(uuid.uuid4()))

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["error"]["code"], "NOT_FOUND")

    def test_create_order_unknown_batch(self):
        res = self._create_order(
            items=[
                {
                    "product_id": str(self.product.id),
                    "batch_id": str(uuid.uuid4()),
                    "quantity": 1,
                }
            ]
        )

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["error"]["code"], "NOT_FOUND")
        self.assertFalse(Order.objects.exists())

    def test_create_order_requires_items(self):
        res = self._create_order(items=[])

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "VALIDATION_ERROR")

    def test_list_and_detail(self):
        order_id = self._create_order().data["order_id"]

        res = self.client.get(ORDERS_URL, {"status": "pending"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 1)

        res = self.client.get(ORDERS_URL, {"status": "cancelled"})
        self.assertEqual(res.data["count"], 0)

        res = self.client.get(order_url(order_id))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["customer_name"], self.customer.name)
        self.assertTrue(res.data["split_across_batches"])
        self.assertIsNone(res.data["order_return"])

    def test_detail_with_malformed_id_is_not_found(self):
        res = self.client.get(f"{ORDERS_URL}not-a-real-id/")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    # ==================================================
    # LIFECYCLE ACTIONS
    # ==================================================

    def test_invalid_transition(self):
        order_id = self._create_order().data["order_id"]

        res = self.client.post(order_url(order_id, "status"), {"status": "delivered"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"]["code"], "INVALID_TRANSITION")

    def test_cancel(self):
        order_id = self._create_order().data["order_id"]

        res = self.client.post(order_url(order_id, "status"), {"status": "cancelled"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["previous_status"], "pending")
        self.assertTrue(res.data["inventory_restored"])
        self.assertEqual(quantities(self.b1, self.b2), [5, 10])

    def test_status_on_missing_order(self):
        res = self.client.post(order_url(uuid.uuid4(), "status"), {"status": "processing"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["error"]["code"], "NOT_FOUND")

    def test_payment(self):
        order_id = self._create_order().data["order_id"]

        res = self.client.post(
            order_url(order_id, "payments"),
            {"amount": "40.00", "method": "cash"},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["payment_status"], "partial")
        self.assertEqual(res.data["total_paid"], "40.00")
        self.assertFalse(res.data["overpaid"])

    def test_payment_with_non_positive_amount(self):
        order_id = self._create_order().data["order_id"]

        res = self.client.post(
            order_url(order_id, "payments"),
            {"amount": "-5.00", "method": "cash"},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "VALIDATION_ERROR")

    def test_return_requires_delivered_order(self):
        order_id = self._create_order().data["order_id"]

        res = self.client.post(
            order_url(order_id, "returns"),
            {
                "reason": "Damaged",
                "items": [
                    {
                        "product_id": str(self.product.id),
                        "batch_id": str(self.b1.id),
                        "quantity": 1,
                        "reason": "damaged",
                    }
                ],
            },
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"]["code"], "INVALID_STATE")

    def test_return_on_delivered_order(self):
        order_id = self._create_order().data["order_id"]
        for target in ("processing", "delivered"):
            self.client.post(order_url(order_id, "status"), {"status": target}, format="json")

        res = self.client.post(
            order_url(order_id, "returns"),
            {
                "reason": "Damaged in transit",
                "items": [
                    {
                        "product_id": str(self.product.id),
                        "batch_id": str(self.b2.id),
                        "quantity": 2,
                        "reason": "damaged",
                    }
                ],
            },
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["total_return_amount"], "24.00")
        self.assertEqual(res.data["final_amount"], "62.00")
        self.assertEqual(len(res.data["items"]), 1)

        res = self.client.get(order_url(order_id))
        self.assertEqual(res.data["order_return"]["total_amount"], "24.00")

    def test_notes(self):
        order_id = self._create_order().data["order_id"]

        res = self.client.post(order_url(order_id, "notes"), {"note": "Call before arrival"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["notes"].endswith("] Call before arrival"))

# orders/tests/helpers.py

"""
Shared fixtures for orders tests.

Default stock picture (used across modules):
    B1: 5 units, expires 2025-01-01, 10.00 each
    B2: 10 units, expires 2025-02-01, 12.00 each
"""

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model

from customers.models import Customer
from orders.services.requests import OrderLineRequest
from products.models import Product, ProductBatch

User = get_user_model()


def make_user(username="rep"):
    return User.objects.create_user(username=username, password="pass12345")


def make_customer(name="Sunrise Chemists", *, balance="0.00", limit="1000.00", **extra):
    return Customer.objects.create(
        name=name,
        city="Accra",
        area="Osu",
        credit_limit=Decimal(limit),
        credit_balance=Decimal(balance),
        **extra,
    )


def make_product(sku="SKU-001", name="Ibuprofen 200mg", price="10.00"):
    return Product.objects.create(sku=sku, name=name, unit_price=Decimal(price))


def make_batch(product, number, quantity, *, expiry=None, price="10.00", **extra):
    return ProductBatch.objects.create(
        product=product,
        batch_number=number,
        expiry_date=expiry,
        received_date=extra.pop("received_date", date(2024, 6, 1)),
        selling_price=Decimal(price),
        initial_quantity=quantity,
        **extra,
    )


def make_stock(product):
    b1 = make_batch(product, "B1", 5, expiry=date(2025, 1, 1), price="10.00")
    b2 = make_batch(product, "B2", 10, expiry=date(2025, 2, 1), price="12.00")
    return b1, b2


def line(product, quantity, **kwargs):
    return OrderLineRequest(product_id=product.id, quantity=quantity, **kwargs)


def quantities(*batches):
    return [type(b).objects.get(pk=b.pk).current_quantity for b in batches]

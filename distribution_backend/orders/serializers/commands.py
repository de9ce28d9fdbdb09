# orders/serializers/commands.py

"""
Command serializers for fulfillment requests.

These serializers do NOT touch the database.
They validate input shape and hand typed requests to the services.
"""

from decimal import Decimal

from rest_framework import serializers

from orders.models import Order, Payment, ReturnItem
from orders.services.requests import OrderLineRequest, ReturnLineRequest


# ==========================================================
# ALLOCATION QUOTE
# ==========================================================

class AllocateCommandSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    discount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.00"),
        required=False,
        default=Decimal("0.00"),
    )


# ==========================================================
# ORDER CREATION
# ==========================================================

class OrderLineInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    batch_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        required=False,
        allow_null=True,
        default=None,
    )
    discount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.00"),
        required=False,
        default=Decimal("0.00"),
    )

    def to_request(self, data) -> OrderLineRequest:
        return OrderLineRequest(
            product_id=data["product_id"],
            quantity=data["quantity"],
            discount=data.get("discount") or Decimal("0.00"),
            batch_id=data.get("batch_id"),
            unit_price=data.get("unit_price"),
        )


class OrderCreateCommandSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    payment_type = serializers.ChoiceField(choices=Order.PAYMENT_TYPE_CHOICES)
    delivery_date = serializers.DateField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = OrderLineInputSerializer(many=True, allow_empty=False)

    def line_requests(self) -> list[OrderLineRequest]:
        line_serializer = OrderLineInputSerializer()
        return [line_serializer.to_request(line) for line in self.validated_data["items"]]


# ==========================================================
# LIFECYCLE
# ==========================================================

class OrderStatusCommandSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)


class PaymentCommandSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES)
    reference_number = serializers.CharField(
        required=False, allow_blank=True, default="", max_length=128
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ReturnLineInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    batch_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    reason = serializers.ChoiceField(choices=ReturnItem.REASON_CHOICES)


class ReturnCommandSerializer(serializers.Serializer):
    reason = serializers.CharField()
    items = ReturnLineInputSerializer(many=True, allow_empty=False)

    def line_requests(self) -> list[ReturnLineRequest]:
        return [
            ReturnLineRequest(
                product_id=line["product_id"],
                batch_id=line["batch_id"],
                quantity=line["quantity"],
                reason=line["reason"],
            )
            for line in self.validated_data["items"]
        ]


class OrderNoteCommandSerializer(serializers.Serializer):
    note = serializers.CharField()

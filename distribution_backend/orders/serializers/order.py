# orders/serializers/order.py

from rest_framework import serializers

from orders.models import Order, OrderItem, OrderReturn, Payment, ReturnItem


class OrderItemSerializer(serializers.ModelSerializer):
    """
    Order line (read-only). One row per (product, batch).
    """

    product_name = serializers.SerializerMethodField()
    batch_number = serializers.SerializerMethodField()
    expiry_date = serializers.SerializerMethodField()

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "code",
            "product",
            "product_name",
            "batch",
            "batch_number",
            "expiry_date",
            "quantity",
            "unit_price",
            "discount",
            "total_price",
        ]
        read_only_fields = fields

    def get_product_name(self, obj):
        p = getattr(obj, "product", None)
        return getattr(p, "name", None) or "Item"

    def get_batch_number(self, obj):
        b = getattr(obj, "batch", None)
        return getattr(b, "batch_number", None)

    def get_expiry_date(self, obj):
        b = getattr(obj, "batch", None)
        return getattr(b, "expiry_date", None)


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            "id",
            "code",
            "amount",
            "method",
            "reference_number",
            "notes",
            "received_by",
            "payment_date",
        ]
        read_only_fields = fields


class ReturnItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReturnItem
        fields = [
            "id",
            "code",
            "product",
            "batch",
            "quantity",
            "unit_price",
            "total_price",
            "reason",
        ]
        read_only_fields = fields


class OrderReturnSerializer(serializers.ModelSerializer):
    items = ReturnItemSerializer(many=True, read_only=True)

    class Meta:
        model = OrderReturn
        fields = [
            "id",
            "code",
            "reason",
            "total_amount",
            "status",
            "processed_by",
            "return_date",
            "items",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """
    Order detail / history payload.
    """

    customer_name = serializers.CharField(source="customer.name", read_only=True)
    sales_rep_name = serializers.SerializerMethodField()
    split_across_batches = serializers.SerializerMethodField()

    items = OrderItemSerializer(many=True, read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)
    order_return = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "code",
            "customer",
            "customer_name",
            "sales_rep",
            "sales_rep_name",
            "order_date",
            "delivery_date",
            "payment_type",
            "payment_status",
            "status",
            "total_amount",
            "discount_amount",
            "final_amount",
            "notes",
            "split_across_batches",
            "items",
            "payments",
            "order_return",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_sales_rep_name(self, obj):
        user = getattr(obj, "sales_rep", None)
        if user is None:
            return None
        return user.get_full_name() or user.get_username()

    def get_split_across_batches(self, obj) -> bool:
        # Works off prefetched items (no extra query on lists)
        batches_by_product = {}
        for item in obj.items.all():
            batches_by_product.setdefault(item.product_id, set()).add(item.batch_id)
        return any(len(batches) > 1 for batches in batches_by_product.values())

    def get_order_return(self, obj):
        try:
            order_return = obj.order_return
        except OrderReturn.DoesNotExist:
            return None
        return OrderReturnSerializer(order_return).data

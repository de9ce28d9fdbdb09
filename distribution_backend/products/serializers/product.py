# products/serializers/product.py

from rest_framework import serializers

from products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    # Annotated by the viewset queryset (avoids N+1 on lists)
    total_stock = serializers.IntegerField(source="stock_on_hand", read_only=True)
    is_below_reorder_level = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "unit_price",
            "reorder_level",
            "is_active",
            "total_stock",
            "is_below_reorder_level",
        ]
        read_only_fields = fields

    def get_is_below_reorder_level(self, obj) -> bool:
        total = getattr(obj, "stock_on_hand", None)
        if total is None:
            return obj.is_below_reorder_level
        return int(total or 0) <= int(obj.reorder_level or 0)

# products/serializers/product_batch.py
"""
======================================================
PATH: products/serializers/product_batch.py
======================================================
PRODUCT BATCH SERIALIZER (READ)

Batch rows as the allocation screen shows them:
FEFO position is implied by list order, supplier name is flattened.
Quantities are ledger-managed, so everything here is read-only.
"""

from rest_framework import serializers

from products.models import ProductBatch


class ProductBatchSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(source="product.id", read_only=True)
    supplier_name = serializers.SerializerMethodField()

    class Meta:
        model = ProductBatch
        fields = [
            "id",
            "product_id",
            "batch_number",
            "supplier_name",
            "manufacturing_date",
            "expiry_date",
            "received_date",
            "cost_price",
            "selling_price",
            "initial_quantity",
            "current_quantity",
            "is_active",
        ]
        read_only_fields = fields

    def get_supplier_name(self, obj) -> str:
        supplier = getattr(obj, "supplier", None)
        return supplier.name if supplier else ""

# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Read-only product listing with annotated stock totals
- FEFO batch listing per product (what the allocator will draw from)

Product CRUD screens live elsewhere; this surface only serves fulfillment.
"""

from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from products.models import Product
from products.serializers import ProductBatchSerializer, ProductSerializer
from products.services.batch_ledger import list_active_batches


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    """
    GET /products/products/
    GET /products/products/{id}/
    GET /products/products/{id}/batches/
    """

    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated]
    lookup_value_regex = "[0-9a-fA-F-]{36}"

    def get_queryset(self):
        stock_filter = Q(batches__is_active=True) & Q(batches__current_quantity__gt=0)

        qs = Product.objects.annotate(
            stock_on_hand=Coalesce(Sum("batches__current_quantity", filter=stock_filter), 0)
        ).order_by("name")

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(name__icontains=q) | Q(sku__icontains=q))

        active = (self.request.query_params.get("active") or "").strip().lower()
        if active in {"1", "true", "yes"}:
            qs = qs.filter(is_active=True)

        return qs

    @extend_schema(
        parameters=[
            OpenApiParameter("q", str, description="Search by name or SKU"),
            OpenApiParameter("active", bool, description="Only active products"),
        ],
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(responses={200: ProductBatchSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="batches")
    def batches(self, request, pk=None):
        """
        Active batches with stock left, earliest expiry first.
        """
        product = self.get_object()
        rows = list_active_batches(product.pk)
        return Response(ProductBatchSerializer(rows, many=True).data)

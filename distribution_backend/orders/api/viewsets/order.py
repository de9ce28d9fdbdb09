# orders/api/viewsets/order.py

"""
======================================================
PATH: orders/api/viewsets/order.py
======================================================
ORDER VIEWSET (STAFF)

Purpose:
- Order history: list + retrieve with filters (django-filter).
- Order creation: cart lines -> durable order (one transaction).
- Lifecycle actions: status, payments, returns, notes.

Rules:
- Request bodies are validated by command serializers and converted into
  typed requests before any service runs.
- Backend is authoritative for totals, stock and credit.
- Domain errors use the canonical {"error": {...}} envelope.
======================================================
"""

from __future__ import annotations

import logging

from django.db import DatabaseError
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from orders.api.errors import (
    DOMAIN_ERRORS,
    domain_error_response,
    internal_error_response,
    validation_error_response,
)
from orders.api.filters import OrderFilterSet
from orders.models import Order
from orders.serializers.commands import (
    OrderCreateCommandSerializer,
    OrderNoteCommandSerializer,
    OrderStatusCommandSerializer,
    PaymentCommandSerializer,
    ReturnCommandSerializer,
)
from orders.serializers.order import (
    OrderItemSerializer,
    OrderSerializer,
    ReturnItemSerializer,
)
from orders.services.order_transaction import create_order
from orders.services.payment_service import record_payment
from orders.services.return_service import process_return
from orders.services.status_service import add_order_notes, update_order_status

logger = logging.getLogger(__name__)


class OrderViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend]
    filterset_class = OrderFilterSet
    lookup_value_regex = "[0-9a-fA-F-]{36}"

    # ======================================================
    # QUERYSET
    # ======================================================

    def get_queryset(self):
        return (
            Order.objects.all()
            .select_related("customer", "sales_rep", "order_return")
            .prefetch_related(
                "items",
                "items__product",
                "items__batch",
                "payments",
                "order_return__items",
            )
            .order_by("-created_at")
        )

    # ======================================================
    # CREATE ORDER
    # POST /api/orders/orders/
    # ======================================================

    @extend_schema(
        request=OrderCreateCommandSerializer,
        responses={201: serializers.DictField()},
    )
    def create(self, request, *args, **kwargs):
        ser = OrderCreateCommandSerializer(data=request.data)
        if not ser.is_valid():
            return validation_error_response(ser.errors)

        data = ser.validated_data

        try:
            order = create_order(
                customer_id=data["customer_id"],
                sales_rep=request.user,
                payment_type=data["payment_type"],
                lines=ser.line_requests(),
                notes=data.get("notes", ""),
                delivery_date=data.get("delivery_date"),
            )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception(
                "Order creation failed",
                extra={"customer_id": str(data["customer_id"])},
            )
            return internal_error_response()

        items = order.items.select_related("product", "batch").order_by("code")

        return Response(
            {
                "order_id": str(order.id),
                "code": order.code,
                "total_amount": str(order.total_amount),
                "discount_amount": str(order.discount_amount),
                "split_across_batches": order.split_across_batches,
                "items": OrderItemSerializer(items, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )

    # ======================================================
    # STATUS TRANSITION
    # POST /api/orders/orders/:id/status/
    # ======================================================

    @extend_schema(
        request=OrderStatusCommandSerializer,
        responses={200: serializers.DictField()},
    )
    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request, pk=None):
        ser = OrderStatusCommandSerializer(data=request.data)
        if not ser.is_valid():
            return validation_error_response(ser.errors)

        try:
            change = update_order_status(
                order_id=pk,
                new_status=ser.validated_data["status"],
                user=request.user,
            )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Order status change failed", extra={"order_id": str(pk)})
            return internal_error_response()

        return Response(
            {
                "order_id": str(change.order.id),
                "previous_status": change.previous_status,
                "status": change.status,
                "inventory_restored": change.inventory_restored,
            },
            status=status.HTTP_200_OK,
        )

    # ======================================================
    # PAYMENTS
    # POST /api/orders/orders/:id/payments/
    # ======================================================

    @extend_schema(
        request=PaymentCommandSerializer,
        responses={201: serializers.DictField()},
    )
    @action(detail=True, methods=["post"], url_path="payments")
    def payments(self, request, pk=None):
        ser = PaymentCommandSerializer(data=request.data)
        if not ser.is_valid():
            return validation_error_response(ser.errors)

        data = ser.validated_data

        try:
            result = record_payment(
                order_id=pk,
                amount=data["amount"],
                method=data["method"],
                reference_number=data.get("reference_number", ""),
                notes=data.get("notes", ""),
                received_by=request.user,
            )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Payment recording failed", extra={"order_id": str(pk)})
            return internal_error_response()

        return Response(
            {
                "payment_id": str(result.payment.id),
                "code": result.payment.code,
                "payment_status": result.payment_status,
                "total_paid": str(result.total_paid),
                "overpaid": result.overpaid,
            },
            status=status.HTTP_201_CREATED,
        )

    # ======================================================
    # RETURNS
    # POST /api/orders/orders/:id/returns/
    # ======================================================

    @extend_schema(
        request=ReturnCommandSerializer,
        responses={201: serializers.DictField()},
    )
    @action(detail=True, methods=["post"], url_path="returns")
    def returns(self, request, pk=None):
        ser = ReturnCommandSerializer(data=request.data)
        if not ser.is_valid():
            return validation_error_response(ser.errors)

        try:
            order_return = process_return(
                order_id=pk,
                processed_by=request.user,
                reason=ser.validated_data["reason"],
                items=ser.line_requests(),
            )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Return processing failed", extra={"order_id": str(pk)})
            return internal_error_response()

        order = order_return.order

        return Response(
            {
                "return_id": str(order_return.id),
                "code": order_return.code,
                "total_return_amount": str(order_return.total_amount),
                "final_amount": str(order.final_amount),
                "items": ReturnItemSerializer(order_return.items.all(), many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )

    # ======================================================
    # NOTES
    # POST /api/orders/orders/:id/notes/
    # ======================================================

    @extend_schema(
        request=OrderNoteCommandSerializer,
        responses={200: serializers.DictField()},
    )
    @action(detail=True, methods=["post"], url_path="notes")
    def notes(self, request, pk=None):
        ser = OrderNoteCommandSerializer(data=request.data)
        if not ser.is_valid():
            return validation_error_response(ser.errors)

        try:
            order = add_order_notes(order_id=pk, note=ser.validated_data["note"])
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Adding order note failed", extra={"order_id": str(pk)})
            return internal_error_response()

        return Response(
            {"order_id": str(order.id), "notes": order.notes},
            status=status.HTTP_200_OK,
        )

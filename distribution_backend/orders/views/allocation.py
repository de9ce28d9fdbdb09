# orders/views/allocation.py

"""
ALLOCATION QUOTE

POST /api/orders/allocate/

Read-only FEFO split for one product line. The quote is shown to the
operator; the order transaction re-validates every line at commit time.
"""

import logging

from django.db import DatabaseError
from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.api.errors import (
    DOMAIN_ERRORS,
    domain_error_response,
    internal_error_response,
    validation_error_response,
)
from orders.serializers.commands import AllocateCommandSerializer
from orders.services.fefo_allocator import allocate

logger = logging.getLogger(__name__)


def _serialize_allocation(allocation) -> dict:
    return {
        "product_id": str(allocation.product_id),
        "split_across_batches": allocation.split_across_batches,
        "total_quantity": allocation.total_quantity,
        "gross_amount": str(allocation.gross_amount),
        "discount": str(allocation.discount),
        "net_amount": str(allocation.net_amount),
        "lines": [
            {
                "batch_id": str(line.batch_id),
                "batch_number": line.batch_number,
                "expiry_date": line.expiry_date.isoformat() if line.expiry_date else None,
                "supplier_name": line.supplier_name,
                "quantity": line.quantity,
                "unit_price": str(line.unit_price),
                "discount": str(line.discount),
                "total_price": str(line.total_price),
            }
            for line in allocation.lines
        ],
    }


class AllocateView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=AllocateCommandSerializer,
        responses={200: serializers.DictField()},
    )
    def post(self, request):
        ser = AllocateCommandSerializer(data=request.data)
        if not ser.is_valid():
            return validation_error_response(ser.errors)

        data = ser.validated_data

        try:
            allocation = allocate(
                data["product_id"],
                data["quantity"],
                data.get("discount"),
            )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception(
                "Allocation quote failed",
                extra={"product_id": str(data["product_id"])},
            )
            return internal_error_response()

        return Response(_serialize_allocation(allocation), status=status.HTTP_200_OK)

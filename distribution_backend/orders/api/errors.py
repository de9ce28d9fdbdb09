# orders/api/errors.py

"""
API ERROR NORMALIZATION

Canonical envelope:
    {"error": {"code": "...", "message": "...", ...details}}

Domain errors map to fixed HTTP statuses. Unexpected database errors are
logged with their traceback and surfaced as INTERNAL_ERROR without the
storage message.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from orders.services.exceptions import (
    FulfillmentError,
    InsufficientStockError,
    InvalidOrderStateError,
    InvalidOrderTransitionError,
    NotFoundError,
    OrderValidationError,
)

DOMAIN_ERRORS = (FulfillmentError, InsufficientStockError)

_STATUS_BY_ERROR = (
    (OrderValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InsufficientStockError, status.HTTP_409_CONFLICT),
    (InvalidOrderTransitionError, status.HTTP_409_CONFLICT),
    (InvalidOrderStateError, status.HTTP_409_CONFLICT),
)


def error_response(*, code: str, message: str, http_status: int, details: dict | None = None):
    """
    Canonical API error response.
    """
    body = dict(details or {})
    body.update({"code": code, "message": message})
    return Response({"error": body}, status=http_status)


def validation_error_response(errors):
    return error_response(
        code="VALIDATION_ERROR",
        message="Invalid request payload.",
        http_status=status.HTTP_400_BAD_REQUEST,
        details={"fields": errors},
    )


def domain_error_response(exc):
    http_status = status.HTTP_400_BAD_REQUEST
    for error_cls, mapped in _STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            http_status = mapped
            break

    return error_response(
        code=getattr(exc, "code", "FULFILLMENT_ERROR"),
        message=getattr(exc, "message", "") or str(exc),
        http_status=http_status,
        details=getattr(exc, "details", None),
    )


def internal_error_response():
    return error_response(
        code="INTERNAL_ERROR",
        message="An internal error occurred. Please try again later.",
        http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )

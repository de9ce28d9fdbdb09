# orders/services/exceptions.py

"""
FULFILLMENT DOMAIN ERRORS

Every error carries a stable machine code (used by the API envelope)
and optional structured details.

InsufficientStockError belongs to the batch ledger (it is raised by the
compare-and-decrement) and is re-exported here so callers import one module.
"""

from products.services.batch_ledger import InsufficientStockError


class FulfillmentError(Exception):
    code = "FULFILLMENT_ERROR"

    def __init__(self, message: str = "", *, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})


class OrderValidationError(FulfillmentError):
    """Input rejected before any write."""

    code = "VALIDATION_ERROR"


class NotFoundError(FulfillmentError):
    code = "NOT_FOUND"


class OrderNotFoundError(NotFoundError):
    pass


class CustomerNotFoundError(NotFoundError):
    pass


class ProductNotFoundError(NotFoundError):
    pass


class BatchNotFoundError(NotFoundError):
    pass


class InvalidOrderTransitionError(FulfillmentError):
    code = "INVALID_TRANSITION"


class InvalidOrderStateError(FulfillmentError):
    code = "INVALID_STATE"


class DuplicateReturnError(InvalidOrderStateError):
    pass


__all__ = [
    "FulfillmentError",
    "OrderValidationError",
    "NotFoundError",
    "OrderNotFoundError",
    "CustomerNotFoundError",
    "ProductNotFoundError",
    "BatchNotFoundError",
    "InvalidOrderTransitionError",
    "InvalidOrderStateError",
    "DuplicateReturnError",
    "InsufficientStockError",
]

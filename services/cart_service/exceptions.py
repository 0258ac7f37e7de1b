from enum import Enum


class RejectionReason(str, Enum):
    MISSING_OR_WRONG_TYPE = "MISSING_OR_WRONG_TYPE"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    UNKNOWN_PRODUCT = "UNKNOWN_PRODUCT"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"


class CartValidationError(ValueError):
    """A cart mutation was rejected before anything was changed."""

    def __init__(self, reason: RejectionReason, message: str, available: int | None = None):
        super().__init__(message)
        self.reason = reason
        self.message = message
        self.available = available


class CartPersistenceError(RuntimeError):
    """The persistent cart store could not be read or written."""

"""
Pure validation for cart mutations.

Rules for an add run in a fixed order and the first failure wins:
shape/type, quantity > 0, catalog membership, stock ceiling.
"""
from collections.abc import Mapping
from typing import Any

from services.product_service.service import Catalog
from .exceptions import CartValidationError, RejectionReason


def _is_int(value: Any) -> bool:
    # bool is an int subclass; JSON true/false is not a quantity
    return isinstance(value, int) and not isinstance(value, bool)


def extract_fields(payload: Any, *names: str) -> tuple:
    """Pulls named fields out of a JSON body. Non-object bodies yield all None."""
    if not isinstance(payload, Mapping):
        return tuple(None for _ in names)
    return tuple(payload.get(name) for name in names)


def validate_add(product_id: Any, qty: Any, current_qty_in_cart: int, catalog: Catalog) -> tuple[int, int]:
    if product_id is None or qty is None:
        raise CartValidationError(
            RejectionReason.MISSING_OR_WRONG_TYPE,
            "Invalid data: productId and qty are required",
        )
    if not _is_int(product_id) or not _is_int(qty):
        raise CartValidationError(
            RejectionReason.MISSING_OR_WRONG_TYPE,
            "Invalid data: productId and qty must be integers",
        )

    if qty <= 0:
        raise CartValidationError(
            RejectionReason.INVALID_QUANTITY,
            "Quantity must be greater than 0",
        )

    product = catalog.get(product_id)
    if product is None:
        raise CartValidationError(
            RejectionReason.UNKNOWN_PRODUCT,
            f"Product {product_id} does not exist",
        )

    if current_qty_in_cart + qty > product.stock:
        available = max(product.stock - current_qty_in_cart, 0)
        raise CartValidationError(
            RejectionReason.INSUFFICIENT_STOCK,
            f"Insufficient stock. Available: {available}",
            available=available,
        )

    return product_id, qty


def validate_remove(product_id: Any) -> int:
    if product_id is None:
        raise CartValidationError(
            RejectionReason.MISSING_OR_WRONG_TYPE,
            "productId is required",
        )
    if not _is_int(product_id):
        raise CartValidationError(
            RejectionReason.MISSING_OR_WRONG_TYPE,
            "productId must be an integer",
        )
    return product_id

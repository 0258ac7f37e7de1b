import pytest

from services.cart_service.exceptions import CartValidationError, RejectionReason
from services.cart_service.validator import extract_fields, validate_add, validate_remove


def _reason(excinfo) -> RejectionReason:
    return excinfo.value.reason


def test_valid_add_returns_sanitized_values(catalog):
    assert validate_add(1, 3, 0, catalog) == (1, 3)


@pytest.mark.parametrize("product_id,qty", [
    (None, 1), (1, None), (None, None),
    ("1", 1), (1, "2"), (1.0, 1), (1, 2.5), (True, 1), (1, True),
])
def test_missing_or_wrong_type(catalog, product_id, qty):
    with pytest.raises(CartValidationError) as excinfo:
        validate_add(product_id, qty, 0, catalog)
    assert _reason(excinfo) == RejectionReason.MISSING_OR_WRONG_TYPE


@pytest.mark.parametrize("qty", [0, -1, -100])
def test_non_positive_quantity(catalog, qty):
    with pytest.raises(CartValidationError) as excinfo:
        validate_add(1, qty, 0, catalog)
    assert _reason(excinfo) == RejectionReason.INVALID_QUANTITY


@pytest.mark.parametrize("product_id", [0, -1, 10, 999])
def test_unknown_product(catalog, product_id):
    with pytest.raises(CartValidationError) as excinfo:
        validate_add(product_id, 1, 0, catalog)
    assert _reason(excinfo) == RejectionReason.UNKNOWN_PRODUCT


def test_insufficient_stock_reports_available(catalog):
    # Product 1 has stock 12
    with pytest.raises(CartValidationError) as excinfo:
        validate_add(1, 5, 10, catalog)
    assert _reason(excinfo) == RejectionReason.INSUFFICIENT_STOCK
    assert excinfo.value.available == 2


def test_stock_ceiling_is_inclusive(catalog):
    assert validate_add(1, 2, 10, catalog) == (1, 2)
    assert validate_add(1, 12, 0, catalog) == (1, 12)


def test_first_failing_rule_wins(catalog):
    # Bad quantity is reported before the unknown product
    with pytest.raises(CartValidationError) as excinfo:
        validate_add(999, 0, 0, catalog)
    assert _reason(excinfo) == RejectionReason.INVALID_QUANTITY

    # Wrong type is reported before the bad quantity
    with pytest.raises(CartValidationError) as excinfo:
        validate_add("999", -1, 0, catalog)
    assert _reason(excinfo) == RejectionReason.MISSING_OR_WRONG_TYPE


def test_validate_remove_accepts_any_integer():
    assert validate_remove(1) == 1
    assert validate_remove(999) == 999


@pytest.mark.parametrize("product_id", [None, "1", 1.5, False])
def test_validate_remove_rejects_non_integers(product_id):
    with pytest.raises(CartValidationError) as excinfo:
        validate_remove(product_id)
    assert _reason(excinfo) == RejectionReason.MISSING_OR_WRONG_TYPE


def test_extract_fields():
    assert extract_fields({"productId": 1, "qty": 2}, "productId", "qty") == (1, 2)
    assert extract_fields({"productId": 1}, "productId", "qty") == (1, None)
    assert extract_fields(None, "productId", "qty") == (None, None)
    assert extract_fields([1, 2], "productId") == (None,)
    assert extract_fields(b"raw", "productId") == (None,)

import json

import pytest

from services.cart_service.exceptions import CartPersistenceError, CartValidationError, RejectionReason
from services.cart_service.repository import CartRepository, JsonFileCartRepository
from services.cart_service.schemas import CartItem
from services.cart_service.service import CartService


class FailingRepository(CartRepository):
    """Repository whose disk is permanently broken."""

    def __init__(self):
        self.save_attempts = 0

    async def load(self, user_id):
        raise CartPersistenceError("read failed")

    async def save(self, user_id, items):
        self.save_attempts += 1
        raise CartPersistenceError("disk full")


def _pairs(cart):
    return [(item.product_id, item.qty) for item in cart]


@pytest.mark.asyncio
async def test_get_unknown_user_is_empty(cart_service):
    assert await cart_service.get("nobody") == []


@pytest.mark.asyncio
async def test_add_new_item(cart_service):
    cart = await cart_service.add("u1", 1, 2)
    assert _pairs(cart) == [(1, 2)]


@pytest.mark.asyncio
async def test_add_existing_item_increments_in_place(cart_service):
    await cart_service.add("u1", 1, 1)
    await cart_service.add("u1", 2, 1)
    cart = await cart_service.add("u1", 1, 3)
    assert _pairs(cart) == [(1, 4), (2, 1)]


@pytest.mark.asyncio
async def test_stock_ceiling_scenario(cart_service):
    cart = await cart_service.add("u1", 1, 12)
    assert _pairs(cart) == [(1, 12)]

    with pytest.raises(CartValidationError) as excinfo:
        await cart_service.add("u1", 1, 1)
    assert excinfo.value.reason == RejectionReason.INSUFFICIENT_STOCK
    assert excinfo.value.available == 0
    assert _pairs(await cart_service.get("u1")) == [(1, 12)]


@pytest.mark.asyncio
async def test_unknown_product_scenario(cart_service, repository):
    with pytest.raises(CartValidationError) as excinfo:
        await cart_service.add("u2", 999, 1)
    assert excinfo.value.reason == RejectionReason.UNKNOWN_PRODUCT
    assert await cart_service.get("u2") == []
    # Rejections never reach the store
    assert not repository.path.exists()


@pytest.mark.asyncio
async def test_stock_is_checked_per_user(cart_service):
    await cart_service.add("u1", 6, 7)
    cart = await cart_service.add("u2", 6, 7)
    assert _pairs(cart) == [(6, 7)]


@pytest.mark.asyncio
async def test_remove_item(cart_service):
    await cart_service.add("u1", 1, 1)
    await cart_service.add("u1", 2, 1)
    cart = await cart_service.remove("u1", 1)
    assert _pairs(cart) == [(2, 1)]


@pytest.mark.asyncio
async def test_remove_missing_item_is_noop(cart_service):
    assert await cart_service.remove("u1", 5) == []
    await cart_service.add("u1", 2, 1)
    assert _pairs(await cart_service.remove("u1", 5)) == [(2, 1)]


@pytest.mark.asyncio
async def test_remove_requires_integer(cart_service):
    with pytest.raises(CartValidationError) as excinfo:
        await cart_service.remove("u1", "1")
    assert excinfo.value.reason == RejectionReason.MISSING_OR_WRONG_TYPE


@pytest.mark.asyncio
async def test_clear(cart_service):
    await cart_service.add("u1", 1, 1)
    await cart_service.add("u1", 3, 2)
    assert await cart_service.clear("u1") == []
    assert await cart_service.get("u1") == []
    assert await cart_service.clear("never-seen") == []


@pytest.mark.asyncio
async def test_total_of_empty_cart(cart_service):
    totals = await cart_service.total("u1")
    assert (totals.total, totals.item_count) == (0, 0)


@pytest.mark.asyncio
async def test_total(cart_service):
    await cart_service.add("u1", 1, 2)
    await cart_service.add("u1", 2, 1)
    totals = await cart_service.total("u1")
    assert totals.total == 199999 * 2 + 149999 == 549997
    assert totals.item_count == 3


@pytest.mark.asyncio
async def test_total_ignores_products_missing_from_catalog(catalog, tmp_path):
    path = tmp_path / "carts.json"
    path.write_text(json.dumps({"u1": [{"productId": 1, "qty": 1}, {"productId": 77, "qty": 4}]}))
    service = CartService(catalog, JsonFileCartRepository(path))

    totals = await service.total("u1")
    assert totals.total == 199999
    assert totals.item_count == 5


@pytest.mark.asyncio
async def test_returned_cart_is_a_copy(cart_service):
    cart = await cart_service.add("u1", 1, 1)
    cart[0].qty = 99
    cart.append(CartItem(product_id=2, qty=1))
    assert _pairs(await cart_service.get("u1")) == [(1, 1)]


@pytest.mark.asyncio
async def test_cart_survives_reload(catalog, repository):
    first = CartService(catalog, repository)
    await first.add("u1", 1, 2)
    await first.add("u1", 4, 1)

    second = CartService(catalog, JsonFileCartRepository(repository.path))
    assert _pairs(await second.get("u1")) == [(1, 2), (4, 1)]


@pytest.mark.asyncio
async def test_reloaded_cart_counts_towards_stock(catalog, repository):
    await CartService(catalog, repository).add("u1", 3, 8)

    second = CartService(catalog, JsonFileCartRepository(repository.path))
    with pytest.raises(CartValidationError) as excinfo:
        await second.add("u1", 3, 1)
    assert excinfo.value.reason == RejectionReason.INSUFFICIENT_STOCK


@pytest.mark.asyncio
async def test_forget_drops_cached_cart_but_keeps_stored_copy(cart_service):
    await cart_service.add("u1", 2, 1)

    cart_service.forget("u1")
    cart_service.forget("never-seen")

    assert "u1" not in cart_service._carts
    assert _pairs(await cart_service.get("u1")) == [(2, 1)]


@pytest.mark.asyncio
async def test_persistence_failure_keeps_in_memory_cart(catalog):
    repository = FailingRepository()
    service = CartService(catalog, repository)

    cart = await service.add("u1", 1, 2)
    assert _pairs(cart) == [(1, 2)]
    assert _pairs(await service.get("u1")) == [(1, 2)]

    assert await service.clear("u1") == []
    assert repository.save_attempts == 2

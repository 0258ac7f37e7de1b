from typing import Any

import structlog

from services.product_service.service import Catalog
from shared.observability.metrics import (
    shop_cart_operations_total,
    shop_cart_persist_failures_total,
    shop_cart_rejections_total,
)
from .exceptions import CartPersistenceError, CartValidationError
from .repository import CartRepository
from .schemas import CartItem, CartTotal
from .validator import validate_add, validate_remove

logger = structlog.get_logger(__name__)


def _copy(cart: list[CartItem]) -> list[CartItem]:
    return [item.model_copy() for item in cart]


class CartService:
    """
    Per-user carts held in memory and written through to a CartRepository.

    The in-memory cart is the source of truth for this process. A failed
    write is logged and counted, and the caller still gets the mutated cart.
    """

    def __init__(self, catalog: Catalog, repository: CartRepository):
        self.catalog = catalog
        self.repository = repository
        self._carts: dict[str, list[CartItem]] = {}

    async def _cart_for(self, user_id: str) -> list[CartItem]:
        cart = self._carts.get(user_id)
        if cart is not None:
            return cart

        try:
            loaded = await self.repository.load(user_id)
        except CartPersistenceError as e:
            logger.error("cart.load_failed", user_id=user_id, error=str(e))
            loaded = []
        # Another request may have loaded the same cart while we awaited
        return self._carts.setdefault(user_id, loaded)

    async def _persist(self, user_id: str, cart: list[CartItem]) -> None:
        try:
            await self.repository.save(user_id, cart)
        except CartPersistenceError as e:
            shop_cart_persist_failures_total.inc()
            logger.error("cart.persist_failed", user_id=user_id, error=str(e))

    def _reject(self, operation: str, error: CartValidationError) -> None:
        shop_cart_operations_total.labels(operation=operation, outcome="rejected").inc()
        shop_cart_rejections_total.labels(reason=error.reason.value).inc()
        logger.info("cart.rejected", operation=operation, reason=error.reason.value, detail=error.message)

    def forget(self, user_id: str) -> None:
        """Drops the in-memory cart. The persisted copy is kept and reloaded on next use."""
        self._carts.pop(user_id, None)

    async def get(self, user_id: str) -> list[CartItem]:
        return _copy(await self._cart_for(user_id))

    async def add(self, user_id: str, product_id: Any, qty: Any) -> list[CartItem]:
        cart = await self._cart_for(user_id)

        current = 0
        if isinstance(product_id, int):
            current = sum(item.qty for item in cart if item.product_id == product_id)

        try:
            product_id, qty = validate_add(product_id, qty, current, self.catalog)
        except CartValidationError as e:
            self._reject("add", e)
            raise

        for item in cart:
            if item.product_id == product_id:
                item.qty += qty
                break
        else:
            cart.append(CartItem(product_id=product_id, qty=qty))

        shop_cart_operations_total.labels(operation="add", outcome="success").inc()
        logger.info("cart.item_added", user_id=user_id, product_id=product_id, qty=qty)

        snapshot = _copy(cart)
        await self._persist(user_id, snapshot)
        return snapshot

    async def remove(self, user_id: str, product_id: Any) -> list[CartItem]:
        try:
            product_id = validate_remove(product_id)
        except CartValidationError as e:
            self._reject("remove", e)
            raise

        cart = await self._cart_for(user_id)
        cart[:] = [item for item in cart if item.product_id != product_id]

        shop_cart_operations_total.labels(operation="remove", outcome="success").inc()
        logger.info("cart.item_removed", user_id=user_id, product_id=product_id)

        snapshot = _copy(cart)
        await self._persist(user_id, snapshot)
        return snapshot

    async def clear(self, user_id: str) -> list[CartItem]:
        self._carts[user_id] = []

        shop_cart_operations_total.labels(operation="clear", outcome="success").inc()
        logger.info("cart.cleared", user_id=user_id)

        await self._persist(user_id, [])
        return []

    async def total(self, user_id: str) -> CartTotal:
        cart = await self._cart_for(user_id)
        total = 0
        for item in cart:
            product = self.catalog.get(item.product_id)
            # Products that left the catalog count as zero
            if product is not None:
                total += product.price * item.qty
        return CartTotal(total=total, item_count=sum(item.qty for item in cart))

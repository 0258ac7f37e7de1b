import math

from .models import Product
from .repository import ProductRepository


class Catalog:
    """Lookup, search and price filtering over a fixed product list."""

    def __init__(self, repository: ProductRepository):
        self._repository = repository

    def all_products(self) -> list[Product]:
        return self._repository.get_all_products()

    def get(self, product_id: int) -> Product | None:
        return self._repository.get_product_by_id(product_id)

    def search(self, term: str) -> list[Product]:
        """Case-insensitive substring match on name or description. Empty term matches all."""
        term = (term or "").strip().lower()
        if not term:
            return self.all_products()
        return [
            p for p in self.all_products()
            if term in p.name.lower() or term in p.description.lower()
        ]

    def filter_by_price(self, min_price: float | None = None, max_price: float | None = None) -> list[Product]:
        low = 0 if min_price is None else min_price
        high = math.inf if max_price is None else max_price
        return [p for p in self.all_products() if low <= p.price <= high]


class ProductService:

    @staticmethod
    def parse_product_id(raw: str) -> int | None:
        """Returns the id as an int, or None when it is not a positive integer."""
        if not isinstance(raw, str):
            return None
        raw = raw.strip()
        # int() alone would also take "1_0" and non-ASCII digits
        if not (raw.isascii() and raw.isdigit()):
            return None
        product_id = int(raw)
        return product_id if product_id > 0 else None

    @staticmethod
    def parse_price_bound(raw: str | None) -> float | None:
        # Unparseable bounds fall back to the filter defaults
        if raw is None or raw.strip() == "":
            return None
        try:
            value = float(raw)
        except ValueError:
            return None
        if math.isnan(value):
            return None
        return value

"""
Component tests for the product catalog endpoints.

These run the real FastAPI application (routers, dependencies, middleware)
against the seeded demo catalog.
"""
from fastapi.testclient import TestClient


class TestListAndLookup:

    def test_list_products(self, test_client: TestClient):
        response = test_client.get("/api/products")

        assert response.status_code == 200
        products = response.json()
        assert len(products) == 9
        assert products[0] == {
            "id": 1,
            "name": "Runner Azul",
            "price": 199999,
            "image": "/img/shoe_1.png",
            "description": "Zapatilla ligera para correr, malla transpirable.",
            "stock": 12,
        }

    def test_get_product(self, test_client: TestClient):
        response = test_client.get("/api/products/7")

        assert response.status_code == 200
        assert response.json()["name"] == "Pro Basketball Negro"

    def test_get_product_invalid_id(self, test_client: TestClient):
        for bad_id in ("abc", "0", "-2", "1.5", "1_0"):
            response = test_client.get(f"/api/products/{bad_id}")
            assert response.status_code == 400, bad_id

    def test_get_product_not_found(self, test_client: TestClient):
        response = test_client.get("/api/products/999")

        assert response.status_code == 404
        assert response.json()["detail"] == "Product not found"


class TestSearchAndFilter:

    def test_search_is_case_insensitive(self, test_client: TestClient):
        for term in ("runner", "RUNNER", "Runner"):
            response = test_client.get(f"/api/products/search/{term}")
            assert response.status_code == 200
            assert [p["name"] for p in response.json()] == ["Runner Azul"]

    def test_search_without_matches(self, test_client: TestClient):
        response = test_client.get("/api/products/search/sandalia")

        assert response.status_code == 200
        assert response.json() == []

    def test_search_strips_markup(self, test_client: TestClient):
        response = test_client.get("/api/products/search/<runner>")

        assert [p["id"] for p in response.json()] == [1]

    def test_filter_by_price_range(self, test_client: TestClient):
        response = test_client.get("/api/products/filter/price", params={"min": 159999, "max": 179999})

        assert response.status_code == 200
        assert sorted(p["id"] for p in response.json()) == [3, 4, 9]

    def test_filter_by_price_only_max(self, test_client: TestClient):
        response = test_client.get("/api/products/filter/price", params={"max": 150000})

        assert sorted(p["id"] for p in response.json()) == [2, 8]

    def test_filter_with_invalid_bounds_uses_defaults(self, test_client: TestClient):
        response = test_client.get("/api/products/filter/price", params={"min": "cheap", "max": "pricey"})

        assert response.status_code == 200
        assert len(response.json()) == 9

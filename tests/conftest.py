import pytest
from fastapi.testclient import TestClient

from main import create_app
from services.cart_service.repository import JsonFileCartRepository
from services.cart_service.service import CartService
from services.product_service.repository import ProductRepository
from services.product_service.service import Catalog
from shared.config.settings import Settings

TEST_API_KEY = "test-internal-key"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        session_secret="test-session-secret",
        internal_api_key=TEST_API_KEY,
        cart_data_file=str(tmp_path / "carts.json"),
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'carts.db'}",
        rate_limit_enabled=False,
        metrics_enabled=False,
        log_level="WARNING",
    )


@pytest.fixture
def catalog():
    return Catalog(ProductRepository.from_seed())


@pytest.fixture
def repository(settings):
    return JsonFileCartRepository(settings.cart_data_file)


@pytest.fixture
def cart_service(catalog, repository):
    return CartService(catalog, repository)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def test_client(app):
    with TestClient(app) as client:
        yield client

"""
Shared test fixtures.

The Admin API client is routed into the mock Shopify Admin API
(`mock_services/mock_shopify_admin.py`) through an `httpx.MockTransport`,
so no test touches the network.
"""

import json
import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import httpx
import pytest
from fastapi.testclient import TestClient

from draft_order_service.clients import ShopifyAdminClient
from draft_order_service.config import Settings, get_settings
from draft_order_service.main import app, get_admin_client_factory
from mock_services import mock_shopify_admin


# ===================
# MOCK SHOPIFY ADMIN API
# ===================

class MockShop:
    """
    Routes Admin API requests into the mock Shopify service and records them.

    Usage:
        def test_something(mock_shop):
            mock_shop.add_product("poster", "Poster", {"base": {...}})
    """

    def __init__(self):
        self.requests = []
        self.products = mock_shopify_admin.PRODUCTS
        self.draft_orders = mock_shopify_admin.DRAFT_ORDERS

    def add_product(self, handle: str, title: str, pricebook=None):
        """Register a product; `pricebook` may be a dict, a raw string or None."""
        if isinstance(pricebook, dict):
            pricebook = json.dumps(pricebook)
        self.products[handle] = {"title": title, "pricebook": pricebook}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.headers.get("X-Shopify-Access-Token") != mock_shopify_admin.ACCESS_TOKEN:
            return httpx.Response(401, json={"errors": "[API] Invalid API key or access token"})
        payload = mock_shopify_admin.GraphQLRequest.model_validate_json(request.content)
        return httpx.Response(200, json=mock_shopify_admin.handle_graphql(payload))

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def settings() -> Settings:
    """Settings pointing at the mock shop, independent of the process environment."""
    return Settings(
        _env_file=None,
        shop=mock_shopify_admin.SHOP_DOMAIN,
        shopify_admin_token=mock_shopify_admin.ACCESS_TOKEN,
        shopify_app_secret=None,
        verify_proxy_signature=False
    )


@pytest.fixture
def mock_shop(monkeypatch) -> MockShop:
    """Fresh copy of the mock shop's products and an empty draft order list."""
    monkeypatch.setattr(mock_shopify_admin, "PRODUCTS", dict(mock_shopify_admin.PRODUCTS))
    monkeypatch.setattr(mock_shopify_admin, "DRAFT_ORDERS", [])
    return MockShop()


@pytest.fixture
def admin_client(settings, mock_shop):
    """Admin API client wired to the mock shop."""
    with ShopifyAdminClient.from_settings(settings, transport=mock_shop.transport()) as client:
        yield client


@pytest.fixture
def test_client(settings, mock_shop):
    """
    FastAPI test client with settings and Admin API overridden.

    Usage:
        def test_endpoint(test_client):
            response = test_client.post("/api/configurator/create-draft", json={...})
    """
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_admin_client_factory] = (
        lambda: lambda s: ShopifyAdminClient.from_settings(s, transport=mock_shop.transport())
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_pricebook() -> dict:
    """Pricebook with one flat add, one choice add and SKU codes."""
    return {
        "base": {
            "Portrait": {"Small": 10, "Large": 20},
            "Landscape": {"Small": 12}
        },
        "adds": {
            "Frame": 5,
            "Color": {"Red": 2, "Blue": 3}
        },
        "sku": {
            "format": "{prefix}-{orientation}-{size}-{Frame}-{Color}",
            "prefix": "ART",
            "codes": {
                "orientation": {"Portrait": "P", "Landscape": "L"},
                "Frame": {"true": "FR"},
                "Color": {"Red": "R"}
            }
        }
    }

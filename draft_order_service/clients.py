"""
This module provides the communication client for the Shopify Admin GraphQL API
used by the draft order service:
- Product lookup by handle, including the `pricing.pricebook` metafield
- Draft order creation
The client encapsulates the transport, authentication headers, error detection
and connection management.
"""

from typing import Optional

import httpx

from .config import Settings
from .errors import ShopifyAPIError
from .logging_config import get_logger
from .models import DraftOrderInput, DraftOrderResult, ProductPricebook

log = get_logger(__name__)

PRODUCT_PRICEBOOK_QUERY = """
query($handle: String!) {
  productByHandle(handle: $handle) {
    title
    metafield(namespace: "pricing", key: "pricebook") { value }
  }
}
"""

DRAFT_ORDER_CREATE = """
mutation($input: DraftOrderInput!) {
  draftOrderCreate(input: $input) {
    draftOrder { invoiceUrl }
    userErrors { field message }
  }
}
"""


class ShopifyAdminClient:
    """
    Client for the Shopify Admin API (GraphQL over HTTPS).
    Authenticates every call with the Admin API access token.
    """
    def __init__(
            self,
            graphql_url: str,
            access_token: str,
            timeout: float = 10.0,
            http_client: Optional[httpx.Client] = None
    ):
        """
        Initializes the HTTP client with proper timeout configuration.
        Args:
            graphql_url (str): Full URL of the shop's `graphql.json` endpoint.
            access_token (str): Admin API access token.
            timeout (float): Timeout in seconds for connect and read.
            http_client (Optional[httpx.Client]): Pre-built client; not closed by this instance.
        """
        self.graphql_url = graphql_url
        self.access_token = access_token
        self._owns_client = http_client is None
        self.client = http_client or httpx.Client(timeout=httpx.Timeout(timeout))

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.BaseTransport] = None):
        """
        Builds a client from the application settings.
        Args:
            settings (Settings): Configuration holding shop, token, API version and timeout.
            transport (Optional[httpx.BaseTransport]): Custom transport, e.g. `httpx.MockTransport`.
        """
        http_client = None
        if transport is not None:
            http_client = httpx.Client(transport=transport, timeout=settings.shopify_timeout_seconds)
        client = cls(
            graphql_url=settings.graphql_url,
            access_token=settings.shopify_admin_token,
            timeout=settings.shopify_timeout_seconds,
            http_client=http_client
        )
        client._owns_client = True
        return client

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        """Closes the HTTP client session if this instance created it."""
        if self._owns_client:
            self.client.close()

    def graphql(self, query: str, variables: Optional[dict] = None) -> dict:
        """
        Sends a GraphQL request and returns its `data` member.
        Args:
            query (str): GraphQL query or mutation document.
            variables (Optional[dict]): Variables for the document.
        Returns:
            dict: The `data` object of the response.
        Raises:
            httpx.HTTPError: If the request fails on the transport level (timeout, connection).
            ShopifyAPIError: If the API answers with an error status or a top-level `errors` array.
        """
        headers = {
            "X-Shopify-Access-Token": self.access_token,
            "Content-Type": "application/json"
        }
        payload = {"query": query, "variables": variables or {}}

        try:
            response = self.client.post(self.graphql_url, json=payload, headers=headers)
        except httpx.TimeoutException:
            log.error("Admin API timeout. Request outcome unknown.")
            raise
        except httpx.HTTPError as e:
            log.error(f"Admin API not reachable: {e}")
            raise

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            log.error(f"Admin API HTTP error {response.status_code}: {body if body is not None else response.text}")
            raise ShopifyAPIError(f"Admin API returned HTTP {response.status_code}", errors=body)

        if not isinstance(body, dict):
            raise ShopifyAPIError("Admin API returned a non-JSON body")

        if body.get("errors"):
            log.error(f"Admin API GraphQL errors: {body['errors']}")
            raise ShopifyAPIError("Admin API returned GraphQL errors", errors=body["errors"])

        return body.get("data") or {}

    def fetch_product_pricebook(self, handle: str) -> ProductPricebook:
        """
        Loads the product title and raw pricebook metafield for a product handle.
        Args:
            handle (str): Product handle.
        Returns:
            ProductPricebook: Title and raw pricebook JSON; both None when the product does not exist.
        """
        data = self.graphql(PRODUCT_PRICEBOOK_QUERY, {"handle": handle})
        product = data.get("productByHandle") or {}
        metafield = product.get("metafield") or {}
        return ProductPricebook(title=product.get("title"), pricebook=metafield.get("value"))

    def create_draft_order(self, draft_order: DraftOrderInput) -> DraftOrderResult:
        """
        Creates a draft order.
        Args:
            draft_order (DraftOrderInput): Line items, tags and note of the draft order.
        Returns:
            DraftOrderResult: The invoice URL, or the field-level user errors reported by Shopify.
        """
        data = self.graphql(DRAFT_ORDER_CREATE, {"input": draft_order.model_dump(exclude_none=True)})
        node = data.get("draftOrderCreate") or {}
        draft = node.get("draftOrder") or {}
        return DraftOrderResult(
            invoice_url=draft.get("invoiceUrl"),
            user_errors=node.get("userErrors") or []
        )

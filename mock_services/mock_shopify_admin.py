"""
mock_shopify_admin.py — Mock Implementation of the Shopify Admin GraphQL API

This module provides a simulated Shopify Admin API for testing the draft order
workflow without a real shop. It exposes a simple FastAPI application that
answers the two GraphQL operations the service uses.

Simulation Scenarios:
    • Product lookup by handle, with or without a pricebook metafield
    • Successful draft order creation (returns an invoice URL)
    • Field-level user errors (product handle starts with "user-error-")
    • Top-level GraphQL errors (product handle starts with "graphql-error-")
    • Missing or wrong access token (HTTP 401)

Endpoints:
    POST /admin/api/{api_version}/graphql.json — Handles GraphQL requests.

Port:
    Default: 8002 (HTTP)
"""

import json
import logging
import uuid

from fastapi import FastAPI, Header, HTTPException
from pydantic import BaseModel, Field

app = FastAPI(title="Mock Shopify Admin API")
logging.basicConfig(level=logging.INFO)

SHOP_DOMAIN = "mock-shop.myshopify.com"
ACCESS_TOKEN = "shpat_mock"

DEMO_PRICEBOOK = {
    "base": {
        "Portrait": {"Small": 49, "Medium": 79, "Large": 119},
        "Landscape": {"Small": 49, "Medium": 79, "Large": 119}
    },
    "adds": {
        "Frame": 25,
        "Finish": {"Matte": 0, "Gloss": 5}
    },
    "sku": {
        "format": "{prefix}-{orientation}-{size}-{Frame}-{Finish}",
        "prefix": "CNV",
        "codes": {
            "orientation": {"Portrait": "P", "Landscape": "L"},
            "Frame": {"true": "FR", "false": "NF"},
            "Finish": {"Matte": "M", "Gloss": "G"}
        }
    }
}

# handle -> {"title": str, "pricebook": Optional[str]}
PRODUCTS = {
    "canvas-print": {"title": "Canvas Print", "pricebook": json.dumps(DEMO_PRICEBOOK)},
    "plain-poster": {"title": "Plain Poster", "pricebook": None}
}

# Every accepted draft order input, in creation order
DRAFT_ORDERS = []


class GraphQLRequest(BaseModel):
    """
    Represents a GraphQL request payload.

    Attributes:
        query (str): GraphQL document.
        variables (dict): Variables for the document.
    """
    query: str
    variables: dict = Field(default_factory=dict)


def product_by_handle(handle: str) -> dict:
    product = PRODUCTS.get(handle)
    if product is None:
        return {"data": {"productByHandle": None}}
    metafield = {"value": product["pricebook"]} if product.get("pricebook") else None
    return {"data": {"productByHandle": {"title": product["title"], "metafield": metafield}}}


def draft_order_create(draft_input: dict) -> dict:
    """
    Simulates `draftOrderCreate`.

    The scenario is chosen by the product handle found in the input tags:
        - "user-error-..."    → userErrors, no draft order
        - "graphql-error-..." → top-level errors
        - anything else       → draft order with invoice URL
    """
    tags = draft_input.get("tags") or []

    if any(tag.startswith("graphql-error-") for tag in tags):
        logging.error("[SHOPIFY] Simulating GraphQL error for draftOrderCreate.")
        return {"errors": [{"message": "Internal error. Looks like something went wrong on our end."}]}

    if any(tag.startswith("user-error-") for tag in tags):
        logging.warning("[SHOPIFY] Simulating user error for draftOrderCreate.")
        return {"data": {"draftOrderCreate": {
            "draftOrder": None,
            "userErrors": [{"field": ["lineItems", "0", "originalUnitPrice"], "message": "Price is invalid"}]
        }}}

    draft_id = uuid.uuid4().hex
    DRAFT_ORDERS.append(draft_input)
    logging.info(f"[SHOPIFY] Draft order {draft_id} created.")
    return {"data": {"draftOrderCreate": {
        "draftOrder": {"invoiceUrl": f"https://{SHOP_DOMAIN}/invoices/{draft_id}"},
        "userErrors": []
    }}}


def handle_graphql(request: GraphQLRequest) -> dict:
    """Dispatches a GraphQL request to the simulated operation."""
    if "productByHandle" in request.query:
        return product_by_handle(request.variables.get("handle", ""))
    if "draftOrderCreate" in request.query:
        return draft_order_create(request.variables.get("input") or {})
    return {"errors": [{"message": "Unsupported operation"}]}


@app.post("/admin/api/{api_version}/graphql.json")
def graphql(
        request: GraphQLRequest,
        api_version: str,
        access_token: str = Header(None, alias="X-Shopify-Access-Token")
):
    """
    Processes a GraphQL request.

    Args:
        request (GraphQLRequest): The GraphQL document and variables.
        api_version (str): Admin API version from the path.
        access_token (str): Value of the X-Shopify-Access-Token header.

    Raises:
        HTTPException(401): If the access token is missing or wrong.
    """
    logging.info(f"[SHOPIFY] GraphQL request (API {api_version}).")

    if access_token != ACCESS_TOKEN:
        logging.warning("[SHOPIFY] Invalid API key or access token.")
        raise HTTPException(status_code=401, detail="[API] Invalid API key or access token")

    return handle_graphql(request)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8002)

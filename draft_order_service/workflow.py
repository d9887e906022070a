"""
workflow.py — Core Orchestration Logic for Configured Draft Orders

This module contains the main workflow for turning a storefront selection
into a Shopify draft order. It coordinates the Admin API calls and the
pricing functions in the correct sequence.

Workflow Overview:
1. Validate the request payload
2. Load the product's pricebook via the Admin API (read)
3. Validate the selection and compute unit price and SKU
4. Create the draft order via the Admin API (write)

The two Admin API calls are strictly sequential: the draft order input
depends on the pricebook. Nothing is retried; either the draft order is
created and its invoice URL returned, or an exception is raised.
"""

import json

from pydantic import ValidationError

from .clients import ShopifyAdminClient
from .errors import (
    DraftOrderUserError,
    InvalidPriceError,
    MissingPayloadError,
    MissingSelectionError,
    PricebookNotFoundError,
    ShopifyAPIError,
)
from .logging_config import get_logger
from .models import (
    CreateDraftRequest,
    CustomAttribute,
    DraftOrderInput,
    DraftOrderLineItem,
    Pricebook,
    Selection,
)
from .pricing import build_sku, compute_price, selection_value_text

log = get_logger(__name__)

DEFAULT_ITEM_TITLE = "Configured Item"
DRAFT_ORDER_TAG = "custom-pricing"


def parse_request(body) -> CreateDraftRequest:
    """
    Validates the raw request body.

    Args:
        body: Parsed JSON body; anything that is not an object counts as empty.

    Returns:
        CreateDraftRequest: The validated payload.

    Raises:
        MissingPayloadError: If `productHandle` is missing or empty, or `selection` is not an object.
    """
    if not isinstance(body, dict):
        body = {}
    if not body.get("productHandle") or not isinstance(body.get("selection"), dict):
        raise MissingPayloadError()
    try:
        return CreateDraftRequest.model_validate(body)
    except ValidationError as e:
        log.warning(f"Malformed payload rejected: {e.errors()}")
        raise MissingPayloadError()


def build_draft_order_input(
        request: CreateDraftRequest,
        pricebook: Pricebook,
        stored_title,
        unit_price: float,
        sku: str
) -> DraftOrderInput:
    """
    Builds the `draftOrderCreate` input for a single configured item.

    The line item carries the computed price and SKU and one custom attribute
    per configuration value: Orientation, Size, then every add in the order
    the pricebook declares them.
    """
    selection = request.selection
    handle = request.productHandle
    title = f"{request.productTitle or stored_title or DEFAULT_ITEM_TITLE} — {selection.orientation} {selection.size}"

    attributes = [
        CustomAttribute(key="Orientation", value=selection.orientation),
        CustomAttribute(key="Size", value=selection.size),
    ]
    for key, add in pricebook.adds.items():
        attributes.append(CustomAttribute(key=key, value=selection_value_text(add, selection.get(key))))

    line_item = DraftOrderLineItem(
        title=title,
        quantity=1,
        originalUnitPrice=f"{unit_price:.2f}",
        sku=sku,
        requiresShipping=True,
        customAttributes=attributes
    )
    return DraftOrderInput(
        lineItems=[line_item],
        tags=[DRAFT_ORDER_TAG, handle],
        note=f"Configured via storefront for {handle}"
    )


def create_draft_order_workflow(body, client: ShopifyAdminClient) -> str:
    """
    Executes the complete draft order workflow for one storefront request.

    Args:
        body: Parsed JSON request body, expected keys:
        - productHandle (str): Handle of the configured product
        - productTitle (str, optional): Line item title override
        - selection (dict): orientation, size and one value per add
        client (ShopifyAdminClient): Admin API client for the configured shop.

    Returns:
        str: Invoice URL of the created draft order.

    Raises:
        MissingPayloadError: productHandle or selection missing.
        PricebookNotFoundError: Product or pricebook metafield absent.
        MissingSelectionError: orientation or size missing.
        InvalidPriceError: Computed price not strictly positive.
        DraftOrderUserError: Shopify rejected the draft order input.
        ShopifyAPIError, httpx.HTTPError: Admin API failures.
        json.JSONDecodeError, pydantic.ValidationError: Malformed pricebook.

    Workflow Steps:
        Step 1 – Payload:
            - Requires productHandle and selection.

        Step 2 – Pricebook (Admin API read):
            - Loads title and pricebook metafield by handle.
            - Parses and validates the pricebook document.

        Step 3 – Pricing:
            - Requires orientation and size.
            - Computes unit price (must be > 0) and SKU.

        Step 4 – Draft order (Admin API write):
            - Creates the draft order; user errors are reported back.
    """
    request = parse_request(body)
    handle = request.productHandle
    selection: Selection = request.selection
    log_prefix = f"[Product: {handle}]"

    log.info(f"{log_prefix} Draft order requested.")

    # --- 1. Pricebook (Admin API) ---
    product = client.fetch_product_pricebook(handle)
    if not product.pricebook:
        log.warning(f"{log_prefix} No pricebook metafield found.")
        raise PricebookNotFoundError(handle)

    pricebook = Pricebook.model_validate(json.loads(product.pricebook))

    # --- 2. Pricing ---
    if not selection.orientation or not selection.size:
        log.warning(f"{log_prefix} Selection without orientation or size rejected.")
        raise MissingSelectionError()

    unit_price = compute_price(pricebook, selection)
    if not unit_price > 0:
        log.warning(
            f"{log_prefix} Invalid price {unit_price} for "
            f"{selection.orientation}/{selection.size}."
        )
        raise InvalidPriceError(unit_price)

    sku = build_sku(pricebook, selection)
    log.info(f"{log_prefix} Priced {selection.orientation} {selection.size} at {unit_price:.2f} (SKU: {sku}).")

    # --- 3. Draft order (Admin API) ---
    draft_input = build_draft_order_input(request, pricebook, product.title, unit_price, sku)
    result = client.create_draft_order(draft_input)

    if result.user_errors:
        log.warning(f"{log_prefix} Draft order rejected by Shopify: {result.user_errors}")
        raise DraftOrderUserError(result.user_errors)

    if not result.invoice_url:
        raise ShopifyAPIError("draftOrderCreate returned neither an invoice URL nor user errors")

    log.info(f"{log_prefix} Draft order created.")
    return result.invoice_url

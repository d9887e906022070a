"""
models.py — Data Models for Configured Draft Orders

This module defines the data structures exchanged with the storefront and
with the Shopify Admin API. It uses Pydantic models to validate the
merchant-authored pricebook once, when it is loaded, instead of inspecting
the raw document field by field during pricing.

Models:
    - FlatAdd / ChoiceAdd: The two kinds of priced add-on options.
    - SkuConfig: SKU formatting rules of a pricebook.
    - Pricebook: The complete pricing rule document of a product.
    - Selection: The customer's configuration choice.
    - CreateDraftRequest: The request payload sent by the storefront.
    - CustomAttribute / DraftOrderLineItem / DraftOrderInput: The draft order
      input sent to the Admin API (camelCase, as the API expects).
    - ProductPricebook / DraftOrderResult: Results of the two Admin API calls.
"""

import json
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, field_validator


class FlatAdd(BaseModel):
    """
    Add-on with a single price, selected by a boolean (checkbox).

    Attributes:
        price (float): Amount added when the selection value is truthy.
    """
    kind: Literal["flat"] = "flat"
    price: float


class ChoiceAdd(BaseModel):
    """
    Add-on with a price per choice label (select box).

    Attributes:
        choices (Dict[str, float]): Amount added per chosen label.
    """
    kind: Literal["choice"] = "choice"
    choices: Dict[str, float] = Field(default_factory=dict)


Add = Annotated[Union[FlatAdd, ChoiceAdd], Field(discriminator="kind")]


class SkuConfig(BaseModel):
    """
    SKU formatting rules.

    Empty or missing `format`/`prefix` values fall back to the defaults in
    `pricing.build_sku`.
    """
    model_config = ConfigDict(coerce_numbers_to_str=True)

    format: Optional[str] = None
    prefix: Optional[str] = None
    codes: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    @field_validator("codes", mode="before")
    @classmethod
    def _null_codes(cls, value):
        return {} if value is None else value


class Pricebook(BaseModel):
    """
    Pricing rule document stored in the product metafield `pricing.pricebook`.

    In the raw JSON an add is either a number (flat add) or an object of
    label → price (choice add). The `adds` validator tags each entry so the
    rest of the code never has to look at the raw shape again. The declared
    order of `adds` is preserved.
    """
    base: Dict[str, Dict[str, NonNegativeFloat]] = Field(default_factory=dict)
    adds: Dict[str, Add] = Field(default_factory=dict)
    sku: SkuConfig = Field(default_factory=SkuConfig)
    sku_map: Optional[Dict[str, str]] = None

    @field_validator("base", "sku", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return {} if value is None else value

    @field_validator("adds", mode="before")
    @classmethod
    def _tag_adds(cls, value):
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        tagged = {}
        for key, add in value.items():
            if isinstance(add, (FlatAdd, ChoiceAdd)):
                tagged[key] = add
            elif isinstance(add, dict):
                tagged[key] = {"kind": "choice", "choices": add}
            elif isinstance(add, (int, float)) and not isinstance(add, bool):
                tagged[key] = {"kind": "flat", "price": add}
            else:
                raise ValueError(f"add '{key}' must be a number or an object of choice prices")
        return tagged


class Selection(BaseModel):
    """
    Configuration chosen by the customer.

    Besides `orientation` and `size` the selection carries one value per add
    key: a boolean for flat adds, a choice label for choice adds. Those are
    kept as extra fields and read through `get()`.
    """
    model_config = ConfigDict(extra="allow")

    orientation: Optional[str] = None
    size: Optional[str] = None

    @field_validator("orientation", "size", mode="before")
    @classmethod
    def _as_text(cls, value):
        # Falsy values count as not chosen; anything else is priced by its text form.
        if not value:
            return None
        if isinstance(value, bool):
            return "true"
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, str):
            return value
        return json.dumps(value)

    def get(self, key: str, default: Any = None) -> Any:
        if key in type(self).model_fields:
            return getattr(self, key)
        return (self.model_extra or {}).get(key, default)


class CreateDraftRequest(BaseModel):
    """
    Request payload sent by the storefront.

    Attributes:
        productHandle (str): Handle of the configured product.
        productTitle (Optional[str]): Title shown on the line item; falls back to the stored product title.
        selection (Selection): The customer's configuration.
    """
    model_config = ConfigDict(coerce_numbers_to_str=True)

    productHandle: str
    productTitle: Optional[str] = None
    selection: Selection


class CustomAttribute(BaseModel):
    key: str
    value: str


class DraftOrderLineItem(BaseModel):
    """A custom (non-variant) line item with its own price and SKU."""
    title: str
    quantity: int = Field(1, gt=0)
    originalUnitPrice: str
    sku: str
    requiresShipping: bool = True
    customAttributes: List[CustomAttribute] = Field(default_factory=list)


class DraftOrderInput(BaseModel):
    """Input of the `draftOrderCreate` mutation."""
    lineItems: List[DraftOrderLineItem]
    tags: List[str] = Field(default_factory=list)
    note: Optional[str] = None


class ProductPricebook(BaseModel):
    """
    Result of the product lookup.

    Attributes:
        title (Optional[str]): Stored product title, None if the product does not exist.
        pricebook (Optional[str]): Raw JSON value of the pricebook metafield.
    """
    title: Optional[str] = None
    pricebook: Optional[str] = None


class DraftOrderResult(BaseModel):
    """Result of `draftOrderCreate`: an invoice URL or field-level user errors."""
    invoice_url: Optional[str] = None
    user_errors: List[Dict[str, Any]] = Field(default_factory=list)

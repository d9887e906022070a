"""
errors.py — Exception classes for the draft order endpoint.

Every `DraftOrderError` maps directly onto an HTTP response: `status_code`
is the response status and `to_dict()` is the response body. Anything that
is not a `DraftOrderError` is treated as an unexpected failure and answered
with a generic `draft_order_failed`.
"""

from typing import Any, Optional


class DraftOrderError(Exception):
    """
    Base exception for all errors reported to the storefront.

    Attributes:
        code: Machine-readable error tag (e.g. "missing_payload")
        status_code: HTTP status code
        details: Additional structured context, sent only when present
    """

    def __init__(
        self,
        code: str,
        status_code: int = 500,
        details: Optional[Any] = None
    ):
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(code)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        body = {"error": self.code}
        if self.details is not None:
            body["details"] = self.details
        return body


class MethodNotAllowedError(DraftOrderError):
    """Only POST is accepted (405)."""

    def __init__(self):
        super().__init__(code="method_not_allowed", status_code=405)


class MissingConfigurationError(DraftOrderError):
    """Shop or Admin API token not configured (500)."""

    def __init__(self):
        super().__init__(code="missing_env", status_code=500)


class SignatureVerificationError(DraftOrderError):
    """App proxy signature missing or wrong (401)."""

    def __init__(self):
        super().__init__(code="bad_hmac", status_code=401)


class MissingPayloadError(DraftOrderError):
    """productHandle or selection missing from the body (400)."""

    def __init__(self):
        super().__init__(code="missing_payload", status_code=400)


class PricebookNotFoundError(DraftOrderError):
    """Product has no pricebook metafield (404)."""

    def __init__(self, handle: str):
        self.handle = handle
        super().__init__(code=f"no_pricebook_for_{handle}", status_code=404)


class MissingSelectionError(DraftOrderError):
    """Selection lacks orientation or size (422)."""

    def __init__(self):
        super().__init__(code="missing_orientation_or_size", status_code=422)


class InvalidPriceError(DraftOrderError):
    """Computed unit price is not strictly positive (422)."""

    def __init__(self, price: float):
        self.price = price
        super().__init__(code="invalid_price_computation", status_code=422)


class DraftOrderUserError(DraftOrderError):
    """Shopify rejected the draft order input with field-level errors (400)."""

    def __init__(self, user_errors: list):
        super().__init__(code="user_error", status_code=400, details=user_errors)


class ShopifyAPIError(Exception):
    """
    The Admin API answered with a non-2xx status or a top-level `errors` array.

    Not a DraftOrderError: the storefront only ever sees `draft_order_failed`.
    """

    def __init__(self, message: str, errors: Optional[Any] = None):
        self.errors = errors
        super().__init__(message)

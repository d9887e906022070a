"""
verification.py — Request Authenticity Checks

When the storefront calls the service through a Shopify app proxy, Shopify
signs the query string with the app secret. The verifier used for a request
is chosen by configuration:

    • AllowAllVerifier        — no check (default)
    • ProxySignatureVerifier  — HMAC-SHA256 over the sorted query parameters
"""

import hashlib
import hmac
from typing import Iterable, Tuple

from .config import Settings
from .logging_config import get_logger

log = get_logger(__name__)

SIGNATURE_PARAMS = ("hmac", "signature")


class AllowAllVerifier:
    """Accepts every request."""

    def verify(self, query_params: Iterable[Tuple[str, str]]) -> bool:
        return True


class ProxySignatureVerifier:
    """
    Verifies the app proxy signature of a request.

    The message is built from all query parameters except `hmac`/`signature`,
    sorted by name and joined as `name=value` pairs with `&`. The hex digest
    of HMAC-SHA256(secret, message) must equal the `hmac` (or `signature`)
    parameter.
    """

    def __init__(self, secret: str):
        self.secret = secret

    def message(self, query_params: Iterable[Tuple[str, str]]) -> str:
        entries = sorted(
            ((key, value) for key, value in query_params if key not in SIGNATURE_PARAMS),
            key=lambda entry: entry[0]
        )
        return "&".join(f"{key}={value}" for key, value in entries)

    def sign(self, query_params: Iterable[Tuple[str, str]]) -> str:
        return hmac.new(
            self.secret.encode("utf-8"),
            self.message(query_params).encode("utf-8"),
            hashlib.sha256
        ).hexdigest()

    def verify(self, query_params: Iterable[Tuple[str, str]]) -> bool:
        params = list(query_params)
        lookup = dict(params)
        provided = lookup.get("hmac") or lookup.get("signature")
        if not provided:
            return False
        return hmac.compare_digest(self.sign(params).encode("utf-8"), provided.encode("utf-8"))


def get_verifier(settings: Settings):
    """
    Selects the verifier for the configured settings.

    Signature verification needs both `verify_proxy_signature` and an app
    secret; enabled without a secret it is skipped with a warning.
    """
    if not settings.verify_proxy_signature:
        return AllowAllVerifier()
    if not settings.shopify_app_secret:
        log.warning("Proxy signature verification enabled but SHOPIFY_APP_SECRET is not set. Skipping check.")
        return AllowAllVerifier()
    return ProxySignatureVerifier(settings.shopify_app_secret)

"""
config.py — Application settings loaded from environment variables.

Uses pydantic-settings for validation. The settings object is built once per
process by `get_settings()` and handed to the endpoint through FastAPI's
dependency injection, so tests can swap it without touching the environment.

Environment variables:
    SHOP                     Shop domain, e.g. "your-shop.myshopify.com"
    SHOPIFY_ADMIN_TOKEN      Admin API access token of the custom app
    SHOPIFY_APP_SECRET       Shared secret for app proxy signatures (optional)
    SHOPIFY_API_VERSION      Admin API version (default "2024-07")
    VERIFY_PROXY_SIGNATURE   Enable app proxy signature verification
    SHOPIFY_TIMEOUT_SECONDS  Timeout for Admin API calls
    LOG_LEVEL / LOG_FILE     Logging configuration
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import MissingConfigurationError


class Settings(BaseSettings):
    """
    Process-wide configuration.

    `shop` and `shopify_admin_token` are optional at load time: a missing
    value is reported per request as `missing_env` instead of preventing
    the application from starting.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    shop: Optional[str] = Field(
        None,
        description="Shop domain, e.g. your-shop.myshopify.com"
    )
    shopify_admin_token: Optional[str] = Field(
        None,
        description="Admin API access token (from the custom app)"
    )
    shopify_app_secret: Optional[str] = Field(
        None,
        description="App secret used to verify app proxy signatures"
    )
    shopify_api_version: str = Field(
        default="2024-07",
        description="Admin GraphQL API version"
    )
    verify_proxy_signature: bool = Field(
        default=False,
        description="Reject requests without a valid app proxy signature"
    )
    shopify_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for a single Admin API call"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    log_file: Optional[str] = Field(
        None,
        description="Optional log file in addition to stdout"
    )

    @property
    def is_configured(self) -> bool:
        """True when both Admin API credentials are present."""
        return bool(self.shop) and bool(self.shopify_admin_token)

    @property
    def graphql_url(self) -> str:
        return f"https://{self.shop}/admin/api/{self.shopify_api_version}/graphql.json"


def require_configuration(settings: Settings):
    """Raises MissingConfigurationError unless the Admin API credentials are set."""
    if not settings.is_configured:
        raise MissingConfigurationError()


@lru_cache()
def get_settings() -> Settings:
    return Settings()

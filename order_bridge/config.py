"""
Order bridge configuration.
"""
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


def find_env_file() -> str:
    """Find .env file - check local dir, then project root."""
    local_env = Path(".env")
    root_env = Path(__file__).parent.parent / ".env"

    if local_env.exists():
        return str(local_env)
    elif root_env.exists():
        return str(root_env)
    return ".env"  # default


class Settings(BaseSettings):
    """Service settings from environment variables."""

    # Shopify
    shopify_shop: str = ""  # e.g. my-store.myshopify.com
    shopify_access_token: str = ""
    shopify_api_version: str = "2025-01"
    shopify_currency: str = "USD"
    shopify_order_flow: str = "draft"  # "draft" or "direct"

    # Payment processor used to confirm captures: "none", "paypal" or "stripe"
    payment_processor: str = "none"

    # PayPal
    paypal_client_id: str = ""
    paypal_client_secret: str = ""
    paypal_api_base: str = "https://api-m.paypal.com"

    # Stripe
    stripe_secret_key: str = ""

    # Outbound HTTP
    http_timeout_seconds: float = 30.0

    # Pricing
    price_tolerance: str = "0.02"
    default_shipping_label: str = "Shipping"

    # Server
    host: str = "0.0.0.0"
    port: int = 10000
    debug: bool = False
    cors_origins: str = "*"

    # Logging
    log_level: str = "info"
    log_path: str = ""  # e.g. /app/logs/order-bridge.log

    # Version
    version: str = "1.0.0"

    class Config:
        env_file = find_env_file()
        env_file_encoding = "utf-8"
        env_prefix = ""
        case_sensitive = False
        extra = "ignore"

    @property
    def shopify_graphql_url(self) -> str:
        """Get Shopify GraphQL API URL"""
        return f"https://{self.shopify_shop}/admin/api/{self.shopify_api_version}/graphql.json"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_shopify_configured(self) -> bool:
        """Check if Shopify is properly configured"""
        return bool(self.shopify_shop and self.shopify_access_token)

    @property
    def is_paypal_configured(self) -> bool:
        """Check if PayPal is properly configured"""
        return bool(self.paypal_client_id and self.paypal_client_secret)

    @property
    def is_stripe_configured(self) -> bool:
        """Check if Stripe is properly configured"""
        return bool(self.stripe_secret_key)

    def validate_required_config(self) -> list:
        """Validate that required configuration is present"""
        errors = []

        if not self.shopify_shop:
            errors.append("SHOPIFY_SHOP is required")

        if not self.shopify_access_token:
            errors.append("SHOPIFY_ACCESS_TOKEN is required")

        if self.shopify_order_flow.lower() not in ("draft", "direct"):
            errors.append("SHOPIFY_ORDER_FLOW must be 'draft' or 'direct'")

        processor = self.payment_processor.lower()
        if processor == "paypal" and not self.is_paypal_configured:
            errors.append("PAYPAL_CLIENT_ID and PAYPAL_CLIENT_SECRET are required when PAYMENT_PROCESSOR=paypal")
        elif processor == "stripe" and not self.is_stripe_configured:
            errors.append("STRIPE_SECRET_KEY is required when PAYMENT_PROCESSOR=stripe")
        elif processor not in ("none", "paypal", "stripe"):
            errors.append("PAYMENT_PROCESSOR must be 'none', 'paypal' or 'stripe'")

        return errors

    def get_config_summary(self) -> dict:
        """Get a summary of configuration (without sensitive data)"""
        return {
            "shopify_shop": self.shopify_shop,
            "shopify_api_version": self.shopify_api_version,
            "shopify_currency": self.shopify_currency,
            "shopify_order_flow": self.shopify_order_flow,
            "shopify_configured": self.is_shopify_configured,
            "payment_processor": self.payment_processor,
            "paypal_configured": self.is_paypal_configured,
            "stripe_configured": self.is_stripe_configured,
            "price_tolerance": self.price_tolerance,
            "debug": self.debug,
            "host": self.host,
            "port": self.port,
            "log_level": self.log_level,
        }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

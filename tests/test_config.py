# tests/test_config.py
# Settings tests

from order_bridge.config import Settings


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.shopify_api_version == "2025-01"
        assert settings.shopify_order_flow == "draft"
        assert settings.payment_processor == "none"
        assert settings.price_tolerance == "0.02"
        assert settings.port == 10000

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("SHOPIFY_SHOP", "env-shop.myshopify.com")
        monkeypatch.setenv("SHOPIFY_ORDER_FLOW", "direct")
        monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "12.5")

        settings = Settings(_env_file=None)

        assert settings.shopify_shop == "env-shop.myshopify.com"
        assert settings.shopify_order_flow == "direct"
        assert settings.http_timeout_seconds == 12.5

    def test_graphql_url(self, settings):
        assert settings.shopify_graphql_url == "https://test-shop.myshopify.com/admin/api/2025-01/graphql.json"

    def test_cors_origin_list(self):
        settings = Settings(_env_file=None, cors_origins="https://shop.example.com, https://www.example.com,")

        assert settings.cors_origin_list == ["https://shop.example.com", "https://www.example.com"]


class TestValidateRequiredConfig:

    def test_complete_config(self, settings):
        assert settings.validate_required_config() == []

    def test_missing_shopify_credentials(self, monkeypatch):
        monkeypatch.delenv("SHOPIFY_SHOP", raising=False)
        monkeypatch.delenv("SHOPIFY_ACCESS_TOKEN", raising=False)

        problems = Settings(_env_file=None).validate_required_config()

        assert "SHOPIFY_SHOP is required" in problems
        assert "SHOPIFY_ACCESS_TOKEN is required" in problems

    def test_processor_without_credentials(self, settings):
        settings.payment_processor = "paypal"
        settings.paypal_client_secret = ""

        assert len(settings.validate_required_config()) == 1

    def test_unknown_values(self, settings):
        settings.payment_processor = "square"
        settings.shopify_order_flow = "later"

        assert len(settings.validate_required_config()) == 2

    def test_summary_has_no_secrets(self, settings):
        summary = settings.get_config_summary()

        assert "shpat_test" not in summary.values()
        assert "sk_test_123" not in summary.values()
        assert summary["shopify_configured"] is True

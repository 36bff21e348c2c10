# tests/conftest.py
# Shared pytest fixtures and fakes

from decimal import Decimal
from typing import Any, Dict, List, Optional

import pytest

from order_bridge.capture import CaptureDetails, CaptureLookup
from order_bridge.config import Settings
from order_bridge.models import CustomerAddress, OrderRequest, OrderResult
from order_bridge.submitters import OrderSubmitter


class FakeResponse:
    """Stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, json_data: Any = None, text: str = ""):
        self.status_code = status_code
        self._json = json_data
        self.text = text or ("" if json_data is None else str(json_data))

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json


class FakeShopifyClient:
    """Records calls instead of talking to Shopify."""

    def __init__(self, complete_error: Optional[Exception] = None):
        self.calls: List[tuple] = []
        self.complete_error = complete_error

    def create_draft_order(self, draft_input: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("draftOrderCreate", draft_input))
        return {"id": "gid://shopify/DraftOrder/111", "name": "#D1"}

    def complete_draft_order(self, draft_id: str, payment_pending: bool = False) -> Dict[str, Any]:
        self.calls.append(("draftOrderComplete", draft_id, payment_pending))
        if self.complete_error is not None:
            raise self.complete_error
        return {
            "id": "gid://shopify/Order/222",
            "name": "#1001",
            "totalPriceSet": {"shopMoney": {"amount": "29.99", "currencyCode": "USD"}},
        }

    def create_order(self, order_input: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self.calls.append(("orderCreate", order_input, options))
        return {
            "id": "gid://shopify/Order/333",
            "name": "#1002",
            "totalPriceSet": {"shopMoney": {"amount": "29.99", "currencyCode": "USD"}},
        }


class FakeSubmitter(OrderSubmitter):
    """Keeps the submitted requests and returns a fixed order."""

    def __init__(self, result: Optional[OrderResult] = None, error: Optional[Exception] = None):
        super().__init__(client=None)
        self.requests: List[OrderRequest] = []
        self.result = result or OrderResult(
            id="gid://shopify/Order/999",
            name="#1099",
            total_price="29.99",
            currency_code="USD",
        )
        self.error = error

    @property
    def flow_name(self) -> str:
        return "fake"

    def submit(self, request: OrderRequest) -> OrderResult:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.result


class FakeCaptureLookup(CaptureLookup):
    """Returns a fixed capture and counts lookups."""

    def __init__(self, details: Optional[CaptureDetails] = None, error: Optional[Exception] = None):
        self.details = details or CaptureDetails(
            captured_total=Decimal("29.99"),
            currency_code="USD",
            capture_reference="CAPTURE-FROM-PROCESSOR",
            status="COMPLETED",
            address=CustomerAddress(
                first_name="Pay",
                last_name="Pal",
                address1="1 Processor Way",
                city="San Jose",
                zip="95131",
                country="US",
                email="payer@example.com",
            ),
        )
        self.error = error
        self.lookups: List[str] = []

    @property
    def gateway_name(self) -> str:
        return "PayPal"

    def fetch_capture(self, payment_reference: str) -> CaptureDetails:
        self.lookups.append(payment_reference)
        if self.error is not None:
            raise self.error
        return self.details


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        shopify_shop="test-shop.myshopify.com",
        shopify_access_token="shpat_test",
        shopify_api_version="2025-01",
        shopify_currency="USD",
        shopify_order_flow="draft",
        payment_processor="none",
        paypal_client_id="client-id",
        paypal_client_secret="client-secret",
        paypal_api_base="https://api-m.sandbox.paypal.com",
        stripe_secret_key="sk_test_123",
    )


@pytest.fixture
def sample_payload() -> Dict[str, Any]:
    """Checkout confirmation with bundle prices already applied by the storefront."""
    return {
        "paymentReference": "5O190127TN364715T",
        "captureReference": "3C679366HH908993F",
        "capturedTotal": "29.99",
        "currencyCode": "USD",
        "shippingLabel": "Standard",
        "shippingCharge": "5.00",
        "address": {
            "firstName": "Jane",
            "lastName": "Doe",
            "address1": "12 King Street",
            "city": "Riyadh",
            "zip": "11564",
            "country": "SA",
            "phone": "+966500000000",
            "email": "jane@example.com",
        },
        "items": [
            {"catalogVariantReference": "44556677", "quantity": 2, "unitPriceHint": "7.50"},
            {"catalogVariantReference": "44556688", "quantity": 1, "unitPriceHint": "9.99"},
        ],
    }


@pytest.fixture
def legacy_payload() -> Dict[str, Any]:
    """Payload as posted by the original PayPal checkout snippet."""
    return {
        "paypalOrderId": "8XY12345AB678901C",
        "paypalCaptureId": "2GG279541U471931P",
        "total": 40,
        "shipping_price": 10,
        "shipping_label": "Express",
        "email": "buyer@example.com",
        "address": {"firstName": "Omar", "lastName": "Ali", "country": "Saudi Arabia"},
        "line_items": [
            {"variant_id": 123, "quantity": "3", "unit_price": 10},
        ],
    }

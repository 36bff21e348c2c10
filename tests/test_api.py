# tests/test_api.py
# HTTP surface tests

import pytest
from fastapi.testclient import TestClient

from order_bridge.errors import UpstreamRejection, UpstreamUnavailable
from order_bridge.main import app, get_bridge_service
from order_bridge.models import OrderResult
from order_bridge.service import OrderBridgeService

from conftest import FakeCaptureLookup, FakeSubmitter


@pytest.fixture
def submitter():
    return FakeSubmitter()


@pytest.fixture
def client(settings, submitter):
    """API client with the bridge service wired to fakes."""
    app.dependency_overrides[get_bridge_service] = lambda: OrderBridgeService(settings, submitter)
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"ok": True, "status": "healthy"}


class TestOrderFromPayment:

    def test_success(self, client, submitter, sample_payload):
        response = client.post("/orders/from-payment", json=sample_payload)

        assert response.status_code == 200
        assert response.json() == {
            "ok": True,
            "order": {"id": "gid://shopify/Order/999", "name": "#1099", "totalPrice": "29.99"},
        }
        assert len(submitter.requests) == 1

    def test_draft_id_is_reported(self, settings, sample_payload):
        submitter = FakeSubmitter(result=OrderResult(
            id="gid://shopify/Order/222",
            name="#1001",
            total_price="29.99",
            currency_code="USD",
            draft_id="gid://shopify/DraftOrder/111",
        ))
        app.dependency_overrides[get_bridge_service] = lambda: OrderBridgeService(settings, submitter)
        try:
            response = TestClient(app).post("/orders/from-payment", json=sample_payload)
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        assert response.json()["draftId"] == "gid://shopify/DraftOrder/111"
        assert response.json()["order"]["name"] == "#1001"

    def test_legacy_keys(self, client, submitter, legacy_payload):
        response = client.post("/orders/from-payment", json=legacy_payload)

        assert response.status_code == 200
        assert submitter.requests[0].line_items[0].variant_id == "gid://shopify/ProductVariant/123"

    def test_processor_path(self, settings, submitter, sample_payload):
        sample_payload["capturedTotal"] = "1.00"
        lookup = FakeCaptureLookup()
        app.dependency_overrides[get_bridge_service] = lambda: OrderBridgeService(settings, submitter, lookup)
        try:
            response = TestClient(app).post("/orders/from-payment", json=sample_payload)
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        assert lookup.lookups == ["5O190127TN364715T"]
        assert submitter.requests[0].captured_total == "29.99"


class TestErrors:
    """Failures come back as {ok: false, error, message, details?}"""

    def test_no_items(self, client, submitter, sample_payload):
        sample_payload["items"] = []

        response = client.post("/orders/from-payment", json=sample_payload)

        assert response.status_code == 400
        body = response.json()
        assert body["ok"] is False
        assert body["error"] == "NoItems"
        assert body["message"]
        assert submitter.requests == []

    def test_invalid_total(self, client, sample_payload):
        sample_payload["capturedTotal"] = "abc"

        response = client.post("/orders/from-payment", json=sample_payload)

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidTotal"

    def test_out_of_range_total(self, client, submitter, sample_payload):
        sample_payload["capturedTotal"] = "1e30"

        response = client.post("/orders/from-payment", json=sample_payload)

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidTotal"
        assert response.json()["details"] == {"capturedTotal": "1e30"}
        assert submitter.requests == []

    def test_invalid_quantities(self, client, sample_payload):
        sample_payload["items"][0]["quantity"] = -2

        response = client.post("/orders/from-payment", json=sample_payload)

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidQuantities"

    def test_shipping_exceeds_total(self, client, sample_payload):
        sample_payload["capturedTotal"] = "4.00"

        response = client.post("/orders/from-payment", json=sample_payload)

        assert response.status_code == 400
        assert response.json()["error"] == "NegativeItemsSubtotal"
        assert response.json()["details"] == {"capturedTotal": "4.00", "shippingCharge": "5.00"}

    def test_malformed_email(self, client, sample_payload):
        sample_payload["address"]["email"] = "not-an-email"

        response = client.post("/orders/from-payment", json=sample_payload)

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidAddress"

    def test_malformed_address(self, client, sample_payload):
        sample_payload["address"] = "12 King Street"

        response = client.post("/orders/from-payment", json=sample_payload)

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidAddress"

    def test_body_is_not_json(self, client):
        response = client.post(
            "/orders/from-payment",
            content="total=10",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidRequest"

    def test_upstream_rejection_of_payload(self, settings, sample_payload):
        error = UpstreamRejection(
            "Shopify rejected orderCreate",
            details={"stage": "orderCreate", "errors": [{"field": ["lineItems"], "message": "Variant not found"}]},
            status_code=400,
        )
        app.dependency_overrides[get_bridge_service] = lambda: OrderBridgeService(settings, FakeSubmitter(error=error))
        try:
            response = TestClient(app).post("/orders/from-payment", json=sample_payload)
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 400
        assert response.json() == {
            "ok": False,
            "error": "UpstreamRejection",
            "message": "Shopify rejected orderCreate",
            "details": {"stage": "orderCreate", "errors": [{"field": ["lineItems"], "message": "Variant not found"}]},
        }

    def test_upstream_unavailable(self, settings, sample_payload):
        error = UpstreamUnavailable("Could not reach Shopify: timed out")
        app.dependency_overrides[get_bridge_service] = lambda: OrderBridgeService(settings, FakeSubmitter(error=error))
        try:
            response = TestClient(app).post("/orders/from-payment", json=sample_payload)
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json()["error"] == "UpstreamUnavailable"

    def test_unexpected_error(self, settings, sample_payload):
        app.dependency_overrides[get_bridge_service] = lambda: OrderBridgeService(
            settings, FakeSubmitter(error=KeyError("draftOrderCreate"))
        )
        try:
            response = TestClient(app, raise_server_exceptions=False).post("/orders/from-payment", json=sample_payload)
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {"ok": False, "error": "InternalError", "message": "Server error"}

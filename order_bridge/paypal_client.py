import logging
from typing import Any, Dict, Optional

import requests

from .capture import CaptureDetails, CaptureLookup
from .config import Settings
from .errors import UpstreamAuthFailure, UpstreamRejection, UpstreamUnavailable
from .models import CustomerAddress
from .money import parse_amount

logger = logging.getLogger(__name__)


class PayPalCaptureClient(CaptureLookup):
    """Client for looking up captured PayPal orders."""

    def __init__(self, config: Settings):
        self.config = config
        self.base_url = config.paypal_api_base.rstrip("/")
        self.timeout = config.http_timeout_seconds

    @property
    def gateway_name(self) -> str:
        return "PayPal"

    def get_access_token(self) -> str:
        """Exchange the client credentials for an OAuth2 access token."""
        try:
            response = requests.post(
                f"{self.base_url}/v1/oauth2/token",
                auth=(self.config.paypal_client_id, self.config.paypal_client_secret),
                data={"grant_type": "client_credentials"},
                headers={"Accept": "application/json"},
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error("PayPal token request failed: %s", e)
            raise UpstreamUnavailable(f"Could not reach PayPal: {e}")

        if response.status_code in (400, 401, 403):
            logger.error("PayPal refused client credentials: %s", response.status_code)
            raise UpstreamAuthFailure(
                "PayPal rejected the client credentials",
                details=self._error_body(response)
            )
        if response.status_code >= 400:
            raise UpstreamRejection(
                f"PayPal token endpoint returned HTTP {response.status_code}",
                details=self._error_body(response)
            )

        return response.json()["access_token"]

    def get_order(self, order_id: str) -> Dict[str, Any]:
        """Fetch a PayPal checkout order by id."""
        token = self.get_access_token()

        try:
            response = requests.get(
                f"{self.base_url}/v2/checkout/orders/{order_id}",
                headers={
                    "Authorization": f"Bearer {token}",
                    "Accept": "application/json",
                },
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error("PayPal order lookup failed for %s: %s", order_id, e)
            raise UpstreamUnavailable(f"Could not reach PayPal: {e}")

        if response.status_code in (401, 403):
            raise UpstreamAuthFailure("PayPal refused the access token", details=self._error_body(response))
        if response.status_code == 404:
            raise UpstreamRejection(
                f"PayPal order {order_id} not found",
                details=self._error_body(response),
                status_code=400
            )
        if response.status_code >= 400:
            raise UpstreamRejection(
                f"PayPal returned HTTP {response.status_code}",
                details=self._error_body(response)
            )

        return response.json()

    def fetch_capture(self, payment_reference: str) -> CaptureDetails:
        """
        Look up the completed capture for a PayPal order.

        Args:
            payment_reference: The PayPal order id

        Returns:
            CaptureDetails with the captured amount and the payer's shipping address
        """
        order = self.get_order(payment_reference)
        purchase_unit = (order.get("purchase_units") or [{}])[0]
        captures = (purchase_unit.get("payments") or {}).get("captures") or []

        capture = next((c for c in captures if c.get("status") == "COMPLETED"), None)
        if capture is None:
            raise UpstreamRejection(
                f"PayPal order {payment_reference} has no completed capture",
                details={
                    "orderStatus": order.get("status"),
                    "captures": [{"id": c.get("id"), "status": c.get("status")} for c in captures],
                },
                status_code=400
            )

        amount = capture.get("amount") or {}
        captured_total = parse_amount(amount.get("value"))
        if captured_total is None:
            raise UpstreamRejection(
                f"PayPal capture {capture.get('id')} has no usable amount",
                details={"amount": amount}
            )

        logger.info(
            "PayPal order %s captured %s %s (capture %s)",
            payment_reference, amount.get("value"), amount.get("currency_code"), capture.get("id")
        )

        return CaptureDetails(
            captured_total=captured_total,
            currency_code=amount.get("currency_code", ""),
            capture_reference=capture.get("id", ""),
            status=capture.get("status", ""),
            address=self._parse_address(purchase_unit.get("shipping"), order.get("payer")),
        )

    def _parse_address(self, shipping: Optional[Dict[str, Any]], payer: Optional[Dict[str, Any]]) -> Optional[CustomerAddress]:
        if not shipping:
            return None

        payer = payer or {}
        addr = shipping.get("address") or {}
        full_name = ((shipping.get("name") or {}).get("full_name") or "").strip()
        first_name, _, last_name = full_name.partition(" ")
        phone = ((payer.get("phone") or {}).get("phone_number") or {}).get("national_number", "")

        return CustomerAddress(
            first_name=first_name,
            last_name=last_name,
            address1=addr.get("address_line_1", ""),
            city=addr.get("admin_area_2", ""),
            zip=addr.get("postal_code", ""),
            country=addr.get("country_code", ""),
            phone=phone,
            email=payer.get("email_address") or None,
        )

    @staticmethod
    def _error_body(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return {"status": response.status_code, "body": response.text[:500]}

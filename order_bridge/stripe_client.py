import logging
from decimal import Decimal
from typing import Any, Optional

import stripe

from .capture import CaptureDetails, CaptureLookup
from .config import Settings
from .errors import UpstreamAuthFailure, UpstreamRejection, UpstreamUnavailable
from .models import CustomerAddress

logger = logging.getLogger(__name__)

# Currencies Stripe expresses in whole units rather than cents
ZERO_DECIMAL_CURRENCIES = {
    "bif", "clp", "djf", "gnf", "jpy", "kmf", "krw", "mga",
    "pyg", "rwf", "ugx", "vnd", "vuv", "xaf", "xof", "xpf",
}


def from_minor_units(amount: int, currency: str) -> Decimal:
    if currency.lower() in ZERO_DECIMAL_CURRENCIES:
        return Decimal(amount)
    return Decimal(amount) / 100


class StripeCaptureClient(CaptureLookup):
    """Client for looking up succeeded Stripe payment intents."""

    def __init__(self, config: Settings):
        self.config = config
        stripe.api_key = config.stripe_secret_key

    @property
    def gateway_name(self) -> str:
        return "Stripe"

    def fetch_capture(self, payment_reference: str) -> CaptureDetails:
        """
        Fetch a payment intent and return what it actually collected.

        Args:
            payment_reference: The PaymentIntent ID

        Returns:
            CaptureDetails built from amount_received and the intent's shipping details
        """
        try:
            payment_intent = stripe.PaymentIntent.retrieve(
                payment_reference,
                expand=["latest_charge"],
            )
        except stripe.AuthenticationError as e:
            logger.error("Stripe refused the secret key: %s", e)
            raise UpstreamAuthFailure("Stripe rejected the secret key", details=self._error_details(e))
        except stripe.APIConnectionError as e:
            logger.error("Stripe unreachable: %s", e)
            raise UpstreamUnavailable(f"Could not reach Stripe: {e}")
        except stripe.InvalidRequestError as e:
            logger.error("Stripe rejected lookup of %s: %s", payment_reference, e)
            raise UpstreamRejection(
                f"Stripe payment {payment_reference} could not be retrieved",
                details=self._error_details(e),
                status_code=400
            )
        except stripe.StripeError as e:
            logger.error("Error fetching payment intent %s: %s", payment_reference, e)
            raise UpstreamRejection("Stripe lookup failed", details=self._error_details(e))

        if payment_intent.status != "succeeded":
            raise UpstreamRejection(
                f"Stripe payment {payment_reference} has not succeeded",
                details={"status": payment_intent.status},
                status_code=400
            )

        currency = payment_intent.currency or ""
        captured_total = from_minor_units(payment_intent.amount_received, currency)

        logger.info(
            "Stripe payment %s received %s %s",
            payment_reference, captured_total, currency.upper()
        )

        return CaptureDetails(
            captured_total=captured_total,
            currency_code=currency.upper(),
            capture_reference=self._charge_id(payment_intent),
            status=payment_intent.status,
            address=self._parse_address(payment_intent),
        )

    @staticmethod
    def _charge_id(payment_intent: Any) -> str:
        charge = getattr(payment_intent, "latest_charge", None)
        if charge is None:
            return ""
        if isinstance(charge, str):
            return charge
        return getattr(charge, "id", "") or ""

    @staticmethod
    def _parse_address(payment_intent: Any) -> Optional[CustomerAddress]:
        shipping = getattr(payment_intent, "shipping", None)
        if not shipping:
            return None

        addr = getattr(shipping, "address", None)
        first_name, _, last_name = (getattr(shipping, "name", None) or "").strip().partition(" ")

        return CustomerAddress(
            first_name=first_name,
            last_name=last_name,
            address1=getattr(addr, "line1", None) or "",
            city=getattr(addr, "city", None) or "",
            zip=getattr(addr, "postal_code", None) or "",
            country=getattr(addr, "country", None) or "",
            phone=getattr(shipping, "phone", None) or "",
            email=getattr(payment_intent, "receipt_email", None) or None,
        )

    @staticmethod
    def _error_details(error: Exception) -> dict:
        return {
            "code": getattr(error, "code", None),
            "message": getattr(error, "user_message", None) or str(error),
            "http_status": getattr(error, "http_status", None),
        }

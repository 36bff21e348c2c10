"""
Payment capture lookup.

A CaptureLookup asks the payment processor what was actually captured for
a payment reference. The processor is picked by the PAYMENT_PROCESSOR
setting; "none" means the captured total in the request body is trusted.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .config import Settings
from .models import CustomerAddress

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaptureDetails:
    """What the processor reports for one payment."""
    captured_total: Decimal
    currency_code: str
    capture_reference: str = ""
    status: str = ""
    address: Optional[CustomerAddress] = None


class CaptureLookup(ABC):
    """Abstract base class for payment processor lookups."""

    @property
    @abstractmethod
    def gateway_name(self) -> str:
        """Return the display name of the processor (e.g., 'PayPal')."""
        pass

    @abstractmethod
    def fetch_capture(self, payment_reference: str) -> CaptureDetails:
        """
        Look up the captured amount for a payment.

        Raises:
            UpstreamRejection: unknown reference or payment not captured
            UpstreamAuthFailure: processor credentials refused
            UpstreamUnavailable: processor unreachable
        """
        pass


def get_capture_lookup(settings: Settings) -> Optional[CaptureLookup]:
    """
    Get the configured capture lookup, or None when PAYMENT_PROCESSOR is "none".

    Supported processors: "paypal", "stripe"
    """
    processor = settings.payment_processor.lower()

    logger.info("Initializing payment processor: %s", processor)

    if processor == "none":
        return None
    elif processor == "paypal":
        from .paypal_client import PayPalCaptureClient
        return PayPalCaptureClient(settings)
    elif processor == "stripe":
        from .stripe_client import StripeCaptureClient
        return StripeCaptureClient(settings)
    else:
        raise ValueError(
            f"Unknown payment processor: {processor}. "
            f"Supported processors: none, paypal, stripe"
        )

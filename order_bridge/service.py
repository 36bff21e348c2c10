"""
Order bridge service.

Takes a parsed confirmation payload through capture lookup, reconciliation,
order construction and submission. Caller-input problems are raised before
any network call; nothing is retried or rolled back.
"""
import logging
from dataclasses import replace
from decimal import Decimal
from typing import List, Optional

from .builder import build_order_request, order_total_cents
from .capture import CaptureLookup
from .config import Settings
from .errors import InvalidRequest
from .models import (
    AddressPayload,
    BridgeResponse,
    ConfirmationPayload,
    CustomerAddress,
    OrderSummary,
    PaymentConfirmation,
    PurchasedItem,
)
from .money import parse_amount, to_cents
from .reconciler import check_items, parse_price_hint, parse_quantity, reconcile
from .submitters import OrderSubmitter

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY = "PayPal"


def parse_items(payload: ConfirmationPayload) -> List[PurchasedItem]:
    items = []
    for index, item in enumerate(payload.items or []):
        reference = (item.catalog_variant_reference or "").strip()
        if not reference:
            raise InvalidRequest(
                "Every item needs a catalogVariantReference",
                details={"field": f"items[{index}].catalogVariantReference"},
            )
        items.append(PurchasedItem(
            variant_reference=reference,
            quantity=parse_quantity(item.quantity),
            unit_price_hint=parse_price_hint(item.unit_price_hint),
        ))
    return items


def parse_address(address: Optional[AddressPayload], fallback_email: Optional[str] = None) -> CustomerAddress:
    address = address or AddressPayload()
    return CustomerAddress(
        first_name=address.first_name or "",
        last_name=address.last_name or "",
        address1=address.address1 or "",
        city=address.city or "",
        zip=address.zip or "",
        country=address.country or "",
        phone=address.phone or "",
        email=address.email or fallback_email or None,
    )


class OrderBridgeService:
    """Turns a completed-payment payload into a paid Shopify order."""

    def __init__(
        self,
        settings: Settings,
        submitter: OrderSubmitter,
        capture_lookup: Optional[CaptureLookup] = None,
    ):
        self.settings = settings
        self.submitter = submitter
        self.capture_lookup = capture_lookup

        tolerance = parse_amount(settings.price_tolerance)
        self.tolerance_cents = to_cents(tolerance) if tolerance is not None and tolerance >= 0 else 2

    @property
    def gateway_name(self) -> str:
        if self.capture_lookup is not None:
            return self.capture_lookup.gateway_name
        return DEFAULT_GATEWAY

    def process(self, payload: ConfirmationPayload) -> BridgeResponse:
        items = parse_items(payload)

        address = parse_address(payload.address, payload.email)
        payment_reference = (payload.payment_reference or "").strip()
        capture_reference = (payload.capture_reference or "").strip()
        currency_code = (payload.currency_code or self.settings.shopify_currency).upper()
        captured_total = payload.captured_total

        if self.capture_lookup is None:
            # Only the payload total is available; validate it before touching Shopify
            reconciled = reconcile(items, captured_total, payload.shipping_charge, self.tolerance_cents)
        else:
            if not payment_reference:
                raise InvalidRequest(
                    "paymentReference is required to confirm the capture",
                    details={"field": "paymentReference"},
                )
            # Cart problems are reported without a processor round trip
            check_items(items)

            capture = self.capture_lookup.fetch_capture(payment_reference)
            claimed = parse_amount(captured_total)
            if claimed is not None and to_cents(claimed) != to_cents(capture.captured_total):
                logger.warning(
                    "Payload total %s for %s differs from captured %s; using captured amount",
                    claimed, payment_reference, capture.captured_total,
                )
            if payload.currency_code and capture.currency_code and payload.currency_code.upper() != capture.currency_code:
                logger.warning(
                    "Payload currency %s differs from captured currency %s",
                    payload.currency_code, capture.currency_code,
                )

            captured_total = capture.captured_total
            currency_code = capture.currency_code or currency_code
            capture_reference = capture_reference or capture.capture_reference
            if payload.address is None and capture.address is not None:
                address = capture.address
                if address.email is None and payload.email:
                    address = replace(address, email=payload.email)

            reconciled = reconcile(items, captured_total, payload.shipping_charge, self.tolerance_cents)

        confirmation = PaymentConfirmation(
            captured_total=parse_amount(captured_total),
            currency_code=currency_code,
            payment_reference=payment_reference,
            capture_reference=capture_reference,
            shipping_charge=parse_amount(payload.shipping_charge) or Decimal("0"),
            shipping_label=(payload.shipping_label or "").strip() or self.settings.default_shipping_label,
        )

        request = build_order_request(reconciled, confirmation, address, gateway=self.gateway_name)

        if all(line.unit_price is not None for line in request.line_items):
            expected = to_cents(confirmation.captured_total)
            built = order_total_cents(request)
            if built != expected:
                logger.error("Built order totals %s cents but %s cents were captured", built, expected)

        logger.info(
            "Submitting %d line(s) for payment %s via %s flow",
            len(request.line_items), payment_reference or "-", self.submitter.flow_name,
        )
        result = self.submitter.submit(request)

        return BridgeResponse(
            order=OrderSummary(id=result.id, name=result.name, total_price=result.total_price),
            draft_id=result.draft_id,
        )

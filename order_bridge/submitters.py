"""
Order submission strategies.

Shopify can create an order in one call (orderCreate) or in two phases
(draftOrderCreate followed by draftOrderComplete). Both sit behind
OrderSubmitter.submit() so the rest of the bridge never branches on the
flow; the flow is picked from configuration by get_order_submitter().
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .config import Settings
from .errors import BridgeError
from .models import MailingAddress, OrderRequest, OrderResult
from .shopify_client import ShopifyClient

logger = logging.getLogger(__name__)


class OrderSubmitter(ABC):
    """Abstract base class for order submission flows."""

    def __init__(self, client: ShopifyClient):
        self.client = client

    @property
    @abstractmethod
    def flow_name(self) -> str:
        """Return the name of this flow (e.g., 'draft', 'direct')."""
        pass

    @abstractmethod
    def submit(self, request: OrderRequest) -> OrderResult:
        """
        Create the order in Shopify.

        Returns:
            OrderResult for the created order

        Raises:
            UpstreamRejection, UpstreamAuthFailure, UpstreamUnavailable
        """
        pass


class DraftOrderSubmitter(OrderSubmitter):
    """Create a draft order, then complete it as paid."""

    @property
    def flow_name(self) -> str:
        return "draft"

    def submit(self, request: OrderRequest) -> OrderResult:
        draft = self.client.create_draft_order(to_draft_order_input(request))
        draft_id = draft["id"]
        logger.info("Draft order created: %s (%s)", draft_id, draft.get("name"))

        try:
            order = self.client.complete_draft_order(draft_id, payment_pending=not request.mark_as_paid)
        except BridgeError as e:
            # The draft is left in place for manual cleanup
            logger.error("Draft order %s was created but not completed: %s", draft_id, e.message)
            if e.details is None:
                e.details = {}
            elif not isinstance(e.details, dict):
                e.details = {"upstream": e.details}
            e.details.setdefault("stage", "draftOrderComplete")
            e.details.setdefault("draftId", draft_id)
            raise

        result = to_order_result(order, draft_id=draft_id)
        logger.info("Order created from draft %s: %s %s", draft_id, result.id, result.name)
        return result


class DirectOrderSubmitter(OrderSubmitter):
    """Create a paid order with a single orderCreate call."""

    @property
    def flow_name(self) -> str:
        return "direct"

    def submit(self, request: OrderRequest) -> OrderResult:
        order = self.client.create_order(
            to_order_create_input(request),
            options={"inventoryBehaviour": "BYPASS", "sendReceipt": False},
        )
        result = to_order_result(order)
        logger.info("Order created: %s %s", result.id, result.name)
        return result


def get_order_submitter(settings: Settings, client: Optional[ShopifyClient] = None) -> OrderSubmitter:
    """
    Get the configured order submitter.

    The flow is determined by the SHOPIFY_ORDER_FLOW setting.
    Supported: "draft", "direct"
    """
    client = client or ShopifyClient(settings)
    flow = settings.shopify_order_flow.lower()

    logger.info("Initializing order flow: %s", flow)

    if flow == "draft":
        return DraftOrderSubmitter(client)
    elif flow == "direct":
        return DirectOrderSubmitter(client)
    else:
        raise ValueError(
            f"Unknown order flow: {flow}. "
            f"Supported flows: draft, direct"
        )


# ============================================
# GraphQL input shapes
# ============================================

def address_input(address: MailingAddress) -> Dict[str, Any]:
    data = {
        "firstName": address.first_name,
        "lastName": address.last_name,
        "address1": address.address1,
        "city": address.city,
        "zip": address.zip,
        "phone": address.phone,
    }
    country = address.country.strip()
    # Two-letter values are ISO codes; anything else is passed as a country name
    if len(country) == 2 and country.isalpha():
        data["countryCode"] = country.upper()
    else:
        data["country"] = country
    return data


def _money(amount: str, currency_code: str) -> Dict[str, str]:
    return {"amount": amount, "currencyCode": currency_code}


def _custom_attributes(request: OrderRequest) -> list:
    return [{"key": attr.key, "value": attr.value} for attr in request.custom_attributes]


def to_draft_order_input(request: OrderRequest) -> Dict[str, Any]:
    """DraftOrderInput for draftOrderCreate."""
    line_items = []
    for line in request.line_items:
        item = {"variantId": line.variant_id, "quantity": line.quantity}
        if line.unit_price is not None:
            item["priceOverride"] = _money(line.unit_price.amount, line.unit_price.currency_code)
        line_items.append(item)

    draft_input = {
        "lineItems": line_items,
        "billingAddress": address_input(request.billing_address),
        "shippingAddress": address_input(request.shipping_address),
        "note": request.note,
        "customAttributes": _custom_attributes(request),
    }

    if request.shipping_line is not None:
        draft_input["shippingLine"] = {
            "title": request.shipping_line.title,
            "priceWithCurrency": _money(
                request.shipping_line.price.amount,
                request.shipping_line.price.currency_code,
            ),
        }

    if request.email:
        draft_input["email"] = request.email

    return draft_input


def to_order_create_input(request: OrderRequest) -> Dict[str, Any]:
    """OrderCreateOrderInput for orderCreate."""
    line_items = []
    for line in request.line_items:
        item = {"variantId": line.variant_id, "quantity": line.quantity}
        if line.unit_price is not None:
            item["priceSet"] = {"shopMoney": _money(line.unit_price.amount, line.unit_price.currency_code)}
        line_items.append(item)

    order_input = {
        "lineItems": line_items,
        "billingAddress": address_input(request.billing_address),
        "shippingAddress": address_input(request.shipping_address),
        "note": request.note,
        "customAttributes": _custom_attributes(request),
        "currency": request.currency_code,
    }

    if request.shipping_line is not None:
        order_input["shippingLines"] = [{
            "title": request.shipping_line.title,
            "priceSet": {
                "shopMoney": _money(
                    request.shipping_line.price.amount,
                    request.shipping_line.price.currency_code,
                )
            },
        }]

    if request.email:
        order_input["email"] = request.email

    if request.mark_as_paid:
        order_input["financialStatus"] = "PAID"
        if request.captured_total is not None:
            order_input["transactions"] = [{
                "kind": "SALE",
                "status": "SUCCESS",
                "gateway": request.payment_gateway,
                "amountSet": {"shopMoney": _money(request.captured_total, request.currency_code)},
            }]

    return order_input


def to_order_result(order: Dict[str, Any], draft_id: Optional[str] = None) -> OrderResult:
    shop_money = (order.get("totalPriceSet") or {}).get("shopMoney") or {}
    return OrderResult(
        id=order["id"],
        name=order["name"],
        total_price=shop_money.get("amount"),
        currency_code=shop_money.get("currencyCode"),
        draft_id=draft_id,
    )

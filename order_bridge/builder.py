"""
Order request construction.

Assembles the Shopify order request from reconciled lines, the shipping
charge and the customer address.
"""
from decimal import Decimal
from typing import Sequence

from .models import (
    CustomAttribute,
    CustomerAddress,
    MailingAddress,
    MoneyAmount,
    OrderLineItem,
    OrderRequest,
    PaymentConfirmation,
    ReconciledItem,
    ShippingLine,
)
from .money import format_cents, to_cents

VARIANT_GID_PREFIX = "gid://shopify/ProductVariant/"


def variant_gid(reference: str) -> str:
    """Map a storefront variant id to a Shopify global id."""
    reference = str(reference).strip()
    if reference.startswith("gid://"):
        return reference
    return f"{VARIANT_GID_PREFIX}{reference}"


def build_order_request(
    items: Sequence[ReconciledItem],
    confirmation: PaymentConfirmation,
    address: CustomerAddress,
    gateway: str = "PayPal",
) -> OrderRequest:
    """
    Build the order request for Shopify.

    Billing and shipping addresses are the same; email goes on the order,
    never on an address. The shipping line is left out when shipping is free.
    The order is marked paid and carries a note with the payment references.
    """
    currency = confirmation.currency_code

    line_items = []
    for item in items:
        line = OrderLineItem(variant_id=variant_gid(item.variant_reference), quantity=item.quantity)
        if item.unit_price_cents is not None:
            line.unit_price = MoneyAmount(amount=format_cents(item.unit_price_cents), currency_code=currency)
        line_items.append(line)

    shipping_line = None
    shipping_cents = to_cents(confirmation.shipping_charge)
    if shipping_cents > 0:
        shipping_line = ShippingLine(
            title=confirmation.shipping_label,
            price=MoneyAmount(amount=format_cents(shipping_cents), currency_code=currency),
        )

    mailing_address = MailingAddress(
        first_name=address.first_name,
        last_name=address.last_name,
        address1=address.address1,
        city=address.city,
        zip=address.zip,
        country=address.country,
        phone=address.phone,
    )

    captured_total = None
    if confirmation.captured_total is not None:
        captured_total = format_cents(to_cents(confirmation.captured_total))

    return OrderRequest(
        line_items=line_items,
        shipping_line=shipping_line,
        billing_address=mailing_address,
        shipping_address=mailing_address.model_copy(),
        email=address.email or None,
        note=(
            f"{gateway} payment {confirmation.payment_reference} "
            f"| capture {confirmation.capture_reference}"
        ),
        custom_attributes=[
            CustomAttribute(key="payment_reference", value=confirmation.payment_reference),
            CustomAttribute(key="capture_reference", value=confirmation.capture_reference),
        ],
        currency_code=currency,
        captured_total=captured_total,
        payment_gateway=gateway.lower(),
        mark_as_paid=True,
    )


def order_total_cents(request: OrderRequest) -> int:
    """Sum of priced lines plus shipping, in cents."""
    total = 0
    for line in request.line_items:
        if line.unit_price is not None:
            total += to_cents(Decimal(line.unit_price.amount)) * line.quantity
    if request.shipping_line is not None:
        total += to_cents(Decimal(request.shipping_line.price.amount))
    return total

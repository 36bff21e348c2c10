"""
Data models for the order bridge.

Inbound/outbound API bodies and the Shopify order request are pydantic
models; the request-scoped values passed between the reconciler and the
builder are plain dataclasses.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator


# ============================================
# Inbound payload
# ============================================

class ItemPayload(BaseModel):
    """One cart line as sent by the storefront."""
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True, extra="ignore")

    catalog_variant_reference: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("catalogVariantReference", "variant_id", "variantId"),
    )
    quantity: Any = None
    unit_price_hint: Any = Field(
        default=None,
        validation_alias=AliasChoices("unitPriceHint", "unit_price"),
    )


class AddressPayload(BaseModel):
    """Recipient address; billing and shipping are never distinguished."""
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True, extra="ignore")

    first_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("firstName", "first_name"))
    last_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("lastName", "last_name"))
    address1: Optional[str] = None
    city: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ConfirmationPayload(BaseModel):
    """Body of POST /orders/from-payment.

    Canonical keys are camelCase; the keys of the legacy PayPal checkout
    snippet (paypalOrderId, line_items, shipping_price, ...) are accepted too.
    """
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True, extra="ignore")

    payment_reference: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("paymentReference", "paypalOrderId"),
    )
    capture_reference: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("captureReference", "paypalCaptureId"),
    )
    captured_total: Any = Field(default=None, validation_alias=AliasChoices("capturedTotal", "total"))
    currency_code: Optional[str] = Field(default=None, validation_alias=AliasChoices("currencyCode", "currency"))
    shipping_label: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("shippingLabel", "shipping_label"),
    )
    shipping_charge: Any = Field(
        default=None,
        validation_alias=AliasChoices("shippingCharge", "shipping_price"),
    )
    address: Optional[AddressPayload] = None
    email: Optional[EmailStr] = None
    items: Optional[List[ItemPayload]] = Field(
        default=None,
        validation_alias=AliasChoices("items", "line_items"),
    )

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


# ============================================
# Request-scoped values
# ============================================

@dataclass(frozen=True)
class PurchasedItem:
    """A cart line after parsing."""
    variant_reference: str
    quantity: int = 1
    unit_price_hint: Optional[Decimal] = None


@dataclass(frozen=True)
class ReconciledItem:
    """A cart line with its final price; unit_price_cents is None for catalog pricing."""
    variant_reference: str
    quantity: int
    unit_price_cents: Optional[int] = None

    @property
    def line_amount_cents(self) -> Optional[int]:
        if self.unit_price_cents is None:
            return None
        return self.unit_price_cents * self.quantity


@dataclass(frozen=True)
class CustomerAddress:
    first_name: str = ""
    last_name: str = ""
    address1: str = ""
    city: str = ""
    zip: str = ""
    country: str = ""
    phone: str = ""
    email: Optional[str] = None


@dataclass(frozen=True)
class PaymentConfirmation:
    """Facts about one captured payment."""
    captured_total: Optional[Decimal]
    currency_code: str
    payment_reference: str = ""
    capture_reference: str = ""
    shipping_charge: Decimal = Decimal("0")
    shipping_label: str = "Shipping"


# ============================================
# Shopify order request
# ============================================

class MoneyAmount(BaseModel):
    amount: str
    currency_code: str


class OrderLineItem(BaseModel):
    variant_id: str
    quantity: int
    unit_price: Optional[MoneyAmount] = None


class ShippingLine(BaseModel):
    title: str
    price: MoneyAmount


class MailingAddress(BaseModel):
    """Shopify MailingAddressInput. Shopify rejects email here, so there is no field for it."""
    first_name: str = ""
    last_name: str = ""
    address1: str = ""
    city: str = ""
    zip: str = ""
    country: str = ""
    phone: str = ""


class CustomAttribute(BaseModel):
    key: str
    value: str


class OrderRequest(BaseModel):
    line_items: List[OrderLineItem]
    shipping_line: Optional[ShippingLine] = None
    billing_address: MailingAddress
    shipping_address: MailingAddress
    email: Optional[str] = None
    note: str
    custom_attributes: List[CustomAttribute] = Field(default_factory=list)
    currency_code: str
    captured_total: Optional[str] = None
    payment_gateway: str = "manual"
    mark_as_paid: bool = True


class OrderResult(BaseModel):
    """Order created in Shopify."""
    id: str
    name: str
    total_price: Optional[str] = None
    currency_code: Optional[str] = None
    draft_id: Optional[str] = None


# ============================================
# Outbound response
# ============================================

class OrderSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    total_price: Optional[str] = Field(default=None, alias="totalPrice")


class BridgeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    order: OrderSummary
    draft_id: Optional[str] = Field(default=None, alias="draftId")


class HealthResponse(BaseModel):
    ok: bool = True
    status: str = "healthy"

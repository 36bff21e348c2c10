"""
Order Bridge - turns captured payments into paid Shopify orders.

- Amount reconciliation: prices the cart so it adds up to the captured total
- Order request construction for Shopify
- Draft and direct order submission flows
- PayPal and Stripe capture lookup
"""

from .builder import build_order_request
from .errors import BridgeError
from .models import CustomerAddress, OrderRequest, PaymentConfirmation, PurchasedItem, ReconciledItem
from .reconciler import reconcile

__all__ = [
    # Core
    "reconcile",
    "build_order_request",
    # Values
    "PurchasedItem",
    "ReconciledItem",
    "CustomerAddress",
    "PaymentConfirmation",
    "OrderRequest",
    # Errors
    "BridgeError",
]

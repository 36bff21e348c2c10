"""
Error taxonomy for the order bridge.

Every failure the bridge reports to a caller is a BridgeError. The `kind`
is the stable string returned in the response body, `status_code` is the
HTTP status it maps to, and `details` carries structured context (field
names, upstream error payloads) verbatim.
"""
from typing import Any, Optional


class BridgeError(Exception):
    """Base class for errors surfaced to the caller."""

    kind = "InternalError"
    status_code = 500

    def __init__(
        self,
        message: str,
        details: Optional[Any] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_response(self) -> dict:
        body = {"ok": False, "error": self.kind, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


# Caller-input faults

class InvalidRequest(BridgeError):
    kind = "InvalidRequest"
    status_code = 400


class NoItems(BridgeError):
    kind = "NoItems"
    status_code = 400


class InvalidQuantities(BridgeError):
    kind = "InvalidQuantities"
    status_code = 400


class InvalidTotal(BridgeError):
    kind = "InvalidTotal"
    status_code = 400


class NegativeItemsSubtotal(BridgeError):
    kind = "NegativeItemsSubtotal"
    status_code = 400


class InvalidAddress(BridgeError):
    kind = "InvalidAddress"
    status_code = 400


# Collaborator faults

class UpstreamAuthFailure(BridgeError):
    kind = "UpstreamAuthFailure"
    status_code = 500


class UpstreamRejection(BridgeError):
    """The payment processor or Shopify answered with a structured error.

    Defaults to 500; callers pass status_code=400 when the rejection is
    attributable to the submitted payload (Shopify userErrors, an
    uncaptured payment, an unknown payment reference).
    """

    kind = "UpstreamRejection"
    status_code = 500


class UpstreamUnavailable(BridgeError):
    kind = "UpstreamUnavailable"
    status_code = 500

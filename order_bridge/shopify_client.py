import logging
from typing import Any, Dict, Optional

import requests

from .config import Settings
from .errors import UpstreamAuthFailure, UpstreamRejection, UpstreamUnavailable

logger = logging.getLogger(__name__)


DRAFT_ORDER_CREATE = """
mutation draftOrderCreate($input: DraftOrderInput!) {
    draftOrderCreate(input: $input) {
        draftOrder {
            id
            name
        }
        userErrors {
            field
            message
        }
    }
}
"""

DRAFT_ORDER_COMPLETE = """
mutation draftOrderComplete($id: ID!, $paymentPending: Boolean) {
    draftOrderComplete(id: $id, paymentPending: $paymentPending) {
        draftOrder {
            id
            order {
                id
                name
                totalPriceSet {
                    shopMoney {
                        amount
                        currencyCode
                    }
                }
            }
        }
        userErrors {
            field
            message
        }
    }
}
"""

ORDER_CREATE = """
mutation orderCreate($order: OrderCreateOrderInput!, $options: OrderCreateOptionsInput) {
    orderCreate(order: $order, options: $options) {
        order {
            id
            name
            totalPriceSet {
                shopMoney {
                    amount
                    currencyCode
                }
            }
        }
        userErrors {
            field
            message
        }
    }
}
"""


class ShopifyClient:
    """Thin client for the Shopify Admin GraphQL API."""

    def __init__(self, config: Settings):
        self.config = config
        self.timeout = config.http_timeout_seconds
        self.headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'X-Shopify-Access-Token': config.shopify_access_token
        }

    def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run a GraphQL document and return its `data` object.

        Raises:
            UpstreamUnavailable: network failure or timeout
            UpstreamAuthFailure: the access token was refused
            UpstreamRejection: non-2xx response or top-level GraphQL errors
        """
        try:
            response = requests.post(
                self.config.shopify_graphql_url,
                json={"query": query, "variables": variables or {}},
                headers=self.headers,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error("Shopify request failed: %s", e)
            raise UpstreamUnavailable(f"Could not reach Shopify: {e}")

        if response.status_code in (401, 403):
            logger.error("Shopify refused credentials: %s", response.status_code)
            raise UpstreamAuthFailure(
                "Shopify rejected the access token",
                details={"status": response.status_code, "body": response.text[:500]}
            )

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.status_code >= 400 or data is None:
            logger.error("Shopify HTTP error %s: %s", response.status_code, response.text[:200])
            raise UpstreamRejection(
                f"Shopify returned HTTP {response.status_code}",
                details={"status": response.status_code, "body": data if data is not None else response.text[:500]}
            )

        if data.get("errors"):
            logger.error("Shopify GraphQL errors: %s", data["errors"])
            raise UpstreamRejection("Shopify GraphQL request failed", details={"errors": data["errors"]})

        return data.get("data") or {}

    def create_draft_order(self, draft_input: Dict[str, Any]) -> Dict[str, Any]:
        """Create a draft order; returns {id, name}."""
        data = self.execute(DRAFT_ORDER_CREATE, {"input": draft_input})
        result = self._mutation_result("draftOrderCreate", data)
        self._raise_user_errors("draftOrderCreate", result)
        return self._require("draftOrderCreate", data, result.get("draftOrder"))

    def complete_draft_order(self, draft_id: str, payment_pending: bool = False) -> Dict[str, Any]:
        """Turn a draft into a real order; returns the order {id, name, totalPriceSet}."""
        data = self.execute(DRAFT_ORDER_COMPLETE, {"id": draft_id, "paymentPending": payment_pending})
        result = self._mutation_result("draftOrderComplete", data, draft_id=draft_id)
        self._raise_user_errors("draftOrderComplete", result, draft_id=draft_id)
        draft = result.get("draftOrder") or {}
        return self._require("draftOrderComplete", data, draft.get("order"), draft_id=draft_id)

    def create_order(self, order_input: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Create an order in one call; returns the order {id, name, totalPriceSet}."""
        data = self.execute(ORDER_CREATE, {"order": order_input, "options": options})
        result = self._mutation_result("orderCreate", data)
        self._raise_user_errors("orderCreate", result)
        return self._require("orderCreate", data, result.get("order"))

    def _mutation_result(self, stage: str, data: Dict[str, Any], draft_id: Optional[str] = None) -> Dict[str, Any]:
        result = data.get(stage)
        if not isinstance(result, dict):
            self._raise_empty(stage, data, draft_id)
        return result

    def _require(self, stage: str, data: Dict[str, Any], value: Any, draft_id: Optional[str] = None) -> Dict[str, Any]:
        if not isinstance(value, dict) or not value.get("id"):
            self._raise_empty(stage, data, draft_id)
        return value

    def _raise_empty(self, stage: str, data: Dict[str, Any], draft_id: Optional[str] = None):
        logger.error("%s returned no result: %s", stage, data)
        details = {"stage": stage, "data": data}
        if draft_id:
            details["draftId"] = draft_id
        raise UpstreamRejection(f"Shopify returned no result for {stage}", details=details)

    def _raise_user_errors(self, stage: str, result: Dict[str, Any], draft_id: Optional[str] = None):
        user_errors = result.get("userErrors") or []
        if not user_errors:
            return

        logger.error("%s userErrors: %s", stage, user_errors)
        details = {"stage": stage, "errors": user_errors}
        if draft_id:
            details["draftId"] = draft_id
        raise UpstreamRejection(f"Shopify rejected {stage}", details=details, status_code=400)

"""
Amount reconciliation.

Turns the captured total, the shipping charge and the cart into per-line
prices whose sum plus shipping equals the captured amount to the cent.

All arithmetic is done in integer cents. Rounding is half away from zero
(see money.divide_half_up). When a share has to be rounded, the last line
absorbs whatever is left so the sum is exact.
"""
import logging
from decimal import Decimal
from typing import Any, List, Optional, Sequence

from .errors import InvalidQuantities, InvalidTotal, NegativeItemsSubtotal, NoItems
from .models import PurchasedItem, ReconciledItem
from .money import divide_half_up, format_cents, parse_amount, parse_decimal, to_cents

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_CENTS = 2


def parse_quantity(value: Any) -> int:
    """Integer part of the value; missing, zero or unparseable quantities become 1."""
    amount = parse_decimal(value)
    if amount is None:
        return 1
    return int(amount) or 1


def parse_price_hint(value: Any) -> Optional[Decimal]:
    """A usable unit price hint, or None when absent, unparseable, negative or out of range."""
    amount = parse_amount(value)
    if amount is None or amount < 0:
        return None
    return amount


def check_items(items: Sequence[PurchasedItem]):
    """Raise NoItems or InvalidQuantities for a cart that cannot be priced."""
    if not items:
        raise NoItems("At least one item is required")

    quantities = [item.quantity for item in items]
    if sum(quantities) <= 0 or any(qty < 1 for qty in quantities):
        raise InvalidQuantities(
            "Every item needs a positive quantity",
            details={"quantities": quantities},
        )


def reconcile(
    items: Sequence[PurchasedItem],
    captured_total: Any,
    shipping_charge: Any = None,
    tolerance_cents: int = DEFAULT_TOLERANCE_CENTS,
) -> List[ReconciledItem]:
    """
    Price the cart so that it adds up to the captured total.

    Args:
        items: Parsed cart lines
        captured_total: Amount the payment processor captured (Decimal, number or numeric string)
        shipping_charge: Shipping amount included in the captured total; absent means 0
        tolerance_cents: Largest mismatch between hinted prices and the target that is
            accepted without redistributing. Within it, every hinted price is kept
            except the last line's, which absorbs the mismatch so the sum stays exact.

    Returns:
        Reconciled lines. An item whose line amount is not a multiple of its quantity
        comes back as two lines (primary price, then a one-cent adjustment).
        When no item carries a price hint, lines are returned unpriced.

    Raises:
        InvalidTotal, NegativeItemsSubtotal, NoItems, InvalidQuantities
    """
    total = parse_amount(captured_total)
    if total is None or to_cents(total) <= 0:
        raise InvalidTotal(
            "capturedTotal must be a number greater than 0",
            details={"capturedTotal": _echo(captured_total)},
        )
    total_cents = to_cents(total)

    shipping = Decimal("0") if shipping_charge is None else parse_amount(shipping_charge)
    if shipping is None or shipping < 0:
        raise InvalidTotal(
            "shippingCharge must be a number of at least 0",
            details={"shippingCharge": _echo(shipping_charge)},
        )
    shipping_cents = to_cents(shipping)

    items_target = total_cents - shipping_cents
    if items_target < 0:
        raise NegativeItemsSubtotal(
            "shippingCharge exceeds capturedTotal",
            details={
                "capturedTotal": format_cents(total_cents),
                "shippingCharge": format_cents(shipping_cents),
            },
        )

    check_items(items)
    quantities = [item.quantity for item in items]

    hints = [item.unit_price_hint for item in items]
    if all(hint is None for hint in hints):
        logger.debug("No unit price hints; leaving %d items to catalog pricing", len(items))
        return [ReconciledItem(item.variant_reference, item.quantity) for item in items]

    weights = quantities
    if all(hint is not None for hint in hints):
        hinted_lines = [to_cents(hint) * qty for hint, qty in zip(hints, quantities)]
        residual = items_target - sum(hinted_lines)

        if abs(residual) <= tolerance_cents and hinted_lines[-1] + residual >= 0:
            if residual:
                logger.info(
                    "Hinted prices are %s off the captured items total; last line absorbs it",
                    format_cents(residual),
                )
            line_amounts = hinted_lines[:-1] + [hinted_lines[-1] + residual]
            return _price_lines(items, line_amounts)

        logger.info(
            "Hinted subtotal %s does not match items total %s; redistributing",
            format_cents(sum(hinted_lines)), format_cents(items_target),
        )
        if sum(hinted_lines) > 0:
            weights = hinted_lines

    return _price_lines(items, distribute(items_target, weights))


def distribute(target_cents: int, weights: Sequence[int]) -> List[int]:
    """
    Split target_cents across weights.

    Every share but the last is rounded on its own; the last is the residual.
    If that would leave the last share negative (a few cents spread over many
    lines), shares are taken from rounded cumulative weights instead, which
    keeps every share non-negative and the sum exact.
    """
    total_weight = sum(weights)
    if total_weight <= 0:
        raise ValueError("weights must sum to a positive number")

    amounts = []
    assigned = 0
    for weight in weights[:-1]:
        amount = divide_half_up(target_cents * weight, total_weight)
        amounts.append(amount)
        assigned += amount
    amounts.append(target_cents - assigned)

    if amounts[-1] >= 0:
        return amounts

    amounts = []
    cumulative_weight = 0
    previous = 0
    for weight in weights:
        cumulative_weight += weight
        boundary = divide_half_up(target_cents * cumulative_weight, total_weight)
        amounts.append(boundary - previous)
        previous = boundary
    return amounts


def _price_lines(items: Sequence[PurchasedItem], line_amounts: Sequence[int]) -> List[ReconciledItem]:
    reconciled = []
    for item, line_amount in zip(items, line_amounts):
        unit = divide_half_up(line_amount, item.quantity)
        difference = line_amount - unit * item.quantity

        if difference == 0:
            reconciled.append(ReconciledItem(item.variant_reference, item.quantity, unit))
            continue

        # |difference| <= quantity / 2, so the primary line always keeps units
        step = 1 if difference > 0 else -1
        adjusted = abs(difference)
        reconciled.append(ReconciledItem(item.variant_reference, item.quantity - adjusted, unit))
        reconciled.append(ReconciledItem(item.variant_reference, adjusted, unit + step))

    return reconciled


def _echo(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)

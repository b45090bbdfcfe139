"""
Order pricing calculations.

Pure functions shared by the order service and by anything that previews
prices before submitting them.
"""

from typing import Dict, Iterable, Mapping, Optional, Tuple

from ..models import AdjustmentRange, FinalPricing, Order, OrderItem, Pricing

GST_RATE = 0.12

# The adjustment stage charges a flat 10% whatever the order's GST flag.
# This differs from the admin stage and is kept as observed.
ADJUSTMENT_TAX_RATE = 0.10

ADJUSTMENT_RANGE_MIN = 10.0
ADJUSTMENT_RANGE_MAX = 15.0


def default_adjustment_range() -> AdjustmentRange:
    """The adjustment range attached whenever an admin allows adjustment."""
    return AdjustmentRange(min=ADJUSTMENT_RANGE_MIN, max=ADJUSTMENT_RANGE_MAX)


def gst_rate(with_gst: bool) -> float:
    return GST_RATE if with_gst else 0.0


def price_lines(
    items: Iterable[OrderItem],
    item_prices: Mapping[str, float]
) -> Tuple[Dict[str, float], float]:
    """
    Price every order line, treating unmapped items as free.

    Args:
        items: Order lines
        item_prices: Unit price per item id

    Returns:
        Tuple of (unit price per item id, subtotal)
    """
    prices: Dict[str, float] = {}
    subtotal = 0.0
    for item in items:
        price = item_prices.get(item.id, 0) or 0
        prices[item.id] = price
        subtotal += price * item.requested_quantity
    return prices, subtotal


def compute_admin_pricing(
    items: Iterable[OrderItem],
    item_prices: Mapping[str, float],
    with_gst: bool
) -> Pricing:
    """
    Compute the admin pricing stage.

    The subtotal covers every order line; the stored price map is the one
    the admin supplied.
    """
    _, subtotal = price_lines(items, item_prices)
    tax = subtotal * gst_rate(with_gst)
    return Pricing(
        subtotal=subtotal,
        tax=tax,
        total=subtotal + tax,
        item_prices=dict(item_prices),
    )


def compute_salesman_pricing(
    items: Iterable[OrderItem],
    item_prices: Mapping[str, float],
    with_gst: bool
) -> Pricing:
    """Compute the prices a salesman proposed when creating the order."""
    prices, subtotal = price_lines(items, item_prices)
    tax = subtotal * gst_rate(with_gst)
    return Pricing(subtotal=subtotal, tax=tax, total=subtotal + tax, item_prices=prices)


def compute_adjusted_pricing(
    items: Iterable[OrderItem],
    base_prices: Mapping[str, float],
    adjustments: Mapping[str, float],
    tax_rate: float = ADJUSTMENT_TAX_RATE
) -> FinalPricing:
    """
    Apply per-item price deltas on top of the admin prices.

    Args:
        items: Order lines
        base_prices: Admin unit price per item id (missing means 0)
        adjustments: Delta per item id (missing means 0)
        tax_rate: Rate applied to the adjusted subtotal

    Returns:
        FinalPricing with the adjusted unit prices
    """
    adjusted: Dict[str, float] = {}
    subtotal = 0.0
    for item in items:
        new_price = (base_prices.get(item.id, 0) or 0) + (adjustments.get(item.id, 0) or 0)
        adjusted[item.id] = new_price
        subtotal += new_price * item.requested_quantity

    tax = subtotal * tax_rate
    return FinalPricing(
        subtotal=subtotal,
        tax=tax,
        total=subtotal + tax,
        item_prices=adjusted,
        adjustments=dict(adjustments),
    )


def clamp_adjustment(delta: float, adjustment_range: Optional[AdjustmentRange] = None) -> float:
    """
    Clamp a price delta to ``[-max, +max]``.

    Callers clamp before submitting; the order service trusts its input.
    """
    bound = (adjustment_range or default_adjustment_range()).max
    return max(-bound, min(bound, delta))


def preview_adjustment(order: Order, adjustments: Mapping[str, float]) -> Optional[FinalPricing]:
    """
    Preview what a salesman sees before submitting adjustments.

    Deltas are clamped to the order's range and tax follows the order's
    GST flag. Returns None when the order has no admin pricing yet.
    """
    if order.admin_pricing is None:
        return None

    clamped = {
        item_id: clamp_adjustment(delta, order.price_adjustment_range)
        for item_id, delta in adjustments.items()
    }
    return compute_adjusted_pricing(
        order.items,
        order.admin_pricing.item_prices,
        clamped,
        tax_rate=gst_rate(order.with_gst),
    )

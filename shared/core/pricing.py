"""
Order pricing.

One pure computation shared by the backend (authoritative totals) and the
console (line prices and draft preview), so both agree to the cent.

    subtotal       = sum(quantity * unit_price)
    effective_i    = quantity * unit_price * (1 - discount_percent / 100)
    total          = sum(effective_i) * (1 - order_discount_percent / 100)
    discount_total = subtotal - total

Nothing here validates ranges or rounds; rounding happens in the display
helpers only.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Tuple, Union

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")


def to_decimal(value: Number) -> Decimal:
    """Coerce a wire/ORM number to Decimal (floats go through their repr)"""
    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    return Decimal(str(value))


def _discount_factor(percent: Number) -> Decimal:
    return 1 - to_decimal(percent) / HUNDRED


def line_subtotal(item: Any) -> Decimal:
    return to_decimal(item.quantity) * to_decimal(item.unit_price)


def effective_item_price(item: Any) -> Decimal:
    """Price of one line after its own discount"""
    return line_subtotal(item) * _discount_factor(item.discount_percent)


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    pre_order_discount_total: Decimal
    total: Decimal
    discount_total: Decimal
    item_totals: Tuple[Decimal, ...] = ()


def compute_order_totals(items: Iterable[Any], order_discount_percent: Number = 0) -> OrderTotals:
    """
    Price an order.

    Args:
        items: objects exposing ``quantity``, ``unit_price`` and
            ``discount_percent`` (ORM rows, pydantic models, draft rows)
        order_discount_percent: discount applied on top of the
            item-discounted sum

    Returns:
        OrderTotals with unrounded Decimal figures
    """
    subtotal = ZERO
    item_totals = []
    for item in items:
        subtotal += line_subtotal(item)
        item_totals.append(effective_item_price(item))

    pre_order_discount_total = sum(item_totals, ZERO)
    total = pre_order_discount_total * _discount_factor(order_discount_percent)

    return OrderTotals(
        subtotal=subtotal,
        pre_order_discount_total=pre_order_discount_total,
        total=total,
        discount_total=subtotal - total,
        item_totals=tuple(item_totals),
    )


def round_money(value: Number) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Number) -> str:
    """Two-place display string, e.g. ``20.25``"""
    return f"{round_money(value):.2f}"


def format_percent(value: Number) -> str:
    """Percent without trailing zeros, e.g. ``50`` or ``12.5``"""
    normalized = to_decimal(value).normalize()
    if normalized == 0:
        return "0"
    return f"{normalized:f}"

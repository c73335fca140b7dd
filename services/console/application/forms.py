"""Parsing of the order builder's HTML form."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

ACTIONS = ("save", "add_item", "remove_item", "create")


class FormError(ValueError):
    pass


def parse_number(raw: Optional[str], label: str) -> Decimal:
    """Numeric input; an empty field reads as 0 like a cleared number box"""
    text = (raw or "").strip()
    if not text:
        return Decimal("0")
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise FormError(f"{label} must be a number")
    if not value.is_finite():
        raise FormError(f"{label} must be a number")
    return value


@dataclass
class ItemFields:
    name: str
    quantity: Decimal
    unit_price: Decimal
    discount_percent: Decimal


@dataclass
class DraftSubmission:
    action: str = "save"
    index: Optional[int] = None
    customer_id: Optional[str] = None
    status: Optional[str] = None
    order_discount_percent: Optional[Decimal] = None
    # Position -> submitted fields; rows missing from the form are left alone
    items: dict = field(default_factory=dict)


def _parse_action(raw: Optional[str]) -> tuple:
    action, _, index = (raw or "save").partition(":")
    if action not in ACTIONS:
        raise FormError(f"Unknown action: {action}")
    if action != "remove_item":
        return action, None
    try:
        return action, int(index)
    except ValueError:
        raise FormError("Missing item position")


def parse_draft_form(form: Mapping[str, str], item_count: int) -> DraftSubmission:
    action, index = _parse_action(form.get("action"))
    submission = DraftSubmission(action=action, index=index)

    if "customer_id" in form:
        submission.customer_id = form.get("customer_id") or ""
    if "status" in form:
        submission.status = form.get("status")
    if "order_discount_percent" in form:
        submission.order_discount_percent = parse_number(form.get("order_discount_percent"), "Order discount")

    for position in range(item_count):
        prefix = f"items-{position}-"
        if f"{prefix}name" not in form:
            continue
        label = f"Item {position + 1}"
        submission.items[position] = ItemFields(
            name=form.get(f"{prefix}name", ""),
            quantity=parse_number(form.get(f"{prefix}quantity"), f"{label} quantity"),
            unit_price=parse_number(form.get(f"{prefix}unit_price"), f"{label} unit price"),
            discount_percent=parse_number(form.get(f"{prefix}discount_percent"), f"{label} discount"),
        )

    return submission

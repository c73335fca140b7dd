from decimal import Decimal

import pytest

from services.console.application.forms import FormError, parse_draft_form, parse_number


def test_full_form():
    form = {
        "action": "create",
        "customer_id": "c1",
        "status": "Paid",
        "order_discount_percent": "12.5",
        "items-0-name": "Widget",
        "items-0-quantity": "2",
        "items-0-unit_price": "9.99",
        "items-0-discount_percent": "",
    }
    submission = parse_draft_form(form, item_count=1)
    assert submission.action == "create"
    assert submission.customer_id == "c1"
    assert submission.status == "Paid"
    assert submission.order_discount_percent == Decimal("12.5")
    item = submission.items[0]
    assert (item.name, item.quantity, item.unit_price, item.discount_percent) == (
        "Widget", Decimal("2"), Decimal("9.99"), Decimal("0"))


def test_missing_action_means_save():
    assert parse_draft_form({}, item_count=0).action == "save"


def test_remove_item_carries_position():
    submission = parse_draft_form({"action": "remove_item:3"}, item_count=0)
    assert (submission.action, submission.index) == ("remove_item", 3)


def test_rows_missing_from_form_are_skipped():
    submission = parse_draft_form({"items-1-name": "Second"}, item_count=2)
    assert list(submission.items) == [1]


def test_absent_fields_stay_unset():
    submission = parse_draft_form({"action": "add_item"}, item_count=0)
    assert submission.customer_id is None
    assert submission.status is None
    assert submission.order_discount_percent is None


@pytest.mark.parametrize("form,message", [
    ({"action": "explode"}, "Unknown action: explode"),
    ({"action": "remove_item:x"}, "Missing item position"),
    ({"order_discount_percent": "ten"}, "Order discount must be a number"),
    ({"items-0-name": "A", "items-0-unit_price": "NaN"}, "Item 1 unit price must be a number"),
])
def test_invalid_forms(form, message):
    with pytest.raises(FormError, match=message):
        parse_draft_form(form, item_count=1)


def test_parse_number_blank_is_zero():
    assert parse_number("  ", "Qty") == 0

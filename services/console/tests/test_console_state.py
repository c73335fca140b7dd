"""View-state behaviour of the console, against a recording fake backend."""

import asyncio
from decimal import Decimal

from services.console.application.forms import DraftSubmission, ItemFields
from services.console.application.sessions import SessionStore
from services.console.application.state import Console, OrderItemDraft
from services.console.infrastructure.backend_client import (
    BackendRejectedError,
    BackendUnavailableError,
)


def _console_with_customer(fake_backend):
    console = Console(fake_backend)
    asyncio.run(fake_backend.create_customer("Ada", "ada@example.com"))
    fake_backend.calls.clear()
    asyncio.run(console.mount())
    return console


# ── customer directory and form ──────────────────────────────────────────────


class TestCustomers:

    def test_mount_seeds_directory_once(self, fake_backend):
        console = _console_with_customer(fake_backend)
        asyncio.run(console.mount())
        assert [c.name for c in console.directory.customers] == ["Ada"]
        assert fake_backend.calls.count("list_customers") == 1

    def test_created_customer_is_prepended_without_refetch(self, fake_backend):
        console = _console_with_customer(fake_backend)
        form = console.customer_form
        form.update(name="Grace", email="grace@example.com", phone="", address="")

        created = asyncio.run(form.submit())

        assert created is not None
        assert [c.name for c in console.directory.customers] == ["Grace", "Ada"]
        assert fake_backend.calls.count("list_customers") == 1
        assert (form.name, form.email, form.error, form.loading) == ("", "", "", False)

    def test_required_fields_block_submission(self, fake_backend):
        console = Console(fake_backend)
        form = console.customer_form
        form.update(name="  ", email="x@example.com")

        assert asyncio.run(form.submit()) is None
        assert form.error == "Name and email are required"
        assert "create_customer" not in fake_backend.calls

    def test_rejection_keeps_fields_and_shows_detail(self, fake_backend):
        fake_backend.fail("create_customer", BackendRejectedError(409, "A customer with this email already exists"))
        console = Console(fake_backend)
        form = console.customer_form
        form.update(name="Ada", email="ada@example.com", phone="555", address="Here")

        assert asyncio.run(form.submit()) is None
        assert form.error == "A customer with this email already exists"
        assert (form.name, form.email, form.phone, form.address) == ("Ada", "ada@example.com", "555", "Here")
        assert form.loading is False
        assert console.directory.customers == []

    def test_no_client_side_email_uniqueness_check(self, fake_backend):
        console = _console_with_customer(fake_backend)
        console.customer_form.update(name="Ada Twin", email="ada@example.com")
        assert asyncio.run(console.customer_form.submit()) is not None
        assert len(console.directory.customers) == 2

    def test_failed_directory_load_is_shown(self, fake_backend):
        fake_backend.fail("list_customers", BackendUnavailableError("Could not reach the server (ConnectError)"))
        console = Console(fake_backend)
        asyncio.run(console.mount())
        assert console.directory.error == "Could not reach the server (ConnectError)"
        assert console.directory.loaded is False


# ── order builder ────────────────────────────────────────────────────────────


class TestOrderBuilder:

    def test_defaults(self, fake_backend):
        builder = Console(fake_backend).builder
        assert builder.selected is None
        assert builder.items == []
        assert builder.status == "Pending"
        assert builder.order_discount_percent == 0
        assert builder.can_create is False

    def test_items_are_edited_by_position(self, fake_backend):
        builder = Console(fake_backend).builder
        builder.add_item()
        builder.add_item()
        builder.add_item()
        assert builder.items[0] == OrderItemDraft(name="", quantity=Decimal("1"), unit_price=Decimal("0"), discount_percent=Decimal("0"))

        builder.update_item(1, OrderItemDraft(name="Gadget", quantity=Decimal("2")))
        builder.remove_item(0)
        assert [item.name for item in builder.items] == ["Gadget", ""]

        builder.remove_item(10)
        assert len(builder.items) == 2

    def test_creation_blocked_without_customer(self, fake_backend):
        builder = Console(fake_backend).builder
        builder.add_item()
        assert asyncio.run(builder.create()) is None
        assert "create_order" not in fake_backend.calls
        assert len(builder.items) == 1

    def test_apply_submission(self, fake_backend):
        console = _console_with_customer(fake_backend)
        builder = console.builder
        builder.add_item()
        builder.apply(DraftSubmission(
            customer_id="c1",
            status="Shipped",
            order_discount_percent=Decimal("10"),
            items={0: ItemFields("Widget", Decimal("2"), Decimal("10"), Decimal("0"))},
        ))
        assert builder.selected.name == "Ada"
        assert builder.status == "Shipped"
        assert builder.items[0].name == "Widget"
        assert builder.preview().total == Decimal("18")

        builder.apply(DraftSubmission(customer_id=""))
        assert builder.selected is None

    def test_successful_create_resets_draft_and_refreshes_orders(self, fake_backend):
        console = _console_with_customer(fake_backend)
        builder = console.builder
        builder.select_customer("c1")
        builder.status = "Paid"
        builder.order_discount_percent = Decimal("10")
        builder.items = [
            OrderItemDraft("Widget", Decimal("2"), Decimal("10"), Decimal("0")),
            OrderItemDraft("Gadget", Decimal("1"), Decimal("5"), Decimal("50")),
        ]

        order = asyncio.run(builder.create())

        assert order.total == Decimal("20.25")
        assert builder.items == []
        assert builder.status == "Pending"
        assert builder.order_discount_percent == 0
        assert builder.selected is not None
        assert console.refresh_key == 1

        asyncio.run(console.mount())
        assert [o.id for o in console.listing.orders] == [order.id]
        assert fake_backend.calls.count("list_orders") == 2

    def test_failed_create_keeps_draft_and_shows_error(self, fake_backend):
        console = _console_with_customer(fake_backend)
        fake_backend.fail("create_order", BackendRejectedError(422, "Input should be greater than or equal to 1"))
        builder = console.builder
        builder.select_customer("c1")
        builder.status = "Paid"
        builder.items = [OrderItemDraft("Widget", Decimal("0"), Decimal("10"), Decimal("0"))]

        assert asyncio.run(builder.create()) is None
        assert builder.error == "Input should be greater than or equal to 1"
        assert builder.status == "Paid"
        assert len(builder.items) == 1
        assert builder.creating is False
        assert console.refresh_key == 0


# ── orders listing ───────────────────────────────────────────────────────────


class TestOrdersListing:

    def test_reloads_only_when_signal_changes(self, fake_backend):
        console = Console(fake_backend)
        asyncio.run(console.mount())
        asyncio.run(console.mount())
        assert fake_backend.calls.count("list_orders") == 1
        assert console.listing.loading is False

        console.request_refresh()
        asyncio.run(console.mount())
        assert fake_backend.calls.count("list_orders") == 2

    def test_failed_load_keeps_previous_orders(self, fake_backend):
        console = _console_with_customer(fake_backend)
        console.builder.select_customer("c1")
        asyncio.run(console.builder.create())
        asyncio.run(console.mount())
        assert len(console.listing.orders) == 1

        fake_backend.fail("list_orders", BackendUnavailableError("Could not reach the server (ReadTimeout)"))
        console.request_refresh()
        asyncio.run(console.mount())
        assert console.listing.error == "Could not reach the server (ReadTimeout)"
        assert len(console.listing.orders) == 1


# ── sessions ─────────────────────────────────────────────────────────────────


class TestSessionStore:

    def test_unknown_cookie_starts_new_session(self, fake_backend):
        store = SessionStore(lambda: Console(fake_backend))
        session = store.resolve(None)
        assert session.is_new
        assert len(session.session_id) == 32

        again = store.resolve("not-a-session")
        assert again.is_new
        assert again.session_id != "not-a-session"
        assert len(store) == 2

    def test_known_cookie_returns_same_console(self, fake_backend):
        store = SessionStore(lambda: Console(fake_backend))
        first = store.resolve(None)
        second = store.resolve(first.session_id)
        assert not second.is_new
        assert second.console is first.console

    def test_oldest_session_evicted_at_capacity(self, fake_backend):
        store = SessionStore(lambda: Console(fake_backend), maxsize=1)
        first = store.resolve(None)
        store.resolve(None)
        assert store.resolve(first.session_id).is_new

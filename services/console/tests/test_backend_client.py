"""BackendClient against the in-process backend and against canned transports."""

import asyncio
import json
from dataclasses import dataclass
from decimal import Decimal

import httpx
import pytest

from services.console.infrastructure.backend_client import (
    BackendClient,
    BackendRejectedError,
    BackendUnavailableError,
    MalformedResponseError,
    error_detail,
    json_number,
)
from services.console.application.state import CustomerDirectory, OrderBuilder, OrderItemDraft
from shared.core.pricing import format_money


@dataclass
class Line:
    name: str
    quantity: Decimal
    unit_price: Decimal
    discount_percent: Decimal


def _client_for(handler) -> BackendClient:
    return BackendClient("http://backend.test", transport=httpx.MockTransport(handler))


# ── against the reference backend ────────────────────────────────────────────


def test_customer_and_order_round_trip(backend_api):
    async def scenario():
        customer = await backend_api.create_customer("Ada", "ada@example.com", "", "")
        order = await backend_api.create_order(
            customer_id=customer.id,
            status="Paid",
            order_discount_percent=Decimal("10"),
            items=[
                Line("Widget", Decimal("2"), Decimal("10"), Decimal("0")),
                Line("Gadget", Decimal("1"), Decimal("5"), Decimal("50")),
            ],
        )
        return customer, order, await backend_api.list_customers(), await backend_api.list_orders()

    customer, order, customers, orders = asyncio.run(scenario())

    assert customers[0].id == customer.id
    assert order.customer_name == "Ada"
    assert order.total == Decimal("20.25")
    assert order.discount_total == Decimal("4.75")
    assert [o.id for o in orders] == [order.id]
    # Client-side line prices agree with the backend totals
    assert order.recomputed_totals().total == order.total


def test_draft_preview_matches_created_order(backend_api):
    builder = OrderBuilder(backend_api, CustomerDirectory(backend_api))
    builder.order_discount_percent = Decimal("12.35")
    builder.items = [
        OrderItemDraft("Thing", Decimal("3"), Decimal("0.33"), Decimal("33.33")),
        OrderItemDraft("Other", Decimal("7"), Decimal("1.07"), Decimal("2.5")),
    ]
    preview = builder.preview()

    async def scenario():
        customer = await backend_api.create_customer("Ada", "ada@example.com")
        builder.directory.prepend(customer)
        builder.select_customer(customer.id)
        return await builder.create()

    order = asyncio.run(scenario())

    assert format_money(order.subtotal) == format_money(preview.subtotal)
    assert format_money(order.discount_total) == format_money(preview.discount_total)
    assert format_money(order.total) == format_money(preview.total)


def test_sub_cent_draft_is_rejected_and_kept(backend_api):
    builder = OrderBuilder(backend_api, CustomerDirectory(backend_api))
    builder.items = [OrderItemDraft("Thing", Decimal("3"), Decimal("0.333"), Decimal("0"))]

    async def scenario():
        customer = await backend_api.create_customer("Ada", "ada@example.com")
        builder.directory.prepend(customer)
        builder.select_customer(customer.id)
        return await builder.create()

    assert asyncio.run(scenario()) is None
    assert "decimal places" in builder.error
    assert len(builder.items) == 1


def test_duplicate_email_surfaces_backend_detail(backend_api):
    async def scenario():
        await backend_api.create_customer("Ada", "ada@example.com")
        await backend_api.create_customer("Ada Again", "ada@example.com")

    with pytest.raises(BackendRejectedError) as excinfo:
        asyncio.run(scenario())
    assert excinfo.value.status_code == 409
    assert excinfo.value.message == "A customer with this email already exists"


# ── failure taxonomy ─────────────────────────────────────────────────────────


def test_transport_failure_is_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(BackendUnavailableError) as excinfo:
        asyncio.run(_client_for(handler).list_customers())
    assert "ConnectError" in excinfo.value.message


def test_validation_errors_are_joined():
    def handler(request):
        return httpx.Response(422, json={"detail": [
            {"loc": ["body", "name"], "msg": "String should have at least 1 character"},
            {"loc": ["body", "email"], "msg": "Field required"},
        ]})

    with pytest.raises(BackendRejectedError) as excinfo:
        asyncio.run(_client_for(handler).create_customer("", ""))
    assert excinfo.value.message == "String should have at least 1 character; Field required"


def test_malformed_success_body():
    def handler(request):
        return httpx.Response(200, json={"unexpected": True})

    with pytest.raises(MalformedResponseError):
        asyncio.run(_client_for(handler).list_orders())


def test_non_json_success_body():
    def handler(request):
        return httpx.Response(200, text="<html>gateway</html>")

    with pytest.raises(MalformedResponseError):
        asyncio.run(_client_for(handler).list_customers())


def test_request_body_shape():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={
            "_id": "o1", "customer_id": "c1", "status": "Pending",
            "items": [], "subtotal": 0, "discount_total": 0, "total": 0,
        })

    asyncio.run(_client_for(handler).create_order(
        customer_id="c1",
        status="Pending",
        order_discount_percent=Decimal("12.5"),
        items=[Line("Widget", Decimal("3"), Decimal("9.99"), Decimal("0"))],
    ))

    assert seen["path"] == "/orders"
    assert seen["body"] == {
        "customer_id": "c1",
        "status": "Pending",
        "order_discount_percent": 12.5,
        "items": [{"name": "Widget", "quantity": 3, "unit_price": 9.99, "discount_percent": 0}],
    }


@pytest.mark.parametrize("response,expected", [
    (httpx.Response(400, json={"detail": "Nope"}), "Nope"),
    (httpx.Response(500, text="Internal Server Error"), "Failed"),
    (httpx.Response(400, json=["not", "a", "dict"]), "Failed"),
    (httpx.Response(400, json={"detail": ""}), "Failed"),
])
def test_error_detail(response, expected):
    assert error_detail(response) == expected


def test_json_number():
    assert json_number(Decimal("3")) == 3 and isinstance(json_number(Decimal("3.0")), int)
    assert json_number(Decimal("2.5")) == 2.5

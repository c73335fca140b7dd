"""Shared fixtures: in-memory backend database, in-process backend, fake backend."""

import os

# Must be set before any service module creates its settings/engine
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["BACKEND_URL"] = "http://backend.test"
os.environ["LOG_LEVEL"] = "WARNING"

from decimal import Decimal

import httpx
import pytest

from services.console.application.schemas import CustomerRecord, OrderRecord
from services.console.infrastructure.backend_client import BackendClient, BackendError
from shared.core.pricing import compute_order_totals


@pytest.fixture
def backend_db():
    from services.backend.infrastructure.db import drop_models, init_models

    drop_models()
    init_models()
    yield
    drop_models()


@pytest.fixture
def backend_app(backend_db):
    from services.backend.main import app

    return app


@pytest.fixture
def backend_api(backend_app) -> BackendClient:
    """Console-side client wired to the in-process backend"""
    return BackendClient("http://backend.test", transport=httpx.ASGITransport(app=backend_app))


class FakeBackend:
    """In-memory stand-in for BackendClient that records every call"""

    def __init__(self):
        self.customers = []
        self.orders = []
        self.calls = []
        self.failures = {}

    def fail(self, method: str, error: BackendError) -> None:
        self.failures[method] = error

    def _record(self, method: str) -> None:
        self.calls.append(method)
        if method in self.failures:
            raise self.failures[method]

    async def list_customers(self):
        self._record("list_customers")
        return list(self.customers)

    async def create_customer(self, name, email, phone="", address=""):
        self._record("create_customer")
        customer = CustomerRecord.model_validate({
            "_id": f"c{len(self.customers) + 1}",
            "name": name,
            "email": email,
            "phone": phone,
            "address": address,
        })
        self.customers.insert(0, customer)
        return customer

    async def list_orders(self):
        self._record("list_orders")
        return list(self.orders)

    async def create_order(self, customer_id, status, order_discount_percent, items):
        self._record("create_order")
        items = list(items)
        totals = compute_order_totals(items, order_discount_percent)
        order = OrderRecord.model_validate({
            "_id": f"o{len(self.orders) + 1}",
            "customer_id": customer_id,
            "customer_name": next((c.name for c in self.customers if c.id == customer_id), None),
            "status": status,
            "order_discount_percent": Decimal(order_discount_percent),
            "items": [
                {
                    "name": item.name,
                    "quantity": int(item.quantity),
                    "unit_price": item.unit_price,
                    "discount_percent": item.discount_percent,
                }
                for item in items
            ],
            "subtotal": totals.subtotal,
            "discount_total": totals.discount_total,
            "total": totals.total,
        })
        self.orders.insert(0, order)
        return order


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()

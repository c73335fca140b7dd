"""
View state for the console.

Each view owns its own state and talks to the backend through
``BackendClient``. ``Console`` composes the views of one browser session and
wires them together with callbacks:

    customer created -> CustomerDirectory.prepend
    order created    -> refresh signal bump -> OrdersListing reload
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Callable, List, Optional

from services.console.application.forms import DraftSubmission
from services.console.application.schemas import CustomerRecord, OrderRecord
from services.console.infrastructure.backend_client import BackendClient, BackendError
from shared.core.logging_config import get_logger
from shared.core.order_status import OrderStatus
from shared.core.pricing import OrderTotals, compute_order_totals

logger = get_logger(__name__)


class CustomerDirectory:
    """Known customers, seeded once from the backend and grown locally"""

    def __init__(self, client: BackendClient):
        self.client = client
        self.customers: List[CustomerRecord] = []
        self.loaded = False
        self.loading = False
        self.error = ""

    async def load(self) -> None:
        self.loading = True
        self.error = ""
        try:
            self.customers = await self.client.list_customers()
            self.loaded = True
        except BackendError as exc:
            self.error = exc.message
            logger.warning(f"Customer list load failed: {exc.message}")
        finally:
            self.loading = False

    async def ensure_loaded(self) -> None:
        if not self.loaded:
            await self.load()

    def prepend(self, customer: CustomerRecord) -> None:
        # Trusted verbatim, no dedup and no re-fetch
        self.customers.insert(0, customer)

    def find(self, customer_id: Optional[str]) -> Optional[CustomerRecord]:
        if not customer_id:
            return None
        return next((c for c in self.customers if c.id == customer_id), None)


class CustomerForm:
    FIELDS = ("name", "email", "phone", "address")

    def __init__(self, client: BackendClient,
                 on_created: Optional[Callable[[CustomerRecord], None]] = None):
        self.client = client
        self.on_created = on_created
        self.name = ""
        self.email = ""
        self.phone = ""
        self.address = ""
        self.loading = False
        self.error = ""

    def update(self, **values: Optional[str]) -> None:
        for key in self.FIELDS:
            if key in values:
                setattr(self, key, values[key] or "")

    def clear(self) -> None:
        self.update(name="", email="", phone="", address="")

    async def submit(self) -> Optional[CustomerRecord]:
        """
        Create the customer. On failure the message is kept in ``error`` and
        the fields stay populated for correction.
        """
        if self.loading:
            return None
        if not self.name.strip() or not self.email.strip():
            self.error = "Name and email are required"
            return None

        self.loading = True
        self.error = ""
        try:
            created = await self.client.create_customer(self.name, self.email, self.phone, self.address)
        except BackendError as exc:
            self.error = exc.message
            return None
        finally:
            self.loading = False

        if self.on_created:
            self.on_created(created)
        self.clear()
        return created


@dataclass(frozen=True)
class OrderItemDraft:
    name: str = ""
    quantity: Decimal = Decimal("1")
    unit_price: Decimal = Decimal("0")
    discount_percent: Decimal = Decimal("0")


class OrderBuilder:
    """Draft of a new order plus its submission"""

    def __init__(self, client: BackendClient, directory: CustomerDirectory,
                 on_created: Optional[Callable[[OrderRecord], None]] = None):
        self.client = client
        self.directory = directory
        self.on_created = on_created
        self.selected: Optional[CustomerRecord] = None
        self.items: List[OrderItemDraft] = []
        self.order_discount_percent = Decimal("0")
        self.status = OrderStatus.PENDING.value
        self.creating = False
        self.error = ""

    @property
    def can_create(self) -> bool:
        return self.selected is not None and not self.creating

    def select_customer(self, customer_id: Optional[str]) -> None:
        self.selected = self.directory.find(customer_id)

    def add_item(self) -> None:
        self.items = [*self.items, OrderItemDraft()]

    def update_item(self, index: int, item: OrderItemDraft) -> None:
        self.items = [item if i == index else current for i, current in enumerate(self.items)]

    def remove_item(self, index: int) -> None:
        self.items = [current for i, current in enumerate(self.items) if i != index]

    def apply(self, submission: DraftSubmission) -> None:
        """Copy the submitted field values into the draft"""
        if submission.customer_id is not None:
            self.select_customer(submission.customer_id)
        if submission.status is not None:
            self.status = submission.status
        if submission.order_discount_percent is not None:
            self.order_discount_percent = submission.order_discount_percent
        for index, fields in submission.items.items():
            if index < len(self.items):
                self.update_item(index, replace(
                    self.items[index],
                    name=fields.name,
                    quantity=fields.quantity,
                    unit_price=fields.unit_price,
                    discount_percent=fields.discount_percent,
                ))

    def preview(self) -> OrderTotals:
        return compute_order_totals(self.items, self.order_discount_percent)

    def reset(self) -> None:
        self.items = []
        self.order_discount_percent = Decimal("0")
        self.status = OrderStatus.PENDING.value

    async def create(self) -> Optional[OrderRecord]:
        """
        Submit the whole draft in one request.

        The draft is reset only when the backend confirms the order; on
        failure it is kept and the message lands in ``error``.
        """
        if not self.can_create:
            return None

        self.creating = True
        self.error = ""
        try:
            order = await self.client.create_order(
                customer_id=self.selected.id,
                status=self.status,
                order_discount_percent=self.order_discount_percent,
                items=self.items,
            )
        except BackendError as exc:
            self.error = exc.message
            logger.warning(f"Order creation failed: {exc.message}")
            return None
        finally:
            self.creating = False

        logger.info(f"Order created: {order.id}")
        if self.on_created:
            self.on_created(order)
        self.reset()
        return order


class OrdersListing:
    """Orders as of the last refresh; every refresh replaces the whole list"""

    def __init__(self, client: BackendClient):
        self.client = client
        self.orders: List[OrderRecord] = []
        self.loading = True
        self.error = ""
        self._synced_key: Optional[int] = None

    async def load(self) -> None:
        self.loading = True
        self.error = ""
        try:
            self.orders = await self.client.list_orders()
        except BackendError as exc:
            self.error = exc.message
            logger.warning(f"Order list load failed: {exc.message}")
        finally:
            self.loading = False

    async def sync(self, refresh_key: int) -> None:
        """Reload on first mount and whenever the refresh signal changes"""
        if refresh_key == self._synced_key:
            return
        self._synced_key = refresh_key
        await self.load()


class Console:
    """All view state of one browser session"""

    def __init__(self, client: BackendClient):
        self.refresh_key = 0
        self.directory = CustomerDirectory(client)
        self.customer_form = CustomerForm(client, on_created=self.directory.prepend)
        self.builder = OrderBuilder(client, self.directory, on_created=self._order_created)
        self.listing = OrdersListing(client)

    async def mount(self) -> None:
        await self.directory.ensure_loaded()
        await self.listing.sync(self.refresh_key)

    def request_refresh(self) -> None:
        self.refresh_key += 1

    def _order_created(self, order: OrderRecord) -> None:
        self.request_refresh()

"""
HTTP client for the customers/orders API.

Every call opens its own ``httpx.AsyncClient`` and is never retried. Failures
are raised as one of three ``BackendError`` subclasses so views can show a
message inline.
"""

from decimal import Decimal
from typing import Any, Iterable, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from services.console.application.schemas import CustomerRecord, OrderRecord
from shared.core.logging_config import get_logger
from shared.core.pricing import to_decimal

logger = get_logger(__name__)

Record = TypeVar("Record", bound=BaseModel)

GENERIC_FAILURE = "Failed"


class BackendError(Exception):
    """Base class for failed backend calls; ``message`` is user facing"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BackendUnavailableError(BackendError):
    """The request never got an HTTP answer (DNS, refused, timeout...)"""


class BackendRejectedError(BackendError):
    """The backend answered with a non-2xx status"""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(BackendError):
    """The backend answered 2xx with a body of the wrong shape"""


def error_detail(response: httpx.Response) -> str:
    """
    Extract the ``detail`` message of an error response.

    FastAPI validation errors carry a list of ``{"msg": ...}`` entries; those
    messages are joined. Anything unreadable falls back to a generic message.
    """
    try:
        body = response.json()
    except ValueError:
        return GENERIC_FAILURE

    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str) and detail:
        return detail
    if isinstance(detail, list):
        messages = [
            entry.get("msg") for entry in detail
            if isinstance(entry, dict) and entry.get("msg")
        ]
        if messages:
            return "; ".join(messages)
    return GENERIC_FAILURE


def json_number(value: Any):
    """Decimal -> int when integral, float otherwise, for JSON bodies"""
    number = to_decimal(value)
    if number == number.to_integral_value():
        return int(number)
    return float(number)


class BackendClient:
    def __init__(self, base_url: str, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def _request(self, method: str, path: str, json: Optional[dict] = None) -> Any:
        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout,
                                         transport=self.transport) as client:
                response = await client.request(method, path, json=json)
        except httpx.RequestError as exc:
            logger.warning(f"Backend unreachable: {method} {path}: {exc!r}")
            raise BackendUnavailableError(f"Could not reach the server ({exc.__class__.__name__})") from exc

        if not response.is_success:
            message = error_detail(response)
            logger.warning(
                f"Backend rejected {method} {path}",
                extra={'extra_fields': {'status_code': response.status_code, 'detail': message}}
            )
            raise BackendRejectedError(response.status_code, message)

        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError("Unexpected response from the server") from exc

    @staticmethod
    def _parse(model: Type[Record], data: Any) -> Record:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.error(f"Malformed {model.__name__} from backend: {exc}")
            raise MalformedResponseError("Unexpected response from the server") from exc

    @staticmethod
    def _parse_list(model: Type[Record], data: Any) -> list:
        try:
            return TypeAdapter(list[model]).validate_python(data)
        except ValidationError as exc:
            logger.error(f"Malformed {model.__name__} list from backend: {exc}")
            raise MalformedResponseError("Unexpected response from the server") from exc

    async def list_customers(self) -> list[CustomerRecord]:
        return self._parse_list(CustomerRecord, await self._request("GET", "/customers"))

    async def create_customer(self, name: str, email: str, phone: str = "", address: str = "") -> CustomerRecord:
        body = {"name": name, "email": email, "phone": phone, "address": address}
        return self._parse(CustomerRecord, await self._request("POST", "/customers", json=body))

    async def list_orders(self) -> list[OrderRecord]:
        return self._parse_list(OrderRecord, await self._request("GET", "/orders"))

    async def create_order(self, customer_id: str, status: str, order_discount_percent: Decimal,
                           items: Iterable[Any]) -> OrderRecord:
        body = {
            "customer_id": customer_id,
            "status": status,
            "order_discount_percent": json_number(order_discount_percent),
            "items": [
                {
                    "name": item.name,
                    "quantity": json_number(item.quantity),
                    "unit_price": json_number(item.unit_price),
                    "discount_percent": json_number(item.discount_percent),
                }
                for item in items
            ],
        }
        return self._parse(OrderRecord, await self._request("POST", "/orders", json=body))

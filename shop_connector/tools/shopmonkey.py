"""
Shopmonkey v3 REST adapter.

Implements ``ShopStore`` over HTTP with ``httpx``. Every response is a
``{"data": ...}`` envelope; errors carry a ``message`` that is kept for
diagnostics, except authorization failures, which are reported as a
generic misconfiguration so nothing about the credentials leaks.
"""

import logging
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from shop_connector.config import AppConfig, ShopmonkeyConfig, require_credentials
from shop_connector.errors import RemoteFailureError, ServiceMisconfiguredError
from shop_connector.schemas.appointment_schema import (
    AppointmentCreate,
    AppointmentQuery,
    AppointmentRecord,
    AppointmentUpdate,
)
from shop_connector.schemas.customer_schema import (
    CustomerCreate,
    CustomerRecord,
    VehicleCreate,
    VehicleRecord,
    WorkOrder,
)
from shop_connector.tools.store import INVOICED_ORDER_STATUS
from shop_connector.utils import to_iso_z

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

AUTH_FAILURE_STATUSES = frozenset({401, 403})


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text or "No specific message from API."


def _parse(model: type[ModelT], data: Any) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise RemoteFailureError(f"Unexpected {model.__name__} payload from Shopmonkey: {exc}") from exc


def _parse_list(model: type[ModelT], data: Any) -> list[ModelT]:
    return [_parse(model, item) for item in data or []]


def build_appointment_search(query: AppointmentQuery) -> dict[str, Any]:
    """Translate an ``AppointmentQuery`` into Shopmonkey's search body."""
    where: dict[str, Any] = {}
    if query.location_id:
        where["locationId"] = {"_eq": query.location_id}
    if query.customer_id:
        where["customerId"] = {"_eq": query.customer_id}
    start_filter: dict[str, str] = {}
    if query.start_from is not None:
        start_filter["gte"] = to_iso_z(query.start_from)
    if query.start_to is not None:
        start_filter["lte"] = to_iso_z(query.start_to)
    if start_filter:
        where["startDate"] = start_filter
    if query.exclude_status:
        where["status"] = {"_neq": query.exclude_status}
    return {"where": where, "limit": query.limit}


class ShopmonkeyStore:
    """Async Shopmonkey client. Use as an async context manager to close the pool."""

    def __init__(
        self,
        config: ShopmonkeyConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=config.timeout_sec,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: AppConfig) -> "ShopmonkeyStore":
        require_credentials(config)
        return cls(config.shopmonkey)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ShopmonkeyStore":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, json: Optional[Any] = None) -> Any:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.RequestError as exc:
            logger.error("Shopmonkey %s %s unreachable: %s", method, path, exc)
            raise RemoteFailureError(f"Shopmonkey is unreachable: {exc}") from exc

        if response.status_code in AUTH_FAILURE_STATUSES:
            logger.error("Shopmonkey rejected credentials (status %d) on %s %s",
                         response.status_code, method, path)
            raise ServiceMisconfiguredError(response.status_code)
        if response.is_error:
            message = _error_message(response)
            logger.error("Status: %d | Path: %s | API Message: %s", response.status_code, path, message)
            raise RemoteFailureError(message, response.status_code)

        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError:
            logger.error("Status: %d | Path: %s | Response is not JSON", response.status_code, path)
            raise RemoteFailureError(
                "Unexpected non-JSON response from Shopmonkey", response.status_code
            ) from None
        return body.get("data") if isinstance(body, dict) else body

    # ------------------------------------------------------------------ #
    # Appointments
    # ------------------------------------------------------------------ #

    async def search_appointments(self, query: AppointmentQuery) -> list[AppointmentRecord]:
        data = await self._request("POST", "/appointment/search", build_appointment_search(query))
        return _parse_list(AppointmentRecord, data)

    async def create_appointment(self, payload: AppointmentCreate) -> AppointmentRecord:
        data = await self._request(
            "POST", "/appointment", payload.model_dump(by_alias=True, mode="json")
        )
        return _parse(AppointmentRecord, data)

    async def update_appointment(self, appointment_id: str, payload: AppointmentUpdate) -> None:
        await self._request(
            "PUT",
            f"/appointment/{appointment_id}",
            payload.model_dump(by_alias=True, exclude_none=True, mode="json"),
        )

    async def delete_appointment(self, appointment_id: str) -> None:
        await self._request("DELETE", f"/appointment/{appointment_id}")

    # ------------------------------------------------------------------ #
    # Customers, vehicles, orders
    # ------------------------------------------------------------------ #

    async def search_customer_by_phone(self, phone: str) -> Optional[CustomerRecord]:
        data = await self._request(
            "POST", "/customer/phone_number/search", {"phoneNumbers": [{"number": phone}]}
        )
        customers = _parse_list(CustomerRecord, data)
        return customers[0] if customers else None

    async def create_customer(self, payload: CustomerCreate) -> CustomerRecord:
        data = await self._request(
            "POST", "/customer", payload.model_dump(by_alias=True, mode="json")
        )
        return _parse(CustomerRecord, data)

    async def list_vehicles_for_customer(self, customer_id: str) -> list[VehicleRecord]:
        data = await self._request("GET", f"/customer/{customer_id}/vehicle")
        return _parse_list(VehicleRecord, data)

    async def create_vehicle(self, payload: VehicleCreate) -> VehicleRecord:
        data = await self._request(
            "POST", "/vehicle", payload.model_dump(by_alias=True, exclude_none=True, mode="json")
        )
        return _parse(VehicleRecord, data)

    async def list_open_orders(self, customer_id: str) -> list[WorkOrder]:
        data = await self._request(
            "POST",
            "/order/search",
            {
                "where": {
                    "customerId": {"_eq": customer_id},
                    "status": {"_neq": INVOICED_ORDER_STATUS},
                }
            },
        )
        return _parse_list(WorkOrder, data)

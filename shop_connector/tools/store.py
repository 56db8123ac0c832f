"""
Remote store contract.

The connector owns no data: customers, vehicles, appointments, and work
orders all live in the shop-management backend. Every component talks to
it through this protocol, so the Shopmonkey HTTP adapter and the
in-memory store are interchangeable.
"""

from typing import Optional, Protocol

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

# Order status that closes a work order
INVOICED_ORDER_STATUS = "Invoice"


class ShopStore(Protocol):
    """Async operations the connector needs from the backend."""

    async def search_appointments(self, query: AppointmentQuery) -> list[AppointmentRecord]: ...

    async def create_appointment(self, payload: AppointmentCreate) -> AppointmentRecord: ...

    async def update_appointment(self, appointment_id: str, payload: AppointmentUpdate) -> None: ...

    async def delete_appointment(self, appointment_id: str) -> None: ...

    async def search_customer_by_phone(self, phone: str) -> Optional[CustomerRecord]: ...

    async def create_customer(self, payload: CustomerCreate) -> CustomerRecord: ...

    async def list_vehicles_for_customer(self, customer_id: str) -> list[VehicleRecord]: ...

    async def create_vehicle(self, payload: VehicleCreate) -> VehicleRecord: ...

    async def list_open_orders(self, customer_id: str) -> list[WorkOrder]: ...

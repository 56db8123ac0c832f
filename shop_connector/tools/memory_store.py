"""
In-memory shop store.

Implements the same contract as the Shopmonkey adapter without any
network, for tests and the offline console command. Each instance is an
isolated backend; nothing is shared at module level.
"""

import logging
import uuid
from typing import Optional

from shop_connector.errors import NotFoundError
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

logger = logging.getLogger(__name__)


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class InMemoryShopStore:
    """Dict-backed store. ``calls`` records every operation name, in order."""

    def __init__(self) -> None:
        self.appointments: dict[str, AppointmentRecord] = {}
        self.customers: dict[str, CustomerRecord] = {}
        self.vehicles: dict[str, VehicleRecord] = {}
        self.orders: dict[str, WorkOrder] = {}
        self.calls: list[str] = []

    # ------------------------------------------------------------------ #
    # Seeding helpers
    # ------------------------------------------------------------------ #

    def add_appointment(self, record: AppointmentRecord) -> AppointmentRecord:
        self.appointments[record.id] = record
        return record

    def add_customer(self, record: CustomerRecord) -> CustomerRecord:
        self.customers[record.id] = record
        return record

    def add_vehicle(self, record: VehicleRecord) -> VehicleRecord:
        self.vehicles[record.id] = record
        return record

    def add_order(self, order: WorkOrder) -> WorkOrder:
        self.orders[order.id] = order
        return order

    # ------------------------------------------------------------------ #
    # Appointments
    # ------------------------------------------------------------------ #

    async def search_appointments(self, query: AppointmentQuery) -> list[AppointmentRecord]:
        self.calls.append("search_appointments")
        matches = [
            appt for appt in self.appointments.values()
            if (query.location_id is None or appt.location_id == query.location_id)
            and (query.customer_id is None or appt.customer_id == query.customer_id)
            and (query.start_from is None or appt.start >= query.start_from)
            and (query.start_to is None or appt.start <= query.start_to)
            and (query.exclude_status is None or appt.status != query.exclude_status)
        ]
        matches.sort(key=lambda appt: appt.start)
        return matches[: query.limit]

    async def create_appointment(self, payload: AppointmentCreate) -> AppointmentRecord:
        self.calls.append("create_appointment")
        record = AppointmentRecord(
            id=_new_id("appt"),
            customer_id=payload.customer_id,
            vehicle_id=payload.vehicle_id,
            location_id=payload.location_id,
            title=payload.title,
            start=payload.start,
            end=payload.end,
        )
        self.appointments[record.id] = record
        logger.info("Appointment created: %s at %s", record.id, record.start.isoformat())
        return record

    async def update_appointment(self, appointment_id: str, payload: AppointmentUpdate) -> None:
        self.calls.append("update_appointment")
        existing = self.appointments.get(appointment_id)
        if existing is None:
            raise NotFoundError(f"Appointment {appointment_id} not found.")
        changes = payload.model_dump(exclude_none=True)
        self.appointments[appointment_id] = existing.model_copy(update=changes)

    async def delete_appointment(self, appointment_id: str) -> None:
        self.calls.append("delete_appointment")
        if self.appointments.pop(appointment_id, None) is None:
            raise NotFoundError(f"Appointment {appointment_id} not found.")

    # ------------------------------------------------------------------ #
    # Customers and vehicles
    # ------------------------------------------------------------------ #

    async def search_customer_by_phone(self, phone: str) -> Optional[CustomerRecord]:
        self.calls.append("search_customer_by_phone")
        for customer in self.customers.values():
            if any(p.number == phone for p in customer.phone_numbers):
                return customer
        return None

    async def create_customer(self, payload: CustomerCreate) -> CustomerRecord:
        self.calls.append("create_customer")
        record = CustomerRecord(
            id=_new_id("cust"),
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone_numbers=payload.phone_numbers,
        )
        self.customers[record.id] = record
        logger.info("New customer created: %s (%s)", payload.name, record.id)
        return record

    async def list_vehicles_for_customer(self, customer_id: str) -> list[VehicleRecord]:
        self.calls.append("list_vehicles_for_customer")
        return [v for v in self.vehicles.values() if v.customer_id == customer_id]

    async def create_vehicle(self, payload: VehicleCreate) -> VehicleRecord:
        self.calls.append("create_vehicle")
        record = VehicleRecord(
            id=_new_id("veh"),
            customer_id=payload.customer_id,
            make=payload.make,
            model=payload.model,
            year=payload.year,
        )
        self.vehicles[record.id] = record
        return record

    async def list_open_orders(self, customer_id: str) -> list[WorkOrder]:
        self.calls.append("list_open_orders")
        return [
            o for o in self.orders.values()
            if o.customer_id == customer_id and o.status != INVOICED_ORDER_STATUS
        ]

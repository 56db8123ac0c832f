"""Record builders shared by the test modules."""

import dataclasses
from datetime import datetime, timedelta, timezone
from typing import Optional

from shop_connector.config import ShopConfig
from shop_connector.schemas.appointment_schema import AppointmentRecord
from shop_connector.schemas.customer_schema import CustomerRecord, PhoneNumber, VehicleRecord

LOCATION_ID = "loc_test"
SHOP_TZ = "America/Los_Angeles"


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    """Aware UTC datetime shorthand."""
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def make_shop_config(**overrides) -> ShopConfig:
    """ShopConfig pinned to known values so env vars cannot leak into tests."""
    base = ShopConfig(
        location_id=LOCATION_ID,
        timezone=SHOP_TZ,
        appointment_duration_minutes=30,
        slot_step_minutes=30,
        business_days=(1, 2, 3, 4, 5),
        business_open="09:00",
        business_close="17:00",
        lead_time_days=(),
        lead_time_hours=24,
        conflict_window_hours=24,
        day_scan_hours=18,
        appointment_search_limit=100,
        locator_page_size=50,
        vehicle_match_mode="fields",
        cancel_strategy="delete",
        default_vehicle_size="LightDuty",
        appointment_color="blue",
    )
    return dataclasses.replace(base, **overrides)


def make_appointment(
    start: datetime,
    minutes: int = 30,
    appointment_id: str = "appt_1",
    status: str = "Scheduled",
    customer_id: Optional[str] = "cust_1",
    location_id: str = LOCATION_ID,
    title: str = "John D. / Toyota Camry / Oil change",
) -> AppointmentRecord:
    """Helper to create an AppointmentRecord."""
    return AppointmentRecord(
        id=appointment_id,
        customer_id=customer_id,
        vehicle_id="veh_1",
        location_id=location_id,
        title=title,
        start=start,
        end=start + timedelta(minutes=minutes),
        status=status,
    )


def make_customer(
    customer_id: str = "cust_1",
    phone: str = "+15551234567",
    first_name: str = "John",
    last_name: str = "Doe",
) -> CustomerRecord:
    return CustomerRecord(
        id=customer_id,
        first_name=first_name,
        last_name=last_name,
        phone_numbers=[PhoneNumber(number=phone, primary=True)],
    )


def make_vehicle(
    vehicle_id: str = "veh_1",
    customer_id: str = "cust_1",
    make: str = "Toyota",
    model: str = "Camry",
    year: Optional[int] = None,
) -> VehicleRecord:
    return VehicleRecord(id=vehicle_id, customer_id=customer_id, make=make, model=model, year=year)


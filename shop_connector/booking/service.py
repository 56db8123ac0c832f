"""
Booking service: the operations a voice or chat agent calls.

Each operation takes already-extracted primitives (phone string, ISO 8601
instants, free-text name/make/model), runs the lookup -> conflict check ->
mutation sequence against the remote store, and returns a result dict.
Failures come back as ``{"success": False, "error": <code>, "message": ...}``
rather than exceptions, so the caller can speak the message and, for
``conflict``, offer other times.

Input is validated before any remote call, and every mutating call is
preceded by the checks it depends on, so a failure at that point is a
genuine remote fault.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Optional, TypedDict

from shop_connector.booking.lifecycle import AppointmentLifecycle, AppointmentTrigger
from shop_connector.booking.locator import AppointmentLocator
from shop_connector.booking.resolver import UNKNOWN_FIRST_NAME, EntityResolver
from shop_connector.config import ShopConfig
from shop_connector.errors import (
    BookingError,
    InvalidInputError,
    NotFoundError,
    RemoteFailureError,
    SlotConflictError,
)
from shop_connector.logging_context import get_request_logger, request_scope
from shop_connector.schemas.appointment_schema import (
    AppointmentCreate,
    AppointmentInterval,
    AppointmentRecord,
    AppointmentStatus,
    AppointmentUpdate,
)
from shop_connector.schemas.customer_schema import CustomerRecord, VehicleRecord
from shop_connector.scheduling.overlap import OverlapChecker
from shop_connector.scheduling.slots import SlotGenerator
from shop_connector.tools.store import ShopStore
from shop_connector.utils import ensure_utc, parse_instant, to_iso_z

logger = get_request_logger(__name__)

SLOT_TAKEN_MESSAGE = "The requested time slot is already booked. Please choose a different time."


class ServiceResult(TypedDict, total=False):
    """Envelope shared by every operation. Extra keys depend on the operation."""

    success: bool
    message: str
    error: str
    status_code: Optional[int]


class SlotView(TypedDict):
    start: str
    end: str
    display: str


class AvailabilityResult(ServiceResult, total=False):
    date: str
    availableSlots: list[SlotView]


class BookingDetails(TypedDict):
    customer: str
    vehicle: str
    appointmentTime: str


class BookingResult(ServiceResult, total=False):
    appointmentId: str
    details: BookingDetails


def _missing_fields(fields: list[tuple[str, Optional[str]]]) -> list[str]:
    return [name for name, value in fields if not value or not str(value).strip()]


def build_appointment_title(customer: CustomerRecord, vehicle: VehicleRecord, reason: str) -> str:
    """``First L. / Make Model / Reason``, the format the shop's calendar uses."""
    initial = f"{customer.last_name.strip()[0]}." if customer.last_name and customer.last_name.strip() else ""
    who = " ".join(part for part in (customer.first_name or "", initial) if part) or UNKNOWN_FIRST_NAME
    return f"{who} / {vehicle.description} / {reason.strip()}"


class BookingService:
    """Availability, booking, and appointment management for one shop location."""

    def __init__(self, store: ShopStore, config: ShopConfig) -> None:
        self.config = config
        self.store = store
        self.slots = SlotGenerator.from_config(config)
        self.calendar = self.slots.calendar
        self.overlap = OverlapChecker(store, config)
        self.resolver = EntityResolver(store, config)
        self.locator = AppointmentLocator(store, config)

    # ------------------------------------------------------------------ #
    # Result handling
    # ------------------------------------------------------------------ #

    async def _run(self, operation: str, call: Callable[[], Awaitable[Any]]) -> Any:
        with request_scope():
            try:
                return await call()
            except BookingError as exc:
                return self._failure(operation, exc)

    @staticmethod
    def _failure(operation: str, exc: BookingError) -> ServiceResult:
        if isinstance(exc, RemoteFailureError):
            logger.error("%s failed: %s (status %s)", operation, exc.message, exc.status_code)
        elif isinstance(exc, SlotConflictError):
            logger.warning("%s rejected: slot occupied by appointment %s", operation, exc.conflicting_id)
        else:
            logger.info("%s: %s", operation, exc.message)

        result: ServiceResult = {"success": False, "error": exc.code, "message": exc.message}
        if isinstance(exc, RemoteFailureError):
            result["status_code"] = exc.status_code
        return result

    # ------------------------------------------------------------------ #
    # Customer lookup
    # ------------------------------------------------------------------ #

    async def fetch_customer_detail(self, phone: str) -> ServiceResult:
        """Identify a returning caller by phone number."""
        return await self._run("fetch_customer_detail", lambda: self._fetch_customer_detail(phone))

    async def _fetch_customer_detail(self, phone: str) -> ServiceResult:
        if _missing_fields([("phone", phone)]):
            raise InvalidInputError("Missing required field 'phone'.")
        logger.info("Looking up customer by phone")
        try:
            customer = await self.resolver.find_customer(phone)
        except RemoteFailureError as exc:
            # The backend validates the number itself and answers 400 for junk
            if exc.status_code == 400:
                raise NotFoundError("Customer not found (Invalid Phone Number).") from exc
            raise
        if customer is None:
            raise NotFoundError("Customer not found.")

        logger.info("Found customer %s", customer.id)
        return {
            "success": True,
            "message": f"Found customer {customer.full_name}.",
            "customerId": customer.id,
            "name": customer.full_name,
            "phone": phone,
        }

    # ------------------------------------------------------------------ #
    # Availability
    # ------------------------------------------------------------------ #

    async def check_availability(self, start_range: str, end_range: str) -> AvailabilityResult:
        """Open slots across an explicit UTC range (range mode)."""
        return await self._run(
            "check_availability", lambda: self._check_availability(start_range, end_range)
        )

    async def _check_availability(self, start_range: str, end_range: str) -> AvailabilityResult:
        start = parse_instant(start_range, "startRange")
        end = parse_instant(end_range, "endRange")
        if end <= start:
            raise InvalidInputError("'endRange' must be after 'startRange'.")

        existing = await self.overlap.busy_intervals(
            self.config.location_id, start, end, self.slots.duration
        )
        slots = self.slots.generate_range(start, end, existing)
        return {
            "success": True,
            "message": f"Found {len(slots)} available slots.",
            "availableSlots": [slot.to_dict() for slot in slots],
        }

    async def check_day_availability(
        self, reference: str, now: Optional[datetime] = None
    ) -> AvailabilityResult:
        """Open slots on the shop-local day containing ``reference`` (single-day mode)."""
        return await self._run(
            "check_day_availability", lambda: self._check_day_availability(reference, now)
        )

    async def _check_day_availability(
        self, reference: str, now: Optional[datetime]
    ) -> AvailabilityResult:
        instant = parse_instant(reference, "date")
        now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
        scan = self.slots.day_scan

        existing = await self.overlap.busy_intervals(
            self.config.location_id, instant - scan, instant + scan, self.slots.duration
        )
        slots = self.slots.generate_for_day(instant, existing, now)
        local_date = self.calendar.local_date(instant)
        day_label = f"{self.calendar.weekday_name(instant)}, {local_date:%B} {local_date.day}"

        if slots:
            message = f"Found {len(slots)} available slots on {day_label}."
        elif self.slots.policy.hours_for(self.calendar.to_shop_components(instant).weekday) is None:
            message = f"The shop is closed on {day_label}."
        else:
            message = f"No available slots on {day_label}."
        return {
            "success": True,
            "message": message,
            "date": local_date.isoformat(),
            "availableSlots": [slot.to_dict() for slot in slots],
        }

    # ------------------------------------------------------------------ #
    # Booking
    # ------------------------------------------------------------------ #

    async def book_appointment(
        self,
        name: str,
        phone: str,
        make: str,
        model: str,
        title: str,
        start_date: str,
        year: Optional[int] = None,
    ) -> BookingResult:
        """Book a fixed-length appointment, creating the customer and vehicle if new."""
        return await self._run(
            "book_appointment",
            lambda: self._book_appointment(name, phone, make, model, title, start_date, year),
        )

    async def _book_appointment(
        self,
        name: str,
        phone: str,
        make: str,
        model: str,
        title: str,
        start_date: str,
        year: Optional[int],
    ) -> BookingResult:
        missing = _missing_fields([
            ("phone", phone), ("make", make), ("model", model),
            ("title", title), ("startDate", start_date), ("name", name),
        ])
        if missing:
            raise InvalidInputError(f"Missing required fields: {', '.join(missing)}.")
        start = parse_instant(start_date, "startDate")
        interval = AppointmentInterval.from_start(start, self.config.appointment_duration_minutes)
        location_id = self.config.location_id

        logger.info("Checking availability for %s - %s", to_iso_z(interval.start), to_iso_z(interval.end))
        await self._ensure_free(interval, location_id)

        customer, customer_created = await self.resolver.resolve_customer(name, phone)
        vehicle, vehicle_created = await self.resolver.resolve_vehicle(customer.id, make, model, year)

        # Resolution took a few round trips; the slot may have been taken meanwhile
        await self._ensure_free(interval, location_id)
        appointment = await self.store.create_appointment(
            AppointmentCreate(
                customer_id=customer.id,
                vehicle_id=vehicle.id,
                location_id=location_id,
                title=build_appointment_title(customer, vehicle, title),
                start=interval.start,
                end=interval.end,
                color=self.config.appointment_color,
            )
        )

        local_time = self.calendar.format_instant(interval.start)
        message = (
            f"Success! Appointment confirmed for {name.strip()} with "
            f"{vehicle.description} on {local_time}."
        )
        logger.info("Booked appointment %s: %s", appointment.id, message)
        return {
            "success": True,
            "message": message,
            "appointmentId": appointment.id,
            "details": {
                "customer": "Created New" if customer_created else "Existing",
                "vehicle": "Created New" if vehicle_created else "Existing",
                "appointmentTime": local_time,
            },
        }

    async def _ensure_free(
        self,
        interval: AppointmentInterval,
        location_id: str,
        exclude_id: Optional[str] = None,
    ) -> None:
        conflict = await self.overlap.find_conflict(interval, location_id, exclude_id)
        if conflict is not None:
            raise SlotConflictError(SLOT_TAKEN_MESSAGE, conflict.id)

    # ------------------------------------------------------------------ #
    # Existing appointments
    # ------------------------------------------------------------------ #

    async def _locate(
        self, phone: str, start_date: str, field_name: str = "startDate"
    ) -> AppointmentRecord:
        if _missing_fields([("phone", phone)]):
            raise InvalidInputError("Missing required field 'phone'.")
        target = parse_instant(start_date, field_name)

        customer = await self.resolver.find_customer(phone)
        if customer is None:
            raise NotFoundError("Customer not found.")
        appointment = await self.locator.find_appointment_at(customer.id, target)
        if appointment is None:
            raise NotFoundError(
                f"No appointment found on {self.calendar.format_instant(target)}."
            )
        return appointment

    def _describe(self, appointment: AppointmentRecord) -> dict[str, Any]:
        return {
            "appointmentId": appointment.id,
            "title": appointment.title,
            "start": to_iso_z(appointment.start),
            "appointmentTime": self.calendar.format_instant(appointment.start),
            "status": appointment.status,
        }

    async def verify_appointment(self, phone: str, start_date: str) -> ServiceResult:
        """Confirm that the caller has an appointment starting at ``start_date``."""
        return await self._run("verify_appointment", lambda: self._verify_appointment(phone, start_date))

    async def _verify_appointment(self, phone: str, start_date: str) -> ServiceResult:
        appointment = await self._locate(phone, start_date)
        details = self._describe(appointment)
        return {
            "success": True,
            "message": f"Your appointment is confirmed for {details['appointmentTime']}.",
            **details,
        }

    async def cancel_appointment(self, phone: str, start_date: str) -> ServiceResult:
        """Cancel the caller's appointment starting at ``start_date``."""
        return await self._run("cancel_appointment", lambda: self._cancel_appointment(phone, start_date))

    async def _cancel_appointment(self, phone: str, start_date: str) -> ServiceResult:
        appointment = await self._locate(phone, start_date)
        AppointmentLifecycle(appointment.status).transition(AppointmentTrigger.CANCEL)

        if self.config.cancel_strategy == "mark_canceled":
            await self.store.update_appointment(
                appointment.id, AppointmentUpdate(status=AppointmentStatus.CANCELED.value)
            )
        else:
            await self.store.delete_appointment(appointment.id)

        local_time = self.calendar.format_instant(appointment.start)
        logger.info("Canceled appointment %s (%s)", appointment.id, self.config.cancel_strategy)
        return {
            "success": True,
            "message": f"Your appointment on {local_time} has been canceled.",
            "appointmentId": appointment.id,
        }

    async def reschedule_appointment(
        self, phone: str, current_start: str, new_start: str
    ) -> ServiceResult:
        """Move the caller's appointment at ``current_start`` to ``new_start``."""
        return await self._run(
            "reschedule_appointment",
            lambda: self._reschedule_appointment(phone, current_start, new_start),
        )

    async def _reschedule_appointment(
        self, phone: str, current_start: str, new_start: str
    ) -> ServiceResult:
        new_time = parse_instant(new_start, "newStartDate")
        appointment = await self._locate(phone, current_start)
        status = AppointmentLifecycle(appointment.status).transition(AppointmentTrigger.RESCHEDULE)

        if appointment.end > appointment.start:
            duration = appointment.end - appointment.start
        else:
            duration = timedelta(minutes=self.config.appointment_duration_minutes)
        interval = AppointmentInterval(new_time, new_time + duration)
        location_id = appointment.location_id or self.config.location_id

        await self._ensure_free(interval, location_id, exclude_id=appointment.id)
        await self.store.update_appointment(
            appointment.id, AppointmentUpdate(start=interval.start, end=interval.end)
        )

        local_time = self.calendar.format_instant(interval.start)
        logger.info("Rescheduled appointment %s to %s", appointment.id, to_iso_z(interval.start))
        return {
            "success": True,
            "message": f"Your appointment has been moved to {local_time}.",
            "appointmentId": appointment.id,
            "start": to_iso_z(interval.start),
            "appointmentTime": local_time,
            "status": status.value,
        }

    # ------------------------------------------------------------------ #
    # Customer overview
    # ------------------------------------------------------------------ #

    async def customer_overview(self, phone: str, now: Optional[datetime] = None) -> ServiceResult:
        """Open work orders and upcoming appointments for a returning caller."""
        return await self._run("customer_overview", lambda: self._customer_overview(phone, now))

    async def _customer_overview(self, phone: str, now: Optional[datetime]) -> ServiceResult:
        if _missing_fields([("phone", phone)]):
            raise InvalidInputError("Missing required field 'phone'.")
        now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)

        customer = await self.resolver.find_customer(phone)
        if customer is None:
            raise NotFoundError("Customer not found.")

        orders, upcoming = await asyncio.gather(
            self.store.list_open_orders(customer.id),
            self.locator.upcoming_for_customer(customer.id, now),
            return_exceptions=True,
        )
        for outcome in (orders, upcoming):
            if isinstance(outcome, BaseException):
                raise outcome
        return {
            "success": True,
            "message": (
                f"{customer.full_name} has {len(orders)} open work orders "
                f"and {len(upcoming)} upcoming appointments."
            ),
            "customerId": customer.id,
            "name": customer.full_name,
            "openOrders": [
                {"id": o.id, "number": o.number, "name": o.name, "status": o.status}
                for o in orders
            ],
            "upcomingAppointments": [self._describe(appt) for appt in upcoming],
        }

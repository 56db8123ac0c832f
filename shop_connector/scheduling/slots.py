"""
Slot Generation

Produces bookable start times from the business-hours policy and the
intervals already taken. Two modes:

- Range mode: step through an explicit UTC ``[start, end)`` range.
- Single-day mode: take one reference instant, find the shop-local date
  it falls on, and scan a wide UTC window around it on the step grid,
  keeping only candidates that land on that local date. The wide window
  is what makes this correct when the shop's day straddles a UTC midnight.

Slots come out in chronological order, one per step at most.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from shop_connector.config import ShopConfig
from shop_connector.schemas.appointment_schema import AppointmentInterval, intervals_overlap
from shop_connector.scheduling.shop_calendar import BusinessHoursPolicy, ShopCalendar
from shop_connector.utils import ensure_utc, to_iso_z

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Slot:
    """A bookable start instant. ``display`` is derived from ``start``, never stored."""

    start: datetime
    duration: timedelta
    calendar: ShopCalendar = field(compare=False, repr=False)

    @property
    def end(self) -> datetime:
        return self.start + self.duration

    @property
    def display(self) -> str:
        return self.calendar.format_instant(self.start)

    def to_dict(self) -> dict[str, str]:
        return {"start": to_iso_z(self.start), "end": to_iso_z(self.end), "display": self.display}


def is_slot_free(
    start: datetime, duration: timedelta, existing: Iterable[AppointmentInterval]
) -> bool:
    """True if ``[start, start + duration)`` overlaps none of ``existing``."""
    end = start + duration
    return not any(intervals_overlap(start, end, busy.start, busy.end) for busy in existing)


class SlotGenerator:
    """Generates open slots for a range or a single shop-local day."""

    def __init__(
        self,
        calendar: ShopCalendar,
        policy: BusinessHoursPolicy,
        step_minutes: int = 30,
        duration_minutes: int = 30,
        day_scan_hours: int = 18,
    ) -> None:
        self.calendar = calendar
        self.policy = policy
        self.step = timedelta(minutes=step_minutes)
        self.duration = timedelta(minutes=duration_minutes)
        self.day_scan = timedelta(hours=day_scan_hours)

    @classmethod
    def from_config(cls, config: ShopConfig) -> "SlotGenerator":
        return cls(
            calendar=ShopCalendar(config.timezone),
            policy=BusinessHoursPolicy.from_config(config),
            step_minutes=config.slot_step_minutes,
            duration_minutes=config.appointment_duration_minutes,
            day_scan_hours=config.day_scan_hours,
        )

    def _duration(self, duration_minutes: Optional[int]) -> timedelta:
        if duration_minutes is None:
            return self.duration
        return timedelta(minutes=duration_minutes)

    def generate_range(
        self,
        start_range: datetime,
        end_range: datetime,
        existing: list[AppointmentInterval],
        duration_minutes: Optional[int] = None,
    ) -> list[Slot]:
        """Every open, unbooked step in ``[start_range, end_range)``."""
        duration = self._duration(duration_minutes)
        current = ensure_utc(start_range)
        end = ensure_utc(end_range)
        slots: list[Slot] = []

        while current < end:
            components = self.calendar.to_shop_components(current)
            if self.calendar.is_open_at(components, self.policy) and is_slot_free(
                current, duration, existing
            ):
                slots.append(Slot(current, duration, self.calendar))
            current += self.step

        logger.debug(
            "Range %s - %s produced %d slots", to_iso_z(start_range), to_iso_z(end_range), len(slots)
        )
        return slots

    def generate_for_day(
        self,
        reference: datetime,
        existing: list[AppointmentInterval],
        now: datetime,
        duration_minutes: Optional[int] = None,
    ) -> list[Slot]:
        """Open slots on the shop-local date that ``reference`` falls on.

        Args:
            reference: Any instant on the wanted day.
            existing: Busy intervals to avoid.
            now: Current time, used by the weekday's lead-time rule.
            duration_minutes: Overrides the configured appointment length.
        """
        duration = self._duration(duration_minutes)
        reference = ensure_utc(reference)
        now = ensure_utc(now)
        target_date = self.calendar.local_date(reference)

        window_start = reference - self.day_scan
        window_end = reference + self.day_scan
        current = EPOCH + ((window_start - EPOCH) // self.step) * self.step
        slots: list[Slot] = []

        while current < window_end:
            components = self.calendar.to_shop_components(current)
            if components.date == target_date and self._passes_day_rules(
                current, components.weekday, components.minute_of_day, now
            ) and is_slot_free(current, duration, existing):
                slots.append(Slot(current, duration, self.calendar))
            current += self.step

        if not slots and self.policy.hours_for(self.calendar.to_shop_components(reference).weekday) is None:
            logger.debug("Shop is closed on %s", target_date.isoformat())
        return slots

    def _passes_day_rules(
        self, candidate: datetime, weekday: int, minute_of_day: int, now: datetime
    ) -> bool:
        day_hours = self.policy.hours_for(weekday)
        if day_hours is None or not day_hours.contains(minute_of_day):
            return False
        if day_hours.min_notice is not None and candidate - now < day_hours.min_notice:
            return False
        return True

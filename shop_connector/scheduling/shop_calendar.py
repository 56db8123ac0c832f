"""
Shop-local calendar and business-hours policy.

All instants are UTC; the shop timezone is applied here and nowhere else.
Conversion goes through the IANA database (``zoneinfo``) rather than a
fixed offset, so weekday and hour stay correct across DST changes.

Weekdays use 0=Sunday .. 6=Saturday throughout the connector.

Usage:
    calendar = ShopCalendar("America/Los_Angeles")
    policy = BusinessHoursPolicy.weekdays(open_minute=9 * 60, close_minute=17 * 60)
    components = calendar.to_shop_components(instant)
    if calendar.is_open_at(components, policy):
        ...
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Mapping, NamedTuple, Optional
from zoneinfo import ZoneInfo

from shop_connector.config import ShopConfig
from shop_connector.utils import ensure_utc

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


class ShopTimeComponents(NamedTuple):
    """An instant as seen on the shop's wall clock."""

    year: int
    month: int
    day: int
    weekday: int
    hour: int
    minute: int

    @property
    def minute_of_day(self) -> int:
        return self.hour * 60 + self.minute

    @property
    def date(self) -> date:
        return date(self.year, self.month, self.day)


@dataclass(frozen=True)
class DayHours:
    """Opening hours for one weekday, as minutes after local midnight.

    ``min_notice`` is the lead-time rule: slots on this weekday must start
    at least that long after "now".
    """

    open_minute: int
    close_minute: int
    min_notice: Optional[timedelta] = None

    def contains(self, minute_of_day: int) -> bool:
        return self.open_minute <= minute_of_day < self.close_minute


@dataclass(frozen=True)
class BusinessHoursPolicy:
    """Weekday → opening hours. A weekday without an entry is closed."""

    hours: Mapping[int, DayHours] = field(default_factory=dict)

    @classmethod
    def weekdays(
        cls,
        open_minute: int,
        close_minute: int,
        days: tuple[int, ...] = (1, 2, 3, 4, 5),
        lead_time_days: tuple[int, ...] = (),
        min_notice: Optional[timedelta] = None,
    ) -> "BusinessHoursPolicy":
        """Same hours on every listed day; ``min_notice`` applies to ``lead_time_days``."""
        return cls(
            hours={
                day: DayHours(
                    open_minute,
                    close_minute,
                    min_notice if day in lead_time_days else None,
                )
                for day in days
            }
        )

    @classmethod
    def from_config(cls, config: ShopConfig) -> "BusinessHoursPolicy":
        return cls.weekdays(
            open_minute=config.open_minute,
            close_minute=config.close_minute,
            days=config.business_days,
            lead_time_days=config.lead_time_days,
            min_notice=timedelta(hours=config.lead_time_hours),
        )

    def hours_for(self, weekday: int) -> Optional[DayHours]:
        return self.hours.get(weekday)

    def is_open(self, components: ShopTimeComponents) -> bool:
        day_hours = self.hours_for(components.weekday)
        return day_hours is not None and day_hours.contains(components.minute_of_day)


class ShopCalendar:
    """Converts UTC instants to the shop's local calendar."""

    def __init__(self, timezone_name: str) -> None:
        self.timezone_name = timezone_name
        self.zone = ZoneInfo(timezone_name)

    def to_local(self, instant: datetime) -> datetime:
        return ensure_utc(instant).astimezone(self.zone)

    def to_shop_components(self, instant: datetime) -> ShopTimeComponents:
        local = self.to_local(instant)
        return ShopTimeComponents(
            year=local.year,
            month=local.month,
            day=local.day,
            # datetime.weekday() is Monday=0; shift so Sunday=0
            weekday=(local.weekday() + 1) % 7,
            hour=local.hour,
            minute=local.minute,
        )

    def local_date(self, instant: datetime) -> date:
        return self.to_local(instant).date()

    def is_open_at(self, components: ShopTimeComponents, policy: BusinessHoursPolicy) -> bool:
        return policy.is_open(components)

    def format_instant(self, instant: datetime) -> str:
        """Render an instant for a caller, e.g. ``November 25, 2025 at 2:00 AM``."""
        local = self.to_local(instant)
        hour = local.hour % 12 or 12
        meridiem = "AM" if local.hour < 12 else "PM"
        return f"{local:%B} {local.day}, {local.year} at {hour}:{local.minute:02d} {meridiem}"

    def weekday_name(self, instant: datetime) -> str:
        return WEEKDAY_NAMES[self.to_shop_components(instant).weekday]

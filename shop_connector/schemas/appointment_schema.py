"""Appointment records, write payloads, and search filters."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shop_connector.errors import InvalidInputError
from shop_connector.utils import ensure_utc


class AppointmentStatus(str, Enum):
    """Statuses the connector distinguishes. Anything else is treated as active."""

    SCHEDULED = "Scheduled"
    CONFIRMED = "Confirmed"
    CANCELED = "Canceled"


class AppointmentRecord(BaseModel):
    """Projection of a remote appointment."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    customer_id: Optional[str] = Field(None, alias="customerId")
    vehicle_id: Optional[str] = Field(None, alias="vehicleId")
    location_id: Optional[str] = Field(None, alias="locationId")
    title: str = Field("", alias="name")
    start: datetime = Field(alias="startDate")
    end: datetime = Field(alias="endDate")
    status: str = AppointmentStatus.SCHEDULED.value

    @field_validator("start", "end")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value: Optional[str]) -> str:
        return value or AppointmentStatus.SCHEDULED.value

    @property
    def is_active(self) -> bool:
        return self.status != AppointmentStatus.CANCELED.value

    @property
    def interval(self) -> "AppointmentInterval":
        return AppointmentInterval(self.start, self.end)


class AppointmentCreate(BaseModel):
    """Fields sent to the remote store when booking."""

    model_config = ConfigDict(populate_by_name=True)

    customer_id: str = Field(alias="customerId")
    vehicle_id: str = Field(alias="vehicleId")
    location_id: str = Field(alias="locationId")
    title: str = Field(alias="name")
    start: datetime = Field(alias="startDate")
    end: datetime = Field(alias="endDate")
    color: str = "blue"


class AppointmentUpdate(BaseModel):
    """Partial update: a reschedule sets start/end, a soft cancel sets status."""

    model_config = ConfigDict(populate_by_name=True)

    start: Optional[datetime] = Field(None, alias="startDate")
    end: Optional[datetime] = Field(None, alias="endDate")
    status: Optional[str] = None


@dataclass(frozen=True)
class AppointmentInterval:
    """A half-open ``[start, end)`` span of time."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise InvalidInputError(
                f"Appointment must end after it starts ({self.start.isoformat()} - {self.end.isoformat()})."
            )

    @classmethod
    def from_start(cls, start: datetime, duration_minutes: int) -> "AppointmentInterval":
        return cls(start, start + timedelta(minutes=duration_minutes))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "AppointmentInterval") -> bool:
        return intervals_overlap(self.start, self.end, other.start, other.end)


def intervals_overlap(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    """Half-open overlap test: back-to-back intervals do not overlap."""
    return start_a < end_b and end_a > start_b


@dataclass(frozen=True)
class AppointmentQuery:
    """Filter for ``ShopStore.search_appointments``.

    ``start_from``/``start_to`` bound the appointment *start*, both inclusive.
    """

    location_id: Optional[str] = None
    customer_id: Optional[str] = None
    start_from: Optional[datetime] = None
    start_to: Optional[datetime] = None
    exclude_status: Optional[str] = AppointmentStatus.CANCELED.value
    limit: int = 100

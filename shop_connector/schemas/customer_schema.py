"""Customer, vehicle, and work order data models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PhoneNumber(BaseModel):
    """One phone number on a customer record."""

    number: str
    primary: bool = False


class CustomerRecord(BaseModel):
    """Customer record from the shop-management backend."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    phone_numbers: list[PhoneNumber] = Field(default_factory=list, alias="phoneNumbers")

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class CustomerCreate(BaseModel):
    """Payload for creating a customer."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field("", alias="lastName")
    phone_numbers: list[PhoneNumber] = Field(alias="phoneNumbers")
    customer_type: str = Field("Customer", alias="customerType")
    origin_location_id: str = Field(alias="originLocationId")
    location_ids: list[str] = Field(alias="locationIds")


class VehicleRecord(BaseModel):
    """A customer's vehicle."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    customer_id: Optional[str] = Field(None, alias="customerId")
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None

    @property
    def description(self) -> str:
        return f"{self.make or ''} {self.model or ''}".strip()


class VehicleCreate(BaseModel):
    """Payload for creating a vehicle."""

    model_config = ConfigDict(populate_by_name=True)

    customer_id: str = Field(alias="customerId")
    make: str
    model: str
    year: Optional[int] = None
    size: str = "LightDuty"


class WorkOrder(BaseModel):
    """Read-only view of a repair order."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    customer_id: Optional[str] = Field(None, alias="customerId")
    number: Optional[int] = None
    name: str = ""
    status: str = ""

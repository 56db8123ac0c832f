"""
Find-or-create resolution for customers and vehicles.

Customers are keyed by their E.164 phone number, vehicles by a fuzzy
(make, model) match within one customer's garage. Resolution is
idempotent: calling it again with the same inputs returns the record the
first call created.

Known limitation: find-then-create is not atomic. Two requests racing on
the same new phone number can both miss the lookup and create two
customers. The backend would need a unique constraint on phone numbers to
close that gap; the connector adds no client-side locking.
"""

import logging
from typing import Optional

from shop_connector.config import ShopConfig
from shop_connector.matching import is_fuzzy_match
from shop_connector.schemas.customer_schema import (
    CustomerCreate,
    CustomerRecord,
    PhoneNumber,
    VehicleCreate,
    VehicleRecord,
)
from shop_connector.tools.store import ShopStore
from shop_connector.utils import normalize_phone

logger = logging.getLogger(__name__)

# First name used when the caller gave nothing usable
UNKNOWN_FIRST_NAME = "N/A"


def split_name(name: str) -> tuple[str, str]:
    """First token is the first name, everything after it the last name.

    Examples:
        >>> split_name("Mary Jane Watson")
        ('Mary', 'Jane Watson')
        >>> split_name("Cher")
        ('Cher', '')
    """
    parts = name.strip().split(None, 1)
    if not parts:
        return UNKNOWN_FIRST_NAME, ""
    return parts[0], parts[1].strip() if len(parts) > 1 else ""


class EntityResolver:
    """Resolves inbound customer and vehicle details to backend records."""

    def __init__(self, store: ShopStore, config: ShopConfig) -> None:
        self._store = store
        self._location_id = config.location_id
        self._match_mode = config.vehicle_match_mode
        self._vehicle_size = config.default_vehicle_size

    async def find_customer(self, phone: str) -> Optional[CustomerRecord]:
        """Look up a customer by phone. Returns None if not found."""
        return await self._store.search_customer_by_phone(normalize_phone(phone))

    async def resolve_customer(self, name: str, phone: str) -> tuple[CustomerRecord, bool]:
        """Return ``(customer, was_created)`` for this phone number."""
        e164 = normalize_phone(phone)
        existing = await self._store.search_customer_by_phone(e164)
        if existing is not None:
            logger.info("Found existing customer: %s", existing.id)
            return existing, False

        first_name, last_name = split_name(name)
        logger.info("Creating new customer for %s", e164)
        created = await self._store.create_customer(
            CustomerCreate(
                name=name.strip(),
                first_name=first_name,
                last_name=last_name,
                phone_numbers=[PhoneNumber(number=e164, primary=True)],
                origin_location_id=self._location_id,
                location_ids=[self._location_id],
            )
        )
        return created, True

    async def resolve_vehicle(
        self,
        customer_id: str,
        make: str,
        model: str,
        year: Optional[int] = None,
    ) -> tuple[VehicleRecord, bool]:
        """Return ``(vehicle, was_created)`` for this customer's make/model."""
        vehicles = await self._store.list_vehicles_for_customer(customer_id)
        for vehicle in vehicles:
            if self.vehicle_matches(vehicle, make, model, year):
                logger.info(
                    "Found existing vehicle (fuzzy match): %s - %s", vehicle.id, vehicle.description
                )
                return vehicle, False

        logger.info("Creating new vehicle for customer %s", customer_id)
        created = await self._store.create_vehicle(
            VehicleCreate(
                customer_id=customer_id,
                make=make.strip(),
                model=model.strip(),
                year=year,
                size=self._vehicle_size,
            )
        )
        return created, True

    def vehicle_matches(
        self, vehicle: VehicleRecord, make: str, model: str, year: Optional[int] = None
    ) -> bool:
        if year is not None and vehicle.year is not None and vehicle.year != year:
            return False
        if self._match_mode == "combined":
            return is_fuzzy_match(vehicle.description, f"{make.strip()} {model.strip()}")
        return is_fuzzy_match(vehicle.make, make) and is_fuzzy_match(vehicle.model, model)

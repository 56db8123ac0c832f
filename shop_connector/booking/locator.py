"""Finds a customer's appointments by exact start time."""

import logging
from datetime import datetime
from typing import Optional

from shop_connector.config import ShopConfig
from shop_connector.schemas.appointment_schema import AppointmentQuery, AppointmentRecord
from shop_connector.tools.store import ShopStore
from shop_connector.utils import ensure_utc

logger = logging.getLogger(__name__)


class AppointmentLocator:
    """Resolves "my appointment at 10am on the 25th" to a record."""

    def __init__(self, store: ShopStore, config: ShopConfig) -> None:
        self._store = store
        self._page_size = config.locator_page_size

    async def find_appointment_at(
        self, customer_id: str, target: datetime
    ) -> Optional[AppointmentRecord]:
        """The customer's active appointment starting exactly at ``target``.

        There is no tolerance window: 10:00 does not match an appointment
        at 10:15. Returns None when nothing starts at that instant.
        """
        target = ensure_utc(target)
        records = await self._store.search_appointments(
            AppointmentQuery(customer_id=customer_id, limit=self._page_size)
        )
        for record in records:
            if record.is_active and record.start == target:
                return record
        logger.debug("No appointment for customer %s at %s", customer_id, target.isoformat())
        return None

    async def upcoming_for_customer(
        self, customer_id: str, now: datetime
    ) -> list[AppointmentRecord]:
        """Active appointments starting at or after ``now``, soonest first."""
        now = ensure_utc(now)
        records = await self._store.search_appointments(
            AppointmentQuery(customer_id=customer_id, start_from=now, limit=self._page_size)
        )
        upcoming = [r for r in records if r.is_active and r.start >= now]
        return sorted(upcoming, key=lambda r: r.start)

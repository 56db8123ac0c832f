"""
Overlap detection against the remote appointment store.

This is the single authority for "is this slot still free". Availability
queries use it to fetch busy intervals, and booking/reschedule call it
again immediately before the mutating request, because the remote store
has no optimistic locking and the last write wins.

The remote search is deliberately wide (start ± conflict window) and the
overlap test is re-applied in memory, so the answer does not depend on
how the remote side paginates, sorts, or interprets its date filters.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from shop_connector.config import ShopConfig
from shop_connector.schemas.appointment_schema import (
    AppointmentInterval,
    AppointmentQuery,
    AppointmentRecord,
    intervals_overlap,
)
from shop_connector.tools.store import ShopStore

logger = logging.getLogger(__name__)


class OverlapChecker:
    """Finds active appointments that collide with a candidate interval."""

    def __init__(self, store: ShopStore, config: ShopConfig) -> None:
        self._store = store
        self._window = timedelta(hours=config.conflict_window_hours)
        self._limit = config.appointment_search_limit

    async def fetch_active(
        self,
        location_id: str,
        start_from: datetime,
        start_to: datetime,
        exclude_id: Optional[str] = None,
    ) -> list[AppointmentRecord]:
        """Non-canceled appointments at ``location_id`` starting inside the window."""
        records = await self._store.search_appointments(
            AppointmentQuery(
                location_id=location_id,
                start_from=start_from,
                start_to=start_to,
                limit=self._limit,
            )
        )
        return [
            r for r in records
            if r.is_active and r.id != exclude_id
            and (r.location_id is None or r.location_id == location_id)
        ]

    async def find_conflict(
        self,
        candidate: AppointmentInterval,
        location_id: str,
        exclude_id: Optional[str] = None,
    ) -> Optional[AppointmentRecord]:
        """Return the first active appointment overlapping ``candidate``, if any.

        Args:
            candidate: The interval about to be booked.
            location_id: Shop location to check.
            exclude_id: Appointment being moved; never conflicts with itself.
        """
        existing = await self.fetch_active(
            location_id,
            candidate.start - self._window,
            candidate.start + self._window,
            exclude_id=exclude_id,
        )
        for record in existing:
            if intervals_overlap(record.start, record.end, candidate.start, candidate.end):
                logger.debug(
                    "Conflict found with appointment %s (%s - %s)",
                    record.id, record.start.isoformat(), record.end.isoformat(),
                )
                return record
        return None

    async def has_conflict(
        self,
        candidate: AppointmentInterval,
        location_id: str,
        exclude_id: Optional[str] = None,
    ) -> bool:
        return await self.find_conflict(candidate, location_id, exclude_id) is not None

    async def busy_intervals(
        self,
        location_id: str,
        range_start: datetime,
        range_end: datetime,
        slot_duration: timedelta = timedelta(0),
    ) -> list[AppointmentInterval]:
        """Intervals that may overlap any slot starting inside ``[range_start, range_end)``.

        A slot that starts just before ``range_end`` still runs for
        ``slot_duration``, so bookings starting in that tail are fetched too.
        """
        records = await self.fetch_active(
            location_id, range_start - self._window, range_end + slot_duration
        )
        return [r.interval for r in records if r.end > r.start]

"""Tests for interval overlap and the store-backed conflict check."""

from datetime import timedelta

import pytest

from shop_connector.errors import InvalidInputError
from shop_connector.schemas.appointment_schema import AppointmentInterval, intervals_overlap
from shop_connector.scheduling.overlap import OverlapChecker
from tests.helpers import make_appointment, utc

TEN = utc(2025, 11, 25, 10, 0)


def interval(start, minutes=30):
    return AppointmentInterval.from_start(start, minutes)


class TestIntervals:
    def test_partial_overlap(self):
        assert interval(TEN).overlaps(interval(TEN + timedelta(minutes=15)))

    def test_symmetric(self):
        a, b = interval(TEN), interval(TEN + timedelta(minutes=15))
        assert a.overlaps(b) == b.overlaps(a)

    def test_self_overlap(self):
        assert interval(TEN).overlaps(interval(TEN))

    def test_back_to_back_is_free(self):
        assert not interval(TEN).overlaps(interval(TEN + timedelta(minutes=30)))
        assert not interval(TEN + timedelta(minutes=30)).overlaps(interval(TEN))

    def test_containment(self):
        assert interval(TEN, 120).overlaps(interval(TEN + timedelta(minutes=45)))

    def test_raw_helper(self):
        assert intervals_overlap(TEN, TEN + timedelta(hours=1), TEN + timedelta(minutes=59), TEN + timedelta(hours=2))

    def test_end_must_follow_start(self):
        with pytest.raises(InvalidInputError):
            AppointmentInterval(TEN, TEN)

    def test_duration(self):
        assert interval(TEN, 45).duration == timedelta(minutes=45)


class TestOverlapChecker:
    @pytest.fixture
    def checker(self, store, shop_config):
        store.add_appointment(make_appointment(TEN))
        return OverlapChecker(store, shop_config)

    @pytest.mark.asyncio
    async def test_overlapping_candidate(self, checker, shop_config):
        conflict = await checker.find_conflict(
            interval(TEN + timedelta(minutes=15)), shop_config.location_id
        )
        assert conflict is not None
        assert conflict.id == "appt_1"

    @pytest.mark.asyncio
    async def test_back_to_back_candidate(self, checker, shop_config):
        assert not await checker.has_conflict(
            interval(TEN + timedelta(minutes=30)), shop_config.location_id
        )
        assert not await checker.has_conflict(
            interval(TEN - timedelta(minutes=30)), shop_config.location_id
        )

    @pytest.mark.asyncio
    async def test_excluded_appointment_never_conflicts(self, checker, shop_config):
        assert not await checker.has_conflict(interval(TEN), shop_config.location_id, exclude_id="appt_1")

    @pytest.mark.asyncio
    async def test_canceled_appointments_ignored(self, store, shop_config):
        store.add_appointment(make_appointment(TEN, status="Canceled"))
        checker = OverlapChecker(store, shop_config)
        assert not await checker.has_conflict(interval(TEN), shop_config.location_id)

    @pytest.mark.asyncio
    async def test_other_location_ignored(self, store, shop_config):
        store.add_appointment(make_appointment(TEN, location_id="loc_other"))
        checker = OverlapChecker(store, shop_config)
        assert not await checker.has_conflict(interval(TEN), shop_config.location_id)

    @pytest.mark.asyncio
    async def test_long_appointment_started_earlier(self, store, shop_config):
        # Started five hours before the candidate but still running
        store.add_appointment(make_appointment(TEN - timedelta(hours=5), minutes=6 * 60))
        checker = OverlapChecker(store, shop_config)
        assert await checker.has_conflict(interval(TEN), shop_config.location_id)

    @pytest.mark.asyncio
    async def test_busy_intervals(self, checker, shop_config):
        busy = await checker.busy_intervals(
            shop_config.location_id, TEN - timedelta(hours=1), TEN + timedelta(hours=1)
        )
        assert busy == [interval(TEN)]

    @pytest.mark.asyncio
    async def test_busy_intervals_cover_last_slot_tail(self, store, shop_config):
        store.add_appointment(make_appointment(TEN + timedelta(minutes=20)))
        checker = OverlapChecker(store, shop_config)
        range_end = TEN + timedelta(minutes=15)
        assert await checker.busy_intervals(shop_config.location_id, TEN, range_end) == []
        busy = await checker.busy_intervals(
            shop_config.location_id, TEN, range_end, slot_duration=timedelta(minutes=30)
        )
        assert busy == [interval(TEN + timedelta(minutes=20))]

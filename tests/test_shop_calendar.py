"""Tests for shop-local time conversion and business hours."""

from datetime import timedelta

import pytest

from shop_connector.scheduling.shop_calendar import (
    BusinessHoursPolicy,
    DayHours,
    ShopCalendar,
    ShopTimeComponents,
)
from tests.helpers import make_shop_config, utc


class TestShopComponents:
    def test_pst_offset_in_november(self, calendar):
        c = calendar.to_shop_components(utc(2025, 11, 25, 10, 0))
        assert (c.year, c.month, c.day, c.hour, c.minute) == (2025, 11, 25, 2, 0)

    def test_weekday_is_sunday_zero(self, calendar):
        # 2025-11-30 is a Sunday; 20:00Z is noon in Los Angeles
        assert calendar.to_shop_components(utc(2025, 11, 30, 20, 0)).weekday == 0
        # 2025-11-29 is a Saturday
        assert calendar.to_shop_components(utc(2025, 11, 29, 20, 0)).weekday == 6

    def test_local_weekday_differs_from_utc_weekday(self, calendar):
        # Tuesday 06:00Z is still Monday evening in Los Angeles
        c = calendar.to_shop_components(utc(2025, 11, 25, 6, 0))
        assert c.weekday == 1
        assert c.day == 24
        assert c.hour == 22

    def test_spring_forward(self, calendar):
        # DST started 2025-03-09; Friday before is PST, Monday after is PDT
        friday = calendar.to_shop_components(utc(2025, 3, 7, 17, 0))
        monday = calendar.to_shop_components(utc(2025, 3, 10, 16, 0))
        assert (friday.weekday, friday.hour) == (5, 9)
        assert (monday.weekday, monday.hour) == (1, 9)

    def test_fall_back(self, calendar):
        # DST ended 2025-11-02
        friday = calendar.to_shop_components(utc(2025, 10, 31, 16, 0))
        monday = calendar.to_shop_components(utc(2025, 11, 3, 17, 0))
        assert friday.hour == 9
        assert monday.hour == 9

    def test_minute_of_day_and_date(self):
        c = ShopTimeComponents(2025, 11, 25, 2, 14, 30)
        assert c.minute_of_day == 14 * 60 + 30
        assert c.date.isoformat() == "2025-11-25"

    def test_local_date(self, calendar):
        assert calendar.local_date(utc(2025, 11, 26, 6, 0)).isoformat() == "2025-11-25"


class TestBusinessHours:
    def test_open_boundaries(self, calendar, policy):
        # 09:00 PST opens, 16:59 is still open, 17:00 is closed
        assert calendar.is_open_at(calendar.to_shop_components(utc(2025, 11, 25, 17, 0)), policy)
        assert calendar.is_open_at(calendar.to_shop_components(utc(2025, 11, 26, 0, 59)), policy)
        assert not calendar.is_open_at(calendar.to_shop_components(utc(2025, 11, 26, 1, 0)), policy)
        assert not calendar.is_open_at(calendar.to_shop_components(utc(2025, 11, 25, 16, 59)), policy)

    def test_weekend_closed(self, calendar, policy):
        assert not calendar.is_open_at(calendar.to_shop_components(utc(2025, 11, 29, 20, 0)), policy)
        assert not calendar.is_open_at(calendar.to_shop_components(utc(2025, 11, 30, 20, 0)), policy)

    def test_missing_weekday_is_closed(self):
        policy = BusinessHoursPolicy(hours={1: DayHours(540, 1020)})
        assert policy.hours_for(2) is None
        assert policy.hours_for(1).contains(540)
        assert not policy.hours_for(1).contains(1020)

    def test_lead_time_only_on_listed_days(self):
        policy = BusinessHoursPolicy.weekdays(
            540, 1020, lead_time_days=(2,), min_notice=timedelta(hours=24)
        )
        assert policy.hours_for(2).min_notice == timedelta(hours=24)
        assert policy.hours_for(3).min_notice is None

    def test_from_config(self):
        config = make_shop_config(
            business_days=(1, 2, 3), business_open="08:30", business_close="12:00",
            lead_time_days=(1,), lead_time_hours=12,
        )
        policy = BusinessHoursPolicy.from_config(config)
        assert sorted(policy.hours) == [1, 2, 3]
        assert policy.hours_for(1) == DayHours(510, 720, timedelta(hours=12))
        assert policy.hours_for(2).min_notice is None


class TestFormatting:
    @pytest.mark.parametrize(
        "instant, expected",
        [
            (utc(2025, 11, 25, 10, 0), "November 25, 2025 at 2:00 AM"),
            (utc(2025, 11, 25, 20, 30), "November 25, 2025 at 12:30 PM"),
            (utc(2025, 11, 26, 0, 45), "November 25, 2025 at 4:45 PM"),
            (utc(2025, 11, 25, 8, 0), "November 25, 2025 at 12:00 AM"),
        ],
    )
    def test_format_instant(self, calendar, instant, expected):
        assert calendar.format_instant(instant) == expected

    def test_weekday_name(self, calendar):
        assert calendar.weekday_name(utc(2025, 11, 25, 20, 0)) == "Tuesday"

    def test_other_timezone(self):
        eastern = ShopCalendar("America/New_York")
        assert eastern.format_instant(utc(2025, 11, 25, 15, 0)) == "November 25, 2025 at 10:00 AM"

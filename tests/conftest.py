"""Shared test fixtures."""

import pytest

from shop_connector.booking.service import BookingService
from shop_connector.scheduling.shop_calendar import BusinessHoursPolicy, ShopCalendar
from shop_connector.scheduling.slots import SlotGenerator
from shop_connector.tools.memory_store import InMemoryShopStore
from tests.helpers import SHOP_TZ, make_shop_config


@pytest.fixture
def shop_config():
    return make_shop_config()


@pytest.fixture
def store():
    return InMemoryShopStore()


@pytest.fixture
def service(store, shop_config):
    return BookingService(store, shop_config)


@pytest.fixture
def calendar():
    return ShopCalendar(SHOP_TZ)


@pytest.fixture
def policy():
    return BusinessHoursPolicy.weekdays(open_minute=9 * 60, close_minute=17 * 60)


@pytest.fixture
def generator(calendar, policy):
    return SlotGenerator(calendar, policy, step_minutes=30, duration_minutes=30, day_scan_hours=18)

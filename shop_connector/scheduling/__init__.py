from shop_connector.scheduling.overlap import OverlapChecker
from shop_connector.scheduling.shop_calendar import (
    BusinessHoursPolicy,
    DayHours,
    ShopCalendar,
    ShopTimeComponents,
)
from shop_connector.scheduling.slots import Slot, SlotGenerator, is_slot_free

__all__ = [
    "OverlapChecker",
    "BusinessHoursPolicy",
    "DayHours",
    "ShopCalendar",
    "ShopTimeComponents",
    "Slot",
    "SlotGenerator",
    "is_slot_free",
]

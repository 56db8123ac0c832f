from shop_connector.booking.lifecycle import AppointmentLifecycle, AppointmentTrigger
from shop_connector.booking.locator import AppointmentLocator
from shop_connector.booking.resolver import EntityResolver, split_name
from shop_connector.booking.service import BookingService, build_appointment_title

__all__ = [
    "AppointmentLifecycle",
    "AppointmentTrigger",
    "AppointmentLocator",
    "EntityResolver",
    "split_name",
    "BookingService",
    "build_appointment_title",
]

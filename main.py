"""
Shop booking connector entry point.

Runs one connector operation from the command line and prints the result
as JSON. Live commands talk to Shopmonkey and need SHOPMONKEY_API_KEY and
LOCATION_ID; console mode uses an in-memory store and needs nothing.

Usage:
    Customer lookup:   python main.py lookup "(555) 123-4567"
    Range slots:       python main.py availability 2025-11-25T16:00:00Z 2025-11-26T01:00:00Z
    Single-day slots:  python main.py day 2025-11-25T18:00:00Z
    Customer overview: python main.py overview 5551234567
    Console mode:      python main.py console
"""

import asyncio
import dataclasses
import json
import logging
import sys
from datetime import datetime, timedelta, timezone

from shop_connector.booking.service import BookingService
from shop_connector.config import require_credentials, settings
from shop_connector.tools.memory_store import InMemoryShopStore
from shop_connector.tools.shopmonkey import ShopmonkeyStore

logger = logging.getLogger(__name__)

USAGE = "usage: python main.py {lookup|availability|day|overview|console} [args...]"


async def _run_live(command: str, args: list[str]) -> dict:
    """Run one command against the Shopmonkey API."""
    require_credentials(settings)
    async with ShopmonkeyStore.from_config(settings) as store:
        service = BookingService(store, settings.shop)
        if command == "lookup":
            return await service.fetch_customer_detail(args[0])
        if command == "availability":
            return await service.check_availability(args[0], args[1])
        if command == "day":
            return await service.check_day_availability(args[0])
        if command == "overview":
            return await service.customer_overview(args[0])
    raise ValueError(f"Unknown command: {command}")


async def _run_console() -> dict:
    """Book, double-book, and reschedule against an in-memory store."""
    shop = dataclasses.replace(settings.shop, location_id=settings.shop.location_id or "console-shop")
    service = BookingService(InMemoryShopStore(), shop)

    tomorrow = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0) + timedelta(days=1)
    start = tomorrow.isoformat()
    booked = await service.book_appointment(
        "John Doe", "555-123-4567", "Toyota", "Camry", "Oil change", start
    )
    clash = await service.book_appointment(
        "Jane Roe", "555-987-6543", "Honda", "Civic", "Brakes", start
    )
    moved = await service.reschedule_appointment(
        "5551234567", start, (tomorrow + timedelta(hours=1)).isoformat()
    )
    return {"booking": booked, "double_booking": clash, "reschedule": moved}


def main(argv: list[str]) -> int:
    if not argv:
        print(USAGE, file=sys.stderr)
        return 2
    command, args = argv[0], argv[1:]
    try:
        if command == "console":
            result = asyncio.run(_run_console())
        else:
            result = asyncio.run(_run_live(command, args))
    except (IndexError, ValueError) as exc:
        logger.error("%s", exc)
        print(USAGE, file=sys.stderr)
        return 2
    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))

"""Shared utilities used across the booking connector."""

import re
from datetime import datetime, timezone
from typing import Optional

from shop_connector.errors import InvalidInputError


def normalize_phone(value: Optional[str]) -> str:
    """Normalize a phone number to E.164, assuming North America for bare numbers.

    Malformed input is passed through with a ``+`` prefix rather than
    rejected; the remote store decides whether it is a real number.

    Examples:
        >>> normalize_phone("(555) 123-4567")
        '+15551234567'
        >>> normalize_phone("1-555-123-4567")
        '+15551234567'
        >>> normalize_phone("+44 20 7946 0958")
        '+442079460958'
    """
    if not value:
        return ""
    digits = re.sub(r"\D", "", value)
    if len(digits) == 10:
        return f"+1{digits}"
    return f"+{digits}"


def parse_instant(value: Optional[str], field_name: str) -> datetime:
    """Parse an ISO 8601 string into an aware UTC datetime.

    A trailing ``Z`` is accepted. Strings without an offset are read as UTC.

    Raises:
        InvalidInputError: If the value is missing or not a valid ISO 8601 string.
    """
    if not value or not value.strip():
        raise InvalidInputError(f"Missing required field '{field_name}'.")
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        raise InvalidInputError(
            f"'{field_name}' is invalid. Please provide a valid ISO 8601 date string."
        ) from None
    return ensure_utc(parsed)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso_z(value: datetime) -> str:
    """Render an instant the way the remote store expects it: UTC with a ``Z`` suffix."""
    return ensure_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")

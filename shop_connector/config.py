"""
Centralized configuration with environment variable overrides.

Shop identity, business hours, booking rules, and Shopmonkey credentials
are all configurable here. Components receive the relevant sub-config at
construction; nothing reads environment variables at call time.
"""

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from shop_connector.logging_context import install_request_id_filter

load_dotenv()

logger = logging.getLogger(__name__)

VEHICLE_MATCH_MODES = ("fields", "combined")
CANCEL_STRATEGIES = ("delete", "mark_canceled")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_weekdays(env_var: str, default: str) -> tuple[int, ...]:
    """Parse a comma-separated weekday list (0=Sunday .. 6=Saturday)."""
    raw = os.getenv(env_var, default)
    try:
        return tuple(int(part) for part in raw.split(",") if part.strip())
    except (ValueError, TypeError, AttributeError):
        raise ValueError(
            f"Invalid weekday list for {env_var}: {raw!r}"
        ) from None


def _parse_clock(value: str) -> int:
    """Convert an ``HH:MM`` string to minutes after midnight."""
    hours, _, minutes = value.strip().partition(":")
    return int(hours) * 60 + int(minutes or 0)


@dataclass(frozen=True)
class ShopmonkeyConfig:
    """Connection settings for the Shopmonkey REST API."""

    api_key: str = os.getenv("SHOPMONKEY_API_KEY", "")
    base_url: str = os.getenv("SHOPMONKEY_BASE_URL", "https://api.shopmonkey.cloud/v3")
    timeout_sec: float = _safe_float("SHOPMONKEY_TIMEOUT", "30.0")


@dataclass(frozen=True)
class ShopConfig:
    """Shop location, business hours, and booking rules."""

    location_id: str = os.getenv("LOCATION_ID", "")
    timezone: str = os.getenv("SHOP_TIMEZONE", "America/Los_Angeles")
    appointment_duration_minutes: int = _safe_int("APPOINTMENT_DURATION_MINUTES", "30")
    slot_step_minutes: int = _safe_int("SLOT_STEP_MINUTES", "30")
    business_days: tuple[int, ...] = _safe_weekdays("BUSINESS_DAYS", "1,2,3,4,5")
    business_open: str = os.getenv("BUSINESS_OPEN", "09:00")
    business_close: str = os.getenv("BUSINESS_CLOSE", "17:00")
    lead_time_days: tuple[int, ...] = _safe_weekdays("LEAD_TIME_DAYS", "")
    lead_time_hours: int = _safe_int("LEAD_TIME_HOURS", "24")
    conflict_window_hours: int = _safe_int("CONFLICT_WINDOW_HOURS", "24")
    day_scan_hours: int = _safe_int("DAY_SCAN_HOURS", "18")
    appointment_search_limit: int = _safe_int("APPOINTMENT_SEARCH_LIMIT", "100")
    locator_page_size: int = _safe_int("LOCATOR_PAGE_SIZE", "50")
    vehicle_match_mode: str = os.getenv("VEHICLE_MATCH_MODE", "fields")
    cancel_strategy: str = os.getenv("CANCEL_STRATEGY", "delete")
    default_vehicle_size: str = os.getenv("DEFAULT_VEHICLE_SIZE", "LightDuty")
    appointment_color: str = os.getenv("APPOINTMENT_COLOR", "blue")

    @property
    def open_minute(self) -> int:
        return _parse_clock(self.business_open)

    @property
    def close_minute(self) -> int:
        return _parse_clock(self.business_close)


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    shop: ShopConfig = field(default_factory=ShopConfig)
    shopmonkey: ShopmonkeyConfig = field(default_factory=ShopmonkeyConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    shop = config.shop
    try:
        ZoneInfo(shop.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"SHOP_TIMEZONE is not a known IANA zone: {shop.timezone!r}") from None

    for name, value in [
        ("APPOINTMENT_DURATION_MINUTES", shop.appointment_duration_minutes),
        ("SLOT_STEP_MINUTES", shop.slot_step_minutes),
        ("CONFLICT_WINDOW_HOURS", shop.conflict_window_hours),
        ("DAY_SCAN_HOURS", shop.day_scan_hours),
        ("APPOINTMENT_SEARCH_LIMIT", shop.appointment_search_limit),
        ("LOCATOR_PAGE_SIZE", shop.locator_page_size),
    ]:
        if value < 1:
            raise ValueError(f"{name} must be >= 1, got {value}")

    if shop.lead_time_hours < 0:
        raise ValueError(f"LEAD_TIME_HOURS must be >= 0, got {shop.lead_time_hours}")

    for name, days in [("BUSINESS_DAYS", shop.business_days), ("LEAD_TIME_DAYS", shop.lead_time_days)]:
        bad = [d for d in days if not 0 <= d <= 6]
        if bad:
            raise ValueError(f"{name} must only contain weekdays 0-6, got {bad}")

    try:
        open_minute, close_minute = shop.open_minute, shop.close_minute
    except ValueError:
        raise ValueError(
            f"BUSINESS_OPEN/BUSINESS_CLOSE must be HH:MM, got "
            f"{shop.business_open!r}/{shop.business_close!r}"
        ) from None
    if not 0 <= open_minute < close_minute <= 24 * 60:
        raise ValueError(
            f"BUSINESS_OPEN must be before BUSINESS_CLOSE, got "
            f"{shop.business_open}-{shop.business_close}"
        )

    if shop.vehicle_match_mode not in VEHICLE_MATCH_MODES:
        raise ValueError(
            f"VEHICLE_MATCH_MODE must be one of {VEHICLE_MATCH_MODES}, "
            f"got {shop.vehicle_match_mode!r}"
        )
    if shop.cancel_strategy not in CANCEL_STRATEGIES:
        raise ValueError(
            f"CANCEL_STRATEGY must be one of {CANCEL_STRATEGIES}, got {shop.cancel_strategy!r}"
        )

    if config.shopmonkey.timeout_sec <= 0:
        raise ValueError(
            f"SHOPMONKEY_TIMEOUT must be > 0, got {config.shopmonkey.timeout_sec}"
        )


def require_credentials(config: AppConfig) -> None:
    """Fail fast when the Shopmonkey API key or location id is missing."""
    missing = [
        name
        for name, value in [
            ("SHOPMONKEY_API_KEY", config.shopmonkey.api_key),
            ("LOCATION_ID", config.shop.location_id),
        ]
        if not value
    ]
    if missing:
        raise ValueError(f"{' and '.join(missing)} must be defined in the environment or .env file.")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_request_id_filter()
    logger.info("Configuration loaded for location '%s' (%s)", config.shop.location_id, config.shop.timezone)
    return config


# Singleton instance
settings = load_config()

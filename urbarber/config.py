"""
Centralized configuration with environment variable overrides.

Shop details, pricing, calendar credentials, booking thresholds and the
HTTP boundary settings all live here. Nothing is hardcoded in the
scheduler, stores or notifiers.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from urbarber.logging_context import request_id_handler

load_dotenv()

logger = logging.getLogger(__name__)


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


def _safe_bool(env_var: str, default: str) -> bool:
    return os.getenv(env_var, default).strip().lower() in ("1", "true", "yes", "on")


def _optional(env_var: str) -> Optional[str]:
    value = os.getenv(env_var, "").strip()
    return value or None


@dataclass(frozen=True)
class ShopConfig:
    """Shop identity, pricing and timezone."""

    name: str = os.getenv("SHOP_NAME", "Urbarber")
    location: str = os.getenv("SHOP_LOCATION", "Urbarber Barbershop")
    service_name: str = os.getenv("SERVICE_NAME", "Standard cut")
    base_price: float = _safe_float("BASE_PRICE", "25")
    home_service_surcharge: float = _safe_float("HOME_SERVICE_SURCHARGE", "10")
    timezone: str = os.getenv("SHOP_TIMEZONE", "America/Toronto")


@dataclass(frozen=True)
class CalendarConfig:
    """Calendar store selection, credentials and booking thresholds."""

    backend: str = os.getenv("CALENDAR_BACKEND", "memory")
    calendar_id: str = os.getenv("GOOGLE_CALENDAR_ID", "primary")
    service_account_email: Optional[str] = _optional("GOOGLE_SERVICE_ACCOUNT_EMAIL")
    private_key: Optional[str] = _optional("GOOGLE_PRIVATE_KEY")
    slot_padding_minutes: int = _safe_int("SLOT_PADDING_MINUTES", "0")
    lock_timeout_ms: int = _safe_int("LOCK_TIMEOUT_MS", "5000")
    scan_window_hours: float = _safe_float("CALENDAR_SCAN_WINDOW_HOURS", "12")


@dataclass(frozen=True)
class ApiConfig:
    """HTTP boundary settings."""

    booking_secret: Optional[str] = _optional("BOOKING_SECRET")
    allowed_origin: str = os.getenv("ALLOWED_ORIGIN", "*")
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = _safe_int("PORT", "8000")


@dataclass(frozen=True)
class NotifierConfig:
    """SMTP settings for confirmation emails. Email is disabled without a host."""

    smtp_host: Optional[str] = _optional("SMTP_HOST")
    smtp_port: int = _safe_int("SMTP_PORT", "587")
    smtp_username: Optional[str] = _optional("SMTP_USERNAME")
    smtp_password: Optional[str] = _optional("SMTP_PASSWORD")
    smtp_use_tls: bool = _safe_bool("SMTP_USE_TLS", "true")
    email_from: str = os.getenv("EMAIL_FROM", "bookings@urbarber.example")

    @property
    def enabled(self) -> bool:
        return self.smtp_host is not None


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    shop: ShopConfig = field(default_factory=ShopConfig)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    notifier: NotifierConfig = field(default_factory=NotifierConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.calendar.slot_padding_minutes < 0:
        raise ValueError(
            f"SLOT_PADDING_MINUTES must be >= 0, got {config.calendar.slot_padding_minutes}"
        )
    if config.calendar.lock_timeout_ms < 1:
        raise ValueError(
            f"LOCK_TIMEOUT_MS must be >= 1, got {config.calendar.lock_timeout_ms}"
        )
    if config.calendar.scan_window_hours < 0:
        raise ValueError(
            f"CALENDAR_SCAN_WINDOW_HOURS must be >= 0, got {config.calendar.scan_window_hours}"
        )
    if config.calendar.backend not in ("google", "memory"):
        raise ValueError(
            f"CALENDAR_BACKEND must be 'google' or 'memory', got {config.calendar.backend!r}"
        )
    if config.shop.base_price < 0:
        raise ValueError(f"BASE_PRICE must be >= 0, got {config.shop.base_price}")
    if config.shop.home_service_surcharge < 0:
        raise ValueError(
            f"HOME_SERVICE_SURCHARGE must be >= 0, got {config.shop.home_service_surcharge}"
        )
    if not 1 <= config.notifier.smtp_port <= 65535:
        raise ValueError(f"SMTP_PORT must be between 1 and 65535, got {config.notifier.smtp_port}")

    try:
        ZoneInfo(config.shop.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"SHOP_TIMEZONE is not a known timezone: {config.shop.timezone!r}") from None


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        handlers=[request_id_handler()],
    )
    logger.info(
        "Configuration loaded for '%s' (calendar backend: %s)",
        config.shop.name,
        config.calendar.backend,
    )
    return config


# Singleton instance
settings = load_config()

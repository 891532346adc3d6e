"""
Configuration models for the system.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple
from urllib.parse import urlparse

from apscheduler.triggers.cron import CronTrigger
from dateutil import tz

DEFAULT_RATES_URL = "https://www.dolarito.ar/merval/cauciones"
DEFAULT_TIMEZONE = "America/Argentina/Buenos_Aires"
DEFAULT_REMINDER_CRON = "0 9 */2 * *"

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_hhmm(value: str) -> Tuple[int, int]:
    """Parse an ``HH:MM`` string into an (hour, minute) tuple."""
    match = _TIME_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return int(match.group(1)), int(match.group(2))


def validate_cron(expression: str, timezone: str = DEFAULT_TIMEZONE) -> bool:
    """Validate a five-field crontab expression."""
    try:
        CronTrigger.from_crontab(expression, timezone=timezone)
    except ValueError as e:
        raise ValueError(f"Invalid cron expression '{expression}': {e}")
    return True


@dataclass(frozen=True)
class TwilioConfig:
    """Credentials and addresses for the Twilio WhatsApp API."""

    account_sid: str = ""
    auth_token: str = ""
    whatsapp_from: str = ""
    whatsapp_to: str = ""
    api_base_url: str = "https://api.twilio.com"
    timeout: int = 30

    @property
    def has_credentials(self) -> bool:
        return all(
            [self.account_sid, self.auth_token, self.whatsapp_from, self.whatsapp_to]
        )

    def validate(self) -> bool:
        """
        Validate Twilio configuration.

        Empty credentials are allowed here; sending fails instead.
        """
        parsed_url = urlparse(self.api_base_url)
        if parsed_url.scheme not in ["http", "https"] or not parsed_url.netloc:
            raise ValueError(f"Invalid Twilio API base URL: {self.api_base_url}")

        if not isinstance(self.timeout, int) or self.timeout <= 0:
            raise ValueError("Twilio timeout must be a positive integer")

        for name in ["whatsapp_from", "whatsapp_to"]:
            value = getattr(self, name)
            if value and not value.startswith("whatsapp:"):
                raise ValueError(f"Twilio {name} must start with 'whatsapp:'")

        return True


@dataclass(frozen=True)
class MarketHoursConfig:
    """Trading window of the market being watched."""

    timezone: str = DEFAULT_TIMEZONE
    open_time: str = "10:30"
    close_time: str = "17:30"
    trading_days: Tuple[int, ...] = (0, 1, 2, 3, 4)  # Monday=0

    def validate(self) -> bool:
        """Validate market hours configuration."""
        if not self.timezone or tz.gettz(self.timezone) is None:
            raise ValueError(f"Unknown timezone: {self.timezone}")

        open_at = parse_hhmm(self.open_time)
        close_at = parse_hhmm(self.close_time)
        if open_at >= close_at:
            raise ValueError("Market open time must be before close time")

        if not self.trading_days:
            raise ValueError("At least one trading day must be configured")

        for day in self.trading_days:
            if not isinstance(day, int) or not (0 <= day <= 6):
                raise ValueError("Trading days must be integers between 0 and 6")

        return True


@dataclass(frozen=True)
class ScraperConfig:
    """Where and how the rate board is scraped."""

    url: str = DEFAULT_RATES_URL
    navigation_timeout_ms: int = 30000
    table_timeout_ms: int = 15000
    table_selector: str = "table"
    headless: bool = True

    def validate(self) -> bool:
        """Validate scraper configuration."""
        parsed_url = urlparse(self.url)
        if not parsed_url.scheme or not parsed_url.netloc:
            raise ValueError(f"Invalid rates URL format: {self.url}")

        if parsed_url.scheme not in ["http", "https"]:
            raise ValueError(f"Rates URL must use HTTP or HTTPS: {self.url}")

        for name in ["navigation_timeout_ms", "table_timeout_ms"]:
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer")

        if not self.table_selector or not self.table_selector.strip():
            raise ValueError("Table selector cannot be empty")

        return True


@dataclass(frozen=True)
class ScheduleConfig:
    """Cron expressions for the scheduled jobs."""

    scan_cron: Optional[str] = None
    reminder_cron: str = DEFAULT_REMINDER_CRON
    reminder_enabled: bool = True

    def validate(self, timezone: str = DEFAULT_TIMEZONE) -> bool:
        """Validate schedule configuration."""
        if self.scan_cron:
            validate_cron(self.scan_cron, timezone)

        if self.reminder_enabled:
            validate_cron(self.reminder_cron, timezone)

        return True


@dataclass(frozen=True)
class ServerConfig:
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = 3000
    access_token: Optional[str] = None

    def validate(self) -> bool:
        """Validate server configuration."""
        if not self.host or not self.host.strip():
            raise ValueError("Server host cannot be empty")

        if not isinstance(self.port, int) or not (1 <= self.port <= 65535):
            raise ValueError("Server port must be between 1 and 65535")

        return True


@dataclass(frozen=True)
class Configuration:
    """System configuration."""

    min_rate: float = 0.0
    max_alert_entries: int = 10
    twilio: TwilioConfig = field(default_factory=TwilioConfig)
    market_hours: MarketHoursConfig = field(default_factory=MarketHoursConfig)
    scraper: ScraperConfig = field(default_factory=ScraperConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_level: str = "INFO"
    log_dir: str = "logs"

    def validate(self) -> bool:
        """Validate system configuration."""
        if not isinstance(self.min_rate, (int, float)) or self.min_rate < 0:
            raise ValueError("Minimum rate must be a non-negative number")

        if (
            not isinstance(self.max_alert_entries, int)
            or not (1 <= self.max_alert_entries <= 50)
        ):
            raise ValueError("Max alert entries must be an integer between 1 and 50")

        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")

        # Validate nested configurations
        self.twilio.validate()
        self.market_hours.validate()
        self.scraper.validate()
        self.schedule.validate(self.market_hours.timezone)
        self.server.validate()

        return True

"""
Configuration management system for the Caución Rate Alert.
"""

import copy
import json
import os
import re
from typing import Any, Dict, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

from ..components.opportunity_filter import parse_min_rate
from ..exceptions import ConfigurationError
from ..models.config import (
    DEFAULT_RATES_URL,
    DEFAULT_REMINDER_CRON,
    DEFAULT_TIMEZONE,
    Configuration,
    MarketHoursConfig,
    ScheduleConfig,
    ScraperConfig,
    ServerConfig,
    TwilioConfig,
)

# ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"^\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-(.*))?\}$")

CONFIG_SEARCH_PATHS = [
    "config/config.yaml",
    "config/config.yml",
    "config/config.json",
    "config.yaml",
    "config.yml",
    "config.json",
]


class ConfigurationManager:
    """Manages loading and validation of system configuration."""

    def __init__(
        self,
        config_path: Optional[str] = None,
        env_file: Optional[str] = None,
        load_env_file: bool = True,
    ):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to a YAML or JSON file. If None, standard locations
                are searched and the built-in template is used when none exists.
            env_file: Path to a ``.env`` file. If None, one is searched upwards
                from the working directory.
            load_env_file: Whether to load the ``.env`` file at all
        """
        self.config_path = config_path or self._find_config_file()
        self.env_file = env_file
        self.load_env_file = load_env_file
        self._config: Optional[Configuration] = None

    def _find_config_file(self) -> Optional[str]:
        """Find the configuration file in standard locations."""
        for path in CONFIG_SEARCH_PATHS:
            if os.path.exists(path):
                return path
        return None

    def load_config(self) -> Configuration:
        """
        Load configuration from file and environment.

        Returns:
            Configuration object with validated settings.

        Raises:
            ConfigurationError: If configuration is invalid or cannot be read.
        """
        if self.load_env_file:
            # Variables already present in the process environment win
            load_dotenv(self.env_file or find_dotenv(usecwd=True), override=False)

        raw_config = self.get_config_template()

        if self.config_path:
            if not os.path.exists(self.config_path):
                raise ConfigurationError(
                    f"Configuration file not found: {self.config_path}"
                )
            raw_config = self._merge(raw_config, self._read_file(self.config_path))

        try:
            raw_config = self._expand_env_vars(raw_config)
            config = self._parse_config(raw_config)
            config.validate()
        except ConfigurationError:
            raise
        except ValueError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        self._config = config
        return config

    def _read_file(self, path: str) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.endswith(".json"):
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration file must contain a mapping")
        return data

    def _merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge ``override`` into a copy of ``base``."""
        merged = copy.deepcopy(base)
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = self._merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _expand_env_vars(self, obj: Any) -> Any:
        """Recursively expand ``${VAR}`` and ``${VAR:-default}`` values."""
        if isinstance(obj, dict):
            return {key: self._expand_env_vars(value) for key, value in obj.items()}
        elif isinstance(obj, list):
            return [self._expand_env_vars(item) for item in obj]
        elif isinstance(obj, str):
            match = ENV_VAR_PATTERN.match(obj)
            if not match:
                return obj

            var_name, default = match.group(1), match.group(2)
            env_value = os.getenv(var_name)
            if env_value is None or (env_value == "" and default is not None):
                if default is None:
                    raise ConfigurationError(
                        f"Environment variable '{var_name}' not found"
                    )
                return default
            return env_value
        else:
            return obj

    def _parse_config(self, raw_config: Dict[str, Any]) -> Configuration:
        """Parse raw configuration dictionary into Configuration object."""
        twilio_data = raw_config.get("twilio") or {}
        twilio = TwilioConfig(
            account_sid=str(twilio_data.get("account_sid") or ""),
            auth_token=str(twilio_data.get("auth_token") or ""),
            whatsapp_from=_whatsapp_address(twilio_data.get("whatsapp_from")),
            whatsapp_to=_whatsapp_address(twilio_data.get("whatsapp_to")),
            api_base_url=str(twilio_data.get("api_base_url") or "https://api.twilio.com"),
            timeout=_as_int(twilio_data.get("timeout", 30), "twilio.timeout"),
        )

        market_data = raw_config.get("market_hours") or {}
        market_hours = MarketHoursConfig(
            timezone=str(market_data.get("timezone") or DEFAULT_TIMEZONE),
            open_time=str(market_data.get("open_time") or "10:30"),
            close_time=str(market_data.get("close_time") or "17:30"),
            trading_days=tuple(
                _as_int(day, "market_hours.trading_days")
                for day in market_data.get("trading_days", [0, 1, 2, 3, 4])
            ),
        )

        scraper_data = raw_config.get("scraper") or {}
        scraper = ScraperConfig(
            url=str(scraper_data.get("url") or DEFAULT_RATES_URL),
            navigation_timeout_ms=_as_int(
                scraper_data.get("navigation_timeout_ms", 30000),
                "scraper.navigation_timeout_ms",
            ),
            table_timeout_ms=_as_int(
                scraper_data.get("table_timeout_ms", 15000), "scraper.table_timeout_ms"
            ),
            table_selector=str(scraper_data.get("table_selector") or "table"),
            headless=_as_bool(scraper_data.get("headless", True)),
        )

        schedule_data = raw_config.get("schedule") or {}
        schedule = ScheduleConfig(
            scan_cron=_optional_str(schedule_data.get("scan_cron")),
            reminder_cron=str(schedule_data.get("reminder_cron") or DEFAULT_REMINDER_CRON),
            reminder_enabled=_as_bool(schedule_data.get("reminder_enabled", True)),
        )

        server_data = raw_config.get("server") or {}
        server = ServerConfig(
            host=str(server_data.get("host") or "0.0.0.0"),
            port=_as_int(server_data.get("port", 3000), "server.port"),
            access_token=_optional_str(server_data.get("access_token")),
        )

        system_data = raw_config.get("system") or {}

        return Configuration(
            min_rate=parse_min_rate(raw_config.get("min_rate")),
            max_alert_entries=_as_int(
                raw_config.get("max_alert_entries", 10), "max_alert_entries"
            ),
            twilio=twilio,
            market_hours=market_hours,
            scraper=scraper,
            schedule=schedule,
            server=server,
            log_level=str(system_data.get("log_level") or "INFO").upper(),
            log_dir=str(system_data.get("log_dir") or "logs"),
        )

    def get_config(self) -> Configuration:
        """
        Get current configuration, loading if necessary.

        Returns:
            Current configuration object.
        """
        if self._config is None:
            return self.load_config()
        return self._config

    def validate_config_file(self, config_path: str) -> bool:
        """
        Validate a configuration file without caching it.

        Missing environment variables are tolerated so files can be checked
        outside the deployment environment.

        Raises:
            ConfigurationError: If configuration is invalid with detailed error message.
        """
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        raw_config = self._merge(self.get_config_template(), self._read_file(config_path))

        try:
            raw_config = self._expand_env_vars(raw_config)
        except ConfigurationError:
            # Validate the structure even when required variables are absent
            raw_config = self._strip_env_refs(raw_config)

        try:
            self._parse_config(raw_config).validate()
        except ValueError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        return True

    def _strip_env_refs(self, obj: Any) -> Any:
        if isinstance(obj, dict):
            return {key: self._strip_env_refs(value) for key, value in obj.items()}
        if isinstance(obj, list):
            return [self._strip_env_refs(item) for item in obj]
        if isinstance(obj, str):
            match = ENV_VAR_PATTERN.match(obj)
            if match:
                return os.getenv(match.group(1)) or match.group(2) or ""
        return obj

    def get_config_template(self) -> Dict[str, Any]:
        """
        Get the built-in configuration, wired to the environment variables.

        Returns:
            Dictionary with the default configuration structure.
        """
        return {
            "min_rate": "${MIN_TNA:-0}",
            "max_alert_entries": 10,
            "twilio": {
                "account_sid": "${TWILIO_ACCOUNT_SID:-}",
                "auth_token": "${TWILIO_AUTH_TOKEN:-}",
                "whatsapp_from": "${TWILIO_WHATSAPP_FROM:-}",
                "whatsapp_to": "${TWILIO_WHATSAPP_TO:-}",
            },
            "market_hours": {
                "timezone": DEFAULT_TIMEZONE,
                "open_time": "10:30",
                "close_time": "17:30",
                "trading_days": [0, 1, 2, 3, 4],
            },
            "scraper": {
                "url": DEFAULT_RATES_URL,
                "navigation_timeout_ms": 30000,
                "table_timeout_ms": 15000,
                "table_selector": "table",
                "headless": True,
            },
            "schedule": {
                "scan_cron": "${CRON_SCHEDULE:-}",
                "reminder_cron": DEFAULT_REMINDER_CRON,
                "reminder_enabled": True,
            },
            "server": {
                "host": "0.0.0.0",
                "port": "${PORT:-3000}",
                "access_token": "${RUN_TOKEN:-}",
            },
            "system": {
                "log_level": "${LOG_LEVEL:-INFO}",
                "log_dir": "logs",
            },
        }


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ["1", "true", "yes", "on"]


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _whatsapp_address(value: Any) -> str:
    """Prefix bare phone numbers with ``whatsapp:`` as Twilio expects."""
    text = str(value or "").strip()
    if text and not text.startswith("whatsapp:"):
        return f"whatsapp:{text}"
    return text

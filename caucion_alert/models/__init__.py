"""
Data models for the Caución Rate Alert system.

This module contains all data classes and type definitions used throughout
the application for representing rates, alerts, configuration, and run results.
"""

from .alert import FormattedAlert
from .config import (
    Configuration,
    MarketHoursConfig,
    ScheduleConfig,
    ScraperConfig,
    ServerConfig,
    TwilioConfig,
)
from .delivery import DeliveryResult
from .pipeline import NotificationStatus, PipelineResult
from .rate import RateEntry

__all__ = [
    "RateEntry",
    "FormattedAlert",
    "DeliveryResult",
    "NotificationStatus",
    "PipelineResult",
    "Configuration",
    "TwilioConfig",
    "MarketHoursConfig",
    "ScraperConfig",
    "ScheduleConfig",
    "ServerConfig",
]

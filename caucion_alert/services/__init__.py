"""
Service layer for the Caución Rate Alert system.

This module contains the services that load configuration, notify
opportunities and run the scrape-filter-notify pipeline.
"""

from .config_manager import ConfigurationManager
from .notifier import Notifier
from .pipeline import CaucionPipeline

__all__ = [
    "ConfigurationManager",
    "Notifier",
    "CaucionPipeline",
]

"""
Protocol interfaces for the Caución Rate Alert system.

This module defines the protocol interfaces that establish system
boundaries and enable dependency injection throughout the application.
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional, Protocol

from .models.alert import FormattedAlert
from .models.delivery import DeliveryResult
from .models.rate import RateEntry

if TYPE_CHECKING:
    from .models.config import Configuration


class IMarketClock(Protocol):
    """Protocol for market-hours checks."""

    def is_market_open(self, now: Optional[datetime] = None) -> bool:
        """Return True when ``now`` (default: current time) is inside the trading window."""
        ...


class ITableFetcher(Protocol):
    """Protocol for fetching the text of a JavaScript-rendered table."""

    async def fetch_rendered_table(self, url: str) -> List[List[str]]:
        """Return the rendered table body as rows of raw cell text."""
        ...


class IRateScraper(Protocol):
    """Protocol for scraping the rate board."""

    async def fetch_rates(self) -> List[RateEntry]:
        """Scrape and return rates sorted by descending rate."""
        ...


class IOpportunityFilter(Protocol):
    """Protocol for selecting rates above the threshold."""

    def apply(self, entries: List[RateEntry]) -> List[RateEntry]:
        """Keep entries strictly above the configured minimum rate."""
        ...


class IAlertFormatter(Protocol):
    """Protocol for formatting alert messages."""

    def format_opportunities(
        self, opportunities: List[RateEntry], min_rate: float
    ) -> FormattedAlert:
        """Format opportunities into an alert message."""
        ...

    def format_maintenance_reminder(self) -> FormattedAlert:
        """Format the sandbox keep-alive reminder."""
        ...


class IMessageDispatcher(Protocol):
    """Protocol for dispatching alert messages."""

    def send_alert(self, alert: FormattedAlert) -> DeliveryResult:
        """Send an alert through the messaging provider."""
        ...

    def test_connection(self) -> bool:
        """Test connection to the messaging provider."""
        ...


class INotifier(Protocol):
    """Protocol for notifying detected opportunities."""

    async def notify(self, opportunities: List[RateEntry]) -> Optional[DeliveryResult]:
        """Send the opportunities, doing nothing when there are none."""
        ...

    async def send_maintenance_reminder(self) -> Optional[DeliveryResult]:
        """Send the keep-alive reminder, logging failures."""
        ...


class IConfigurationManager(Protocol):
    """Protocol for managing system configuration."""

    def load_config(self) -> "Configuration":
        """Load and validate configuration."""
        ...

    def get_config(self) -> "Configuration":
        """Return the cached configuration, loading it if needed."""
        ...

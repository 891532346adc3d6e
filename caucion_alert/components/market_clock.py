"""Market-hours check for the BYMA caución market."""

from datetime import datetime, time
from typing import Callable, Optional

from dateutil import tz

from ..interfaces import IMarketClock
from ..models.config import MarketHoursConfig, parse_hhmm
from ..utils.logging import get_logger


class MarketClock(IMarketClock):
    """Decides whether an instant falls inside the trading window."""

    def __init__(
        self,
        config: MarketHoursConfig,
        now_provider: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the market clock.

        Args:
            config: Trading window and timezone
            now_provider: Callable returning the current aware datetime
        """
        self.config = config
        self.timezone = tz.gettz(config.timezone)
        if self.timezone is None:
            raise ValueError(f"Unknown timezone: {config.timezone}")

        self.open_time = time(*parse_hhmm(config.open_time))
        self.close_time = time(*parse_hhmm(config.close_time))
        self.trading_days = frozenset(config.trading_days)
        self._now_provider = now_provider or (lambda: datetime.now(tz.UTC))
        self.logger = get_logger("market.clock")

    def local_now(self, now: Optional[datetime] = None) -> datetime:
        """Return ``now`` expressed in the market timezone."""
        current = now if now is not None else self._now_provider()
        if current.tzinfo is None:
            # Naive datetimes are market-local wall-clock times
            return current.replace(tzinfo=self.timezone)
        return current.astimezone(self.timezone)

    def is_market_open(self, now: Optional[datetime] = None) -> bool:
        local = self.local_now(now)

        if local.weekday() not in self.trading_days:
            self.logger.debug(
                "Market closed: not a trading day",
                extra={"local_time": local.isoformat(), "weekday": local.weekday()},
            )
            return False

        # Minute granularity, both ends inclusive
        wall_clock = local.time().replace(second=0, microsecond=0)
        is_open = self.open_time <= wall_clock <= self.close_time

        self.logger.debug(
            "Market hours checked",
            extra={"local_time": local.isoformat(), "market_open": is_open},
        )
        return is_open

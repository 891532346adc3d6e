"""
The scrape-filter-notify pipeline shared by every trigger.
"""

from datetime import datetime
from typing import Callable, Optional

from dateutil import tz

from ..exceptions import NotifyError, SessionExpiredError
from ..interfaces import IMarketClock, INotifier, IOpportunityFilter, IRateScraper
from ..models.pipeline import NotificationStatus, PipelineResult
from ..utils.error_handling import ErrorCategory, ErrorSeverity, get_error_tracker
from ..utils.logging import get_logger


class CaucionPipeline:
    """
    Composes market clock, scraper, filter and notifier.

    The HTTP endpoints, the scheduled job and the one-shot CLI all call
    :meth:`run`; they only differ in the flags they pass.
    """

    def __init__(
        self,
        clock: IMarketClock,
        scraper: IRateScraper,
        opportunity_filter: IOpportunityFilter,
        notifier: INotifier,
        min_rate: float = 0.0,
        now_provider: Optional[Callable[[], datetime]] = None,
    ):
        self.clock = clock
        self.scraper = scraper
        self.opportunity_filter = opportunity_filter
        self.notifier = notifier
        self.min_rate = min_rate
        self._now_provider = now_provider or (lambda: datetime.now(tz.tzlocal()))
        self.error_tracker = get_error_tracker()
        self.logger = get_logger("pipeline")

    async def scan(self) -> PipelineResult:
        """Scrape and filter without any market gate or notification."""
        return await self.run(notify=False, require_market_open=False)

    async def run(
        self, notify: bool = False, require_market_open: bool = False
    ) -> PipelineResult:
        """
        Run one pipeline cycle.

        Args:
            notify: Send the opportunities when the market is open
            require_market_open: Skip the scrape entirely when the market is closed

        Returns:
            PipelineResult describing the cycle

        Raises:
            FetchError: If the rate page could not be scraped
        """
        market_open = self.clock.is_market_open()
        result = PipelineResult(
            timestamp=self._now_provider(),
            market_open=market_open,
            min_rate=self.min_rate,
        )

        if require_market_open and not market_open:
            self.logger.info("Outside market hours, skipping scan")
            result.notification = NotificationStatus.MARKET_CLOSED
            return result

        result.entries = await self.scraper.fetch_rates()
        result.opportunities = self.opportunity_filter.apply(result.entries)

        self.logger.info(
            "Scan finished",
            extra={
                "entry_count": len(result.entries),
                "opportunity_count": len(result.opportunities),
                "min_rate": self.min_rate,
            },
        )

        if not notify:
            result.notification = NotificationStatus.NOT_REQUESTED
        elif not market_open:
            result.notification = NotificationStatus.MARKET_CLOSED
        elif not result.opportunities:
            result.notification = NotificationStatus.NO_OPPORTUNITIES
        else:
            await self._notify(result)

        return result

    async def _notify(self, result: PipelineResult):
        self.logger.info(
            f"Found {len(result.opportunities)} opportunities, notifying",
            extra={"opportunity_count": len(result.opportunities)},
        )

        try:
            result.delivery = await self.notifier.notify(result.opportunities)
            result.notification = NotificationStatus.SENT
        except SessionExpiredError as e:
            result.notification = NotificationStatus.SESSION_EXPIRED
            result.error = str(e)
            self._record_notify_error(e, ErrorSeverity.HIGH)
        except NotifyError as e:
            result.notification = NotificationStatus.FAILED
            result.error = str(e)
            self._record_notify_error(e, ErrorSeverity.MEDIUM)

    def _record_notify_error(self, error: NotifyError, severity: ErrorSeverity):
        self.error_tracker.record_error(
            component="notifier",
            category=ErrorCategory.MESSAGE_DELIVERY,
            severity=severity,
            message=str(error),
            exception=error,
            context={"code": error.code},
        )

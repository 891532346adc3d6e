"""
Main application orchestrator for the Caución Rate Alert system.

This module provides the central coordination point for all system components,
managing their lifecycle, the HTTP server, the scheduler and graceful shutdown.
"""

import asyncio
import signal
import sys
from datetime import datetime
from typing import Any, Dict, Optional

from aiohttp import web

from .components.alert_formatter import AlertFormatter
from .components.market_clock import MarketClock
from .components.message_dispatcher import TwilioWhatsAppDispatcher
from .components.opportunity_filter import OpportunityFilter
from .components.rate_scraper import RateScraper
from .components.table_fetcher import PlaywrightTableFetcher
from .interfaces import IConfigurationManager
from .models.config import Configuration
from .scheduler import CaucionScheduler
from .server import create_app
from .services.config_manager import ConfigurationManager
from .services.notifier import Notifier
from .services.pipeline import CaucionPipeline
from .utils.error_handling import (
    ErrorCategory,
    ErrorSeverity,
    get_error_tracker,
    with_error_handling,
)
from .utils.logging import get_logger, setup_logging


class ApplicationOrchestrator:
    """
    Main application orchestrator that coordinates all system components.

    This class wires the pipeline from configuration, serves the HTTP
    triggers, runs the cron jobs and handles startup and shutdown.
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        config_manager: Optional[IConfigurationManager] = None,
    ):
        """
        Initialize the application orchestrator.

        Args:
            config_path: Path to configuration file. If None, uses default paths.
            config_manager: Optional pre-built configuration manager
        """
        self.config_path = config_path
        self._config_manager = config_manager
        self._running = False
        self._shutdown_event: Optional[asyncio.Event] = None

        self.error_tracker = get_error_tracker()
        self.logger = get_logger("orchestrator")

        # Component instances
        self._config: Optional[Configuration] = None
        self._notifier: Optional[Notifier] = None
        self._dispatcher: Optional[TwilioWhatsAppDispatcher] = None
        self._pipeline: Optional[CaucionPipeline] = None
        self._scheduler: Optional[CaucionScheduler] = None
        self._runner: Optional[web.AppRunner] = None

        # System state
        self._startup_time: Optional[datetime] = None
        self._component_health: Dict[str, bool] = {}

    @property
    def pipeline(self) -> Optional[CaucionPipeline]:
        return self._pipeline

    @with_error_handling(
        component="orchestrator",
        category=ErrorCategory.CONFIGURATION,
        severity=ErrorSeverity.CRITICAL,
        fallback_value=False,
        suppress_exceptions=True,
    )
    def initialize(self) -> bool:
        """
        Load configuration and build all components.

        Returns:
            True if initialization successful, False otherwise.
        """
        if self._config_manager is None:
            self._config_manager = ConfigurationManager(self.config_path)

        self._config = self._config_manager.load_config()
        setup_logging(log_dir=self._config.log_dir, log_level=self._config.log_level)
        self.logger = get_logger("orchestrator")
        self.logger.info(
            "Configuration loaded",
            extra={
                "min_rate": self._config.min_rate,
                "scan_cron": self._config.schedule.scan_cron,
                "rates_url": self._config.scraper.url,
            },
        )

        self._initialize_components(self._config)

        if not self._config.twilio.has_credentials:
            self.logger.warning(
                "Twilio credentials incomplete, notifications will fail when sent"
            )

        self.logger.info("System initialization completed successfully")
        return True

    def _initialize_components(self, config: Configuration):
        """Build components in dependency order."""
        clock = MarketClock(config.market_hours)
        self._component_health["market_clock"] = True

        fetcher = PlaywrightTableFetcher(config.scraper)
        scraper = RateScraper(fetcher, config.scraper.url)
        self._component_health["rate_scraper"] = True

        self._dispatcher = TwilioWhatsAppDispatcher(config.twilio)
        self._notifier = Notifier(
            self._dispatcher,
            AlertFormatter(max_entries=config.max_alert_entries),
            min_rate=config.min_rate,
        )
        self._component_health["notifier"] = config.twilio.has_credentials

        self._pipeline = CaucionPipeline(
            clock=clock,
            scraper=scraper,
            opportunity_filter=OpportunityFilter(config.min_rate),
            notifier=self._notifier,
            min_rate=config.min_rate,
        )

        self._scheduler = CaucionScheduler(
            pipeline=self._pipeline,
            notifier=self._notifier,
            schedule=config.schedule,
            timezone=config.market_hours.timezone,
        )
        self._scheduler.configure()
        self._component_health["scheduler"] = True

    def _setup_signal_handlers(self):
        """Setup signal handlers for graceful shutdown."""
        if sys.platform == "win32":
            signal.signal(signal.SIGINT, self._signal_handler)
            return

        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(signum, self._signal_handler, signum, None)

    def _signal_handler(self, signum: int, frame) -> None:
        """Handle shutdown signals."""
        self.logger.info(
            "Received shutdown signal, initiating graceful shutdown",
            extra={"signal": signum},
        )
        if self._shutdown_event is not None:
            self._shutdown_event.set()

    async def start(self):
        """Start the HTTP server and the scheduler."""
        if self._running:
            self.logger.warning("System is already running")
            return

        self._shutdown_event = asyncio.Event()

        app = create_app(
            self._pipeline, self._config.server, status_provider=self.get_system_status
        )
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self._config.server.host, self._config.server.port)
        try:
            await site.start()
        except OSError:
            await self.shutdown()
            raise
        self._component_health["server"] = True

        self._scheduler.start()

        self._running = True
        self._startup_time = datetime.now()
        self.logger.info(
            "Server listening",
            extra={"host": self._config.server.host, "port": self._config.server.port},
        )

    async def shutdown(self):
        """Gracefully shutdown the system."""
        if not self._running and self._runner is None:
            return

        self.logger.info("Initiating graceful shutdown...")
        self._running = False

        try:
            if self._scheduler:
                self._scheduler.shutdown()

            if self._runner:
                await self._runner.cleanup()
                self._runner = None
                self._component_health["server"] = False
                self.logger.info("HTTP server stopped")

            uptime = datetime.now() - self._startup_time if self._startup_time else None
            self.logger.info(f"System shutdown complete. Uptime: {uptime}")

        except Exception as e:
            self.logger.error(f"Error during shutdown: {e}", exc_info=True)

    def get_system_status(self) -> Dict[str, Any]:
        """Get current system status information."""
        return {
            "running": self._running,
            "startup_time": self._startup_time.isoformat()
            if self._startup_time
            else None,
            "uptime": str(datetime.now() - self._startup_time)
            if self._startup_time
            else None,
            "component_health": self._component_health.copy(),
            "scheduled_jobs": self._scheduler.get_jobs() if self._scheduler else [],
            "errors": self.error_tracker.get_error_stats(),
            "config_loaded": self._config is not None,
        }

    async def run(self) -> bool:
        """
        Run the complete application lifecycle until a shutdown signal.

        Returns:
            False if the system could not start, True after a clean shutdown
        """
        if not self.initialize():
            self.logger.error("System initialization failed")
            return False

        try:
            await self.start()
            self._setup_signal_handlers()
            await self._shutdown_event.wait()
        except Exception as e:
            self.logger.error(f"Unexpected error in application: {e}", exc_info=True)
            return False
        finally:
            await self.shutdown()

        return True

    async def run_once(self) -> bool:
        """
        Run the scheduled-scan policy a single time.

        Returns:
            True when the scan completed or the market was closed
        """
        if not self.initialize():
            self.logger.error("System initialization failed")
            return False

        try:
            result = await self._pipeline.run(notify=True, require_market_open=True)
        except Exception as e:
            self.logger.error(f"One-shot scan failed: {e}", exc_info=True)
            return False

        if not result.scanned:
            self.logger.info("Market closed, nothing scanned")
        else:
            self.logger.info(
                "One-shot scan completed",
                extra={
                    "entry_count": len(result.entries),
                    "opportunity_count": len(result.opportunities),
                    "min_rate": result.min_rate,
                    "notification": result.notification.value,
                },
            )
        return True

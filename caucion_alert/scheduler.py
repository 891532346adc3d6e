"""
Cron-driven triggers for the Caución Rate Alert system.

Runs the scheduled scan and the sandbox maintenance reminder on the
application's event loop with APScheduler.
"""

from typing import Any, Dict, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from .interfaces import INotifier
from .models.config import ScheduleConfig
from .models.delivery import DeliveryResult
from .models.pipeline import PipelineResult
from .services.pipeline import CaucionPipeline
from .utils.error_handling import ErrorCategory, ErrorSeverity, with_error_handling
from .utils.logging import get_logger

SCAN_JOB_ID = "caucion_scan"
REMINDER_JOB_ID = "maintenance_reminder"


class CaucionScheduler:
    """Registers and runs the cron jobs."""

    def __init__(
        self,
        pipeline: CaucionPipeline,
        notifier: INotifier,
        schedule: ScheduleConfig,
        timezone: str,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        """
        Initialize the scheduler.

        Args:
            pipeline: Shared pipeline run by the scan job
            notifier: Notifier used by the reminder job
            schedule: Cron expressions and reminder toggle
            timezone: IANA name the cron expressions are evaluated in
            scheduler: Optional pre-built APScheduler instance
        """
        self.pipeline = pipeline
        self.notifier = notifier
        self.schedule = schedule
        self.timezone = timezone
        self.scheduler = scheduler or AsyncIOScheduler(timezone=timezone)
        self.logger = get_logger("scheduler")

    def configure(self) -> List[str]:
        """
        Register the configured jobs.

        Returns:
            Ids of the registered jobs
        """
        job_ids = []

        if self.schedule.scan_cron:
            self.scheduler.add_job(
                self.run_scheduled_scan,
                CronTrigger.from_crontab(self.schedule.scan_cron, timezone=self.timezone),
                id=SCAN_JOB_ID,
                name="Caución scan",
                replace_existing=True,
                coalesce=True,
            )
            job_ids.append(SCAN_JOB_ID)
            self.logger.info(
                "Scheduled scan registered", extra={"cron": self.schedule.scan_cron}
            )
        else:
            self.logger.info("No scan schedule configured, HTTP triggers only")

        if self.schedule.reminder_enabled:
            self.scheduler.add_job(
                self.send_reminder,
                CronTrigger.from_crontab(
                    self.schedule.reminder_cron, timezone=self.timezone
                ),
                id=REMINDER_JOB_ID,
                name="Sandbox maintenance reminder",
                replace_existing=True,
                coalesce=True,
            )
            job_ids.append(REMINDER_JOB_ID)
            self.logger.info(
                "Maintenance reminder registered",
                extra={"cron": self.schedule.reminder_cron},
            )

        return job_ids

    def start(self):
        """Start the scheduler; must be called from the running event loop."""
        if not self.scheduler.running:
            self.scheduler.start()
            self.logger.info("Scheduler started", extra={"jobs": self.get_jobs()})

    def shutdown(self):
        """
        Ask the scheduler to stop without waiting for running jobs.

        AsyncIOScheduler performs the stop on its event loop, so ``running``
        only turns False once the loop has had a turn.
        """
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            self.logger.info("Scheduler shutdown requested")

    def get_jobs(self) -> List[Dict[str, Any]]:
        """Describe the registered jobs and their next fire time."""
        jobs = []
        for job in self.scheduler.get_jobs():
            # Jobs added before start() have no next run time yet
            next_run = getattr(job, "next_run_time", None)
            jobs.append(
                {
                    "id": job.id,
                    "name": job.name,
                    "next_run_time": next_run.isoformat() if next_run else None,
                }
            )
        return jobs

    @with_error_handling(
        component="scheduler",
        category=ErrorCategory.SCHEDULING,
        severity=ErrorSeverity.HIGH,
        suppress_exceptions=True,
    )
    async def run_scheduled_scan(self) -> Optional[PipelineResult]:
        """Scheduled scan: gate on market hours, notify when opportunities exist."""
        result = await self.pipeline.run(notify=True, require_market_open=True)

        if not result.scanned:
            self.logger.info("Market closed, scheduled scan skipped")
            return result

        self.logger.info(
            "Scheduled scan completed",
            extra={
                "entry_count": len(result.entries),
                "opportunity_count": len(result.opportunities),
                "notification": result.notification.value,
            },
        )
        return result

    @with_error_handling(
        component="scheduler",
        category=ErrorCategory.MESSAGE_DELIVERY,
        severity=ErrorSeverity.MEDIUM,
        suppress_exceptions=True,
    )
    async def send_reminder(self) -> Optional[DeliveryResult]:
        """Send the sandbox keep-alive reminder regardless of market hours."""
        self.logger.info("Sending maintenance reminder")
        return await self.notifier.send_maintenance_reminder()

"""Daily reset scheduler.

APScheduler-based async scheduler that runs the counter sweep once a day
(00:00 UTC by default). Job failures are logged, never propagated.
"""
import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from hospital_scheduler import config
from hospital_scheduler.daily_reset import DailyResetService

logger = logging.getLogger(__name__)

JOB_ID = "daily_counter_reset"


class DailyResetScheduler:
    """Runs DailyResetService.sweep on a cron trigger."""

    def __init__(
        self,
        reset_service: DailyResetService,
        hour: int = config.DAILY_RESET_HOUR,
        minute: int = config.DAILY_RESET_MINUTE,
        timezone_name: str = config.RESET_TIMEZONE,
        enabled: bool = config.SCHEDULER_ENABLED,
    ):
        """
        Initialize scheduler.

        Args:
            reset_service: Service whose sweep() is invoked
            hour: Hour of day for the sweep
            minute: Minute of hour for the sweep
            timezone_name: Timezone of the cron trigger
            enabled: Whether scheduler is enabled
        """
        self.reset_service = reset_service
        self.hour = hour
        self.minute = minute
        self.timezone_name = timezone_name
        self.enabled = enabled

        self._scheduler: Optional[AsyncIOScheduler] = None
        self._is_running = False

    @property
    def is_running(self) -> bool:
        return self._is_running

    def start(self) -> None:
        """Start the scheduler (must be called from a running event loop)."""
        if not self.enabled:
            logger.info("DailyResetScheduler is disabled, skipping start")
            return

        if self._is_running:
            logger.warning("DailyResetScheduler already running")
            return

        scheduler = AsyncIOScheduler(timezone=self.timezone_name)
        scheduler.add_job(
            self.run_sweep,
            CronTrigger(hour=self.hour, minute=self.minute, timezone=self.timezone_name),
            id=JOB_ID,
            replace_existing=True,
            name="Daily Appointment Counter Reset",
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        self._is_running = True
        logger.info(
            f"DailyResetScheduler started ({self.hour:02d}:{self.minute:02d} {self.timezone_name})"
        )

    def shutdown(self) -> None:
        """Stop the scheduler."""
        if self._scheduler and self._is_running:
            self._scheduler.shutdown(wait=False)
            self._is_running = False
            logger.info("DailyResetScheduler stopped")

    def run_sweep(self) -> Optional[int]:
        """
        Scheduled job body.

        Returns:
            Number of doctors reset, or None if the sweep failed
        """
        try:
            count = self.reset_service.sweep()
            logger.info(f"Daily reset: {count} doctor(s) reset")
            return count
        except Exception as e:
            logger.error(f"Daily reset failed: {e}", exc_info=True)
            return None

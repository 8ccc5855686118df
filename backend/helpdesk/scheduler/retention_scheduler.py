"""Retention Scheduler - Optional daily run of the retention sweep

The sweep normally runs out-of-band via scripts/archive_data.py. When
retention_schedule_enabled is set, the API process also runs it once a
day. The job is a plain function, so APScheduler runs it in its
thread pool instead of on the event loop. max_instances=1 keeps runs inside one process from overlapping;
nothing coordinates separate processes, so enable this on one server only.
"""
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from ..config.settings import Settings
from ..services.retention_service import RetentionSweep
from ..utils.idgen import generate_correlation_id
from ..utils.logger import get_logger, set_correlation_id

logger = get_logger(__name__)


class RetentionScheduler:
    """APScheduler wrapper for the daily retention sweep"""

    def __init__(self, settings: Settings, sweep: RetentionSweep):
        self.settings = settings
        self.sweep = sweep
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._is_running = False

    def start(self) -> None:
        """Start the scheduler"""
        if self._is_running:
            logger.warning("Scheduler already running")
            return

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self._run_sweep,
            trigger=CronTrigger(hour=self.settings.retention_cron_hour, minute=0, timezone="UTC"),
            id="retention_sweep",
            name="Archive aged tickets, audit logs and logins",
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )
        self.scheduler.start()
        self._is_running = True

        logger.info(
            f"Retention scheduler started (daily at {self.settings.retention_cron_hour:02d}:00 UTC)"
        )

    def stop(self) -> None:
        """Stop the scheduler"""
        if self.scheduler:
            self.scheduler.shutdown(wait=False)
            self._is_running = False
            logger.info("Retention scheduler stopped")

    @property
    def is_running(self) -> bool:
        return self._is_running

    def _run_sweep(self) -> None:
        set_correlation_id(generate_correlation_id())
        result = self.sweep.run()
        if result.failed:
            logger.error(f"Retention sweep had failing tables: {list(result.failed)}")

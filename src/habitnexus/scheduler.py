"""Background reminder polling on top of APScheduler."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from apscheduler.schedulers.background import BackgroundScheduler as APScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .services.reminders import ReminderCallback, ReminderPoller

if TYPE_CHECKING:
    from .context import AppContext

logger = logging.getLogger("habitnexus.scheduler")

REMINDER_JOB_ID = "reminder_poll"


class ReminderScheduler:
    """Runs :class:`ReminderPoller` on a fixed interval in a background thread."""

    def __init__(self, ctx: AppContext, notify: ReminderCallback, *, interval_seconds: Optional[int] = None):
        """Initialize the scheduler with app context.

        Args:
            ctx: Application context holding the current state
            notify: Called with ``(habit, reminder)`` for every reminder that fires
            interval_seconds: Poll period; defaults to ``REMINDER_POLL_SECONDS``
        """
        self.ctx = ctx
        self.interval_seconds = interval_seconds or ctx.config.REMINDER_POLL_SECONDS
        self.poller = ReminderPoller(lambda: ctx.state.habits, notify)
        self.scheduler: Optional[APScheduler] = None

    @property
    def running(self) -> bool:
        return self.scheduler is not None

    def start(self) -> None:
        """Start polling."""
        if self.scheduler is not None:
            logger.warning("Scheduler already running")
            return

        self.scheduler = APScheduler()
        self.scheduler.add_job(
            func=self._run_poll,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=REMINDER_JOB_ID,
            name="Reminder Poll",
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info(f"Reminder polling started every {self.interval_seconds}s")

    def stop(self) -> None:
        """Stop the background scheduler gracefully."""
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=True)
            self.scheduler = None
            logger.info("Reminder polling stopped")

    def _run_poll(self) -> None:
        try:
            self.poller.poll()
        except Exception as exc:
            logger.error(f"Reminder poll failed: {exc}", exc_info=True)


def create_scheduler(
    ctx: AppContext,
    notify: ReminderCallback,
    *,
    auto_start: bool = False,
) -> ReminderScheduler:
    """Create and optionally start a reminder scheduler."""
    scheduler = ReminderScheduler(ctx, notify)
    if auto_start:
        scheduler.start()
    return scheduler

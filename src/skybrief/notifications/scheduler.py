"""
Notification Scheduler

Runs NotificationService.process_notifications on a fixed interval inside the
application's event loop. Scans run one after another in a single task, so a
slow scan delays the next one instead of overlapping it.
"""

import asyncio
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class NotificationScheduler:
    """
    Args:
        service: NotificationService
        interval_seconds: Pause between the end of one scan and the start of the next
    """

    def __init__(self, service, interval_seconds: float):
        self.service = service
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start scanning now and then every interval; no-op when already running."""
        if self.is_running:
            logger.warning("Notification scheduler is already running")
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"Notification scheduler started (interval {self.interval_seconds}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Notification scheduler stopped")

    async def run_notification_check(self) -> None:
        """Run one scan; failures are logged and never stop the scheduler."""
        try:
            sent = await self.service.process_notifications()
            logger.info(f"Notification check finished, {sent} SMS sent")
        except Exception:
            logger.exception("Notification check failed")

    async def _run(self) -> None:
        while True:
            await self.run_notification_check()
            await asyncio.sleep(self.interval_seconds)

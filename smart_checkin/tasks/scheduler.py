"""
Background task scheduler for housekeeping.

Runs the expired-challenge sweep on an interval inside the application
process. Deployments that prefer an external cron can disable it and call
the maintenance endpoint instead.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from smart_checkin.config import settings
from smart_checkin.database import AsyncSessionLocal
from smart_checkin.models.security_log import SecurityEventType, SecurityLog
from smart_checkin.services.challenge_store import ChallengeStore

logger = logging.getLogger(__name__)


@dataclass
class ScheduledTask:
    """Represents a scheduled background task."""
    name: str
    func: Callable
    interval_seconds: int
    last_run: Optional[datetime] = None
    next_run: Optional[datetime] = None
    enabled: bool = True
    running: bool = False
    failures: int = 0

    def __post_init__(self):
        if self.next_run is None:
            self.next_run = datetime.now() + timedelta(seconds=self.interval_seconds)

    def should_run(self) -> bool:
        """Check if task should run now."""
        return (
            self.enabled
            and not self.running
            and self.next_run is not None
            and datetime.now() >= self.next_run
        )

    def mark_started(self):
        self.running = True

    def mark_completed(self):
        """Mark task as completed and schedule next run."""
        self.last_run = datetime.now()
        self.next_run = self.last_run + timedelta(seconds=self.interval_seconds)
        self.running = False


class BackgroundTaskScheduler:
    """Manages background task scheduling and execution."""

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker] = None,
        sweep_interval_seconds: Optional[int] = None,
        poll_interval_seconds: float = 10,
    ):
        self.session_factory = session_factory or AsyncSessionLocal
        self.poll_interval_seconds = poll_interval_seconds
        self.tasks: Dict[str, ScheduledTask] = {}
        self.running = False
        self.add_task(
            name="challenge_sweep",
            func=self._run_challenge_sweep,
            interval_seconds=sweep_interval_seconds or settings.challenge_sweep_interval_seconds,
        )

    def add_task(self, name: str, func: Callable, interval_seconds: int, enabled: bool = True):
        """Add a new scheduled task."""
        self.tasks[name] = ScheduledTask(
            name=name,
            func=func,
            interval_seconds=interval_seconds,
            enabled=enabled,
        )
        logger.info(f"Added background task: {name} (interval: {interval_seconds}s)")

    async def start(self):
        """Run the scheduler loop until stop() is called or the task is cancelled."""
        if self.running:
            logger.warning("Task scheduler is already running")
            return

        self.running = True
        logger.info("Starting background task scheduler")

        while self.running:
            try:
                for task in list(self.tasks.values()):
                    if task.should_run():
                        await self._execute_task(task)

                await asyncio.sleep(self.poll_interval_seconds)

            except asyncio.CancelledError:
                logger.info("Task scheduler cancelled")
                break

        logger.info("Background task scheduler stopped")

    def stop(self):
        """Stop the task scheduler."""
        self.running = False
        logger.info("Stopping background task scheduler")

    async def run_task(self, name: str) -> Any:
        """Run a task immediately, outside its schedule."""
        task = self.tasks[name]
        return await self._execute_task(task)

    async def _execute_task(self, task: ScheduledTask) -> Any:
        logger.debug(f"Executing background task: {task.name}")
        task.mark_started()

        try:
            result = await task.func()
        except Exception as e:
            # The loop keeps going; the task is retried at its next interval
            task.failures += 1
            logger.error(f"Task failed: {task.name} - {e}", exc_info=True)
            result = None
        finally:
            task.mark_completed()

        logger.debug(f"Task finished: {task.name}")
        return result

    async def _run_challenge_sweep(self) -> int:
        """Delete expired WebAuthn challenges."""
        async with self.session_factory() as session:
            return await sweep_challenges(session, trigger="scheduler")

    def get_task_status(self) -> Dict[str, Any]:
        """Get status of all scheduled tasks."""
        status = {
            "scheduler_running": self.running,
            "total_tasks": len(self.tasks),
            "enabled_tasks": sum(1 for task in self.tasks.values() if task.enabled),
            "tasks": {}
        }

        for name, task in self.tasks.items():
            status["tasks"][name] = {
                "enabled": task.enabled,
                "running": task.running,
                "failures": task.failures,
                "interval_seconds": task.interval_seconds,
                "last_run": task.last_run.isoformat() if task.last_run else None,
                "next_run": task.next_run.isoformat() if task.next_run else None,
            }

        return status


async def sweep_challenges(session: AsyncSession, trigger: str) -> int:
    """
    Remove expired challenges and record the sweep in the security log.

    Args:
        session: Database session
        trigger: What started the sweep (scheduler, http, cli)

    Returns:
        int: Number of challenges removed
    """
    deleted_count = await ChallengeStore(session).sweep_expired()

    session.add(
        SecurityLog.create_log(
            event_type=SecurityEventType.CHALLENGES_SWEPT,
            description=f"Removed {deleted_count} expired challenges",
            metadata={"deleted_count": deleted_count, "trigger": trigger},
        )
    )
    await session.commit()
    return deleted_count


# Global task scheduler instance
_task_scheduler: Optional[BackgroundTaskScheduler] = None
_scheduler_task: Optional[asyncio.Task] = None


async def start_background_tasks():
    """Start the global background task scheduler."""
    global _task_scheduler, _scheduler_task

    if _task_scheduler is not None and _task_scheduler.running:
        logger.warning("Background tasks are already running")
        return

    _task_scheduler = BackgroundTaskScheduler()
    _scheduler_task = asyncio.create_task(_task_scheduler.start())
    logger.info("Background tasks started")


async def stop_background_tasks():
    """Stop the global background task scheduler."""
    global _task_scheduler, _scheduler_task

    if _task_scheduler is not None:
        _task_scheduler.stop()

    if _scheduler_task is not None:
        _scheduler_task.cancel()
        try:
            await _scheduler_task
        except asyncio.CancelledError:
            pass
        _scheduler_task = None

    _task_scheduler = None
    logger.info("Background tasks stopped")


async def run_cleanup_now(session_factory: Optional[async_sessionmaker] = None) -> Dict[str, int]:
    """Manually trigger the challenge sweep."""
    factory = session_factory or AsyncSessionLocal
    async with factory() as session:
        deleted_count = await sweep_challenges(session, trigger="manual")

    results = {"challenges_cleaned": deleted_count}
    logger.info(f"Manual cleanup completed: {results}")
    return results

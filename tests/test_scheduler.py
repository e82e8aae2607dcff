"""Tests for the background challenge sweep."""

from datetime import timedelta

from sqlalchemy import select

from smart_checkin.database import utcnow
from smart_checkin.models.security_log import SecurityEventType, SecurityLog
from smart_checkin.models.webauthn_challenge import CeremonyType, WebAuthnChallenge
from smart_checkin.tasks.scheduler import BackgroundTaskScheduler, ScheduledTask, run_cleanup_now


async def seed_expired(session_factory, count=2):
    async with session_factory() as session:
        for _ in range(count):
            session.add(
                WebAuthnChallenge(
                    challenge="b2xk",
                    ceremony=CeremonyType.AUTHENTICATION.value,
                    expires_at=utcnow() - timedelta(minutes=1),
                )
            )
        await session.commit()


def test_scheduled_task_not_due_immediately():
    task = ScheduledTask(name="noop", func=lambda: None, interval_seconds=60)
    assert not task.should_run()
    task.enabled = False
    task.next_run = task.next_run - timedelta(minutes=5)
    assert not task.should_run()


async def test_challenge_sweep_task(session_factory):
    await seed_expired(session_factory, count=2)
    scheduler = BackgroundTaskScheduler(session_factory=session_factory, sweep_interval_seconds=60)

    assert await scheduler.run_task("challenge_sweep") == 2

    status = scheduler.get_task_status()
    assert status["tasks"]["challenge_sweep"]["last_run"] is not None
    assert status["tasks"]["challenge_sweep"]["failures"] == 0

    async with session_factory() as session:
        result = await session.execute(
            select(SecurityLog).where(SecurityLog.event_type == SecurityEventType.CHALLENGES_SWEPT.value)
        )
        log = result.scalar_one()
        assert log.event_metadata == {"deleted_count": 2, "trigger": "scheduler"}


async def test_failing_task_does_not_stop_scheduler(session_factory):
    scheduler = BackgroundTaskScheduler(session_factory=session_factory)

    async def boom():
        raise RuntimeError("store unavailable")

    scheduler.add_task("boom", boom, interval_seconds=60)
    assert await scheduler.run_task("boom") is None
    assert scheduler.tasks["boom"].failures == 1
    assert not scheduler.tasks["boom"].running


async def test_run_cleanup_now(session_factory):
    await seed_expired(session_factory, count=3)
    assert await run_cleanup_now(session_factory) == {"challenges_cleaned": 3}

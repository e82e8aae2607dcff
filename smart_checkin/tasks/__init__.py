"""
Background tasks module for check-in system housekeeping.

Schedules the periodic sweep of expired WebAuthn challenges.
"""

from .scheduler import (
    BackgroundTaskScheduler,
    run_cleanup_now,
    start_background_tasks,
    stop_background_tasks,
    sweep_challenges,
)

__all__ = [
    "BackgroundTaskScheduler",
    "run_cleanup_now",
    "start_background_tasks",
    "stop_background_tasks",
    "sweep_challenges",
]

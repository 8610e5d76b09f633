"""
Background Job Scheduler

Scheduled housekeeping using APScheduler with AsyncIO support.
The scheduler is created and torn down by the FastAPI lifespan and kept
on ``app.state``; nothing here is a module-level singleton.

Design Principles:
- Jobs are idempotent (safe to run multiple times)
- Failed jobs are logged but don't crash the scheduler
"""

import logging
from collections.abc import Callable, Coroutine
from datetime import UTC, datetime
from typing import Any

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from astro_api.core.rate_limit import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)

JOB_ID_PRUNE_RATE_LIMITS = "rate_limit_prune_expired_windows"


class SchedulerConfig:
    """Configuration for the background scheduler."""

    TIMEZONE = "UTC"

    JOB_DEFAULTS = {
        "coalesce": True,  # Combine multiple missed executions into one
        "max_instances": 1,
        "misfire_grace_time": 60,
    }


def _job_listener(event: JobExecutionEvent) -> None:
    """Log job execution results."""
    if event.exception:
        logger.error(
            f"Job {event.job_id} failed with exception: {event.exception}",
            exc_info=event.exception,
        )
    else:
        logger.debug(f"Job {event.job_id} executed at {datetime.now(UTC).isoformat()}")


def create_scheduler() -> AsyncIOScheduler:
    """Build an AsyncIOScheduler configured for this service (not started)."""
    scheduler = AsyncIOScheduler(
        timezone=SchedulerConfig.TIMEZONE,
        job_defaults=SchedulerConfig.JOB_DEFAULTS,
    )
    scheduler.add_listener(_job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)
    return scheduler


def register_job(
    scheduler: AsyncIOScheduler,
    job_id: str,
    func: Callable[[], Coroutine[Any, Any, Any]],
    trigger: IntervalTrigger,
) -> None:
    """Add (or replace) a job on the scheduler."""
    scheduler.add_job(func, trigger=trigger, id=job_id, replace_existing=True)
    logger.info(f"Registered job: {job_id}")


def register_rate_limit_pruning(
    scheduler: AsyncIOScheduler,
    limiter: SlidingWindowRateLimiter,
) -> None:
    """Prune closed rate limit windows once per window length."""
    register_job(
        scheduler,
        JOB_ID_PRUNE_RATE_LIMITS,
        limiter.prune,
        IntervalTrigger(seconds=limiter.window_seconds),
    )


async def stop_scheduler(scheduler: AsyncIOScheduler | None) -> None:
    """Stop the scheduler, waiting for running jobs to finish."""
    if scheduler is None or not scheduler.running:
        logger.debug("Scheduler not running, nothing to stop")
        return

    logger.info("Stopping background job scheduler...")
    scheduler.shutdown(wait=True)
    logger.info("Background job scheduler stopped")

"""
Background Task Scheduler for rate limiter maintenance.

Uses APScheduler to periodically sweep expired entries out of the in-memory
rate limiter so that memory use stays proportional to active clients.
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger

from services.rate_limit_service import RateLimiter

SWEEP_JOB_ID = "rate_limit_sweep"

# Global scheduler instance
scheduler: BackgroundScheduler | None = None


def rate_limit_sweep_job(rate_limiter: RateLimiter) -> int:
    """Scheduled job removing expired rate limit entries."""
    try:
        removed = rate_limiter.sweep()
    except Exception as e:
        logger.error(f"Rate limit sweep failed: {e!r}")
        raise
    if removed:
        logger.info(
            f"Rate limit sweep removed {removed} entries ({len(rate_limiter)} tracked)"
        )
    return removed


def setup_scheduler(rate_limiter: RateLimiter, interval_seconds: int) -> None:
    """
    Configure and start the background scheduler.

    Schedules:
    - Rate limiter sweep: every ``interval_seconds`` (skipped when <= 0)
    """
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already initialized")
        return

    if interval_seconds <= 0:
        logger.info("Rate limit sweep disabled (interval <= 0)")
        return

    scheduler = BackgroundScheduler()

    scheduler.add_job(
        rate_limit_sweep_job,
        IntervalTrigger(seconds=interval_seconds),
        args=[rate_limiter],
        id=SWEEP_JOB_ID,
        name="Rate Limit Sweep",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )

    scheduler.start()
    logger.info(f"Background scheduler started; sweeping every {interval_seconds}s")


def shutdown_scheduler() -> None:
    """Gracefully shutdown the scheduler."""
    global scheduler

    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Background scheduler stopped")
    scheduler = None

"""
Periodic job scheduler.

Enqueues the commission actors with APScheduler:
- maturation according to commission_check_schedule ("hourly" or "HH:MM")
- reconciliation sweep every hour

The schedule setting is re-read periodically, so an admin change in
app_settings takes effect without a restart.
"""

import asyncio
import signal

from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from app.config.settings import settings
from app.services.commission.config import (
    HOURLY_SCHEDULE,
    load_commission_config,
    parse_check_schedule,
)


MATURATION_JOB_ID = "process_commission_status"
RECONCILIATION_JOB_ID = "reprocess_pending_commissions"
SCHEDULE_REFRESH_JOB_ID = "refresh_commission_schedule"
SCHEDULE_REFRESH_MINUTES = 15

# Global scheduler reference for graceful shutdown
scheduler_instance: AsyncIOScheduler | None = None


def build_trigger(check_schedule: str) -> CronTrigger:
    """
    Cron trigger for a commission_check_schedule value.

    Args:
        check_schedule: "hourly" or "HH:MM" (invalid values mean hourly)

    Returns:
        CronTrigger in UTC
    """
    schedule = parse_check_schedule(check_schedule)
    if schedule == HOURLY_SCHEDULE:
        return CronTrigger(minute=0, timezone="UTC")

    hour, minute = schedule.split(":")
    return CronTrigger(hour=int(hour), minute=int(minute), timezone="UTC")


def create_scheduler() -> AsyncIOScheduler:
    """Create scheduler with single-instance, coalescing job defaults."""
    return AsyncIOScheduler(
        jobstores={"default": MemoryJobStore()},
        executors={"default": AsyncIOExecutor()},
        job_defaults={
            "coalesce": True,  # Combine multiple pending executions into one
            "max_instances": 1,
            "misfire_grace_time": 300,
        },
        timezone="UTC",
    )


def enqueue_maturation() -> None:
    """Send the maturation actor to the broker."""
    from jobs.tasks.commission_maturation import process_commission_status

    process_commission_status.send()
    logger.info("Enqueued commission maturation")


def enqueue_reconciliation() -> None:
    """Send the reconciliation sweep to the broker."""
    from jobs.tasks.commission_reconciliation import reprocess_pending_commissions

    reprocess_pending_commissions.send()
    logger.info("Enqueued commission reconciliation")


async def load_check_schedule() -> str:
    """Read commission_check_schedule from the store."""
    from app.config.database import async_session_maker

    async with async_session_maker() as session:
        config = await load_commission_config(session)
    return config.check_schedule


def register_jobs(scheduler: AsyncIOScheduler, check_schedule: str) -> None:
    """
    Register all periodic jobs.

    Args:
        scheduler: Scheduler instance
        check_schedule: Normalized commission_check_schedule
    """
    scheduler.add_job(
        enqueue_maturation,
        build_trigger(check_schedule),
        id=MATURATION_JOB_ID,
        name=f"Commission maturation ({check_schedule})",
        replace_existing=True,
    )
    scheduler.add_job(
        enqueue_reconciliation,
        CronTrigger(minute=30, timezone="UTC"),
        id=RECONCILIATION_JOB_ID,
        name="Commission reconciliation (hourly)",
        replace_existing=True,
    )
    scheduler.add_job(
        refresh_schedule,
        "interval",
        minutes=SCHEDULE_REFRESH_MINUTES,
        args=[scheduler, check_schedule],
        id=SCHEDULE_REFRESH_JOB_ID,
        name="Refresh commission schedule",
        replace_existing=True,
    )


async def refresh_schedule(scheduler: AsyncIOScheduler, current: str) -> None:
    """Reschedule maturation when commission_check_schedule changed."""
    try:
        check_schedule = await load_check_schedule()
    except Exception as e:
        logger.warning(f"Could not refresh commission schedule: {e}")
        return

    if check_schedule == current:
        return

    logger.info(
        f"Commission schedule changed: {current} -> {check_schedule}"
    )
    scheduler.reschedule_job(MATURATION_JOB_ID, trigger=build_trigger(check_schedule))
    scheduler.modify_job(
        MATURATION_JOB_ID, name=f"Commission maturation ({check_schedule})"
    )
    scheduler.modify_job(SCHEDULE_REFRESH_JOB_ID, args=[scheduler, check_schedule])


async def main() -> None:
    """Run the scheduler and its health server until stopped."""
    from app.config.logging import setup_logging
    from jobs.broker import broker  # noqa: F401
    from jobs.health import set_scheduler, start_health_server, stop_health_server

    setup_logging("scheduler")

    global scheduler_instance
    scheduler = create_scheduler()
    scheduler_instance = scheduler

    try:
        check_schedule = await load_check_schedule()
    except Exception as e:
        check_schedule = parse_check_schedule(settings.default_check_schedule)
        logger.warning(
            f"Could not read commission schedule, using {check_schedule}: {e}"
        )

    register_jobs(scheduler, check_schedule)
    scheduler.start()
    set_scheduler(scheduler)

    for job in scheduler.get_jobs():
        logger.info(f"Scheduled job: {job.name} - Next run: {job.next_run_time}")

    runner, _ = await start_health_server(port=settings.health_check_port)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    try:
        await stop_event.wait()
    finally:
        logger.info("Graceful shutdown initiated...")
        scheduler.shutdown(wait=False)
        await stop_health_server(runner)

        from app.config.database import engine
        await engine.dispose()
        logger.info("Graceful shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())

"""
Background scheduler for the challenge completion sweep.
The sweep itself lives in ChallengeService; this module only decides when
it runs.
"""

import logging
from datetime import datetime
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from taskduel.database import SessionLocal
from taskduel.services.challenge_service import ChallengeService
from taskduel.config import SWEEP_INTERVAL_MINUTES

logger = logging.getLogger("taskduel.scheduler")

scheduler = AsyncIOScheduler()


def run_challenge_sweep(now: datetime = None) -> int:
    """Job: close expired active challenges"""
    db = SessionLocal()
    try:
        closed = ChallengeService(db).sweep_completions(now or datetime.now())
        if closed:
            logger.info(f"Challenge sweep closed {len(closed)} challenges: {[c.id for c in closed]}")
        return len(closed)
    except Exception as e:
        logger.error(f"Scheduler Error (Challenge sweep): {e}")
        return 0
    finally:
        db.close()


async def run_challenge_sweep_job():
    run_challenge_sweep()


def start_scheduler(interval_minutes: int = SWEEP_INTERVAL_MINUTES):
    """Start the scheduler"""
    if not scheduler.running:
        scheduler.add_job(
            run_challenge_sweep_job,
            IntervalTrigger(minutes=interval_minutes),
            id="challenge_sweep",
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        scheduler.start()
        logger.info(">>> APScheduler STARTED <<<")
        logger.info(f"Scheduled jobs: {[job.id for job in scheduler.get_jobs()]}")


def stop_scheduler():
    """Stop the scheduler"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("APScheduler stopped")

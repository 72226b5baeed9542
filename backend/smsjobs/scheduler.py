"""
Background Session Sweep

Inbound messages already sweep expired sessions, but an instance that stops
receiving traffic would keep its last sessions in memory forever. When
SESSION_SWEEP_INTERVAL_SECONDS is set, an APScheduler interval job sweeps
on a timer as well.
"""

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from smsjobs.middleware.metrics import record_sessions_swept
from smsjobs.services.sessions import SessionStore

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


async def sweep_sessions(sessions: SessionStore) -> int:
    try:
        dropped = await sessions.sweep()
    except Exception as e:
        logger.warning(f"Session sweep failed: {e}")
        return 0
    record_sessions_swept(dropped)
    if dropped:
        logger.info(f"Swept {dropped} expired sessions")
    return dropped


def start_scheduler(sessions: SessionStore, interval_seconds: int) -> Optional[AsyncIOScheduler]:
    """Schedule the periodic sweep; returns None when disabled."""
    if interval_seconds <= 0:
        return None

    scheduler.add_job(
        sweep_sessions,
        trigger=IntervalTrigger(seconds=interval_seconds),
        args=[sessions],
        id="sweep_sessions",
        name="Drop expired SMS search sessions",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(f"Session sweep scheduled every {interval_seconds}s")
    return scheduler


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown()

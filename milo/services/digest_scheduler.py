"""In-process scheduler that sends the digest once a day.

Deployments that trigger ``/send-digest`` from an external cron leave
``DIGEST_SCHEDULE_ENABLED`` off and never start this loop.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable

from loguru import logger

from ..config.email_config import EmailConfig, get_email_config
from .digest_service import DigestAggregator, get_digest_aggregator


def next_run_utc(now: datetime, hour: int, minute: int) -> datetime:
    """Return the next ``hour:minute`` UTC strictly after ``now``."""
    now = now.astimezone(timezone.utc) if now.tzinfo else now.replace(tzinfo=timezone.utc)
    scheduled = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if scheduled <= now:
        scheduled = scheduled + timedelta(days=1)
    return scheduled


async def run_scheduled_digest(
    aggregator_factory: Callable[[], DigestAggregator] = get_digest_aggregator,
    window_end: datetime | None = None,
) -> None:
    """Run one digest and log the outcome; failures do not propagate."""
    try:
        report = await aggregator_factory().build_digest(window_end)
    except Exception:
        logger.exception("Scheduled digest run failed")
        return
    logger.info("Scheduled digest finished: {} (count={})", report.message, report.count)


async def digest_scheduler_loop(
    email_config: EmailConfig | None = None,
    aggregator_factory: Callable[[], DigestAggregator] = get_digest_aggregator,
) -> None:
    """Sleep until the configured time, send the digest, repeat until cancelled."""
    config = email_config or get_email_config()
    hour, minute = config.digest_hour_minute
    while True:
        now = datetime.now(timezone.utc)
        next_run = next_run_utc(now, hour, minute)
        sleep_for = max(0.0, (next_run - now).total_seconds())
        logger.info("Next digest run scheduled at {} (in {:.0f}s)", next_run.isoformat(), sleep_for)
        await asyncio.sleep(sleep_for)
        await run_scheduled_digest(aggregator_factory, window_end=next_run)

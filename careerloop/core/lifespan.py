import contextlib
from contextlib import asynccontextmanager
import asyncio
import logging

from careerloop.core.config import settings
from careerloop.core.loop_store import init_loop_store, purge_stale_loops

logger = logging.getLogger(__name__)

PURGE_INTERVAL_S = 3600


@asynccontextmanager
async def lifespan(app):
    init_loop_store()
    purged = purge_stale_loops(settings.loop_retention_days)
    if purged:
        logger.info("loop_retention_purge deleted=%s", purged)

    stop_event = asyncio.Event()

    async def periodic_purge() -> None:
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=PURGE_INTERVAL_S)
            except asyncio.TimeoutError:
                pass
            if stop_event.is_set():
                break
            try:
                deleted = purge_stale_loops(settings.loop_retention_days)
                if deleted:
                    logger.info("loop_retention_purge deleted=%s", deleted)
            except Exception as exc:  # pragma: no cover - purge must not stop the service
                logger.warning("loop_retention_purge_failed: %s", exc)

    purge_task = asyncio.create_task(periodic_purge())
    yield
    stop_event.set()
    if not purge_task.done():
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task

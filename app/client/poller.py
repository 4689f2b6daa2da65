from datetime import datetime
from typing import Optional
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.client.data_store import DataStore, SyncResult, describe_time_since_sync
from app.config import settings

logger = logging.getLogger(__name__)

JOB_ID = "dormguard_data_store_sync"


class DataStorePoller:
    """
    Periodically refreshes a ``DataStore``.

    Runs as a single APScheduler interval job; overdue runs coalesce and a
    tick that finds a refresh still in flight does nothing.
    """

    def __init__(
        self,
        store: DataStore,
        interval: Optional[float] = None,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.store = store
        self.interval = interval if interval is not None else settings.poll_interval_seconds
        self.scheduler = scheduler or AsyncIOScheduler()
        self._owns_scheduler = scheduler is None
        self.last_result: Optional[SyncResult] = None

    @property
    def running(self) -> bool:
        return self.scheduler.running and self.scheduler.get_job(JOB_ID) is not None

    async def tick(self) -> Optional[SyncResult]:
        if self.store.is_syncing:
            logger.debug("[Poller] Refresh still in flight; skipping tick")
            return None
        return await self.refresh()

    async def refresh(self) -> SyncResult:
        """Refresh now, outside the schedule."""
        self.last_result = await self.store.refresh_all()
        if not self.last_result.ok:
            logger.info(f"[Poller] Sync finished with stale collections: {sorted(self.last_result.failed)}")
        return self.last_result

    def start(self) -> None:
        """Schedule polling, with the first sync due immediately. Needs a running event loop."""
        self.scheduler.add_job(
            self.tick,
            trigger=IntervalTrigger(seconds=self.interval),
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
            next_run_time=datetime.now(),
        )
        if not self.scheduler.running:
            self.scheduler.start()
        logger.info(f"[Poller] Polling every {self.interval}s")

    def stop(self) -> None:
        if self.scheduler.get_job(JOB_ID) is not None:
            self.scheduler.remove_job(JOB_ID)
        if self._owns_scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("[Poller] Polling stopped")

    def time_since_sync(self, now: Optional[datetime] = None) -> str:
        return describe_time_since_sync(self.store.last_sync, now)

"""
Tests for the background poller that keeps a DataStore fresh.
"""

import asyncio
from datetime import datetime, timedelta

import httpx
import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.client import VISITORS, DataStore, DataStorePoller, DormGuardClient
from app.client.poller import JOB_ID


@pytest.fixture
def calls():
    return {"count": 0}


@pytest.fixture
async def store(calls):
    def handler(request):
        calls["count"] += 1
        return httpx.Response(200, json=[])

    client = DormGuardClient(base_url="http://test", transport=httpx.MockTransport(handler))
    store = DataStore(client, collections=(VISITORS,))
    yield store
    await client.aclose()


async def wait_for(predicate, timeout=2.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


class TestTick:
    async def test_refresh_records_result(self, store):
        poller = DataStorePoller(store, interval=60)

        result = await poller.refresh()

        assert result.ok
        assert poller.last_result is result
        assert store.last_sync is not None

    async def test_tick_skips_while_syncing(self, store, calls):
        poller = DataStorePoller(store, interval=60)
        store.is_syncing = True

        assert await poller.tick() is None
        assert calls["count"] == 0

    async def test_interval_defaults_to_settings(self, store):
        from app.config import settings

        assert DataStorePoller(store).interval == settings.poll_interval_seconds


class TestSchedule:
    async def test_start_syncs_immediately_and_stop(self, store):
        poller = DataStorePoller(store, interval=60)

        poller.start()
        try:
            assert poller.running
            job = poller.scheduler.get_job(JOB_ID)
            assert job.max_instances == 1
            assert job.coalesce is True
            assert job.trigger.interval == timedelta(seconds=60)

            await wait_for(lambda: store.last_sync is not None)
        finally:
            poller.stop()

        assert not poller.running
        await asyncio.sleep(0)

    async def test_restart_replaces_the_job(self, store):
        poller = DataStorePoller(store, interval=60)

        poller.start()
        poller.start()
        try:
            assert len(poller.scheduler.get_jobs()) == 1
        finally:
            poller.stop()
        await asyncio.sleep(0)

    async def test_shared_scheduler_is_left_running(self, store):
        scheduler = AsyncIOScheduler()
        scheduler.start()
        poller = DataStorePoller(store, interval=60, scheduler=scheduler)

        poller.start()
        poller.stop()

        assert scheduler.running
        assert scheduler.get_job(JOB_ID) is None
        scheduler.shutdown(wait=False)
        await asyncio.sleep(0)


class TestStaleness:
    async def test_time_since_sync(self, store):
        poller = DataStorePoller(store, interval=60)
        assert poller.time_since_sync() == "Never"

        store.last_sync = datetime(2030, 1, 1, 12, 0)

        assert poller.time_since_sync(datetime(2030, 1, 1, 12, 0, 30)) == "30s ago"

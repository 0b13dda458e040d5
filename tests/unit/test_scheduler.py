"""
Unit tests for the periodic scheduler.

Tests cover:
- commission_check_schedule -> cron trigger
- Job registration and schedule refresh
- Health probes
"""

import pytest
from aiohttp.test_utils import TestClient, TestServer
from apscheduler.triggers.cron import CronTrigger

import jobs.scheduler as scheduler_module
from jobs.health import create_health_app, set_scheduler
from jobs.scheduler import (
    MATURATION_JOB_ID,
    RECONCILIATION_JOB_ID,
    SCHEDULE_REFRESH_JOB_ID,
    build_trigger,
    create_scheduler,
    refresh_schedule,
    register_jobs,
)


def _fields(trigger: CronTrigger) -> dict[str, str]:
    return {field.name: str(field) for field in trigger.fields}


class TestBuildTrigger:
    """Test commission_check_schedule -> cron trigger."""

    def test_hourly(self):
        fields = _fields(build_trigger("hourly"))
        assert fields["minute"] == "0"
        assert fields["hour"] == "*"

    def test_time_of_day(self):
        fields = _fields(build_trigger("03:15"))
        assert fields["hour"] == "3"
        assert fields["minute"] == "15"

    def test_invalid_means_hourly(self):
        fields = _fields(build_trigger("whenever"))
        assert fields["minute"] == "0"
        assert fields["hour"] == "*"


@pytest.fixture
async def running_scheduler():
    """Started scheduler with the commission jobs registered."""
    scheduler = create_scheduler()
    register_jobs(scheduler, "hourly")
    scheduler.start(paused=True)
    yield scheduler
    scheduler.shutdown(wait=False)
    set_scheduler(None)


class TestRegisterJobs:
    """Test job registration and schedule refresh."""

    @pytest.mark.asyncio
    async def test_registers_commission_jobs(self, running_scheduler):
        ids = {job.id for job in running_scheduler.get_jobs()}
        assert ids == {
            MATURATION_JOB_ID,
            RECONCILIATION_JOB_ID,
            SCHEDULE_REFRESH_JOB_ID,
        }

    @pytest.mark.asyncio
    async def test_refresh_reschedules_on_change(
        self, running_scheduler, monkeypatch
    ):
        async def changed_schedule():
            return "06:30"

        monkeypatch.setattr(scheduler_module, "load_check_schedule", changed_schedule)

        await refresh_schedule(running_scheduler, "hourly")

        job = running_scheduler.get_job(MATURATION_JOB_ID)
        fields = _fields(job.trigger)
        assert fields["hour"] == "6"
        assert fields["minute"] == "30"
        assert job.name == "Commission maturation (06:30)"

    @pytest.mark.asyncio
    async def test_refresh_keeps_schedule_when_store_fails(
        self, running_scheduler, monkeypatch
    ):
        async def unavailable():
            raise ConnectionRefusedError("connection refused")

        monkeypatch.setattr(scheduler_module, "load_check_schedule", unavailable)

        await refresh_schedule(running_scheduler, "hourly")

        fields = _fields(running_scheduler.get_job(MATURATION_JOB_ID).trigger)
        assert fields["minute"] == "0"
        assert fields["hour"] == "*"


class TestHealthServer:
    """Test scheduler health probes."""

    @pytest.mark.asyncio
    async def test_not_initialized(self):
        set_scheduler(None)
        async with TestClient(TestServer(create_health_app())) as client:
            resp = await client.get("/health")
            assert resp.status == 503
            resp = await client.get("/readiness")
            assert (await resp.json())["ready"] is False
            resp = await client.get("/liveness")
            assert resp.status == 200

    @pytest.mark.asyncio
    async def test_running_scheduler(self, running_scheduler):
        set_scheduler(running_scheduler)
        async with TestClient(TestServer(create_health_app())) as client:
            resp = await client.get("/health")
            assert resp.status == 200
            data = await resp.json()
            assert data["scheduler_running"] is True
            assert data["jobs_count"] == 3
            assert {job["id"] for job in data["jobs"]} >= {MATURATION_JOB_ID}

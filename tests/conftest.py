"""
Pytest configuration and fixtures for the ingestion API tests.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from ingestion.config import Settings
from ingestion.manager import IngestionManager
from main import create_app
from tests.helpers import FakeClock, RecordingWork


@pytest.fixture
def fast_settings():
    """Short intervals so real-time scheduling tests finish quickly."""
    return Settings(
        rate_limit_seconds=0.2,
        idle_poll_seconds=0.02,
        min_work_latency_seconds=0.0,
        max_work_latency_seconds=0.01,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def wall_clock():
    return FakeClock(start=1_700_000_000.0)


@pytest.fixture
def work():
    return RecordingWork()


@pytest.fixture
def manager(clock, wall_clock, work):
    """Manager with fake clocks, driven by calling ``scheduler.run_once()``."""
    return IngestionManager(
        Settings(),
        work=work,
        wall_clock=wall_clock,
        monotonic_clock=clock,
    )


@pytest.fixture
def app(fast_settings, work):
    return create_app(fast_settings, work=work)


@pytest_asyncio.fixture
async def client(app):
    """Async HTTP client with the scheduler running, as under the lifespan."""
    app.state.manager.start()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.state.manager.stop()
    await app.state.manager.scheduler.wait_idle()


@pytest_asyncio.fixture
async def idle_client(app):
    """Async HTTP client without a running scheduler; nothing gets processed."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

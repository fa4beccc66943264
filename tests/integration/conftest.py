"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.

Tests in this directory are skipped when PostgreSQL or Redis is not
reachable at the configured DATABASE_URL / REDIS_URL.
"""

import socket
from pathlib import Path
from urllib.parse import urlparse

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.engine import make_url

from config.settings import settings
from src.main import app

_HERE = Path(__file__).parent


def _reachable(host: str | None, port: int | None) -> bool:
    try:
        with socket.create_connection((host or "localhost", port), timeout=0.5):
            return True
    except OSError:
        return False


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    db_url = make_url(settings.DATABASE_URL)
    redis_url = urlparse(settings.REDIS_URL)
    if _reachable(db_url.host, db_url.port or 5432) and _reachable(
        redis_url.hostname, redis_url.port or 6379
    ):
        return
    skip = pytest.mark.skip(reason="PostgreSQL/Redis not reachable")
    for item in items:
        if _HERE in item.path.parents:
            item.add_marker(pytest.mark.integration)
            item.add_marker(skip)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client: keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

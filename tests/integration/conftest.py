"""Integration-test fixtures.

Require a migrated PostgreSQL (alembic upgrade head) and are skipped unless
RUN_INTEGRATION=1. All integration tests share a single event loop so the
module-level SQLAlchemy async engine pool stays valid for the whole session.
"""

import os
import time
from collections.abc import Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.cw_gateway.auth.jwt_handler import create_access_token
from src.main import app


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if os.environ.get("RUN_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="set RUN_INTEGRATION=1 to run against a live database")
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(skip)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client that keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture(scope="session")
def id_base() -> int:
    """Distinct user-id range per run so repeated runs never collide."""
    return int(time.time() * 1000) % 10**12 * 10


@pytest.fixture(scope="session")
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(1, role='admin')}"}


@pytest.fixture(scope="session")
def user_headers() -> Callable[[int], dict[str, str]]:
    def _headers(user_id: int) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _headers

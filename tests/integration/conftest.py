"""Integration test fixtures: the API wired to the test database."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from punch_payroll.api.app import create_app
from punch_payroll.api.dependencies import get_app_settings, get_session_factory

ADMIN_HEADERS = {"X-User-ID": "admin@example.com"}


@pytest.fixture
async def client(session_factory, settings) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against an app that uses the per-test SQLite database."""
    app = create_app()
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_app_settings] = lambda: settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()

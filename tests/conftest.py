"""Pytest fixtures for punch payroll tests."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import AsyncGenerator, Awaitable, Callable

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from punch_payroll.config import Settings
from punch_payroll.database import create_schema, make_session_factory
from punch_payroll.models import PayrollPeriod, PunchEvent, Worker
from punch_payroll.services.period_service import PeriodService


@pytest.fixture
def settings() -> Settings:
    """Settings for tests: one worker at a time, since SQLite serializes writers."""
    return Settings(
        database_url="sqlite+aiosqlite://",
        engine_version="1.0.0",
        host="127.0.0.1",
        port=8000,
        debug=False,
        calculation_concurrency=1,
    )


@pytest.fixture
async def engine(tmp_path):
    """Create a file-backed SQLite engine so every session gets its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'payroll.db'}", echo=False)
    await create_schema(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(engine)


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def make_worker(
    session_factory,
) -> Callable[..., Awaitable[Worker]]:
    """Create and commit a worker."""

    async def _make(
        name: str,
        hourly_rate: Decimal | str | None = "10",
        role: str = "worker",
        email: str | None = None,
    ) -> Worker:
        async with session_factory() as session, session.begin():
            worker = Worker(
                name=name,
                email=email or f"{name.lower()}@example.com",
                role=role,
                hourly_rate=Decimal(hourly_rate) if hourly_rate is not None else None,
            )
            session.add(worker)
        return worker

    return _make


@pytest.fixture
def add_punches(session_factory) -> Callable[..., Awaitable[list[PunchEvent]]]:
    """Record punches for a worker: add_punches(worker, ("IN", ts), ("OUT", ts))."""

    async def _add(worker: Worker, *punches: tuple[str, datetime]) -> list[PunchEvent]:
        async with session_factory() as session, session.begin():
            events = [
                PunchEvent(worker_id=worker.worker_id, kind=kind, timestamp=when)
                for kind, when in punches
            ]
            session.add_all(events)
        return events

    return _add


@pytest.fixture
async def march_period(session_factory) -> PayrollPeriod:
    """Open payroll period for March 2026."""
    async with session_factory() as session, session.begin():
        period = await PeriodService(session).create_period(3, 2026, "admin")
    return period

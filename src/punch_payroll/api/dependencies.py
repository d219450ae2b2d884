"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from punch_payroll.config import Settings, get_settings
from punch_payroll.database import init_db


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory dependency (overridden in tests)."""
    _, factory = init_db()
    return factory


def get_app_settings() -> Settings:
    """Settings dependency (overridden in tests)."""
    return get_settings()


SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]


async def get_db_session(factory: SessionFactory) -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_user_id(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """Identity of the caller, supplied by the authenticating gateway."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-User-ID header is required",
        )
    return x_user_id.strip()


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
UserId = Annotated[str, Depends(get_user_id)]

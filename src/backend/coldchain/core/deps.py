"""Dependency injection utilities for FastAPI.

The engine, session factory and store are built once in the application
lifespan and kept on ``app.state``; handlers reach them through the
dependencies below so tests can override them.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from coldchain.core.config import Settings, get_settings
from coldchain.services.telemetry_store import TelemetryStore


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the database engine for the configured URL."""
    return create_async_engine(settings.database_url, echo=settings.debug, pool_pre_ping=True)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


def get_store(request: Request) -> TelemetryStore:
    """Get the telemetry store owned by the running application."""
    return request.app.state.store


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session."""
    async with request.app.state.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
Store = Annotated[TelemetryStore, Depends(get_store)]
AppSettings = Annotated[Settings, Depends(get_settings)]

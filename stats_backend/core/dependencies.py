"""
FastAPI dependency injection module for the Stats Query backend.

Provides reusable dependencies for database sessions, configuration access and
the clock used to capture a query's "now". Endpoints receive them through the
type aliases below, and tests replace them with app.dependency_overrides.

Usage Examples:
    @router.get("/{site_id}/query")
    async def get_query(
        site_id: int,
        db: DBSessionDep,
        settings: SettingsDep,
        clock: ClockDep,
    ) -> QueryResponse:
        ...
"""

from typing import Annotated, AsyncGenerator

from asyncpg import Connection
from fastapi import Depends

from stats_backend.core.config import Settings, get_settings
from stats_backend.core.database import get_db_pool
from stats_backend.services.query import Clock, utc_now


# =============================================================================
# Database Session Dependency
# =============================================================================

async def get_db_session() -> AsyncGenerator[Connection, None]:
    """
    Yield an async database connection from the pool.

    The connection is released back to the pool when the endpoint completes,
    whether or not it raised.

    Yields:
        asyncpg.Connection: An active database connection from the pool.
    """
    pool = await get_db_pool()
    async with pool.acquire() as connection:
        yield connection


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can override it:

        app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    """
    return get_settings()


# =============================================================================
# Clock Dependency
# =============================================================================

def get_clock() -> Clock:
    """
    Return the clock queries read "now" from.

    Tests override this to pin the current instant.
    """
    return utc_now


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

DBSessionDep = Annotated[Connection, Depends(get_db_session)]

ClockDep = Annotated[Clock, Depends(get_clock)]

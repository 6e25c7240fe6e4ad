"""
Pytest Configuration and Shared Fixtures for Stats Query Backend Tests.

This module provides fixtures and configuration for all backend tests, supporting:
- Async test execution with pytest-asyncio
- A pinned "now" so relative periods resolve deterministically
- Site metadata snapshots (UTC and non-UTC timezones) and import factories
- Settings built without reading a .env file
- Mock asyncpg connections for the site metadata provider

The pinned instant is Friday 2024-03-15 12:00 UTC; tests that derive expected
dates from "today" use that date.
"""

from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest
import pytz

from stats_backend.core.config import Settings
from stats_backend.models import ImportStatus, SiteImport, SiteMetadata


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Configure custom pytest markers for test organization.

    Custom markers defined:
    - slow: Marks tests as slow (deselect with -m "not slow")

    Usage:
        # Run only fast tests:
        pytest -m "not slow"
    """
    config.addinivalue_line(
        'markers',
        'slow: marks tests as slow (deselect with -m "not slow")'
    )


# ============================================================
# CLOCK FIXTURES
# ============================================================

FIXED_NOW = datetime(2024, 3, 15, 12, 0, 0, tzinfo=pytz.utc)


@pytest.fixture
def fixed_now() -> datetime:
    """The pinned current instant: Friday 2024-03-15 12:00:00 UTC."""
    return FIXED_NOW


@pytest.fixture
def today(fixed_now: datetime) -> date:
    """Calendar date of fixed_now in UTC."""
    return fixed_now.date()


# ============================================================
# SETTINGS FIXTURE
# ============================================================

@pytest.fixture
def settings() -> Settings:
    """
    Settings with their documented defaults, ignoring any local .env file.

    Defaults:
        - default_period: 30d
        - default_sample_threshold: 20_000_000
        - realtime_window_minutes: 30
        - realtime_lookahead_seconds: 5
    """
    return Settings(_env_file=None)


# ============================================================
# SITE METADATA FIXTURES
# ============================================================

@pytest.fixture
def make_import() -> Callable[..., SiteImport]:
    """
    Factory for SiteImport records.

    Usage:
        def test_overlap(make_import):
            site_import = make_import(date(2019, 1, 1), date(2019, 1, 31))
    """
    def _make(
        start_date: date = date(2005, 1, 1),
        end_date: date = FIXED_NOW.date(),
        status: ImportStatus = ImportStatus.COMPLETED,
    ) -> SiteImport:
        return SiteImport(start_date=start_date, end_date=end_date, status=status)
    return _make


@pytest.fixture
def make_site() -> Callable[..., SiteMetadata]:
    """
    Factory for SiteMetadata snapshots.

    Defaults to a UTC site created 2020-01-01 with stats from that day and no
    imports.
    """
    def _make(
        timezone: str = "Etc/UTC",
        inserted_at: datetime = datetime(2020, 1, 1, tzinfo=pytz.utc),
        stats_start_date: Optional[date] = date(2020, 1, 1),
        native_stats_start_at: Optional[datetime] = None,
        imports: tuple = (),
    ) -> SiteMetadata:
        return SiteMetadata(
            id=1,
            domain="example.com",
            timezone=timezone,
            inserted_at=inserted_at,
            stats_start_date=stats_start_date,
            native_stats_start_at=native_stats_start_at,
            imports=imports,
        )
    return _make


@pytest.fixture
def site(make_site: Callable[..., SiteMetadata]) -> SiteMetadata:
    """A UTC site without imports."""
    return make_site()


@pytest.fixture
def site_with_import(
    make_site: Callable[..., SiteMetadata],
    make_import: Callable[..., SiteImport],
) -> SiteMetadata:
    """A UTC site with one completed import covering 2005-01-01 through today."""
    return make_site(imports=(make_import(),))


# ============================================================
# DATABASE MOCK FIXTURES
# ============================================================

@pytest.fixture
def site_record() -> Dict[str, Any]:
    """A row of the sites table as returned by asyncpg."""
    return {
        'id': 1,
        'domain': 'example.com',
        'timezone': 'Europe/Tallinn',
        'inserted_at': datetime(2020, 1, 1, 9, 30, tzinfo=pytz.utc),
        'stats_start_date': date(2020, 1, 1),
        'native_stats_start_at': datetime(2020, 1, 1, 9, 45, tzinfo=pytz.utc),
    }


@pytest.fixture
def import_records() -> List[Dict[str, Any]]:
    """Rows of the site_imports table as returned by asyncpg."""
    return [
        {
            'id': 10,
            'start_date': date(2018, 3, 1),
            'end_date': date(2019, 12, 31),
            'source': 'universal_analytics',
            'status': 'completed',
        },
        {
            'id': 11,
            'start_date': date(2019, 6, 1),
            'end_date': date(2019, 12, 31) + timedelta(days=1),
            'source': 'google_analytics_4',
            'status': 'completed',
        },
    ]


@pytest.fixture
def mock_db_conn() -> AsyncMock:
    """
    Create a mock asyncpg connection.

    Methods Mocked:
        - conn.fetch(query, *args): Fetch multiple rows, returns []
        - conn.fetchrow(query, *args): Fetch single row, returns None
    """
    conn = AsyncMock()
    conn.fetch = AsyncMock(return_value=[])
    conn.fetchrow = AsyncMock(return_value=None)
    return conn

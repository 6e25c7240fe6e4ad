"""
Core infrastructure package for the FastAPI backend.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL database connectivity via asyncpg
- The InvalidQueryParameter error raised by query normalization

FastAPI dependencies live in stats_backend.core.dependencies; they are not
re-exported here because they depend on the services layer.

Usage Examples:
    from stats_backend.core import get_settings, InvalidQueryParameter

    settings = get_settings()
    print(settings.default_period)
"""

from stats_backend.core.config import Settings, get_settings
from stats_backend.core.database import init_db, close_db, get_db_pool
from stats_backend.core.errors import InvalidQueryParameter


__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
    # Errors (from errors.py)
    'InvalidQueryParameter',
]

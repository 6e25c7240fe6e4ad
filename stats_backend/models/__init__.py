"""
Package initialization file for backend models.

Re-exports all Pydantic schemas and enumerations so other modules can import
them from stats_backend.models directly:

    from stats_backend.models import Period, Interval, SiteMetadata
"""

# =============================================================================
# Enums
# =============================================================================

from stats_backend.models.enums import (
    ComparisonMode,
    FilterOperator,
    GoalKind,
    ImportSource,
    ImportStatus,
    Interval,
    Period,
)

# =============================================================================
# Schemas
# =============================================================================

from stats_backend.models.schemas import (
    ComparisonResponse,
    DateRangeResponse,
    FilterResponse,
    QueryResponse,
    ReportRequest,
    SiteImport,
    SiteMetadata,
)


__all__ = [
    # Enums
    'ComparisonMode',
    'FilterOperator',
    'GoalKind',
    'ImportSource',
    'ImportStatus',
    'Interval',
    'Period',
    # Site metadata
    'SiteImport',
    'SiteMetadata',
    # Import pipeline
    'ReportRequest',
    # API responses
    'ComparisonResponse',
    'DateRangeResponse',
    'FilterResponse',
    'QueryResponse',
]

"""
Pydantic models for the Stats Query backend.

This module provides type-safe validation and serialization for:
- Site metadata consumed by the query normalizer (SiteMetadata, SiteImport)
- GA4 Data API report requests used by the import pipeline (ReportRequest)
- API response contracts for the normalized query (QueryResponse and parts)

All models use Pydantic v2 syntax. Input models are frozen so a snapshot handed
to the normalizer cannot change underneath it.
"""

from datetime import datetime, date as DateType
from typing import Any, Dict, List, Optional, Tuple

import pytz
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from stats_backend.models.enums import (
    ComparisonMode,
    FilterOperator,
    ImportSource,
    ImportStatus,
    Interval,
    Period,
)


# =============================================================================
# Site Metadata (input snapshot owned by the persistence layer)
# =============================================================================


class SiteImport(BaseModel):
    """
    One import of historical data from an external analytics provider.

    The import covers the inclusive calendar range [start_date, end_date].
    """
    model_config = ConfigDict(frozen=True)

    id: Optional[int] = Field(default=None, description="Import identifier")
    start_date: DateType = Field(..., description="First day covered by the import")
    end_date: DateType = Field(..., description="Last day covered by the import")
    source: ImportSource = Field(
        default=ImportSource.GOOGLE_ANALYTICS_4,
        description="Provider the data was imported from"
    )
    status: ImportStatus = Field(
        default=ImportStatus.COMPLETED,
        description="Import lifecycle state; only completed imports are queryable"
    )

    @model_validator(mode="after")
    def _check_range(self) -> "SiteImport":
        if self.start_date > self.end_date:
            raise ValueError(
                f"start_date ({self.start_date}) must be <= end_date ({self.end_date})"
            )
        return self

    @classmethod
    def from_record(cls, record: Any) -> "SiteImport":
        """Build from an asyncpg record of the site_imports table."""
        return cls(
            id=record["id"],
            start_date=record["start_date"],
            end_date=record["end_date"],
            source=record["source"],
            status=record["status"],
        )


class SiteMetadata(BaseModel):
    """
    Read-only snapshot of the site a stats query is built for.

    Attributes:
        timezone: IANA timezone identifier; all calendar dates are resolved in it.
        inserted_at: Account creation instant (UTC).
        stats_start_date: First day with native stats, or None for a fresh site.
        native_stats_start_at: First instant with native (non-imported) events.
            Falls back to inserted_at when unknown.
        imports: Site imports available to blend into results.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "domain": "example.com",
                "timezone": "Europe/Tallinn",
                "inserted_at": "2020-01-01T00:00:00Z",
                "stats_start_date": "2020-01-01",
                "imports": [
                    {"start_date": "2018-03-01", "end_date": "2019-12-31"}
                ]
            }
        }
    )

    id: Optional[int] = Field(default=None, description="Site identifier")
    domain: Optional[str] = Field(default=None, description="Site domain")
    timezone: str = Field(default="Etc/UTC", description="IANA timezone identifier")
    inserted_at: datetime = Field(..., description="Account creation instant")
    stats_start_date: Optional[DateType] = Field(
        default=None,
        description="First day of native stats"
    )
    native_stats_start_at: Optional[datetime] = Field(
        default=None,
        description="First instant of native stats"
    )
    imports: Tuple[SiteImport, ...] = Field(
        default=(),
        description="Site imports available for blending"
    )

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {value}")
        return value

    @property
    def tzinfo(self) -> pytz.BaseTzInfo:
        """The pytz timezone object for this site."""
        return pytz.timezone(self.timezone)

    @property
    def completed_imports(self) -> List[SiteImport]:
        """Imports whose data can be queried."""
        return [i for i in self.imports if i.status == ImportStatus.COMPLETED]

    @classmethod
    def from_record(cls, record: Any, imports: Optional[List[SiteImport]] = None) -> "SiteMetadata":
        """Build from an asyncpg record of the sites table and its loaded imports."""
        return cls(
            id=record["id"],
            domain=record["domain"],
            timezone=record["timezone"],
            inserted_at=record["inserted_at"],
            stats_start_date=record["stats_start_date"],
            native_stats_start_at=record["native_stats_start_at"],
            imports=tuple(imports or ()),
        )


# =============================================================================
# GA4 Report Requests (import pipeline)
# =============================================================================


class ReportRequest(BaseModel):
    """
    A single GA4 Data API report request for one imported dataset.

    Metrics may be plain GA4 metric names or derived metrics written as
    ``"<name> = <expression>"`` (e.g. ``"bounces = sessions - engagedSessions"``).
    """
    model_config = ConfigDict(frozen=True)

    dataset: str = Field(..., description="Target imported_* table")
    dimensions: List[str] = Field(..., description="GA4 dimension names")
    metrics: List[str] = Field(..., description="GA4 metric names or expressions")
    start_date: Optional[DateType] = Field(default=None)
    end_date: Optional[DateType] = Field(default=None)
    property: Optional[str] = Field(default=None, description="GA4 property, e.g. properties/123")
    access_token: Optional[str] = Field(default=None)
    offset: int = Field(default=0, ge=0)
    limit: Optional[int] = Field(default=None, gt=0)

    def to_api_body(self) -> Dict[str, Any]:
        """
        Render the JSON body of a GA4 ``runReport`` call.

        Returns:
            Dict suitable for POST /v1beta/{property}:runReport.

        Raises:
            ValueError: If the date range has not been filled in.
        """
        if self.start_date is None or self.end_date is None:
            raise ValueError(f"Report request for {self.dataset} has no date range")

        metrics = []
        for metric in self.metrics:
            name, sep, expression = metric.partition("=")
            if sep:
                metrics.append({"name": name.strip(), "expression": expression.strip()})
            else:
                metrics.append({"name": metric.strip()})

        body: Dict[str, Any] = {
            "dateRanges": [
                {
                    "startDate": self.start_date.isoformat(),
                    "endDate": self.end_date.isoformat(),
                }
            ],
            "dimensions": [{"name": d} for d in self.dimensions],
            "metrics": metrics,
            "orderBys": [{"dimension": {"dimensionName": "date"}, "desc": False}],
            "offset": self.offset,
        }
        if self.limit is not None:
            body["limit"] = self.limit
        return body


# =============================================================================
# API Response Models
# =============================================================================


class DateRangeResponse(BaseModel):
    """Inclusive calendar date range."""
    first: DateType
    last: DateType


class FilterResponse(BaseModel):
    """One parsed filter predicate."""
    operator: FilterOperator
    value: Any = Field(..., description="Literal string, list of values, or goal reference")


class ComparisonResponse(BaseModel):
    """Comparison mode and its resolved date range."""
    mode: ComparisonMode
    date_range: DateRangeResponse


class QueryResponse(BaseModel):
    """
    Normalized stats query as returned by GET /api/stats/{site_id}/query.

    ``sample_threshold`` is either the string "infinite" or an integer cap.
    ``utc_first``/``utc_last`` are the UTC instants bounding the query.
    """
    period: Period
    date_range: DateRangeResponse
    interval: Interval
    filters: Dict[str, FilterResponse] = Field(default_factory=dict)
    property: Optional[str] = None
    include_imported: bool
    sample_threshold: Any
    comparison: Optional[ComparisonResponse] = None
    now: datetime
    utc_first: datetime
    utc_last: datetime

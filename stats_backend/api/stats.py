"""
FastAPI router module for stats query endpoints.

Key Endpoints:
- GET /api/stats/{site_id}/query: Normalize dashboard parameters for a site

The endpoint loads the site's metadata snapshot, runs the query normalizer and
returns the resolved query together with its UTC boundaries, which is what the
aggregation layer consumes. It is also what the dashboard uses to label graphs
(resolved interval, comparison range).

Query Parameters:
    period, date, from, to, interval, filters (JSON), comparison, compare_from,
    compare_to, match_day_of_week, with_imported, property, sample_threshold

Errors:
- 400: InvalidQueryParameter, body {"error": ..., "parameter": ...}
- 404: Unknown site
"""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from stats_backend.core.dependencies import ClockDep, DBSessionDep, SettingsDep
from stats_backend.core.errors import InvalidQueryParameter
from stats_backend.models.schemas import (
    ComparisonResponse,
    DateRangeResponse,
    FilterResponse,
    QueryResponse,
)
from stats_backend.services.boundaries import utc_boundaries
from stats_backend.services.date_range import DateRange
from stats_backend.services.filters import GoalReference
from stats_backend.services.query import Query, query_from
from stats_backend.services.sites import load_site_metadata


# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Helper Functions
# =============================================================================

def _operand_json(operand: Any) -> Any:
    """Convert a filter operand into a JSON-friendly value."""
    if isinstance(operand, GoalReference):
        return {"goal_kind": operand.kind.value, "name": operand.name}
    if isinstance(operand, tuple):
        return [_operand_json(item) for item in operand]
    return operand


def _date_range_response(date_range: DateRange) -> DateRangeResponse:
    return DateRangeResponse(first=date_range.first, last=date_range.last)


def build_query_response(query: Query, utc_first: datetime, utc_last: datetime) -> QueryResponse:
    """
    Serialize a resolved Query for the API.

    Args:
        query: The resolved query.
        utc_first: Lower UTC boundary of the query.
        utc_last: Upper UTC boundary of the query.

    Returns:
        QueryResponse ready to be returned from the endpoint.
    """
    comparison = None
    if query.comparison is not None:
        comparison = ComparisonResponse(
            mode=query.comparison.mode,
            date_range=_date_range_response(query.comparison.date_range),
        )

    return QueryResponse(
        period=query.period,
        date_range=_date_range_response(query.date_range),
        interval=query.interval,
        filters={
            key: FilterResponse(operator=predicate.operator, value=_operand_json(predicate.operand))
            for key, predicate in query.filters.items()
        },
        property=query.breakdown_property,
        include_imported=query.include_imported,
        sample_threshold=query.sample_threshold,
        comparison=comparison,
        now=query.now,
        utc_first=utc_first,
        utc_last=utc_last,
    )


async def invalid_query_parameter_handler(
    request: Request,
    exc: InvalidQueryParameter,
) -> JSONResponse:
    """Exception handler turning InvalidQueryParameter into a 400 response."""
    logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=400, content=exc.to_dict())


# =============================================================================
# GET /api/stats/{site_id}/query
# =============================================================================

@router.get("/{site_id}/query", response_model=QueryResponse)
async def get_normalized_query(
    site_id: int,
    request: Request,
    db: DBSessionDep,
    settings: SettingsDep,
    clock: ClockDep,
) -> QueryResponse:
    """
    Normalize the dashboard's query parameters for a site.

    Args:
        site_id: Site identifier.
        request: Incoming request; its query string holds the raw parameters.
        db: Database connection from dependency injection.
        settings: Application settings.
        clock: Clock the query's "now" is captured from.

    Returns:
        QueryResponse with the resolved query and its UTC boundaries.

    Raises:
        HTTPException 404: If the site does not exist.
        InvalidQueryParameter: Rendered as 400 by invalid_query_parameter_handler.

    Example Request:
        GET /api/stats/1/query?period=month&date=2019-01-01&filters={"goal":"Signup"}

    Example Response:
        {
            "period": "month",
            "date_range": {"first": "2019-01-01", "last": "2019-01-31"},
            "interval": "date",
            "filters": {
                "event:goal": {"operator": "is", "value": {"goal_kind": "event", "name": "Signup"}}
            },
            "include_imported": false,
            "sample_threshold": 20000000,
            ...
        }
    """
    site = await load_site_metadata(db, site_id)
    if site is None:
        raise HTTPException(status_code=404, detail=f"Site {site_id} not found")

    params = dict(request.query_params)
    query = query_from(site, params, settings=settings, clock=clock)
    utc_first, utc_last = utc_boundaries(query, site, settings)

    logger.info(
        f"GET /api/stats/{site_id}/query: period={query.period.value} "
        f"range={query.date_range.first}..{query.date_range.last} "
        f"interval={query.interval.value} include_imported={query.include_imported}"
    )
    return build_query_response(query, utc_first, utc_last)

"""
GA4 Report Requests

Declarative list of the GA4 Data API reports fetched when importing a site's
history from Google Analytics 4. Each entry names the imported_* table it fills,
the GA4 dimensions it is grouped by and the GA4 metrics it reads.

Derived metrics are written ``"<name> = <expression>"`` and rendered as GA4
metric expressions (see ReportRequest.to_api_body).

There is no imported_exit_pages report: GA4 has no dimension that maps directly
to the exit page path, and the Data API has no exits metric.
"""

import logging
from datetime import date
from typing import List, Optional

from stats_backend.models.schemas import ReportRequest


logger = logging.getLogger(__name__)

BOUNCES = "bounces = sessions - engagedSessions"

# Page size used when a caller does not choose one; the Data API caps rows at 250k
DEFAULT_LIMIT = 100_000


def full_report() -> List[ReportRequest]:
    """
    The GA4 reports that make up a full import, without request details.

    Returns:
        One ReportRequest per imported dataset, date range and property unset.
    """
    return [
        ReportRequest(
            dataset="imported_visitors",
            dimensions=["date"],
            metrics=[
                "activeUsers",
                "screenPageViews",
                BOUNCES,
                "sessions",
                "userEngagementDuration",
            ],
        ),
        ReportRequest(
            dataset="imported_sources",
            dimensions=[
                "date",
                "sessionSource",
                "sessionMedium",
                "sessionCampaignName",
                "sessionManualAdContent",
                "sessionGoogleAdsKeyword",
                "pageReferrer",
            ],
            metrics=[
                "screenPageViews",
                "activeUsers",
                "sessions",
                BOUNCES,
                "userEngagementDuration",
            ],
        ),
        ReportRequest(
            dataset="imported_pages",
            dimensions=["date", "hostName", "pagePath"],
            # No exits: the Data API does not provide that metric
            metrics=["activeUsers", "screenPageViews", "sessions", "userEngagementDuration"],
        ),
        ReportRequest(
            dataset="imported_entry_pages",
            dimensions=["date", "landingPage"],
            metrics=[
                "screenPageViews",
                "activeUsers",
                "sessions",
                "userEngagementDuration",
                BOUNCES,
            ],
        ),
        ReportRequest(
            dataset="imported_locations",
            dimensions=["date", "countryId", "region", "city"],
            metrics=[
                "screenPageViews",
                "activeUsers",
                "sessions",
                BOUNCES,
                "userEngagementDuration",
            ],
        ),
        ReportRequest(
            dataset="imported_devices",
            dimensions=["date", "deviceCategory"],
            metrics=[
                "screenPageViews",
                "activeUsers",
                "sessions",
                BOUNCES,
                "userEngagementDuration",
            ],
        ),
        ReportRequest(
            dataset="imported_browsers",
            dimensions=["date", "browser"],
            metrics=[
                "screenPageViews",
                "activeUsers",
                "sessions",
                BOUNCES,
                "userEngagementDuration",
            ],
        ),
        ReportRequest(
            dataset="imported_operating_systems",
            dimensions=["date", "operatingSystem", "operatingSystemVersion"],
            metrics=[
                "screenPageViews",
                "activeUsers",
                "sessions",
                BOUNCES,
                "userEngagementDuration",
            ],
        ),
    ]


def build_report_requests(
    property: str,
    access_token: str,
    start_date: date,
    end_date: date,
    limit: Optional[int] = None,
) -> List[ReportRequest]:
    """
    Fill the full report with the details of one import.

    Args:
        property: GA4 property resource name (e.g. "properties/428685906").
        access_token: OAuth access token for the Data API.
        start_date: First day to import.
        end_date: Last day to import.
        limit: Rows per page; DEFAULT_LIMIT when omitted.

    Returns:
        Ready-to-send report requests, first page of each dataset.

    Raises:
        ValueError: If start_date is after end_date.
    """
    if start_date > end_date:
        raise ValueError(f"start_date ({start_date}) must be <= end_date ({end_date})")

    requests = [
        request.model_copy(
            update={
                "property": property,
                "access_token": access_token,
                "start_date": start_date,
                "end_date": end_date,
                "offset": 0,
                "limit": limit or DEFAULT_LIMIT,
            }
        )
        for request in full_report()
    ]
    logger.info(
        f"Prepared {len(requests)} GA4 report requests for {property} "
        f"({start_date}..{end_date})"
    )
    return requests


def next_page(request: ReportRequest) -> ReportRequest:
    """The request for the page following ``request``."""
    if request.limit is None:
        raise ValueError(f"Report request for {request.dataset} is not paginated")
    return request.model_copy(update={"offset": request.offset + request.limit})

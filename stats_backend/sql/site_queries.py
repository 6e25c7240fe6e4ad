"""
Parameterized SQL for loading site metadata.

Queries use asyncpg positional placeholders ($1, $2, ...). Only completed
imports are loaded since the other states carry no queryable data.

Tables:
- sites: id, domain, timezone, inserted_at, stats_start_date, native_stats_start_at
- site_imports: id, site_id, start_date, end_date, source, status
"""

from stats_backend.models.enums import ImportStatus


GET_SITE_QUERY = """
    SELECT
        id,
        domain,
        timezone,
        inserted_at,
        stats_start_date,
        native_stats_start_at
    FROM sites
    WHERE id = $1
"""


def get_site_imports_query() -> str:
    """
    Build the query for a site's completed imports, oldest first.

    Parameters:
        $1: site id
    """
    return f"""
    SELECT
        id,
        start_date,
        end_date,
        source,
        status
    FROM site_imports
    WHERE site_id = $1
      AND status = '{ImportStatus.COMPLETED.value}'
    ORDER BY start_date ASC
"""

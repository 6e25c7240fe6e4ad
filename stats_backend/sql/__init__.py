"""
SQL Query Module for the Stats Query Backend.

Provides parameterized SQL queries for loading the site metadata snapshot
(site row and completed imports) the query normalizer runs against.

Example usage:
    from stats_backend.sql import GET_SITE_QUERY, get_site_imports_query

    row = await conn.fetchrow(GET_SITE_QUERY, site_id)
    imports = await conn.fetch(get_site_imports_query(), site_id)
"""

from stats_backend.sql.site_queries import GET_SITE_QUERY, get_site_imports_query


__all__ = [
    "GET_SITE_QUERY",
    "get_site_imports_query",
]

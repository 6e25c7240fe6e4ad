"""
Site metadata provider.

Loads the read-only SiteMetadata snapshot a stats query is built against: the
site row plus its completed imports.
"""

import logging
from typing import Optional

from asyncpg import Connection

from stats_backend.models.schemas import SiteImport, SiteMetadata
from stats_backend.sql.site_queries import GET_SITE_QUERY, get_site_imports_query


logger = logging.getLogger(__name__)


async def load_site_metadata(conn: Connection, site_id: int) -> Optional[SiteMetadata]:
    """
    Load a site and its completed imports.

    Args:
        conn: Database connection.
        site_id: Site identifier.

    Returns:
        SiteMetadata, or None if the site does not exist.
    """
    row = await conn.fetchrow(GET_SITE_QUERY, site_id)
    if row is None:
        logger.info(f"Site {site_id} not found")
        return None

    import_rows = await conn.fetch(get_site_imports_query(), site_id)
    imports = [SiteImport.from_record(r) for r in import_rows]

    logger.debug(f"Loaded site {site_id} with {len(imports)} completed import(s)")
    return SiteMetadata.from_record(row, imports)

"""Selection of the source workspaces to migrate.

The operator picks either every catalog row (``migrate_all``) or exactly one
row (``single_workspace_id``). Any other combination is ambiguous and is
rejected before the catalog is touched.
"""

import asyncio

import structlog

from assistant_migration.catalog.catalog import WorkspaceCatalog
from assistant_migration.catalog.schema import WORKSPACE_TABLE, WorkspaceColumns
from assistant_migration.client.exceptions import ConfigurationError
from assistant_migration.migration.models import (
    CandidateQuery,
    MigrationParameters,
    QueryFilter,
    WorkspaceRecord,
)
from assistant_migration.utils.logging import get_logger

logger = get_logger(__name__)


def select_candidate_query(
    params: MigrationParameters, table_name: str = WORKSPACE_TABLE
) -> CandidateQuery:
    """Build the catalog query selecting migration candidates.

    Args:
        params: Migration parameters
        table_name: Source catalog table

    Returns:
        A query filtered on the single id, or an unfiltered query

    Raises:
        ConfigurationError: Unless exactly one of the two modes is active
    """
    single_id = params.single_workspace_id.strip()

    if not params.migrate_all and single_id:
        return CandidateQuery(
            table_name=table_name,
            filters=(QueryFilter(column=WorkspaceColumns.ID, value=single_id),),
        )
    if params.migrate_all and not single_id:
        return CandidateQuery(table_name=table_name)

    raise ConfigurationError("invalid migration parameters")


async def fetch_candidates(
    catalog: WorkspaceCatalog,
    query: CandidateQuery,
    log: structlog.stdlib.BoundLogger | None = None,
) -> list[WorkspaceRecord]:
    """Run the candidate query against the source catalog.

    An empty list is a valid outcome here; deciding what it means is left to
    the caller.

    Raises:
        CatalogError: If the query fails or any row cannot be decoded
    """
    log = log or logger
    log.info("retrieving_candidates", select_all=query.select_all)
    candidates = await asyncio.to_thread(catalog.find, query)
    log.info("candidates_fetched", count=len(candidates))
    return candidates

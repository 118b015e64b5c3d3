"""Resolution of target workspace identifiers.

The workspace name is the join key between the two deployments: the target
catalog row with the same name holds the identifier to update. Target rows
are provisioned beforehand; this resolver never creates one.
"""

import asyncio

import structlog

from assistant_migration.catalog.catalog import WorkspaceCatalog
from assistant_migration.client.exceptions import AmbiguousWorkspaceError, WorkspaceNotFoundError
from assistant_migration.migration.models import MigrationUnit
from assistant_migration.utils.logging import get_logger

logger = get_logger(__name__)


class TargetResolver:
    """Looks up the target identifier of a migration unit by name."""

    def __init__(
        self, target_catalog: WorkspaceCatalog, log: structlog.stdlib.BoundLogger | None = None
    ):
        self.target_catalog = target_catalog
        self.log = log or logger

    async def resolve_target_id(self, unit: MigrationUnit) -> str:
        """Return the target id for ``unit``.

        Raises:
            WorkspaceNotFoundError: No target row has the name, or the row has no id
            AmbiguousWorkspaceError: Several target rows have the name
            CatalogError: The target catalog query failed
        """
        name = unit.source_catalog_name
        records = await asyncio.to_thread(self.target_catalog.find_by_name, name)

        if not records:
            raise WorkspaceNotFoundError(f"Workspace {name} not found in target catalog")
        if len(records) > 1:
            raise AmbiguousWorkspaceError(
                f"Workspace {name} found {len(records)} times in target catalog",
                matches=len(records),
            )

        target_id = records[0].id
        if not target_id:
            raise WorkspaceNotFoundError(f"Target catalog row for {name} has no workspace id")

        self.log.info("target_resolved", workspace=name, target_id=target_id)
        return target_id

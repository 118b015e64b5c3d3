"""Assembly of migration units from source catalog candidates.

For each candidate the assembler checks the identifier against the source
service's workspace list, exports the workspace, writes a backup and packages
the export with the candidate's catalog name.
"""

import asyncio
from collections.abc import Sequence
from pathlib import Path

import structlog

from assistant_migration.client.assistant_client import AssistantClient
from assistant_migration.migration.backup import BackupSink, backup_file_name
from assistant_migration.migration.matching import match_one
from assistant_migration.migration.models import (
    MigrationUnit,
    WorkspaceExport,
    WorkspaceRecord,
    WorkspaceSummary,
)
from assistant_migration.utils.concurrency import BatchResult, run_batch
from assistant_migration.utils.logging import get_logger

logger = get_logger(__name__)


class MigrationAssembler:
    """Builds MigrationUnits, one concurrent task per candidate."""

    def __init__(
        self,
        source_client: AssistantClient,
        backup_sink: BackupSink,
        backup_dir: str | Path,
        max_concurrent: int | None = None,
        log: structlog.stdlib.BoundLogger | None = None,
    ):
        """Initialize the assembler.

        Args:
            source_client: Client of the source assistant service
            backup_sink: Where workspace backups are written
            backup_dir: Directory receiving the backup files
            max_concurrent: Optional cap on concurrent candidates
            log: Logger to use (defaults to the module logger)
        """
        self.source_client = source_client
        self.backup_sink = backup_sink
        self.backup_dir = Path(backup_dir)
        self.max_concurrent = max_concurrent
        self.log = log or logger

    async def assemble(
        self,
        candidates: Sequence[WorkspaceRecord],
        source_summaries: Sequence[WorkspaceSummary],
    ) -> list[MigrationUnit]:
        """Assemble every candidate; any failure fails the whole batch.

        Units are returned in candidate order.
        """
        result = await run_batch(
            candidates,
            lambda candidate: self.assemble_one(candidate, source_summaries),
            max_concurrent=self.max_concurrent,
        )
        self.log.info("workspaces_assembled", count=len(result.succeeded))
        return result.succeeded

    async def assemble_collecting(
        self,
        candidates: Sequence[WorkspaceRecord],
        source_summaries: Sequence[WorkspaceSummary],
    ) -> BatchResult[WorkspaceRecord, MigrationUnit]:
        """Assemble every candidate, collecting failures instead of raising."""
        result = await run_batch(
            candidates,
            lambda candidate: self.assemble_one(candidate, source_summaries),
            max_concurrent=self.max_concurrent,
            fail_fast=False,
        )
        self.log.info(
            "workspaces_assembled",
            count=len(result.succeeded),
            failed=len(result.failed),
        )
        return result

    async def assemble_one(
        self, candidate: WorkspaceRecord, source_summaries: Sequence[WorkspaceSummary]
    ) -> MigrationUnit:
        """Cross-reference, export, back up and package one candidate.

        Raises:
            WorkspaceNotFoundError: Candidate has no id or is not on the service
            AmbiguousWorkspaceError: Candidate id listed more than once
            ServiceError: Export call failed
        """
        log = self.log.bind(workspace=candidate.name, source_id=candidate.id)

        workspace_id = match_one(source_summaries, candidate.id or "")
        log.debug("workspace_cross_referenced")

        export = await self.source_client.get_workspace(workspace_id, export=True)
        log.info("workspace_fetched", intents=len(export.intents), dialog_nodes=len(export.dialog_nodes))

        await self._write_backup(workspace_id, export, log)

        return MigrationUnit(
            source_catalog_name=candidate.name,
            exported_content=export,
            source_id=workspace_id,
        )

    async def _write_backup(
        self,
        workspace_id: str,
        export: WorkspaceExport,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        path = self.backup_dir / backup_file_name(workspace_id)
        try:
            await asyncio.to_thread(self.backup_sink.write, path, export.to_json_dict())
        except Exception as e:
            # Any sink failure loses the backup copy, never the migration of this workspace
            log.warning(
                "backup_write_failed", path=str(path), error_type=type(e).__name__, error=str(e)
            )
            return
        log.info("workspace_backed_up", path=str(path))

"""Migration coordinator for orchestrating the workspace pipeline.

This module runs one migration end to end:
select candidates → fetch them from the source catalog → cross-reference and
export them from the source service (with backups) → resolve each target id
in the target catalog → update the target workspaces.

The run is all-or-nothing by default: the first failing workspace stops the
batch. With ``performance.continue_on_error`` failures are collected in the
summary instead.
"""

import time
from pathlib import Path

import structlog

from assistant_migration.catalog.catalog import WorkspaceCatalog
from assistant_migration.client.assistant_client import AssistantClient
from assistant_migration.client.exceptions import NoCandidatesError
from assistant_migration.config import MigrationConfig
from assistant_migration.migration.applier import MigrationApplier
from assistant_migration.migration.assembler import MigrationAssembler
from assistant_migration.migration.backup import BackupSink, FileBackupSink
from assistant_migration.migration.models import (
    AppliedWorkspace,
    FailedWorkspace,
    MigrationParameters,
    MigrationSummary,
    MigrationUnit,
)
from assistant_migration.migration.resolver import TargetResolver
from assistant_migration.migration.selector import fetch_candidates, select_candidate_query
from assistant_migration.utils.concurrency import run_batch
from assistant_migration.utils.logging import get_logger

logger = get_logger(__name__)


class MigrationCoordinator:
    """Coordinates one run of the workspace migration pipeline.

    The catalogs and clients are created by the caller, shared by every task
    of the run, and only read through their interfaces.
    """

    def __init__(
        self,
        config: MigrationConfig,
        source_catalog: WorkspaceCatalog,
        source_client: AssistantClient,
        target_catalog: WorkspaceCatalog,
        target_client: AssistantClient,
        backup_sink: BackupSink | None = None,
        dry_run: bool = False,
        log: structlog.stdlib.BoundLogger | None = None,
    ):
        """Initialize migration coordinator.

        Args:
            config: Validated migration configuration
            source_catalog: Catalog selecting the workspaces to migrate
            source_client: Client of the source assistant service
            target_catalog: Catalog resolving target workspace ids by name
            target_client: Client of the target assistant service
            backup_sink: Backup destination (defaults to JSON files)
            dry_run: Resolve everything but skip the target updates
            log: Logger to use (defaults to the module logger)
        """
        self.config = config
        self.source_catalog = source_catalog
        self.source_client = source_client
        self.target_catalog = target_catalog
        self.target_client = target_client
        self.dry_run = dry_run
        self.log = log or logger

        performance = config.performance
        self.max_concurrent = performance.max_concurrent
        self.continue_on_error = performance.continue_on_error

        self.assembler = MigrationAssembler(
            source_client,
            backup_sink or FileBackupSink(),
            Path(config.source.backup_directory or "./backup"),
            max_concurrent=self.max_concurrent,
            log=self.log,
        )
        self.resolver = TargetResolver(target_catalog, log=self.log)
        self.applier = MigrationApplier(target_client, log=self.log)

        self.log.info(
            "migration_coordinator_initialized",
            source_url=config.source.service_api.url,
            target_url=config.target.service_api.url,
            max_concurrent=self.max_concurrent,
            continue_on_error=self.continue_on_error,
            dry_run=dry_run,
        )

    async def run(self) -> MigrationSummary:
        """Execute the migration pipeline once.

        Returns:
            Summary of the run

        Raises:
            ConfigurationError: Invalid migration parameters
            CatalogError: A catalog query failed or returned an undecodable row
            NoCandidatesError: The source catalog selected nothing
            ServiceError: A source service call failed
            MigrationError: A workspace could not be matched, resolved or updated
        """
        start_time = time.monotonic()
        params = MigrationParameters(**self.config.migration_tool_parameters.model_dump())
        query = select_candidate_query(params, self.source_catalog.table_name)

        self.log.info(
            "migration_started",
            migrate_all=params.migrate_all,
            single_workspace_id=params.single_workspace_id or None,
        )

        candidates = await fetch_candidates(self.source_catalog, query, log=self.log)
        if not candidates:
            raise NoCandidatesError("No workspace to migrate found in source catalog")

        source_summaries = await self.source_client.list_workspaces()

        summary = MigrationSummary(candidates=len(candidates), dry_run=self.dry_run)

        if self.continue_on_error:
            assembled = await self.assembler.assemble_collecting(candidates, source_summaries)
            units = assembled.succeeded
            summary.failed.extend(
                FailedWorkspace(name=candidate.name, error=str(error))
                for candidate, error in assembled.failed
            )
        else:
            units = await self.assembler.assemble(candidates, source_summaries)
        summary.assembled = len(units)

        applied = await run_batch(
            units,
            self._migrate_unit,
            max_concurrent=self.max_concurrent,
            fail_fast=not self.continue_on_error,
        )
        summary.updated.extend(applied.succeeded)
        summary.failed.extend(
            FailedWorkspace(name=unit.source_catalog_name, error=str(error))
            for unit, error in applied.failed
        )

        summary.duration_seconds = round(time.monotonic() - start_time, 3)
        self.log.info(
            "migration_completed",
            candidates=summary.candidates,
            assembled=summary.assembled,
            updated=len(summary.updated),
            failed=len(summary.failed),
            dry_run=self.dry_run,
            duration_seconds=summary.duration_seconds,
        )
        return summary

    async def _migrate_unit(self, unit: MigrationUnit) -> AppliedWorkspace:
        target_id = await self.resolver.resolve_target_id(unit)

        if self.dry_run:
            self.log.info(
                "dry_run_update_skipped",
                workspace=unit.source_catalog_name,
                target_id=target_id,
            )
        else:
            await self.applier.apply(unit, target_id)

        return AppliedWorkspace(
            name=unit.source_catalog_name,
            source_id=unit.source_id,
            target_id=target_id,
        )

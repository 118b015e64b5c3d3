"""
Migration execution command.

This module provides the command that migrates workspaces from the source
deployment to the target deployment.
"""

import click

from assistant_migration.cli.context import MigrationContext
from assistant_migration.cli.decorators import (
    EXIT_MIGRATION_ERROR,
    handle_errors,
    pass_context,
    requires_config,
)
from assistant_migration.cli.utils import (
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    format_duration,
    print_stats,
    print_table,
    run_with_clients,
)
from assistant_migration.config import MigrationConfig, MigrationParametersConfig
from assistant_migration.migration.coordinator import MigrationCoordinator
from assistant_migration.migration.models import MigrationSummary
from assistant_migration.utils.logging import get_logger

logger = get_logger(__name__)


def apply_overrides(
    config: MigrationConfig,
    migrate_all: bool = False,
    workspace_id: str | None = None,
    max_concurrent: int | None = None,
    continue_on_error: bool = False,
) -> MigrationConfig:
    """Return ``config`` with the command-line options applied.

    Selection options replace the configured migration parameters as a whole,
    so ``--all`` together with ``--workspace-id`` stays an invalid combination.
    """
    updates = {}

    if migrate_all or workspace_id:
        updates["migration_tool_parameters"] = MigrationParametersConfig(
            migrate_all=migrate_all,
            single_workspace_id=workspace_id or "",
        )

    performance_updates = {}
    if max_concurrent is not None:
        performance_updates["max_concurrent"] = max_concurrent
    if continue_on_error:
        performance_updates["continue_on_error"] = True
    if performance_updates:
        updates["performance"] = config.performance.model_copy(update=performance_updates)

    if not updates:
        return config
    return config.model_copy(update=updates)


@click.command(name="migrate")
@click.option("--all", "migrate_all", is_flag=True, help="Migrate every source catalog workspace")
@click.option("--workspace-id", help="Migrate only this source workspace")
@click.option(
    "--max-concurrent",
    type=click.IntRange(1, 100),
    help="Cap on workspaces processed at once (unbounded by default)",
)
@click.option(
    "--continue-on-error",
    is_flag=True,
    help="Record failing workspaces and keep going instead of stopping the run",
)
@click.option("--dry-run", is_flag=True, help="Export and resolve, but do not update the target")
@pass_context
@requires_config
@handle_errors
def migrate(
    ctx: MigrationContext,
    migrate_all: bool,
    workspace_id: str | None,
    max_concurrent: int | None,
    continue_on_error: bool,
    dry_run: bool,
) -> None:
    """Migrate workspaces from the source deployment to the target.

    Selected workspaces are exported from the source service (a backup of
    each is written first), matched by name in the target catalog, and
    written over the target workspaces.

    Without --all or --workspace-id the selection comes from the
    configuration (migration_tool_parameters).

    Examples:

        # Migrate everything listed in the source catalog
        assistant-bridge migrate --all

        # Migrate a single workspace
        assistant-bridge migrate --workspace-id 9f8e7d6c

        # See what would be updated
        assistant-bridge migrate --all --dry-run
    """
    config = apply_overrides(
        ctx.config,
        migrate_all=migrate_all,
        workspace_id=workspace_id,
        max_concurrent=max_concurrent,
        continue_on_error=continue_on_error,
    )
    ctx.use_config(config)

    params = config.migration_tool_parameters
    if params.migrate_all:
        echo_info("Migrating every workspace of the source catalog")
    else:
        echo_info(f"Migrating workspace {params.single_workspace_id or '(none selected)'}")
    if dry_run:
        echo_warning("Dry run: target workspaces will not be updated")

    async def run() -> MigrationSummary:
        coordinator = MigrationCoordinator(
            config=config,
            source_catalog=ctx.source_catalog,
            source_client=ctx.source_client,
            target_catalog=ctx.target_catalog,
            target_client=ctx.target_client,
            dry_run=dry_run,
        )
        return await coordinator.run()

    summary = run_with_clients(ctx, run)

    click.echo()
    _display_summary(summary)

    if not summary.success:
        echo_error(f"{len(summary.failed)} workspace(s) failed to migrate")
        raise click.exceptions.Exit(EXIT_MIGRATION_ERROR)

    if summary.dry_run:
        echo_success(f"Dry run complete: {len(summary.updated)} workspace(s) would be updated")
    else:
        echo_success(f"Migration complete: {len(summary.updated)} workspace(s) updated")


def _display_summary(summary: MigrationSummary) -> None:
    """Display the outcome of a migration run."""
    print_stats(
        {
            "candidates": summary.candidates,
            "assembled": summary.assembled,
            "updated": len(summary.updated),
            "failed": len(summary.failed),
            "duration": format_duration(summary.duration_seconds),
        },
        title="Migration Summary",
    )

    if summary.updated:
        print_table(
            "Would Update" if summary.dry_run else "Updated Workspaces",
            ["Name", "Source ID", "Target ID"],
            [[item.name, item.source_id, item.target_id] for item in summary.updated],
        )

    if summary.failed:
        print_table(
            "Failed Workspaces",
            ["Name", "Error"],
            [[item.name, item.error] for item in summary.failed],
        )

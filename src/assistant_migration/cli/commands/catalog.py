"""
Workspace catalog commands.

This module provides commands to inspect and register rows of the source
and target workspace catalogs.
"""

import click

from assistant_migration.cli.context import MigrationContext
from assistant_migration.cli.decorators import handle_errors, pass_context, requires_config
from assistant_migration.cli.utils import (
    SIDE_OPTION_CHOICES,
    echo_info,
    echo_success,
    print_table,
)
from assistant_migration.migration.models import WorkspaceRecord
from assistant_migration.utils.logging import get_logger

logger = get_logger(__name__)


@click.group(name="catalog")
def catalog() -> None:
    """Workspace catalog commands."""
    pass


@catalog.command(name="list")
@click.option("--side", type=SIDE_OPTION_CHOICES, default="source", show_default=True)
@pass_context
@requires_config
@handle_errors
def list_rows(ctx: MigrationContext, side: str) -> None:
    """List the workspaces recorded in a catalog."""
    workspace_catalog = ctx.catalog(side.lower())
    records = workspace_catalog.list_workspaces()

    if not records:
        echo_info(f"The {side} catalog is empty")
        return

    print_table(
        f"{side.title()} Catalog ({workspace_catalog.table_name})",
        ["ID", "Name", "Label"],
        [[record.id, record.name, record.label] for record in records],
    )


@catalog.command(name="add")
@click.option("--side", type=SIDE_OPTION_CHOICES, default="target", show_default=True)
@click.option("--name", required=True, help="Workspace name (the key matched across sides)")
@click.option("--label", required=True, help="Workspace label")
@click.option("--id", "workspace_id", help="Workspace id on the service, if it exists")
@pass_context
@requires_config
@handle_errors
def add(
    ctx: MigrationContext, side: str, name: str, label: str, workspace_id: str | None
) -> None:
    """Register a workspace in a catalog.

    Target workspaces must be registered before they can receive a
    migration; migrate never creates catalog rows.

    Examples:

        assistant-bridge catalog add --side target --name Alpha --label "Alpha bot" --id T1
    """
    record = WorkspaceRecord(id=workspace_id or None, name=name, label=label)
    ctx.catalog(side.lower()).insert_workspace(record)
    echo_success(f"Registered {name} in the {side} catalog")

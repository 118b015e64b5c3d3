"""
Assistant service workspace commands.

This module provides commands to list workspaces on either service, to
recreate a workspace from a backup file and to delete a workspace.
"""

import json
from pathlib import Path

import click
from pydantic import ValidationError

from assistant_migration.cli.context import MigrationContext
from assistant_migration.cli.decorators import (
    confirm_action,
    handle_errors,
    pass_context,
    requires_config,
)
from assistant_migration.cli.utils import (
    SIDE_OPTION_CHOICES,
    echo_info,
    echo_success,
    print_table,
    run_with_clients,
)
from assistant_migration.client.exceptions import ConfigurationError
from assistant_migration.migration.models import WorkspaceExport, WorkspaceRecord
from assistant_migration.migration.reshape import build_create_payload
from assistant_migration.utils.logging import get_logger

logger = get_logger(__name__)


@click.group(name="workspaces")
def workspaces() -> None:
    """Assistant service workspace commands."""
    pass


@workspaces.command(name="list")
@click.option("--side", type=SIDE_OPTION_CHOICES, default="source", show_default=True)
@pass_context
@requires_config
@handle_errors
def list_workspaces(ctx: MigrationContext, side: str) -> None:
    """List the workspaces of a service."""
    client = ctx.client(side.lower())
    summaries = run_with_clients(ctx, client.list_workspaces)

    if not summaries:
        echo_info(f"No workspace on the {side} service")
        return

    print_table(
        f"{side.title()} Workspaces",
        ["ID", "Name"],
        [[summary.id, summary.name] for summary in summaries],
    )


def load_backup(backup_file: Path) -> WorkspaceExport:
    """Read a workspace backup file.

    Raises:
        ConfigurationError: If the file is not a workspace export
    """
    try:
        with open(backup_file, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read backup file {backup_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Backup file {backup_file} does not hold a workspace")
    try:
        return WorkspaceExport.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Backup file {backup_file} is not a workspace export: {e}") from e


@workspaces.command(name="restore")
@click.argument("backup_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--side", type=SIDE_OPTION_CHOICES, default="target", show_default=True)
@click.option(
    "--register/--no-register",
    default=True,
    show_default=True,
    help="Record the new workspace in the catalog of the same side",
)
@click.option("--label", help="Catalog label (defaults to the workspace name)")
@pass_context
@requires_config
@handle_errors
def restore(
    ctx: MigrationContext, backup_file: Path, side: str, register: bool, label: str | None
) -> None:
    """Create a workspace from a backup file.

    The backup (written by migrate before any update) is reduced to the
    create-call fields and sent as a new workspace; the service assigns a
    new id.

    Examples:

        assistant-bridge workspaces restore backup/9f8e7d6c_1700000000000.json
    """
    side = side.lower()
    export = load_backup(backup_file)
    payload = build_create_payload(export)
    client = ctx.client(side)

    created = run_with_clients(ctx, lambda: client.create_workspace(payload))
    workspace_id = created.get("workspace_id")
    echo_success(f"Created workspace {payload.get('name')} ({workspace_id}) on the {side} service")

    if register:
        name = payload.get("name") or created.get("name")
        if not name:
            raise ConfigurationError("Backup has no workspace name; cannot register it")
        record = WorkspaceRecord(id=workspace_id or None, name=name, label=label or name)
        ctx.catalog(side).insert_workspace(record)
        echo_success(f"Registered {name} in the {side} catalog")


@workspaces.command(name="delete")
@click.argument("workspace_id")
@click.option("--side", type=SIDE_OPTION_CHOICES, default="target", show_default=True)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@confirm_action("This will permanently delete the workspace. Continue?")
@pass_context
@requires_config
@handle_errors
def delete(ctx: MigrationContext, workspace_id: str, side: str, yes: bool) -> None:
    """Delete a workspace from a service.

    Catalog rows are left untouched.
    """
    client = ctx.client(side.lower())
    run_with_clients(ctx, lambda: client.delete_workspace(workspace_id))
    echo_success(f"Deleted workspace {workspace_id} from the {side} service")

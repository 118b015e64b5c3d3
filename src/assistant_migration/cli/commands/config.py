"""``config validate`` and ``config show``."""

import click
import yaml

from assistant_migration.catalog.database import validate_catalog_connection
from assistant_migration.cli.context import SIDES, MigrationContext
from assistant_migration.cli.decorators import handle_errors, pass_context, requires_config
from assistant_migration.cli.utils import (
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    print_table,
    run_with_clients,
)
from assistant_migration.client.exceptions import CatalogError
from assistant_migration.config import MigrationConfig, redacted_config
from assistant_migration.utils.logging import get_logger

logger = get_logger(__name__)


@click.group(name="config")
def config() -> None:
    """Configuration management commands.

    Validate and display the migration configuration.
    """
    pass


@config.command(name="validate")
@click.option(
    "--check-connectivity",
    is_flag=True,
    help="Test the catalog databases and the assistant services of both sides",
)
@pass_context
@requires_config
@handle_errors
def validate(ctx: MigrationContext, check_connectivity: bool) -> None:
    """Validate migration configuration.

    This command validates the configuration, checking:
    - Both sides have a catalog database and a service API
    - URLs are properly formatted and credentials are set
    - The migration parameters select workspaces unambiguously

    If --check-connectivity is provided, it also opens both catalogs and
    lists the workspaces of both services.

    Examples:

        assistant-bridge config validate --config config.yaml

        assistant-bridge config validate --check-connectivity
    """
    echo_info(f"Validating configuration: {ctx.config_path or 'environment'}")

    # Loading already validated the models; parameters are checked here
    config = ctx.config

    click.echo()
    _display_config_summary(config)

    click.echo()
    echo_info("Validating migration parameters...")
    _validate_parameters(config)

    if check_connectivity:
        click.echo()
        echo_info("Testing connectivity...")
        _test_connectivity(ctx)

    click.echo()
    echo_success("Configuration is valid!")


def _display_config_summary(config: MigrationConfig) -> None:
    """Print the settings that decide where the migration reads and writes."""
    params = config.migration_tool_parameters
    rows = [
        ["Source Service URL", config.source.service_api.url],
        ["Source Catalog", config.source.db.sqlalchemy_url().render_as_string(hide_password=True)],
        ["Target Service URL", config.target.service_api.url],
        ["Target Catalog", config.target.db.sqlalchemy_url().render_as_string(hide_password=True)],
        ["Backup Directory", config.source.backup_directory],
        ["Migrate All", params.migrate_all],
        ["Single Workspace ID", params.single_workspace_id or "-"],
        ["Max Concurrent", config.performance.max_concurrent or "unbounded"],
        ["Continue On Error", config.performance.continue_on_error],
    ]

    print_table("Configuration Summary", ["Setting", "Value"], rows)


def _validate_parameters(config: MigrationConfig) -> None:
    """Check that exactly one selection mode is active."""
    params = config.migration_tool_parameters
    single_id = params.single_workspace_id.strip()

    if params.migrate_all and single_id:
        echo_warning("migrate_all and single_workspace_id are both set")
        echo_warning("migrate needs --all or --workspace-id to pick one")
    elif not params.migrate_all and not single_id:
        echo_warning("No workspace selected: migrate needs --all or --workspace-id")
    else:
        echo_success("Migration parameters are valid")


def _test_connectivity(ctx: MigrationContext) -> None:
    """Test the catalogs and services of both sides."""
    for side in SIDES:
        catalog = ctx.catalog(side)
        if validate_catalog_connection(catalog.engine):
            echo_success(f"{side.title()} catalog reachable")
        else:
            echo_error(f"{side.title()} catalog unreachable")
            raise CatalogError(f"Cannot connect to the {side} catalog database")

    async def list_both() -> None:
        for side in SIDES:
            echo_info(f"Listing {side} workspaces...")
            workspaces = await ctx.client(side).list_workspaces()
            echo_success(f"{side.title()} service reachable ({len(workspaces)} workspaces)")

    run_with_clients(ctx, list_both)


@config.command(name="show")
@pass_context
@requires_config
@handle_errors
def show(ctx: MigrationContext) -> None:
    """Display current configuration.

    Shows the loaded configuration with passwords and API keys masked.

    Examples:

        assistant-bridge config show --config config.yaml
    """
    click.echo(yaml.safe_dump(redacted_config(ctx.config), sort_keys=False))

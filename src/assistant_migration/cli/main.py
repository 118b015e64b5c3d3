"""Entry point of the ``assistant-bridge`` command."""

import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from assistant_migration import __version__
from assistant_migration.cli.commands import catalog as catalog_commands
from assistant_migration.cli.commands import config as config_commands
from assistant_migration.cli.commands import migrate as migrate_commands
from assistant_migration.cli.commands import workspaces as workspaces_commands
from assistant_migration.cli.context import MigrationContext
from assistant_migration.utils.logging import configure_logging, get_logger, log_error

load_dotenv()

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="assistant-bridge")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to YAML configuration file (environment variables otherwise)",
    envvar="ASSISTANT_BRIDGE_CONFIG",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Console logging level (defaults to logging.level of the configuration)",
    envvar="ASSISTANT_BRIDGE_LOG_LEVEL",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Log file (defaults to logging.file of the configuration)",
    envvar="ASSISTANT_BRIDGE_LOG_FILE",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    log_level: str | None,
    log_file: Path | None,
) -> None:
    """Assistant Bridge - Migrate assistant workspaces between deployments.

    Workspaces listed in the source catalog are exported from the source
    assistant service, backed up, and written over the workspaces of the
    same name registered in the target catalog.

    Examples:

        # Validate configuration
        assistant-bridge config validate --config config.yaml

        # Migrate every workspace
        assistant-bridge --config config.yaml migrate --all

        # Recreate a workspace from its backup
        assistant-bridge workspaces restore backup/9f8e7d6c_1700000000000.json
    """
    # Console only until the configuration is loaded and names the log file
    configure_logging(
        level=log_level or "WARNING",
        log_file=str(log_file) if log_file else None,
    )

    migration_ctx = MigrationContext(
        config_path=config,
        log_level=log_level,
        log_file=log_file,
    )
    ctx.obj = migration_ctx
    ctx.call_on_close(migration_ctx.cleanup)

    logger.debug(
        "cli_initialized",
        config=str(config) if config else None,
        log_level=log_level,
    )


cli.add_command(config_commands.config)
cli.add_command(catalog_commands.catalog)
cli.add_command(workspaces_commands.workspaces)

cli.add_command(migrate_commands.migrate)


def main() -> int:
    """Run the CLI and return its exit code instead of exiting."""
    try:
        cli(standalone_mode=False)
        return 0
    except click.exceptions.Exit as e:
        return e.exit_code
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except Exception as e:
        log_error(logger, e, context="cli")
        click.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())

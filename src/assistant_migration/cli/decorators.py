"""Decorators shared by the CLI commands: context passing, error to exit code
mapping, configuration loading and confirmation prompts."""

import functools
from collections.abc import Callable
from typing import NamedTuple

import click

from assistant_migration.cli.context import MigrationContext
from assistant_migration.client.exceptions import (
    AuthenticationError,
    AuthorizationError,
    CatalogError,
    ConfigurationError,
    MigrationError,
    ServiceError,
)
from assistant_migration.utils.logging import get_logger

logger = get_logger(__name__)

EXIT_GENERAL_ERROR = 1
EXIT_CONFIGURATION_ERROR = 2
EXIT_AUTHENTICATION_ERROR = 3
EXIT_SERVICE_ERROR = 4
EXIT_CATALOG_ERROR = 5
EXIT_MIGRATION_ERROR = 6


class ErrorOutcome(NamedTuple):
    exit_code: int
    label: str
    hint: str | None


# Checked in order; authentication errors are ServiceErrors and must come first
ERROR_OUTCOMES: list[tuple[type[Exception] | tuple[type[Exception], ...], ErrorOutcome]] = [
    (
        ConfigurationError,
        ErrorOutcome(
            EXIT_CONFIGURATION_ERROR,
            "Configuration Error",
            "Check the configuration file or the SOURCE__/TARGET__ environment variables.",
        ),
    ),
    (
        (AuthenticationError, AuthorizationError),
        ErrorOutcome(
            EXIT_AUTHENTICATION_ERROR,
            "Authentication Error",
            "Verify the service_api credentials of both deployments.",
        ),
    ),
    (ServiceError, ErrorOutcome(EXIT_SERVICE_ERROR, "Service API Error", None)),
    (
        CatalogError,
        ErrorOutcome(
            EXIT_CATALOG_ERROR,
            "Catalog Error",
            "Check the db settings and the contents of the WORKSPACE table.",
        ),
    ),
    (MigrationError, ErrorOutcome(EXIT_MIGRATION_ERROR, "Migration Error", None)),
]


def outcome_for(error: Exception) -> ErrorOutcome:
    """Exit code, label and hint reported for ``error``."""
    for error_types, outcome in ERROR_OUTCOMES:
        if isinstance(error, error_types):
            return outcome
    return ErrorOutcome(
        EXIT_GENERAL_ERROR, "Unexpected Error", "Run with --log-level DEBUG for details."
    )


def pass_context(f: Callable) -> Callable:
    """Call the command with the ``MigrationContext`` stored on the click context."""

    @click.pass_context
    @functools.wraps(f)
    def wrapper(click_ctx: click.Context, *args, **kwargs):
        return f(click_ctx.obj, *args, **kwargs)

    return wrapper


def handle_errors(f: Callable) -> Callable:
    """Report errors raised by a command and exit with the matching code.

    Exit codes:
        0: Success
        1: Unexpected error
        2: Configuration error
        3: Authentication or authorization error
        4: Service API error
        5: Catalog error
        6: Migration error
    """

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (click.exceptions.Exit, click.exceptions.Abort):
            raise
        except Exception as e:
            outcome = outcome_for(e)
            logger.error(
                "command_failed",
                error_type=type(e).__name__,
                error=str(e),
                exit_code=outcome.exit_code,
                exc_info=outcome.exit_code == EXIT_GENERAL_ERROR,
            )
            click.echo(f"{outcome.label}: {e}", err=True)
            if isinstance(e, ServiceError) and e.status_code:
                click.echo(f"Response status: {e.status_code}", err=True)
            if isinstance(e, MigrationError) and e.__cause__ is not None:
                click.echo(f"Caused by: {e.__cause__}", err=True)
            if outcome.hint:
                click.echo(outcome.hint, err=True)
            raise click.exceptions.Exit(outcome.exit_code) from e

    return wrapper


def requires_config(f: Callable) -> Callable:
    """Load and validate the configuration before the command runs."""

    @functools.wraps(f)
    def wrapper(ctx: MigrationContext, *args, **kwargs):
        try:
            ctx.config
        except ConfigurationError as e:
            click.echo(f"Error loading configuration: {e}", err=True)
            raise click.exceptions.Exit(EXIT_CONFIGURATION_ERROR) from e
        return f(ctx, *args, **kwargs)

    return wrapper


def confirm_action(
    message: str = "Do you want to continue?",
    abort_message: str = "Operation cancelled.",
) -> Callable:
    """Ask for confirmation unless the command was given ``--yes``.

    Declining prints ``abort_message`` and exits with code 0.
    """

    def decorator(f: Callable) -> Callable:
        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            assume_yes = click.get_current_context().params.get("yes", False)
            if not assume_yes and not click.confirm(message):
                click.echo(abort_message)
                raise click.exceptions.Exit(0)
            return f(*args, **kwargs)

        return wrapper

    return decorator

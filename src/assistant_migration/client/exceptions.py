"""Custom exceptions for Assistant Bridge.

This module defines exception classes for the error conditions that can occur
while loading configuration, reading the workspace catalogs, calling the
assistant service, and running the migration pipeline.
"""


class AssistantMigrationError(Exception):
    """Base exception for all assistant migration tool errors."""

    pass


class ConfigurationError(AssistantMigrationError):
    """Raised when configuration or migration parameters are invalid or missing."""

    pass


class CatalogError(AssistantMigrationError):
    """Raised when a workspace catalog cannot be opened, queried or decoded."""

    pass


class ServiceError(AssistantMigrationError):
    """An assistant service call failed.

    ``status_code`` is None when no response was received. ``response`` holds
    the decoded error body, usually ``{"error": ..., "code": ...}``.
    """

    def __init__(self, message: str, status_code: int | None = None, response: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.response = response
        super().__init__(self.describe())

    def describe(self) -> str:
        """``[status] message: body``, leaving out the parts that are absent."""
        prefix = f"[{self.status_code}] " if self.status_code else ""
        suffix = f": {self.response}" if self.response else ""
        return f"{prefix}{self.message}{suffix}"


class AuthenticationError(ServiceError):
    """The service rejected the credentials (401)."""

    pass


class AuthorizationError(ServiceError):
    """The credentials may not access the workspace (403)."""

    pass


class ResourceNotFoundError(ServiceError):
    """The workspace does not exist on the service (404)."""

    pass


class ConflictError(ServiceError):
    """The service refused a conflicting change (409)."""

    pass


class RateLimitError(ServiceError):
    """The service is throttling calls (429)."""

    def __init__(self, message: str, *args, retry_after: int | None = None, **kwargs):
        super().__init__(message, *args, **kwargs)
        #: Seconds from the Retry-After header, when the service sent one
        self.retry_after = retry_after


class ServerError(ServiceError):
    """The service failed internally (5xx)."""

    pass


class NetworkError(ServiceError):
    """No response was received: timeout or connection failure."""

    pass


class BackupWriteError(AssistantMigrationError):
    """Raised when a workspace backup file cannot be written.

    Never fatal: the migration of the workspace goes on without its backup.
    """

    pass


class MigrationError(AssistantMigrationError):
    """Raised when migration pipeline operations fail."""

    pass


class NoCandidatesError(MigrationError):
    """Raised when the source catalog yields no workspace to migrate."""

    pass


class WorkspaceNotFoundError(MigrationError):
    """Raised when a workspace cannot be matched (zero matches)."""

    pass


class AmbiguousWorkspaceError(MigrationError):
    """Raised when a workspace lookup returns more than one match."""

    def __init__(self, message: str, matches: int = 0):
        """Initialize ambiguous workspace error.

        Args:
            message: Error message
            matches: Number of matching entries found
        """
        super().__init__(message)
        self.matches = matches


class ApplyError(MigrationError):
    """Raised when a workspace update on the target service fails."""

    def __init__(self, message: str, workspace_id: str | None = None):
        """Initialize apply error.

        Args:
            message: Error message
            workspace_id: Target workspace identifier that failed to update
        """
        super().__init__(message)
        self.workspace_id = workspace_id

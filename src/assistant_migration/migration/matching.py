"""Cross-referencing of catalog identifiers against the service's workspace list."""

from collections.abc import Sequence

from assistant_migration.client.exceptions import AmbiguousWorkspaceError, WorkspaceNotFoundError
from assistant_migration.migration.models import WorkspaceSummary


def match_one(summaries: Sequence[WorkspaceSummary], target_id: str) -> str:
    """Return ``target_id`` if exactly one summary carries it.

    Duplicate identifiers on the service are treated as unrecoverable rather
    than resolved by picking one.

    Raises:
        WorkspaceNotFoundError: No summary has the id
        AmbiguousWorkspaceError: More than one summary has the id
    """
    matches = [summary.id for summary in summaries if summary.id == target_id]

    if not matches:
        raise WorkspaceNotFoundError(f"Workspace {target_id} not found on the service")
    if len(matches) > 1:
        raise AmbiguousWorkspaceError(
            f"Workspace {target_id} listed {len(matches)} times on the service",
            matches=len(matches),
        )
    return matches[0]

"""Point-in-time backups of source workspaces.

Every exported workspace is written to ``{workspace_id}_{epoch_millis}.json``
before anything is changed on the target.
"""

import json
import time
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from assistant_migration.client.exceptions import BackupWriteError
from assistant_migration.utils.logging import get_logger

logger = get_logger(__name__)


def backup_file_name(workspace_id: str, timestamp_ms: int | None = None) -> str:
    """Return the backup file name for a workspace.

    Args:
        workspace_id: Source workspace identifier
        timestamp_ms: Epoch milliseconds (defaults to now)
    """
    if not workspace_id:
        raise ValueError("Workspace id is required to name a backup")
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    return f"{workspace_id}_{timestamp_ms}.json"


@runtime_checkable
class BackupSink(Protocol):
    """Destination for workspace backups."""

    def write(self, path: Path, payload: dict[str, Any]) -> None:
        """Persist ``payload`` as JSON at ``path``.

        Raises:
            BackupWriteError: If the backup cannot be written
        """
        ...


class FileBackupSink:
    """Writes backups as indented JSON files on the local filesystem."""

    def write(self, path: Path, payload: dict[str, Any]) -> None:
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            raise BackupWriteError(f"Cannot write backup {path}: {e}") from e

        logger.debug("backup_file_written", path=str(path))

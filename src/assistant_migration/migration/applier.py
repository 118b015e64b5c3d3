"""Application of migration units to the target service."""

from typing import Any

import structlog

from assistant_migration.client.assistant_client import AssistantClient
from assistant_migration.client.exceptions import ApplyError, ServiceError
from assistant_migration.migration.models import MigrationUnit
from assistant_migration.migration.reshape import build_update_payload
from assistant_migration.utils.logging import get_logger

logger = get_logger(__name__)


class MigrationApplier:
    """Updates target workspaces with migrated content. Nothing is retried."""

    def __init__(
        self, target_client: AssistantClient, log: structlog.stdlib.BoundLogger | None = None
    ):
        self.target_client = target_client
        self.log = log or logger

    async def apply(self, unit: MigrationUnit, target_id: str) -> dict[str, Any]:
        """Overwrite target workspace ``target_id`` with the unit's content.

        Returns:
            The service's description of the updated workspace

        Raises:
            ApplyError: The update call failed
        """
        payload = build_update_payload(unit.exported_content, target_id)
        log = self.log.bind(workspace=unit.source_catalog_name, target_id=target_id)

        try:
            result = await self.target_client.update_workspace(payload)
        except ServiceError as e:
            log.error("workspace_update_failed", error=str(e), status_code=e.status_code)
            raise ApplyError("error to update workspace", workspace_id=target_id) from e

        log.info(
            "workspace_updated",
            intents=len(payload["intents"]),
            entities=len(payload["entities"]),
            dialog_nodes=len(payload["dialog_nodes"]),
        )
        return result

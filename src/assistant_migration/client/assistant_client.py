"""Assistant service client for workspace operations.

This client wraps the assistant v1 REST API calls the migration needs:
listing workspace summaries, exporting a workspace, and updating, creating
or deleting a workspace by id.
"""

from typing import Any

import httpx

from assistant_migration.client.base_client import BaseAPIClient
from assistant_migration.config import ServiceAPIConfig
from assistant_migration.migration.models import WorkspaceExport, WorkspaceSummary
from assistant_migration.utils.logging import get_logger

logger = get_logger(__name__)

WORKSPACES_ENDPOINT = "v1/workspaces"


class AssistantClient(BaseAPIClient):
    """Client for one assistant service deployment."""

    def __init__(
        self,
        config: ServiceAPIConfig,
        side: str = "source",
        log_payloads: bool = False,
        max_payload_size: int = 10000,
        max_connections: int | None = None,
        max_keepalive_connections: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize assistant client.

        Args:
            config: Service API configuration
            side: Deployment this client talks to ("source" or "target")
            log_payloads: Enable request/response payload logging
            max_payload_size: Maximum payload size to log before truncation
            max_connections: Maximum number of connections in pool
            max_keepalive_connections: Maximum keep-alive connections
            transport: Optional httpx transport (used by tests)
        """
        super().__init__(
            base_url=config.url,
            username=config.username,
            password=config.password,
            version=config.version,
            verify_ssl=config.verify_ssl,
            timeout=config.timeout,
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
            log_payloads=log_payloads,
            max_payload_size=max_payload_size,
            transport=transport,
        )
        self.side = side
        logger.info("assistant_client_initialized", side=side, url=config.url)

    async def list_workspaces(self, page_limit: int = 100) -> list[WorkspaceSummary]:
        """List every workspace of the deployment, following cursor pagination.

        Args:
            page_limit: Number of workspaces per page

        Returns:
            One summary per workspace
        """
        summaries: list[WorkspaceSummary] = []
        params: dict[str, Any] = {"page_limit": page_limit}
        page = 1

        while True:
            response = await self.get(WORKSPACES_ENDPOINT, params=params)
            workspaces = response.get("workspaces", [])
            summaries.extend(WorkspaceSummary.model_validate(item) for item in workspaces)

            next_cursor = (response.get("pagination") or {}).get("next_cursor")

            logger.debug(
                "workspace_page_fetched",
                side=self.side,
                page=page,
                items_this_page=len(workspaces),
                total_items_so_far=len(summaries),
            )

            if not next_cursor or not workspaces:
                break

            params = {"page_limit": page_limit, "cursor": next_cursor}
            page += 1

        logger.info("workspaces_listed", side=self.side, total=len(summaries))
        return summaries

    async def get_workspace(self, workspace_id: str, export: bool = True) -> WorkspaceExport:
        """Retrieve a workspace, with its full content when ``export`` is set."""
        logger.info("retrieving_workspace", side=self.side, workspace_id=workspace_id)
        response = await self.get(
            f"{WORKSPACES_ENDPOINT}/{workspace_id}",
            params={"export": str(export).lower()},
        )
        return WorkspaceExport.model_validate(response)

    async def update_workspace(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Update the workspace named by ``payload["workspace_id"]``.

        The identifier goes in the path; the rest of the payload is the body.
        """
        body = dict(payload)
        workspace_id = body.pop("workspace_id", None)
        if not workspace_id:
            raise ValueError("Update payload requires a workspace_id")

        logger.info("updating_workspace", side=self.side, workspace_id=workspace_id)
        return await self.post(f"{WORKSPACES_ENDPOINT}/{workspace_id}", json_data=body)

    async def create_workspace(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create a new workspace and return the service's description of it."""
        logger.info("creating_workspace", side=self.side, name=payload.get("name"))
        return await self.post(WORKSPACES_ENDPOINT, json_data=payload)

    async def delete_workspace(self, workspace_id: str) -> dict[str, Any]:
        """Delete a workspace."""
        logger.info("deleting_workspace", side=self.side, workspace_id=workspace_id)
        return await self.delete(f"{WORKSPACES_ENDPOINT}/{workspace_id}")

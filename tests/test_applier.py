"""Tests for applying migration units to the target service."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from assistant_migration.client.exceptions import ApplyError, ConflictError
from assistant_migration.migration.applier import MigrationApplier
from assistant_migration.migration.models import MigrationUnit, WorkspaceExport


@pytest.fixture
def unit(sample_export: WorkspaceExport) -> MigrationUnit:
    return MigrationUnit(source_catalog_name="Alpha", exported_content=sample_export, source_id="W1")


async def test_apply_sends_reshaped_payload(target_client: MagicMock, unit: MigrationUnit) -> None:
    result = await MigrationApplier(target_client).apply(unit, "T1")

    assert result == {"workspace_id": "T1"}
    target_client.update_workspace.assert_awaited_once()
    payload = target_client.update_workspace.await_args.args[0]
    assert payload["workspace_id"] == "T1"
    assert payload["name"] == "Alpha"
    assert "status" not in payload


async def test_service_error_becomes_apply_error(unit: MigrationUnit) -> None:
    cause = ConflictError("Resource conflict", status_code=409)
    client = MagicMock()
    client.update_workspace = AsyncMock(side_effect=cause)

    with pytest.raises(ApplyError, match="error to update workspace") as exc_info:
        await MigrationApplier(client).apply(unit, "T1")

    assert exc_info.value.workspace_id == "T1"
    assert exc_info.value.__cause__ is cause
    client.update_workspace.assert_awaited_once()

"""Tests for the migration coordinator pipeline."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from conftest import catalog_row, config_data

from assistant_migration.client.exceptions import (
    ConfigurationError,
    NoCandidatesError,
    ServerError,
    WorkspaceNotFoundError,
)
from assistant_migration.config import MigrationConfig
from assistant_migration.migration.coordinator import MigrationCoordinator
from assistant_migration.migration.models import AppliedWorkspace, WorkspaceSummary


def _coordinator(
    config: MigrationConfig,
    source_catalog,
    source_client: MagicMock,
    target_catalog,
    target_client: MagicMock,
    **kwargs,
) -> MigrationCoordinator:
    return MigrationCoordinator(
        config=config,
        source_catalog=source_catalog,
        source_client=source_client,
        target_catalog=target_catalog,
        target_client=target_client,
        **kwargs,
    )


async def test_single_workspace_end_to_end(
    tmp_path: Path, source_catalog, source_client, target_catalog, target_client
) -> None:
    config = MigrationConfig(**config_data(tmp_path, single_workspace_id="W1"))

    summary = await _coordinator(
        config, source_catalog, source_client, target_catalog, target_client
    ).run()

    target_client.update_workspace.assert_awaited_once()
    payload = target_client.update_workspace.await_args.args[0]
    assert payload["workspace_id"] == "T1"
    assert payload["name"] == "Alpha"

    assert summary.success
    assert summary.candidates == 1
    assert summary.assembled == 1
    assert summary.updated == [AppliedWorkspace(name="Alpha", source_id="W1", target_id="T1")]

    assert len(list((tmp_path / "backup").glob("W1_*.json"))) == 1


async def test_no_candidates(
    tmp_path: Path, source_catalog, source_client, target_catalog, target_client
) -> None:
    config = MigrationConfig(**config_data(tmp_path, single_workspace_id="W9"))

    with pytest.raises(NoCandidatesError):
        await _coordinator(
            config, source_catalog, source_client, target_catalog, target_client
        ).run()

    source_client.list_workspaces.assert_not_awaited()
    target_client.update_workspace.assert_not_awaited()


async def test_invalid_parameters_fail_before_catalog(
    tmp_path: Path, source_catalog, source_client, target_catalog, target_client
) -> None:
    config = MigrationConfig(
        **config_data(tmp_path, migrate_all=True, single_workspace_id="W1")
    )

    with pytest.raises(ConfigurationError):
        await _coordinator(
            config, source_catalog, source_client, target_catalog, target_client
        ).run()

    source_client.list_workspaces.assert_not_awaited()


async def test_dry_run_resolves_without_updating(
    migration_config: MigrationConfig, source_catalog, source_client, target_catalog, target_client
) -> None:
    summary = await _coordinator(
        migration_config, source_catalog, source_client, target_catalog, target_client, dry_run=True
    ).run()

    target_client.update_workspace.assert_not_awaited()
    assert summary.dry_run
    assert [item.target_id for item in summary.updated] == ["T1"]


async def test_missing_target_fails_the_run(
    migration_config: MigrationConfig, source_catalog, source_client, make_catalog, target_client
) -> None:
    target_catalog = make_catalog("target", [catalog_row("T2", "Beta")], side="target")

    with pytest.raises(WorkspaceNotFoundError):
        await _coordinator(
            migration_config, source_catalog, source_client, target_catalog, target_client
        ).run()

    target_client.update_workspace.assert_not_awaited()


async def test_export_failure_fails_the_run(
    migration_config: MigrationConfig, source_catalog, source_client, target_catalog, target_client
) -> None:
    source_client.get_workspace.side_effect = ServerError("Server error", status_code=503)

    with pytest.raises(ServerError):
        await _coordinator(
            migration_config, source_catalog, source_client, target_catalog, target_client
        ).run()

    target_client.update_workspace.assert_not_awaited()


async def test_continue_on_error_collects_failures(
    tmp_path: Path, make_catalog, source_client, target_client
) -> None:
    data = config_data(tmp_path)
    data["performance"] = {"continue_on_error": True, "max_concurrent": 2}
    config = MigrationConfig(**data)

    source_catalog = make_catalog(
        "source",
        [catalog_row("W1", "Alpha"), catalog_row("W2", "Beta"), catalog_row("W3", "Gamma")],
        side="source",
    )
    target_catalog = make_catalog(
        "target", [catalog_row("T1", "Alpha"), catalog_row("T3", "Gamma")], side="target"
    )
    # W3 is in the source catalog but not on the source service
    source_client.list_workspaces.return_value = [
        WorkspaceSummary(id="W1", name="Alpha"),
        WorkspaceSummary(id="W2", name="Beta"),
    ]

    summary = await _coordinator(
        config, source_catalog, source_client, target_catalog, target_client
    ).run()

    assert not summary.success
    assert summary.candidates == 3
    assert summary.assembled == 2
    assert [item.target_id for item in summary.updated] == ["T1"]
    assert sorted(item.name for item in summary.failed) == ["Beta", "Gamma"]
    target_client.update_workspace.assert_awaited_once()

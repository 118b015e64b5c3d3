"""Tests for target id resolution."""

from __future__ import annotations

import pytest
from conftest import catalog_row

from assistant_migration.client.exceptions import AmbiguousWorkspaceError, WorkspaceNotFoundError
from assistant_migration.migration.models import MigrationUnit, WorkspaceExport
from assistant_migration.migration.resolver import TargetResolver


@pytest.fixture
def unit(sample_export: WorkspaceExport) -> MigrationUnit:
    return MigrationUnit(source_catalog_name="Alpha", exported_content=sample_export, source_id="W1")


async def test_resolves_single_row(target_catalog, unit: MigrationUnit) -> None:
    assert await TargetResolver(target_catalog).resolve_target_id(unit) == "T1"


async def test_no_row_with_name(make_catalog, unit: MigrationUnit) -> None:
    catalog = make_catalog("target", [catalog_row("T2", "Beta")])

    with pytest.raises(WorkspaceNotFoundError):
        await TargetResolver(catalog).resolve_target_id(unit)


async def test_several_rows_with_name(make_catalog, unit: MigrationUnit) -> None:
    catalog = make_catalog("target", [catalog_row("T1", "Alpha"), catalog_row("T2", "Alpha")])

    with pytest.raises(AmbiguousWorkspaceError) as exc_info:
        await TargetResolver(catalog).resolve_target_id(unit)

    assert exc_info.value.matches == 2


async def test_row_without_id(make_catalog, unit: MigrationUnit) -> None:
    catalog = make_catalog("target", [catalog_row(None, "Alpha")])

    with pytest.raises(WorkspaceNotFoundError, match="no workspace id"):
        await TargetResolver(catalog).resolve_target_id(unit)

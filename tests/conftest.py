"""Shared fixtures for assistant-bridge tests."""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from assistant_migration.catalog.catalog import WorkspaceCatalog
from assistant_migration.catalog.database import create_catalog_engine
from assistant_migration.catalog.schema import WorkspaceColumns
from assistant_migration.config import MigrationConfig
from assistant_migration.migration.models import WorkspaceExport, WorkspaceSummary

TIMESTAMP = "2024-03-01T10:00:00.000Z"

SAMPLE_EXPORT: dict[str, Any] = {
    "workspace_id": "W1",
    "name": "Alpha",
    "description": "Alpha support bot",
    "language": "en",
    "status": "Available",
    "created": TIMESTAMP,
    "updated": TIMESTAMP,
    "learning_opt_out": False,
    "metadata": {"api_version": {"major_version": "v1", "minor_version": "2018-07-10"}},
    "system_settings": {"disambiguation": {"enabled": True}},
    "webhooks": [],
    "intents": [
        {
            "intent": "greeting",
            "description": None,
            "created": TIMESTAMP,
            "updated": TIMESTAMP,
            "examples": [
                {"text": "hello", "created": TIMESTAMP, "updated": TIMESTAMP},
                {"text": "good morning", "created": TIMESTAMP, "updated": TIMESTAMP},
            ],
        }
    ],
    "entities": [
        {
            "entity": "color",
            "fuzzy_match": True,
            "created": TIMESTAMP,
            "updated": TIMESTAMP,
            "values": [
                {
                    "value": "red",
                    "type": "synonyms",
                    "synonyms": ["crimson"],
                    "created": TIMESTAMP,
                    "updated": TIMESTAMP,
                }
            ],
        }
    ],
    "dialog_nodes": [
        {
            "dialog_node": "welcome",
            "conditions": "welcome",
            "title": "Welcome",
            "output": {"generic": [{"response_type": "text", "values": [{"text": "Hi!"}]}]},
            "created": TIMESTAMP,
            "updated": TIMESTAMP,
            "disabled": False,
        },
        {
            "dialog_node": "anything_else",
            "conditions": "anything_else",
            "previous_sibling": "welcome",
            "created": TIMESTAMP,
            "updated": TIMESTAMP,
        },
    ],
    "counterexamples": [{"text": "buy a car", "created": TIMESTAMP, "updated": TIMESTAMP}],
}


def catalog_row(workspace_id: str | None, name: str, label: str | None = None) -> dict[str, Any]:
    return {
        WorkspaceColumns.ID: workspace_id,
        WorkspaceColumns.NAME: name,
        WorkspaceColumns.LABEL: label or f"{name} label",
    }


@pytest.fixture
def export_data() -> dict[str, Any]:
    """A fresh copy of the sample export JSON."""
    return copy.deepcopy(SAMPLE_EXPORT)


@pytest.fixture
def sample_export(export_data: dict[str, Any]) -> WorkspaceExport:
    return WorkspaceExport.model_validate(export_data)


@pytest.fixture
def make_catalog(tmp_path: Path) -> Iterator[Callable[..., WorkspaceCatalog]]:
    """Factory for SQLite-backed catalogs pre-filled with rows."""
    created: list[WorkspaceCatalog] = []

    def _make(
        name: str, rows: list[dict[str, Any]] | None = None, side: str = "catalog"
    ) -> WorkspaceCatalog:
        engine = create_catalog_engine(f"sqlite:///{tmp_path / name}.db")
        catalog = WorkspaceCatalog(engine, side=side)
        catalog.create_table()
        for row in rows or []:
            catalog.insert(catalog.table_name, row)
        created.append(catalog)
        return catalog

    yield _make

    for catalog in created:
        catalog.close()


@pytest.fixture
def source_catalog(make_catalog: Callable[..., WorkspaceCatalog]) -> WorkspaceCatalog:
    return make_catalog("source", [catalog_row("W1", "Alpha")], side="source")


@pytest.fixture
def target_catalog(make_catalog: Callable[..., WorkspaceCatalog]) -> WorkspaceCatalog:
    return make_catalog("target", [catalog_row("T1", "Alpha")], side="target")


@pytest.fixture
def source_client(sample_export: WorkspaceExport) -> MagicMock:
    """Source service double listing W1/Alpha and exporting the sample workspace."""
    client = MagicMock()
    client.list_workspaces = AsyncMock(return_value=[WorkspaceSummary(id="W1", name="Alpha")])
    client.get_workspace = AsyncMock(return_value=sample_export)
    client.close = AsyncMock()
    return client


@pytest.fixture
def target_client() -> MagicMock:
    """Target service double accepting every update."""
    client = MagicMock()
    client.update_workspace = AsyncMock(side_effect=lambda payload: {"workspace_id": payload["workspace_id"]})
    client.create_workspace = AsyncMock(return_value={"workspace_id": "N1", "name": "Alpha"})
    client.delete_workspace = AsyncMock(return_value={})
    client.list_workspaces = AsyncMock(return_value=[WorkspaceSummary(id="T1", name="Alpha")])
    client.close = AsyncMock()
    return client


def config_data(tmp_path: Path, **parameters: Any) -> dict[str, Any]:
    """Raw configuration with SQLite catalogs under ``tmp_path``."""
    return {
        "source": {
            "db": {"url": f"sqlite:///{tmp_path / 'source'}.db"},
            "service_api": {"url": "https://source.example.com/", "password": "source-key"},
            "backup_directory": str(tmp_path / "backup"),
        },
        "target": {
            "db": {"url": f"sqlite:///{tmp_path / 'target'}.db"},
            "service_api": {"url": "https://target.example.com", "password": "target-key"},
        },
        "migration_tool_parameters": parameters or {"migrate_all": True},
        "logging": {"file": str(tmp_path / "migration.log")},
    }


@pytest.fixture
def migration_config(tmp_path: Path) -> MigrationConfig:
    return MigrationConfig(**config_data(tmp_path))

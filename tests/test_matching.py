"""Tests for cross-referencing catalog ids against the service list."""

from __future__ import annotations

import pytest

from assistant_migration.client.exceptions import AmbiguousWorkspaceError, WorkspaceNotFoundError
from assistant_migration.migration.matching import match_one
from assistant_migration.migration.models import WorkspaceSummary


def _summaries(*ids: str) -> list[WorkspaceSummary]:
    return [WorkspaceSummary(id=workspace_id, name=f"ws-{workspace_id}") for workspace_id in ids]


def test_exactly_one_match() -> None:
    assert match_one(_summaries("W1", "W2", "W3"), "W2") == "W2"


def test_no_match() -> None:
    with pytest.raises(WorkspaceNotFoundError):
        match_one(_summaries("W1", "W2"), "W9")


def test_empty_list() -> None:
    with pytest.raises(WorkspaceNotFoundError):
        match_one([], "W1")


def test_duplicate_ids_are_ambiguous() -> None:
    with pytest.raises(AmbiguousWorkspaceError) as exc_info:
        match_one(_summaries("W1", "W2", "W1"), "W1")

    assert exc_info.value.matches == 2


def test_match_is_exact() -> None:
    with pytest.raises(WorkspaceNotFoundError):
        match_one(_summaries("W10", "w1"), "W1")


def test_summary_decodes_service_field_name() -> None:
    summary = WorkspaceSummary.model_validate({"workspace_id": "W1", "name": "Alpha", "status": "x"})

    assert summary.id == "W1"
    assert summary.name == "Alpha"

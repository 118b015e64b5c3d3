"""
Migration module for Assistant Bridge.

This module provides the value records, the payload reshaping and the
pipeline steps used to move workspaces from the source deployment to the
target deployment. The coordinator lives in
``assistant_migration.migration.coordinator``.
"""

# Value records
from assistant_migration.migration.models import (
    AppliedWorkspace,
    CandidateQuery,
    FailedWorkspace,
    MigrationParameters,
    MigrationSummary,
    MigrationUnit,
    QueryFilter,
    WorkspaceExport,
    WorkspaceRecord,
    WorkspaceSummary,
)

# Payload reshaping
from assistant_migration.migration.reshape import build_create_payload, build_update_payload

__all__ = [
    # Models
    "AppliedWorkspace",
    "CandidateQuery",
    "FailedWorkspace",
    "MigrationParameters",
    "MigrationSummary",
    "MigrationUnit",
    "QueryFilter",
    "WorkspaceExport",
    "WorkspaceRecord",
    "WorkspaceSummary",
    # Reshaping
    "build_create_payload",
    "build_update_payload",
]

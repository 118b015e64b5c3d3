"""
Workspace catalog module for Assistant Bridge.

This module provides the catalog table definition, engine creation and the
WorkspaceCatalog used to select and resolve workspaces on each side.
"""

from assistant_migration.catalog.catalog import WorkspaceCatalog, decode_workspace_rows
from assistant_migration.catalog.database import (
    create_catalog_engine,
    engine_from_config,
    validate_catalog_connection,
)
from assistant_migration.catalog.schema import (
    WORKSPACE_TABLE,
    WorkspaceColumns,
    build_workspace_table,
)

__all__ = [
    # Schema
    "WORKSPACE_TABLE",
    "WorkspaceColumns",
    "build_workspace_table",
    # Database utilities
    "create_catalog_engine",
    "engine_from_config",
    "validate_catalog_connection",
    # Catalog
    "WorkspaceCatalog",
    "decode_workspace_rows",
]

"""
SQLAlchemy schema of the workspace catalog.

Each deployment keeps one row per workspace with its service identifier, its
name (the join key between source and target) and a free-form label.
"""

from sqlalchemy import Column, MetaData, String, Table

WORKSPACE_TABLE = "WORKSPACE"


class WorkspaceColumns:
    """Column names of the workspace catalog table."""

    ID = "ID"
    NAME = "NAME"
    LABEL = "LABEL"


def build_workspace_table(metadata: MetaData, table_name: str = WORKSPACE_TABLE) -> Table:
    """Declare the workspace catalog table on ``metadata``.

    ``ID`` is nullable: target rows can be provisioned before their
    workspace exists.
    """
    return Table(
        table_name,
        metadata,
        Column(WorkspaceColumns.ID, String(128), nullable=True, comment="Workspace id on the service"),
        Column(WorkspaceColumns.NAME, String(256), nullable=False, comment="Workspace name"),
        Column(WorkspaceColumns.LABEL, String(256), nullable=False, comment="Workspace label"),
    )

"""Workspace catalog access.

The catalog is a relational table tracking the workspaces known to one
deployment. Queries are equality-only filters ANDed together; every row read
is decoded into a WorkspaceRecord, and a single undecodable row fails the
whole query.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import ValidationError
from sqlalchemy import Engine, MetaData, Table, and_, insert, select
from sqlalchemy.exc import SQLAlchemyError

from assistant_migration.catalog.schema import WORKSPACE_TABLE, WorkspaceColumns, build_workspace_table
from assistant_migration.client.exceptions import CatalogError
from assistant_migration.migration.models import CandidateQuery, QueryFilter, WorkspaceRecord
from assistant_migration.utils.logging import get_logger

logger = get_logger(__name__)


def decode_workspace_rows(rows: Iterable[Mapping[str, Any]]) -> list[WorkspaceRecord]:
    """Decode catalog rows into WorkspaceRecords.

    Args:
        rows: Row mappings keyed by catalog column name

    Returns:
        Decoded records, in row order

    Raises:
        CatalogError: If any row lacks a required field; no partial list is returned
    """
    records = []
    for row in rows:
        try:
            records.append(
                WorkspaceRecord(
                    id=row.get(WorkspaceColumns.ID),
                    name=row.get(WorkspaceColumns.NAME),
                    label=row.get(WorkspaceColumns.LABEL),
                )
            )
        except ValidationError as e:
            logger.error("catalog_row_decode_failed", error_count=e.error_count())
            raise CatalogError(f"Error parsing workspace records from DB: {e}") from e
    return records


class WorkspaceCatalog:
    """Read and insert access to one deployment's workspace catalog."""

    def __init__(self, engine: Engine, table_name: str = WORKSPACE_TABLE, side: str = "catalog"):
        """Initialize the catalog.

        Args:
            engine: SQLAlchemy engine of the catalog database
            table_name: Name of the workspace table
            side: Label used in log events ("source" or "target")
        """
        self.engine = engine
        self.table_name = table_name
        self.side = side
        self.metadata = MetaData()
        self.table = build_workspace_table(self.metadata, table_name)
        self.log = logger.bind(catalog=side)

    def _get_table(self, table_name: str) -> Table:
        table = self.metadata.tables.get(table_name)
        if table is None:
            raise CatalogError(f"Unknown catalog table: {table_name}")
        return table

    def _column(self, table: Table, column: str):
        if column not in table.c:
            raise CatalogError(f"Unknown column {column} in table {table.name}")
        return table.c[column]

    def query(self, table_name: str, filters: Sequence[QueryFilter]) -> list[dict[str, Any]]:
        """Select rows matching every filter.

        Args:
            table_name: Catalog table to read
            filters: Equality filters, ANDed; empty selects every row

        Returns:
            Row mappings keyed by column name

        Raises:
            CatalogError: If the statement fails
        """
        table = self._get_table(table_name)
        stmt = select(table)
        if filters:
            stmt = stmt.where(and_(*(self._column(table, f.column) == f.value for f in filters)))

        self.log.debug(
            "catalog_query",
            table=table_name,
            filters={f.column: f.value for f in filters},
        )
        try:
            with self.engine.connect() as conn:
                rows = [dict(row._mapping) for row in conn.execute(stmt)]
        except SQLAlchemyError as e:
            self.log.error("catalog_query_failed", table=table_name, error=str(e))
            raise CatalogError(f"Error occurred executing statement on DB: {e}") from e

        self.log.debug("catalog_query_complete", table=table_name, rows=len(rows))
        return rows

    def query_all(self, table_name: str) -> list[dict[str, Any]]:
        """Select every row of a table."""
        return self.query(table_name, ())

    def insert(self, table_name: str, values: Mapping[str, Any]) -> None:
        """Insert one row.

        Args:
            table_name: Catalog table to write
            values: Column name to value; ``None`` values are left out

        Raises:
            CatalogError: If the statement fails
        """
        table = self._get_table(table_name)
        row = {self._column(table, k).name: v for k, v in values.items() if v is not None}
        try:
            with self.engine.begin() as conn:
                conn.execute(insert(table).values(**row))
        except SQLAlchemyError as e:
            self.log.error("catalog_insert_failed", table=table_name, error=str(e))
            raise CatalogError(f"Error occurred inserting into DB: {e}") from e

        self.log.info("catalog_row_inserted", table=table_name, columns=sorted(row))

    def find(self, query: CandidateQuery) -> list[WorkspaceRecord]:
        """Run a candidate query and decode its rows."""
        return decode_workspace_rows(self.query(query.table_name, query.filters))

    def find_by_name(self, name: str) -> list[WorkspaceRecord]:
        """Return every record whose NAME equals ``name``."""
        return self.find(
            CandidateQuery(
                table_name=self.table_name,
                filters=(QueryFilter(column=WorkspaceColumns.NAME, value=name),),
            )
        )

    def list_workspaces(self) -> list[WorkspaceRecord]:
        """Return every record of the catalog."""
        return decode_workspace_rows(self.query_all(self.table_name))

    def insert_workspace(self, record: WorkspaceRecord) -> None:
        """Insert a WorkspaceRecord as a catalog row."""
        self.insert(
            self.table_name,
            {
                WorkspaceColumns.ID: record.id,
                WorkspaceColumns.NAME: record.name,
                WorkspaceColumns.LABEL: record.label,
            },
        )

    def create_table(self) -> None:
        """Create the workspace table if it does not exist."""
        try:
            self.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise CatalogError(f"Failed to create catalog table: {e}") from e

    def close(self) -> None:
        """Release the catalog's connections."""
        self.engine.dispose()
        self.log.info("catalog_closed")

    def __enter__(self) -> "WorkspaceCatalog":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

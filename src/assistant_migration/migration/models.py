"""Value records passed through the migration pipeline.

Every record is frozen: the pipeline builds new records rather than mutating
the ones it received.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WorkspaceRecord(BaseModel):
    """One row of a workspace catalog.

    ``id`` is absent only for target rows whose workspace does not exist yet.
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = Field(default=None, min_length=1)
    name: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)


class WorkspaceSummary(BaseModel):
    """One entry of the service's workspace list."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., alias="workspace_id")
    name: str = ""


class WorkspaceExport(BaseModel):
    """Full workspace content as returned by an export-mode get.

    Only the top-level content fields are typed; intents, entities and dialog
    nodes stay plain JSON objects. Read-only fields (``status``, ``created``,
    ``updated`` and so on) are kept as extras so the backup is complete.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    workspace_id: str | None = None
    name: str | None = None
    description: str | None = None
    language: str | None = None
    intents: list[dict[str, Any]] = Field(default_factory=list)
    entities: list[dict[str, Any]] = Field(default_factory=list)
    dialog_nodes: list[dict[str, Any]] = Field(default_factory=list)
    counterexamples: list[dict[str, Any]] = Field(default_factory=list)
    metadata: dict[str, Any] | None = None
    learning_opt_out: bool | None = None
    system_settings: dict[str, Any] | None = None

    def to_json_dict(self) -> dict[str, Any]:
        """Return the export as plain JSON data, extras included."""
        return self.model_dump(mode="json")


class MigrationUnit(BaseModel):
    """A fetched workspace waiting to be applied to the target."""

    model_config = ConfigDict(frozen=True)

    source_catalog_name: str = Field(..., min_length=1)
    exported_content: WorkspaceExport
    source_id: str | None = None


class MigrationParameters(BaseModel):
    """Operator choice between migrating every workspace or exactly one."""

    model_config = ConfigDict(frozen=True)

    migrate_all: bool = False
    single_workspace_id: str = ""


class QueryFilter(BaseModel):
    """Equality filter on one catalog column."""

    model_config = ConfigDict(frozen=True)

    column: str = Field(..., min_length=1)
    value: str


class CandidateQuery(BaseModel):
    """A catalog query; no filters means every row."""

    model_config = ConfigDict(frozen=True)

    table_name: str = Field(..., min_length=1)
    filters: tuple[QueryFilter, ...] = ()

    @property
    def select_all(self) -> bool:
        return not self.filters


class AppliedWorkspace(BaseModel):
    """A workspace successfully updated on the target."""

    model_config = ConfigDict(frozen=True)

    name: str
    source_id: str | None = None
    target_id: str


class FailedWorkspace(BaseModel):
    """A workspace whose migration failed while failures were being collected."""

    model_config = ConfigDict(frozen=True)

    name: str
    error: str


class MigrationSummary(BaseModel):
    """Outcome of one migration run."""

    candidates: int = 0
    assembled: int = 0
    updated: list[AppliedWorkspace] = Field(default_factory=list)
    failed: list[FailedWorkspace] = Field(default_factory=list)
    dry_run: bool = False
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return not self.failed

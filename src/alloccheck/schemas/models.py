# src/alloccheck/schemas/models.py
"""
@brief
Pydantic data models for the alloccheck project.

@details
Defines the canonical model types shared by every stage of the pipeline:
    - Client, Worker, Task: normalized spreadsheet records
    - Dataset: one immutable (clients, workers, tasks) snapshot
    - Finding, ValidationResult: output of the validation engine
    - Config: runtime configuration (from config.yaml), with nested sections
    - BusinessRule: rule records produced by the assist layer

Python attributes are snake_case; every entity field is aliased to its canonical
spreadsheet column name (ClientID, PriorityLevel, ...) so that records can be
built from, and dumped back to, the column shape with `by_alias=True`.
Entity fields are typed leniently where the validation rules must be able to
observe malformed content instead of having it rejected at construction time.
"""

from __future__ import annotations

from typing import Any, ClassVar, Literal

from pydantic import BaseModel, Field, computed_field

EntityType = Literal["client", "worker", "task"]
FindingKind = Literal["error", "warning"]
Severity = Literal["low", "medium", "high"]
RuleType = Literal["constraint", "preference", "requirement"]

ENTITY_TYPES: tuple[EntityType, ...] = ("client", "worker", "task")


class _StrictBaseModel(BaseModel):
    """
    @brief
    Base model enforcing strict defaults for configuration and data contracts.

    @details
    Forbids unknown fields and allows population by either field name or alias.
    Designed as a foundation for all other alloccheck models.
    """

    model_config = {
        "extra": "forbid",  # Reject unknown fields
        "populate_by_name": True,  # Allow population by field name
        "use_enum_values": True,  # Export raw enum values if enums appear later
    }


def _attr_name(model_cls: type[BaseModel], key: str) -> str:
    """Resolve a column alias or attribute name to the model attribute name."""
    for name, info in model_cls.model_fields.items():
        if key == name or key == info.alias:
            return name
    raise KeyError(f"{model_cls.__name__} has no field or column named {key!r}")


class _EntityModel(_StrictBaseModel):
    """
    @brief
    Common behavior of the three spreadsheet entities.

    @details
    Entities are frozen: an edit produces a new instance (see Dataset.replace_entity).
    Subclasses declare their identifier column and the columns that must be populated.
    """

    model_config = {"frozen": True}

    ENTITY_TYPE: ClassVar[EntityType]
    ID_COLUMN: ClassVar[str]
    REQUIRED_COLUMNS: ClassVar[tuple[str, ...]]

    def get_column(self, column: str) -> Any:
        """Return the value stored under a canonical column name (or attribute name)."""
        return getattr(self, _attr_name(type(self), column))

    @property
    def identifier(self) -> str:
        return self.get_column(self.ID_COLUMN)


class Client(_EntityModel):
    """
    @brief
    One row of the clients table.

    @params
        client_id : str
            Unique identifier (ClientID).
        priority_level : int | float | None
            Semantically 1..5; None when the cell was absent.
        requested_task_ids : list[str]
            References into Task.task_id.
        attributes_json : Any
            Parsed JSON blob; expected to be a mapping.
    """

    ENTITY_TYPE: ClassVar[EntityType] = "client"
    ID_COLUMN: ClassVar[str] = "ClientID"
    REQUIRED_COLUMNS: ClassVar[tuple[str, ...]] = ("ClientID", "ClientName", "PriorityLevel")

    client_id: str = Field("", alias="ClientID", description="Unique identifier")
    client_name: str = Field("", alias="ClientName", description="Display name")
    priority_level: int | float | None = Field(
        None, alias="PriorityLevel", description="Priority, 1 (lowest) .. 5 (highest)"
    )
    requested_task_ids: list[str] = Field(
        default_factory=list, alias="RequestedTaskIDs", description="Requested TaskIDs"
    )
    group_tag: str = Field("", alias="GroupTag", description="Free-form group tag")
    attributes_json: Any = Field(
        default_factory=dict, alias="AttributesJSON", description="Opaque key/value mapping"
    )


class Worker(_EntityModel):
    """
    @brief
    One row of the workers table.

    @details
    available_slots keeps whatever the normalizer produced; entries that are not
    positive integers are reported by the malformed-list rule.
    """

    ENTITY_TYPE: ClassVar[EntityType] = "worker"
    ID_COLUMN: ClassVar[str] = "WorkerID"
    REQUIRED_COLUMNS: ClassVar[tuple[str, ...]] = (
        "WorkerID",
        "WorkerName",
        "Skills",
        "AvailableSlots",
    )

    worker_id: str = Field("", alias="WorkerID", description="Unique identifier")
    worker_name: str = Field("", alias="WorkerName", description="Display name")
    skills: list[str] = Field(default_factory=list, alias="Skills", description="Skill tags")
    available_slots: list[Any] = Field(
        default_factory=list, alias="AvailableSlots", description="Phases the worker can work"
    )
    max_load_per_phase: int | float | None = Field(
        None, alias="MaxLoadPerPhase", description="Max units per single phase"
    )
    worker_group: str = Field("", alias="WorkerGroup")
    qualification_level: str = Field("", alias="QualificationLevel")


class Task(_EntityModel):
    """
    @brief
    One row of the tasks table.
    """

    ENTITY_TYPE: ClassVar[EntityType] = "task"
    ID_COLUMN: ClassVar[str] = "TaskID"
    REQUIRED_COLUMNS: ClassVar[tuple[str, ...]] = (
        "TaskID",
        "TaskName",
        "Duration",
        "RequiredSkills",
    )

    task_id: str = Field("", alias="TaskID", description="Unique identifier")
    task_name: str = Field("", alias="TaskName", description="Display name")
    category: str = Field("", alias="Category")
    duration: int | float | None = Field(
        None, alias="Duration", description="Number of phases the task spans (>= 1)"
    )
    required_skills: list[str] = Field(
        default_factory=list, alias="RequiredSkills", description="Skills a worker must hold"
    )
    preferred_phases: list[Any] = Field(
        default_factory=list, alias="PreferredPhases", description="Phases the task prefers"
    )
    max_concurrent: int | float | None = Field(
        None, alias="MaxConcurrent", description="Max simultaneous assignees"
    )


ENTITY_MODELS: dict[EntityType, type[_EntityModel]] = {
    "client": Client,
    "worker": Worker,
    "task": Task,
}


class Dataset(_StrictBaseModel):
    """
    @brief
    Immutable snapshot of the three entity collections.

    @details
    The validation engine only ever reads a Dataset. Edits made by a consumer
    go through replace_entity(), which returns a fresh snapshot.
    """

    model_config = {"frozen": True}

    clients: list[Client] = Field(default_factory=list)
    workers: list[Worker] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)

    def collection(self, entity_type: EntityType) -> list[Any]:
        return {"client": self.clients, "worker": self.workers, "task": self.tasks}[entity_type]

    def replace_entity(self, entity_type: EntityType, index: int, **changes: Any) -> Dataset:
        """
        @brief
        Return a new Dataset with one entity edited.

        @params
            entity_type : EntityType
                Which collection to edit.
            index : int
                Row position inside that collection.
            **changes
                Column names (ClientID, ...) or attribute names mapped to new values.

        @returns
            New Dataset; the current snapshot is left untouched.
        """
        items = list(self.collection(entity_type))
        current = items[index]
        merged = current.model_dump()
        for key, value in changes.items():
            merged[_attr_name(type(current), key)] = value
        items[index] = type(current).model_validate(merged)
        return self.model_copy(update={f"{entity_type}s": items})


class Finding(_StrictBaseModel):
    """
    @brief
    One reported validation issue.

    @details
    Serialized with `by_alias=True` this reproduces the consumer contract:
    id, type, message, field, entityType, entityId, severity.
    """

    model_config = {"frozen": True}

    id: str = Field(..., description="Stable identifier within one report")
    kind: FindingKind = Field(..., alias="type", description="error | warning")
    message: str = Field(..., description="Human-readable description")
    field: str | None = Field(None, description="Column that triggered the finding")
    entity_type: EntityType = Field(..., alias="entityType")
    entity_id: str = Field(..., alias="entityId")
    severity: Severity = Field(..., description="low | medium | high (advisory)")


class ValidationResult(_StrictBaseModel):
    """
    @brief
    Aggregated output of one validation run.

    @details
    is_valid is derived from errors and cannot drift from it; warnings never
    influence it. checks maps each rule name to True when the rule was silent.
    """

    errors: list[Finding] = Field(default_factory=list)
    warnings: list[Finding] = Field(default_factory=list)
    checks: dict[str, bool] = Field(default_factory=dict)

    @computed_field(alias="isValid")  # type: ignore[prop-decorator]
    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    @property
    def findings(self) -> list[Finding]:
        return [*self.errors, *self.warnings]

    def has_blocking_issues(self, fail_on_warnings: bool = False) -> bool:
        """True when the workflow must not advance (errors, or warnings under strict policy)."""
        if not self.is_valid:
            return True
        return fail_on_warnings and bool(self.warnings)


# ------------------------------------------------------------
# Runtime configuration
# ------------------------------------------------------------
class NormalizerConfig(_StrictBaseModel):
    """
    @brief
    Cell-coercion settings for the Record Normalizer.

    @details
    Default numeric values replace missing or unparsable numeric cells.
    """

    list_delimiter: str = Field(",", min_length=1, description="Separator for list cells")
    map_columns: bool = Field(True, description="Map header variations to canonical columns")
    default_priority: int = Field(1, ge=1, le=5, description="Fallback PriorityLevel")
    default_duration: int = Field(1, ge=1, description="Fallback Duration")
    default_max_load: int = Field(1, ge=1, description="Fallback MaxLoadPerPhase")
    default_max_concurrent: int = Field(1, ge=1, description="Fallback MaxConcurrent")


class ValidationConfig(BaseModel):
    """
    @brief
    Controls behavior of the validation report.

    @details
    Determines whether to write a report and whether warnings
    should be treated as blocking by the command-line pipeline.
    """

    write_report: bool = True
    fail_on_warnings: bool = False
    report_filename: str = "validation_report.json"


class Config(_StrictBaseModel):
    """
    @brief
    Represents the full runtime configuration loaded from config.yaml.
    """

    clients_path: str | None = None
    workers_path: str | None = None
    tasks_path: str | None = None
    output_dir: str | None = "data/output"
    normalizer: NormalizerConfig = Field(default_factory=NormalizerConfig.model_construct)
    validation: ValidationConfig = Field(default_factory=ValidationConfig.model_construct)


class BusinessRule(_StrictBaseModel):
    """
    @brief
    A scheduling rule proposed by the assist layer.
    """

    id: str
    rule_type: RuleType = Field("constraint", alias="type")
    description: str
    condition: str
    action: str
    priority: int = Field(3, ge=1, le=5)
    active: bool = True


__all__ = [
    "BusinessRule",
    "Client",
    "Config",
    "Dataset",
    "ENTITY_MODELS",
    "ENTITY_TYPES",
    "EntityType",
    "Finding",
    "NormalizerConfig",
    "Severity",
    "Task",
    "ValidationConfig",
    "ValidationResult",
    "Worker",
]

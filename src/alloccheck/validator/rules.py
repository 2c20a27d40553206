# src/alloccheck/validator/rules.py
"""
@brief
Rule catalog of the validation engine.

@details
Every rule is a pure function `(Dataset) -> tuple[Finding, ...]`. Rules never
read each other's output and never mutate the dataset, so each one can be run
and tested on its own. Absent or malformed values are reported by the rule
responsible for them and skipped by the aggregate rules (saturation,
concurrency), which keeps every rule total over well-typed input.

Finding ids are composed from the rule prefix, the entity label and, where one
entity can trigger the same rule several times, the row index or list position.
Identical datasets therefore always produce identical ids.
"""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from alloccheck.schemas.models import (
    ENTITY_TYPES,
    Dataset,
    EntityType,
    Finding,
    FindingKind,
    Severity,
)

RuleFn = Callable[[Dataset], tuple[Finding, ...]]


# ----------------------------
# AUXILIARY FUNCTIONS
# ----------------------------
def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def _is_missing(value: Any) -> bool:
    """Empty, falsy, or an empty sequence counts as missing (0 included)."""
    if isinstance(value, float) and math.isnan(value):
        return True
    return not value


def _fmt(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _label(entity: Any, index: int) -> str:
    """Entity identifier, or a positional fallback when the identifier is missing."""
    return entity.identifier or f"Row {index + 1}"


def _finding(
    fid: str,
    kind: FindingKind,
    message: str,
    entity_type: EntityType,
    entity_id: str,
    severity: Severity,
    field: str | None = None,
) -> Finding:
    return Finding(
        id=fid,
        kind=kind,
        message=message,
        field=field,
        entity_type=entity_type,
        entity_id=entity_id,
        severity=severity,
    )


# ----------------------------
# RULES
# ----------------------------
def check_missing_required_columns(dataset: Dataset) -> tuple[Finding, ...]:
    """Rule 1: every mandatory column of every entity is populated."""
    findings = []
    for entity_type in ENTITY_TYPES:
        for index, entity in enumerate(dataset.collection(entity_type)):
            for column in entity.REQUIRED_COLUMNS:
                if _is_missing(entity.get_column(column)):
                    findings.append(
                        _finding(
                            f"missing-{entity_type}-{column}-{index}",
                            "error",
                            f"Missing required field: {column}",
                            entity_type,
                            _label(entity, index),
                            "high",
                            field=column,
                        )
                    )
    return tuple(findings)


def check_duplicate_ids(dataset: Dataset) -> tuple[Finding, ...]:
    """
    Rule 2: identifiers are unique within each collection.

    The first occurrence is canonical; every later occurrence is reported on
    its own. Rows without an identifier are left to rule 1.
    """
    findings = []
    for entity_type in ENTITY_TYPES:
        seen: dict[str, int] = {}
        for index, entity in enumerate(dataset.collection(entity_type)):
            value = entity.identifier
            if not value:
                continue
            if value in seen:
                findings.append(
                    _finding(
                        f"duplicate-{entity_type}-{value}-{index}",
                        "error",
                        f"Duplicate {entity.ID_COLUMN}: {value} (first seen in row {seen[value] + 1})",
                        entity_type,
                        value,
                        "high",
                        field=entity.ID_COLUMN,
                    )
                )
            else:
                seen[value] = index
    return tuple(findings)


def check_malformed_lists(dataset: Dataset) -> tuple[Finding, ...]:
    """Rule 3: AvailableSlots entries must be numbers >= 1."""
    findings = []
    for index, worker in enumerate(dataset.workers):
        label = _label(worker, index)
        for pos, slot in enumerate(worker.available_slots):
            if _is_number(slot) and slot >= 1:
                continue
            findings.append(
                _finding(
                    f"malformed-slots-{label}-{index}-{pos}",
                    "error",
                    f"Invalid AvailableSlot value: {_fmt(slot)}. Must be positive numbers.",
                    "worker",
                    label,
                    "medium",
                    field="AvailableSlots",
                )
            )
    return tuple(findings)


def check_out_of_range_values(dataset: Dataset) -> tuple[Finding, ...]:
    """Rule 4: PriorityLevel within [1, 5], Duration at least 1."""
    findings = []
    for index, client in enumerate(dataset.clients):
        priority = client.priority_level
        if _is_number(priority) and not 1 <= priority <= 5:
            label = _label(client, index)
            findings.append(
                _finding(
                    f"priority-range-{label}-{index}",
                    "error",
                    f"PriorityLevel must be between 1-5, got: {_fmt(priority)}",
                    "client",
                    label,
                    "medium",
                    field="PriorityLevel",
                )
            )
    for index, task in enumerate(dataset.tasks):
        duration = task.duration
        if _is_number(duration) and duration < 1:
            label = _label(task, index)
            findings.append(
                _finding(
                    f"duration-range-{label}-{index}",
                    "error",
                    f"Duration must be at least 1, got: {_fmt(duration)}",
                    "task",
                    label,
                    "medium",
                    field="Duration",
                )
            )
    return tuple(findings)


def check_broken_json(dataset: Dataset) -> tuple[Finding, ...]:
    """Rule 5: a present AttributesJSON must be a key/value mapping."""
    findings = []
    for index, client in enumerate(dataset.clients):
        value = client.attributes_json
        if value is None or value == "" or isinstance(value, Mapping):
            continue
        label = _label(client, index)
        findings.append(
            _finding(
                f"broken-json-{label}-{index}",
                "error",
                f"Invalid JSON in AttributesJSON: expected an object, got {type(value).__name__}",
                "client",
                label,
                "low",
                field="AttributesJSON",
            )
        )
    return tuple(findings)


def check_unknown_references(dataset: Dataset) -> tuple[Finding, ...]:
    """Rule 6: every RequestedTaskIDs entry resolves to an existing TaskID."""
    task_ids = {task.task_id for task in dataset.tasks if task.task_id}
    findings = []
    for index, client in enumerate(dataset.clients):
        label = _label(client, index)
        for pos, task_id in enumerate(client.requested_task_ids):
            if task_id in task_ids:
                continue
            findings.append(
                _finding(
                    f"unknown-task-{label}-{index}-{pos}",
                    "error",
                    f"Client references unknown TaskID: {task_id}",
                    "client",
                    label,
                    "high",
                    field="RequestedTaskIDs",
                )
            )
    return tuple(findings)


def check_overloaded_workers(dataset: Dataset) -> tuple[Finding, ...]:
    """
    Rule 7: a worker should be available in at least MaxLoadPerPhase phases.

    Compares a count of phases with a per-phase limit; it is an advisory
    heuristic, hence a warning.
    """
    findings = []
    for index, worker in enumerate(dataset.workers):
        load = worker.max_load_per_phase
        slots = len(worker.available_slots)
        if _is_number(load) and slots < load:
            label = _label(worker, index)
            findings.append(
                _finding(
                    f"overloaded-worker-{label}-{index}",
                    "warning",
                    f"Worker has {slots} available slots but MaxLoadPerPhase is {_fmt(load)}",
                    "worker",
                    label,
                    "medium",
                    field="MaxLoadPerPhase",
                )
            )
    return tuple(findings)


def phase_demand(dataset: Dataset) -> dict[Any, float]:
    """Sum of Duration per phase; a task counts fully in every preferred phase."""
    demand: dict[Any, float] = defaultdict(int)
    for task in dataset.tasks:
        if not _is_number(task.duration):
            continue
        for phase in task.preferred_phases:
            if _is_number(phase):
                demand[phase] += task.duration
    return dict(demand)


def phase_supply(dataset: Dataset) -> dict[Any, float]:
    """Sum of MaxLoadPerPhase per phase; a worker counts fully in every available slot."""
    supply: dict[Any, float] = defaultdict(int)
    for worker in dataset.workers:
        if not _is_number(worker.max_load_per_phase):
            continue
        for phase in worker.available_slots:
            if _is_number(phase):
                supply[phase] += worker.max_load_per_phase
    return dict(supply)


def check_phase_slot_saturation(dataset: Dataset) -> tuple[Finding, ...]:
    """Rule 8: per phase, task demand must not exceed worker supply."""
    demand = phase_demand(dataset)
    supply = phase_supply(dataset)
    findings = []
    for phase in sorted(demand):
        needed = demand[phase]
        available = supply.get(phase, 0)
        if needed > available:
            findings.append(
                _finding(
                    f"phase-saturation-{_fmt(phase)}",
                    "warning",
                    f"Phase {_fmt(phase)} is oversaturated: demand {_fmt(needed)} > supply {_fmt(available)}",
                    "task",
                    f"Phase {_fmt(phase)}",
                    "high",
                )
            )
    return tuple(findings)


def check_skill_coverage(dataset: Dataset) -> tuple[Finding, ...]:
    """Rule 9: each required skill is held by at least one worker."""
    available = {skill for worker in dataset.workers for skill in worker.skills}
    findings = []
    for index, task in enumerate(dataset.tasks):
        label = _label(task, index)
        for skill in dict.fromkeys(task.required_skills):
            if skill in available:
                continue
            findings.append(
                _finding(
                    f"missing-skill-{label}-{index}-{skill}",
                    "error",
                    f"No worker has required skill: {skill}",
                    "task",
                    label,
                    "high",
                    field="RequiredSkills",
                )
            )
    return tuple(findings)


def qualified_worker_count(dataset: Dataset, required_skills: Sequence[str]) -> int:
    """Workers holding every one of the given skills (no splitting across workers)."""
    required = set(required_skills)
    return sum(1 for worker in dataset.workers if required.issubset(worker.skills))


def check_concurrency_feasibility(dataset: Dataset) -> tuple[Finding, ...]:
    """Rule 10: MaxConcurrent must not exceed the qualified-worker pool."""
    findings = []
    for index, task in enumerate(dataset.tasks):
        limit = task.max_concurrent
        if not _is_number(limit):
            continue
        qualified = qualified_worker_count(dataset, task.required_skills)
        if limit > qualified:
            label = _label(task, index)
            findings.append(
                _finding(
                    f"concurrency-infeasible-{label}-{index}",
                    "warning",
                    f"MaxConcurrent ({_fmt(limit)}) exceeds qualified workers ({qualified})",
                    "task",
                    label,
                    "medium",
                    field="MaxConcurrent",
                )
            )
    return tuple(findings)


# Execution order of the report builder.
RULES: tuple[tuple[str, RuleFn], ...] = (
    ("MissingRequiredColumns", check_missing_required_columns),
    ("DuplicateIDs", check_duplicate_ids),
    ("MalformedLists", check_malformed_lists),
    ("OutOfRangeValues", check_out_of_range_values),
    ("BrokenJSON", check_broken_json),
    ("UnknownReferences", check_unknown_references),
    ("OverloadedWorkers", check_overloaded_workers),
    ("PhaseSlotSaturation", check_phase_slot_saturation),
    ("SkillCoverage", check_skill_coverage),
    ("ConcurrencyFeasibility", check_concurrency_feasibility),
)


__all__ = [
    "RULES",
    "RuleFn",
    "check_broken_json",
    "check_concurrency_feasibility",
    "check_duplicate_ids",
    "check_malformed_lists",
    "check_missing_required_columns",
    "check_out_of_range_values",
    "check_overloaded_workers",
    "check_phase_slot_saturation",
    "check_skill_coverage",
    "check_unknown_references",
    "phase_demand",
    "phase_supply",
    "qualified_worker_count",
]

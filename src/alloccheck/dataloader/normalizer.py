# src/alloccheck/dataloader/normalizer.py
from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from alloccheck.schemas.models import Client, EntityType, NormalizerConfig, Task, Worker

logger = logging.getLogger(__name__)

# Header variations accepted for each canonical column. Headers are compared
# lower-cased with every non-alphanumeric character removed.
COLUMN_ALIASES: dict[EntityType, dict[str, tuple[str, ...]]] = {
    "client": {
        "ClientID": ("client_id", "clientid", "id", "client"),
        "ClientName": ("client_name", "clientname", "name", "company"),
        "PriorityLevel": ("priority_level", "prioritylevel", "priority", "level"),
        "RequestedTaskIDs": ("requested_task_ids", "requestedtaskids", "tasks", "task_ids"),
        "GroupTag": ("group_tag", "grouptag", "group", "tag"),
        "AttributesJSON": ("attributes_json", "attributesjson", "attributes", "metadata"),
    },
    "worker": {
        "WorkerID": ("worker_id", "workerid", "id", "worker"),
        "WorkerName": ("worker_name", "workername", "name", "employee"),
        "Skills": ("skills", "skill", "capabilities", "expertise"),
        "AvailableSlots": ("available_slots", "availableslots", "slots", "availability"),
        "MaxLoadPerPhase": ("max_load_per_phase", "maxloadperphase", "max_load", "capacity"),
        "WorkerGroup": ("worker_group", "workergroup", "group", "team"),
        "QualificationLevel": (
            "qualification_level",
            "qualificationlevel",
            "qualification",
            "level",
        ),
    },
    "task": {
        "TaskID": ("task_id", "taskid", "id", "task"),
        "TaskName": ("task_name", "taskname", "name", "title"),
        "Category": ("category", "type", "classification"),
        "Duration": ("duration", "time"),
        "RequiredSkills": ("required_skills", "requiredskills", "skills", "requirements"),
        "PreferredPhases": ("preferred_phases", "preferredphases", "phases", "timeline"),
        "MaxConcurrent": ("max_concurrent", "maxconcurrent", "concurrent", "parallel"),
    },
}

_RANGE_RE = re.compile(r"^(\d+)\s*-\s*(\d+)$")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


# ------------------------------
# Cell-level helpers
# ------------------------------
def _normalize_header(header: str) -> str:
    return _NON_ALNUM_RE.sub("", str(header).lower())


def is_blank(value: Any) -> bool:
    """True for None, NaN and whitespace-only strings (pandas empty cells)."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def detect_entity_type(file_name: str) -> EntityType:
    """Guess the collection from a file name; falls back to clients."""
    name = file_name.lower()
    if "client" in name:
        return "client"
    if "worker" in name or "employee" in name:
        return "worker"
    if "task" in name:
        return "task"
    return "client"


def to_text(value: Any) -> str:
    if is_blank(value):
        return ""
    return str(value).strip()


def to_number(value: Any) -> int | float | None:
    """
    Coerce a cell into an int (when integral) or float.

    Returns None for blank or unparsable cells. Booleans are not numbers here.
    """
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return int(number) if number.is_integer() else number


def _tokens(value: Any, delimiter: str) -> list[Any]:
    """Split a list-like cell into raw tokens; sequences pass through item by item."""
    if is_blank(value):
        return []
    if isinstance(value, str):
        cleaned = value.strip()
        if cleaned.startswith("[") and cleaned.endswith("]"):
            cleaned = cleaned[1:-1]
        return [t.strip().strip("'\"").strip() for t in cleaned.split(delimiter)]
    if isinstance(value, Sequence):
        return list(value)
    return [value]


def split_list(value: Any, delimiter: str = ",") -> list[str]:
    """Comma-separated (or bracketed) cell → list of non-empty trimmed strings."""
    return [text for text in (to_text(t) for t in _tokens(value, delimiter)) if text]


def parse_numeric_list(value: Any, delimiter: str = ",") -> list[Any]:
    """
    Cell → list of numbers.

    Tokens that do not parse as numbers are kept verbatim (as trimmed strings)
    so that downstream checks can report them.
    """
    out: list[Any] = []
    for token in _tokens(value, delimiter):
        if is_blank(token):
            continue
        number = to_number(token)
        out.append(number if number is not None else to_text(token))
    return out


def parse_phases(value: Any, delimiter: str = ",") -> tuple[list[int], list[str]]:
    """
    @brief
    Parse a PreferredPhases cell.

    @details
    Each token is either an integer or an inclusive "start-end" range; "1-3"
    expands to [1, 2, 3]. Tokens that are neither are dropped and described in
    the returned problem list, as are phases below 1 and ranges whose start
    exceeds their end. Only the offending token is dropped; the rest of the
    cell is kept.

    @returns
        (phases, problems)
    """
    phases: list[int] = []
    problems: list[str] = []
    for token in _tokens(value, delimiter):
        if is_blank(token):
            continue
        text = to_text(token)
        match = _RANGE_RE.match(text)
        if match:
            start, end = int(match.group(1)), int(match.group(2))
            if start > end:
                problems.append(f"empty range {text!r}")
                continue
            if start < 1:
                problems.append(f"phase must be a positive integer, got {text!r}")
                continue
            phases.extend(range(start, end + 1))
            continue
        number = to_number(token)
        if not isinstance(number, int):
            problems.append(f"unparsable phase {text!r}")
        elif number < 1:
            problems.append(f"phase must be a positive integer, got {text!r}")
        else:
            phases.append(number)
    return phases, problems


def parse_json_cell(value: Any) -> Any:
    """
    @brief
    Best-effort JSON decoding with one level of quote-unescaping.

    @details
    Spreadsheet exports frequently wrap JSON in an extra pair of quotes and
    double the inner quotes ("{""a"": 1}"). If the first decode fails, the outer
    quotes are removed and doubled/escaped quotes collapsed before a second try.
    A value that decodes to a string is decoded once more.

    @raises
        ValueError
            If neither attempt yields valid JSON.
    """
    if is_blank(value):
        return {}
    if isinstance(value, (Mapping, list)):
        return value

    text = str(value).strip()
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError:
        unescaped = text
        if len(unescaped) >= 2 and unescaped[0] == unescaped[-1] == '"':
            unescaped = unescaped[1:-1]
        unescaped = unescaped.replace('""', '"').replace('\\"', '"')
        try:
            decoded = json.loads(unescaped)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON: {e.msg} at position {e.pos}") from e

    if isinstance(decoded, str):
        try:
            decoded = json.loads(decoded)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON inside quoted string: {e.msg}") from e
    return decoded


# ------------------------------
# Normalizer
# ------------------------------
class RecordNormalizer:
    """
    Raw table rows → canonical Client / Worker / Task models.

    Rules:
      - header variations are mapped to canonical columns (see COLUMN_ALIASES)
      - list cells are split on the configured delimiter
      - numeric cells fall back to configured defaults when blank or unparsable
      - broken JSON falls back to {} and records an `invalid_json` issue
      - nothing here raises for malformed cells: every problem becomes an issue dict
        (kind, line_no, entity_id, field, message) and the row is still kept
    """

    def __init__(self, cfg: NormalizerConfig | None = None) -> None:
        self.cfg = cfg or NormalizerConfig()

    def map_columns(self, headers: Sequence[str], entity_type: EntityType) -> dict[str, str]:
        """
        Build a header → canonical column mapping.

        Headers that already name a canonical column win; remaining canonical
        columns claim the first unmapped header matching one of their variations.
        """
        aliases = COLUMN_ALIASES[entity_type]
        mapping: dict[str, str] = {}
        claimed: set[str] = set()

        for header in headers:
            key = _normalize_header(header)
            for column in aliases:
                if key == _normalize_header(column) and column not in claimed:
                    mapping[header] = column
                    claimed.add(column)
                    break

        if not self.cfg.map_columns:
            return mapping

        for column, variations in aliases.items():
            if column in claimed:
                continue
            wanted = {_normalize_header(v) for v in variations}
            for header in headers:
                if header not in mapping and _normalize_header(header) in wanted:
                    mapping[header] = column
                    claimed.add(column)
                    break
        return mapping

    def normalize_rows(
        self, rows: Sequence[Mapping[str, Any]], entity_type: EntityType
    ) -> tuple[list[Any], list[dict[str, Any]]]:
        """
        Normalize a whole table.

        Returns (records, issues). Line numbers count the header as line 1.
        """
        headers: list[str] = []
        for row in rows:
            headers.extend(h for h in row if h not in headers)
        mapping = self.map_columns(headers, entity_type)

        parse = {
            "client": self.parse_client,
            "worker": self.parse_worker,
            "task": self.parse_task,
        }[entity_type]

        records: list[Any] = []
        issues: list[dict[str, Any]] = []
        for line_no, raw in enumerate(rows, start=2):
            canonical = {mapping[k]: v for k, v in raw.items() if k in mapping}
            record = parse(canonical, line_no, issues)
            if record is not None:
                records.append(record)
        return records, issues

    # ---------- per-entity parsing ----------
    def parse_client(
        self, raw: Mapping[str, Any], line_no: int, issues: list[dict[str, Any]]
    ) -> Client | None:
        client_id = to_text(raw.get("ClientID"))
        try:
            attributes = parse_json_cell(raw.get("AttributesJSON"))
        except ValueError as e:
            self._issue(issues, "invalid_json", line_no, client_id, "AttributesJSON", str(e))
            attributes = {}

        priority = to_number(raw.get("PriorityLevel"))
        return self._build(
            Client,
            issues,
            line_no,
            client_id,
            ClientID=client_id,
            ClientName=to_text(raw.get("ClientName")),
            PriorityLevel=priority if priority is not None else self.cfg.default_priority,
            RequestedTaskIDs=split_list(raw.get("RequestedTaskIDs"), self.cfg.list_delimiter),
            GroupTag=to_text(raw.get("GroupTag")),
            AttributesJSON=attributes,
        )

    def parse_worker(
        self, raw: Mapping[str, Any], line_no: int, issues: list[dict[str, Any]]
    ) -> Worker | None:
        worker_id = to_text(raw.get("WorkerID"))
        max_load = to_number(raw.get("MaxLoadPerPhase"))
        return self._build(
            Worker,
            issues,
            line_no,
            worker_id,
            WorkerID=worker_id,
            WorkerName=to_text(raw.get("WorkerName")),
            Skills=split_list(raw.get("Skills"), self.cfg.list_delimiter),
            AvailableSlots=parse_numeric_list(raw.get("AvailableSlots"), self.cfg.list_delimiter),
            MaxLoadPerPhase=max_load if max_load is not None else self.cfg.default_max_load,
            WorkerGroup=to_text(raw.get("WorkerGroup")),
            QualificationLevel=to_text(raw.get("QualificationLevel")),
        )

    def parse_task(
        self, raw: Mapping[str, Any], line_no: int, issues: list[dict[str, Any]]
    ) -> Task | None:
        task_id = to_text(raw.get("TaskID"))
        phases, problems = parse_phases(raw.get("PreferredPhases"), self.cfg.list_delimiter)
        for problem in problems:
            self._issue(issues, "invalid_phase", line_no, task_id, "PreferredPhases", problem)

        duration = to_number(raw.get("Duration"))
        max_concurrent = to_number(raw.get("MaxConcurrent"))
        return self._build(
            Task,
            issues,
            line_no,
            task_id,
            TaskID=task_id,
            TaskName=to_text(raw.get("TaskName")),
            Category=to_text(raw.get("Category")),
            Duration=duration if duration is not None else self.cfg.default_duration,
            RequiredSkills=split_list(raw.get("RequiredSkills"), self.cfg.list_delimiter),
            PreferredPhases=phases,
            MaxConcurrent=(
                max_concurrent if max_concurrent is not None else self.cfg.default_max_concurrent
            ),
        )

    # ---------- internals ----------
    def _build(
        self,
        model_cls: type[Any],
        issues: list[dict[str, Any]],
        line_no: int,
        entity_id: str,
        **values: Any,
    ) -> Any:
        try:
            return model_cls(**values)
        except ValidationError as e:
            # schema mismatch (unlikely after coercion); the row is skipped
            self._issue(
                issues,
                "schema_error",
                line_no,
                entity_id,
                None,
                f"{model_cls.__name__} model construction failed: {e}",
            )
            return None

    @staticmethod
    def _issue(
        issues: list[dict[str, Any]],
        kind: str,
        line_no: int,
        entity_id: str,
        field_name: str | None,
        message: str,
    ) -> None:
        logger.debug("Row %d (%s): %s", line_no, kind, message)
        issues.append(
            {
                "kind": kind,
                "line_no": line_no,
                "entity_id": entity_id or None,
                "field": field_name,
                "message": message,
            }
        )


__all__ = [
    "COLUMN_ALIASES",
    "RecordNormalizer",
    "detect_entity_type",
    "parse_json_cell",
    "parse_numeric_list",
    "parse_phases",
    "split_list",
    "to_number",
    "to_text",
]

# src/alloccheck/dataloader/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from alloccheck.schemas.models import EntityType


@dataclass(slots=True)
class LoadResult:
    """
    Structured result of loading one spreadsheet table.

    Fields:
        entity_type: Which collection the table was detected as (client/worker/task).
        source: File name the rows came from (for reporting).
        success: True if no row-level parse issues were found, False otherwise.
        records: Normalized Client/Worker/Task models. Unlike a hard load failure,
                 parse issues do not drop rows: every row is kept with best-effort values.
        errors: List of parse issue dicts (used for reporting).
                Each item contains at least: kind, line_no, entity_id, field, message.
        total_rows: Total number of data rows observed in the table (excludes header).
        kept_rows: Number of records produced (len(records)).
    """

    entity_type: EntityType
    source: str = ""
    success: bool = True
    records: list[Any] = field(default_factory=list)
    errors: list[dict[str, Any]] = field(default_factory=list)
    total_rows: int = 0
    kept_rows: int = 0

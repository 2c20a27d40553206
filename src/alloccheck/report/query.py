# src/alloccheck/report/query.py
from __future__ import annotations

from collections import Counter
from typing import Any

from alloccheck.schemas.models import ENTITY_TYPES, EntityType, Finding, ValidationResult

_SEVERITY_RANK = {"high": 0, "medium": 1, "low": 2}


class ReportQuery:
    """
    Read-only lookups over a ValidationResult for grid and export consumers.

    Cells are addressed by (entity_id, field); per-collection summaries key on
    entity_type. Nothing here changes the result or re-runs validation.
    """

    def __init__(self, result: ValidationResult) -> None:
        self.result = result

    def for_entity(self, entity_type: EntityType, entity_id: str) -> list[Finding]:
        return [
            f
            for f in self.result.findings
            if f.entity_type == entity_type and f.entity_id == entity_id
        ]

    def for_cell(self, entity_id: str, field: str) -> list[Finding]:
        """Findings to decorate one grid cell."""
        return [f for f in self.result.findings if f.entity_id == entity_id and f.field == field]

    def counts_by_entity_type(self) -> dict[str, dict[str, int]]:
        counts = {t: {"errors": 0, "warnings": 0} for t in ENTITY_TYPES}
        for f in self.result.errors:
            counts[f.entity_type]["errors"] += 1
        for f in self.result.warnings:
            counts[f.entity_type]["warnings"] += 1
        return counts

    def counts_by_severity(self) -> dict[str, int]:
        tally = Counter(f.severity for f in self.result.findings)
        return {level: tally.get(level, 0) for level in ("high", "medium", "low")}

    def sorted_by_severity(self) -> list[Finding]:
        """Errors before warnings, then high → low; stable within equal keys."""
        return sorted(
            self.result.findings,
            key=lambda f: (f.kind != "error", _SEVERITY_RANK[f.severity]),
        )

    def summary(self) -> dict[str, Any]:
        return {
            "isValid": self.result.is_valid,
            "totalErrors": len(self.result.errors),
            "totalWarnings": len(self.result.warnings),
            "byEntityType": self.counts_by_entity_type(),
            "bySeverity": self.counts_by_severity(),
        }


__all__ = ["ReportQuery"]

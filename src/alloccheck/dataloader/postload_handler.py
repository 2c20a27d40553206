# src/alloccheck/dataloader/postload_handler.py
from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from alloccheck.dataloader.types import LoadResult
from alloccheck.schemas.models import Dataset, Finding

logger = logging.getLogger(__name__)


def parse_findings(result: LoadResult, offset: int = 0) -> list[Finding]:
    """
    @brief
    Convert AttributesJSON decode failures into error findings.

    @details
    The normalizer replaces undecodable JSON with {} so that the rules see a
    well-formed mapping; the original problem must still reach the report,
    which is what these findings carry.

    `offset` is the number of records of the same collection already loaded
    from earlier tables, so that the row position in ids and fallback labels
    is unique across files.
    """
    findings: list[Finding] = []
    for issue in result.errors:
        if issue.get("kind") != "invalid_json":
            continue
        line_no = issue.get("line_no") or 0
        # line 1 is the header
        row = offset + max(line_no - 1, 1)
        detail = issue.get("message")
        findings.append(
            Finding(
                id=f"parse-json-{result.entity_type}-{row}",
                kind="error",
                message="Invalid JSON in AttributesJSON" + (f": {detail}" if detail else ""),
                field="AttributesJSON",
                entity_type=result.entity_type,
                entity_id=issue.get("entity_id") or f"Row {row}",
                severity="low",
            )
        )
    return findings


class LoadResultHandler:
    """
    @brief
    Turns the per-table LoadResults into one Dataset snapshot.

    @details
    Records from every table are concatenated per collection in input order.
    Parse issues never block the pipeline (rows are kept with best-effort values),
    but when any exist they are written to 'load_errors.json' inside output_dir
    for traceability, and JSON decode failures are returned as findings so the
    validation report shows them next to the rule findings.
    """

    def __init__(self, output_dir: Path | None = None) -> None:
        self.output_dir = output_dir

    def handle(self, results: Iterable[LoadResult]) -> tuple[Dataset, list[Finding]]:
        """
        @brief
        Assemble the Dataset and collect parse-error findings.

        @returns
            (dataset, findings)
        """
        clients, workers, tasks = [], [], []
        findings: list[Finding] = []
        issues: list[dict] = []

        # (1) Concatenate records per collection and gather issues
        for result in results:
            collection = {"client": clients, "worker": workers, "task": tasks}[result.entity_type]
            findings.extend(parse_findings(result, offset=len(collection)))
            collection.extend(result.records)
            issues.extend({"source": result.source, **issue} for issue in result.errors)

        dataset = Dataset(clients=clients, workers=workers, tasks=tasks)
        logger.info(
            "PostLoad: dataset ready (clients=%d, workers=%d, tasks=%d).",
            len(clients),
            len(workers),
            len(tasks),
        )

        # (2) Persist row-level issues when there are any
        if issues and self.output_dir is not None:
            self._write_issues(issues)
        return dataset, findings

    def _write_issues(self, issues: list[dict]) -> Path | None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        out_path = self.output_dir / "load_errors.json"
        try:
            with out_path.open("w", encoding="utf-8") as f:
                json.dump(issues, f, ensure_ascii=False, indent=2)
            logger.warning("PostLoad: %d parse issue(s). See %s", len(issues), out_path)
        except OSError as e:
            # report writing is best-effort; the dataset is still usable
            logger.error("PostLoad: failed to write parse issue report: %s", e)
            return None
        return out_path


__all__ = ["LoadResultHandler", "parse_findings"]

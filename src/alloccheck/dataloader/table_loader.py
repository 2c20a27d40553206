# src/alloccheck/dataloader/table_loader.py
from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Any

import pandas as pd

from alloccheck.dataloader.normalizer import RecordNormalizer, detect_entity_type
from alloccheck.dataloader.types import LoadResult
from alloccheck.errors import DataError
from alloccheck.schemas.models import EntityType, NormalizerConfig

logger = logging.getLogger(__name__)


class TableLoader:
    """
    CSV / XLSX → LoadResult[Client | Worker | Task].

    Rules:
      - Formats: UTF-8 CSV (delimiter=","), Excel .xlsx (first sheet only)
      - All cells are read as text; typing is the normalizer's job
      - The collection is taken from the caller or detected from the file name
      - Row-level problems (broken JSON, bad phase tokens) → issue + row is kept
      - On completion:
          * issues present → success=False, records still returned
          * no issues      → success=True

    Fatal errors (raise DataError immediately):
      - path is not a pathlib.Path / file missing
      - unsupported extension
      - unreadable or corrupt file
    """

    CSV_SUFFIXES = (".csv",)
    EXCEL_SUFFIXES = (".xlsx",)

    def __init__(self, cfg: NormalizerConfig | None = None) -> None:
        self.normalizer = RecordNormalizer(cfg)

    def load(self, path: Path, entity_type: EntityType | None = None) -> LoadResult:
        kind = entity_type or detect_entity_type(path.name if isinstance(path, Path) else "")
        rows = self._read_table(path)
        result = self._rows_to_result(rows, kind, path.name)
        self._report_summary(path, result)
        return result

    # ------------------------------
    # Internal helpers
    # ------------------------------
    def _read_table(self, path: Path) -> list[dict[str, Any]]:
        if not isinstance(path, Path):
            raise DataError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="TableLoader._read_table",
                suggested_action="Pass a pathlib.Path pointing to a CSV or XLSX file",
            )
        if not path.exists():
            raise DataError(
                message=f"Input table not found: {path}",
                source="TableLoader._read_table",
                suggested_action="Verify file path and ensure the file is present.",
            )

        suffix = path.suffix.lower()
        if suffix not in self.CSV_SUFFIXES + self.EXCEL_SUFFIXES:
            raise DataError(
                message=f"Unsupported file format: {suffix or '<none>'}",
                source="TableLoader._read_table",
                suggested_action="Please use CSV or XLSX files.",
            )

        try:
            if suffix in self.CSV_SUFFIXES:
                frame = pd.read_csv(
                    path, dtype=str, keep_default_na=False, skip_blank_lines=True, encoding="utf-8"
                )
            else:
                frame = pd.read_excel(
                    path, sheet_name=0, dtype=str, keep_default_na=False, engine="openpyxl"
                )
        except pd.errors.EmptyDataError:
            return []
        except (OSError, ValueError, zipfile.BadZipFile, pd.errors.ParserError) as e:
            raise DataError(
                message=f"Failed to parse file: {e}",
                source="TableLoader._read_table",
                suggested_action="Check that the file is a well-formed CSV/XLSX and not locked.",
            ) from e

        frame.columns = [str(c).strip() for c in frame.columns]
        records = frame.to_dict(orient="records")
        # drop rows where every cell is empty
        return [r for r in records if any(str(v).strip() for v in r.values())]

    def _rows_to_result(
        self, rows: list[dict[str, Any]], entity_type: EntityType, source: str
    ) -> LoadResult:
        if not rows:
            return LoadResult(
                entity_type=entity_type,
                source=source,
                success=False,
                errors=[
                    {
                        "kind": "empty_file",
                        "line_no": None,
                        "entity_id": None,
                        "field": None,
                        "message": "File appears to be empty or has no valid data.",
                    }
                ],
            )

        records, issues = self.normalizer.normalize_rows(rows, entity_type)
        return LoadResult(
            entity_type=entity_type,
            source=source,
            success=not issues,
            records=records,
            errors=issues,
            total_rows=len(rows),
            kept_rows=len(records),
        )

    def _report_summary(self, path: Path, result: LoadResult) -> None:
        if result.success:
            logger.info(
                "TableLoader OK: %s kept=%d/%d from %s",
                result.entity_type,
                result.kept_rows,
                result.total_rows,
                path,
            )
        else:
            # aggregate by kind
            counts: dict[str, int] = {}
            for it in result.errors:
                counts[it["kind"]] = counts.get(it["kind"], 0) + 1
            summary = ", ".join(f"{k}={v}" for k, v in counts.items())
            logger.error(
                "TableLoader: %d issue(s) across %d row(s) in %s [%s]",
                len(result.errors),
                result.total_rows,
                path,
                summary or "no-summary",
            )


__all__ = ["TableLoader"]

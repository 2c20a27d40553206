# src/alloccheck/export/report_export.py
from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from alloccheck.errors import ExportError
from alloccheck.report.query import ReportQuery
from alloccheck.schemas.models import ValidationResult

logger = logging.getLogger(__name__)


def build_export_payload(
    result: ValidationResult, timestamp: datetime | None = None
) -> dict[str, Any]:
    """
    @brief
    Serialize a ValidationResult into the export document.

    @details
    Layout: {timestamp, errors, warnings, summary}. Findings are dumped by
    alias (id, type, message, field, entityType, entityId, severity) so that
    the export matches what grid consumers key on.

    @params
        result : ValidationResult
            Output of one validation run.
        timestamp : datetime | None
            Fixed timestamp (tests); defaults to current UTC time.

    @returns
        JSON-serializable dictionary.
    """
    ts = (timestamp or datetime.now(timezone.utc)).isoformat(timespec="seconds")
    return {
        "timestamp": ts,
        "errors": [f.model_dump(by_alias=True) for f in result.errors],
        "warnings": [f.model_dump(by_alias=True) for f in result.warnings],
        "summary": ReportQuery(result).summary(),
    }


def write_validation_report(
    result: ValidationResult,
    out_dir: Path,
    filename: str = "validation_report.json",
    timestamp: datetime | None = None,
) -> Path:
    """
    @brief
    Writes the validation export atomically in UTF-8 encoding.

    @returns
        Path to the written JSON file.

    @raises
        ExportError
            If serialization or the atomic write fails.
    """
    payload = build_export_payload(result, timestamp=timestamp)

    # (1) Validate JSON serializability before touching the disk
    try:
        text = json.dumps(payload, ensure_ascii=False, indent=2)
    except (TypeError, ValueError) as e:
        raise ExportError(
            f"validation report not JSON-serializable: {e}",
            source="export.write_validation_report",
            suggested_action="Findings must only carry plain JSON types.",
        ) from e

    # (2) Atomically write validated payload
    target = Path(out_dir) / filename
    _atomic_write_text(target, text + "\n")
    logger.info("Validation report saved: %s", target)
    return target


def _atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    """
    @brief
    Performs atomic text file writing using a temporary file swap.

    @details
    Writes text to a temporary file within the same directory, then replaces
    the destination in a single filesystem operation.

    @raises
        ExportError
            On write or rename failure.
    """
    path = Path(path)
    tmp_dir = path.parent
    tmp_dir.mkdir(parents=True, exist_ok=True)

    # (1) Create temporary file near the target for atomicity
    fd, tmp_path = tempfile.mkstemp(prefix=path.name + ".", dir=str(tmp_dir))
    try:
        with open(fd, "w", encoding=encoding, newline="") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except OSError as e:
        # (2) Clean up temp file on error
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise ExportError(
            f"atomic write failed for {path}: {e}",
            source="export._atomic_write_text",
            suggested_action="Check output directory permissions and disk space.",
        ) from e


__all__ = ["build_export_payload", "write_validation_report"]

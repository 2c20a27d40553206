# scripts/run.py
from __future__ import annotations

import argparse
import logging
import sys
import time
import traceback
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from alloccheck.dataloader.config_loader import ConfigLoader
from alloccheck.dataloader.postload_handler import LoadResultHandler
from alloccheck.dataloader.table_loader import TableLoader
from alloccheck.errors import AllocCheckError, DataError
from alloccheck.schemas.models import Config
from alloccheck.validator import validate_dataset


def _setup_logging() -> None:
    """
    @brief
    Initializes global logging configuration.

    @details
    Sets the default logging level to INFO and defines a simple console format.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """
    @brief
    Parses command-line arguments for the alloccheck pipeline.

    @details
    Table paths given on the command line override the ones from config.yaml.
    A missing config file is tolerated: defaults are used instead.
    """
    parser = argparse.ArgumentParser(
        prog="alloccheck-run",
        description="Run the alloccheck pipeline: load → normalize → validate → export",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/config.yaml",
        help="Path to config YAML (default: config/config.yaml)",
    )
    parser.add_argument("--clients", type=str, default=None, help="Clients CSV/XLSX")
    parser.add_argument("--workers", type=str, default=None, help="Workers CSV/XLSX")
    parser.add_argument("--tasks", type=str, default=None, help="Tasks CSV/XLSX")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory for artifacts (default: config output_dir)",
    )
    return parser.parse_args(argv)


def run_pipeline(
    cfg: Config,
    inputs: dict[str, Path | None],
    output_dir: Path,
) -> dict[str, Any]:
    """
    @brief
    Executes the full alloccheck pipeline.

    @details
    Performs sequential steps:
    (1) Load each provided table and normalize its rows.
    (2) Assemble one Dataset snapshot and collect parse findings.
    (3) Validate the snapshot and optionally write the JSON export.

    @params
        cfg : Config
            Runtime configuration.
        inputs : dict[str, Path | None]
            Table path per collection ("client", "worker", "task"); None skips it.
        output_dir : Path
            Directory for storing pipeline outputs.

    @returns
        Dictionary with validity flags, finding counts and artifact paths.

    @raises
        AllocCheckError
            On configuration or unreadable input.
    """
    # (1) Start timer and prepare output directory
    t0 = time.perf_counter()
    output_dir.mkdir(parents=True, exist_ok=True)

    provided = {kind: path for kind, path in inputs.items() if path is not None}
    if not provided:
        raise DataError(
            message="No input tables given",
            source="scripts.run",
            suggested_action="Pass --clients/--workers/--tasks or set *_path in config.yaml.",
        )

    # (2) Load and normalize tables
    loader = TableLoader(cfg.normalizer)
    results = []
    for kind, path in provided.items():
        logging.info("Loading %ss: %s", kind, path)
        results.append(loader.load(path, entity_type=kind))

    dataset, parse_findings = LoadResultHandler(output_dir=output_dir).handle(results)

    # (3) Validate and export
    report_path = output_dir / cfg.validation.report_filename
    result = validate_dataset(
        dataset,
        extra_findings=parse_findings,
        write_report=cfg.validation.write_report,
        out_dir=output_dir,
        filename=cfg.validation.report_filename,
    )
    blocked = result.has_blocking_issues(cfg.validation.fail_on_warnings)

    # (4) Final summary
    dt = time.perf_counter() - t0
    logging.info("Pipeline finished in %.2f s", dt)

    load_errors_path = output_dir / "load_errors.json"
    return {
        "valid": result.is_valid,
        "blocked": blocked,
        "errors": len(result.errors),
        "warnings": len(result.warnings),
        "artifacts": {
            "validation_report": report_path if report_path.exists() else None,
            "load_errors": load_errors_path if load_errors_path.exists() else None,
        },
    }


def main(argv: Sequence[str] | None = None) -> int:
    """
    @brief
    CLI entry point for the alloccheck pipeline.

    @details
    Returns numeric exit codes suitable for shell integration:
      0 – dataset passes (no errors; no warnings when fail_on_warnings)
      1 – blocking findings or controlled failure (data/config/export)
      2 – unexpected crash
    """
    _setup_logging()
    args = _parse_args(argv)

    try:
        cfg = ConfigLoader().load_or_default(Path(args.config))

        def pick(cli_value: str | None, cfg_value: str | None) -> Path | None:
            value = cli_value or cfg_value
            return Path(value) if value else None

        inputs = {
            "client": pick(args.clients, cfg.clients_path),
            "worker": pick(args.workers, cfg.workers_path),
            "task": pick(args.tasks, cfg.tasks_path),
        }
        output_dir = Path(args.output or cfg.output_dir or "data/output")

        result = run_pipeline(cfg, inputs, output_dir)
        logging.info(
            "Result: valid=%s errors=%d warnings=%d",
            result["valid"],
            result["errors"],
            result["warnings"],
        )
        return 1 if result["blocked"] else 0

    except AllocCheckError as e:
        logging.error(str(e))
        return 1
    except Exception:
        logging.error("Unexpected error occurred:")
        traceback.print_exc()
        return 2


if __name__ == "__main__":
    sys.exit(main())

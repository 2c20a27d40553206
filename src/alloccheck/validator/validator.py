# src/alloccheck/validator/validator.py
from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from alloccheck.export.report_export import write_validation_report
from alloccheck.schemas.models import Dataset, Finding, ValidationResult
from alloccheck.validator.rules import RULES, RuleFn

logger = logging.getLogger(__name__)


# ---------------------------
# VALIDATOR CLASS (report builder)
# ----------------------------
class Validator:
    """
    @brief
    Dataset validator: runs the rule catalog and builds the report.

    @details
    Every rule runs unconditionally over the same snapshot; no rule is skipped
    because another one failed, and no rule sees another rule's findings.
    Findings are concatenated in rule order, then partitioned by kind.
    The validator never raises for rule violations; they are data in the report.
    """

    # ---------- Constructor ----------
    def __init__(
        self,
        dataset: Dataset,
        rules: Iterable[tuple[str, RuleFn]] = RULES,
    ) -> None:
        """
        @brief
        Initialize validation context.

        @params
            dataset : Dataset
                Snapshot to validate; only ever read.
            rules : Iterable[tuple[str, RuleFn]]
                (check name, rule function) pairs in execution order.
        """
        self.dataset = dataset
        self.rules = tuple(rules)

        # (1) Initialize accumulators for validation outcomes
        self.findings: list[Finding] = []
        self.checks: dict[str, bool] = {}

    # ---------- Public lifecycle API ----------
    def run_all_checks(self) -> None:
        """
        @brief
        Execute the full rule catalog.

        @details
        Accumulators are reset first, so calling this twice on the same
        validator gives the same findings as calling it once.
        """
        self.findings = []
        self.checks = {}
        for name, rule in self.rules:
            produced = rule(self.dataset)
            self.checks[name] = not produced
            self.findings.extend(produced)

    def build_result(self, extra_findings: Iterable[Finding] = ()) -> ValidationResult:
        """
        @brief
        Partition accumulated findings into a ValidationResult.

        @params
            extra_findings : Iterable[Finding]
                Findings from outside the rule catalog (normalizer parse errors),
                appended after rule findings.
        """
        merged = [*self.findings, *extra_findings]
        errors = [f for f in merged if f.kind == "error"]
        warnings = [f for f in merged if f.kind == "warning"]
        return ValidationResult(errors=errors, warnings=warnings, checks=dict(self.checks))


# ----------------------------
# THIN FACADE
# ----------------------------
def validate_dataset(
    dataset: Dataset,
    *,
    extra_findings: Iterable[Finding] = (),
    write_report: bool = False,
    out_dir: Path | None = None,
    filename: str = "validation_report.json",
) -> ValidationResult:
    """
    @brief
    High-level convenience wrapper for dataset validation.

    @details
    Creates a Validator, runs every rule, and builds the ValidationResult.
    Deterministic: the same dataset always yields the same findings, in the
    same order, with the same ids. Optionally persists the export document.

    @params
        dataset : Dataset
            Snapshot to validate.
        extra_findings : Iterable[Finding]
            Parse-error findings from the normalizer stage.
        write_report : bool
            If True, write the JSON export to out_dir/filename.
        out_dir : Path | None
            Directory for the export (defaults to 'data/output').
        filename : str
            Export file name.

    @returns
        ValidationResult with is_valid == (no errors).
    """
    # (1) Run the catalog
    validator = Validator(dataset)
    validator.run_all_checks()

    # (2) Merge and partition
    result = validator.build_result(extra_findings)
    logger.info(
        "Validation finished: valid=%s errors=%d warnings=%d",
        result.is_valid,
        len(result.errors),
        len(result.warnings),
    )

    # (3) Optionally persist the report
    if write_report:
        write_validation_report(result, out_dir or Path("data/output"), filename=filename)

    return result


__all__ = ["Validator", "validate_dataset"]

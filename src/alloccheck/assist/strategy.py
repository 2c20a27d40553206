# src/alloccheck/assist/strategy.py
"""
@brief
Assistant layer for rule authoring, correction hints and dataset search.

@details
AssistStrategy is the seam a language-model backend would plug into.
KeywordAssistStrategy is the built-in implementation: plain keyword
matching, synchronous and deterministic. The validation engine does not
depend on this module.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable, Sequence
from typing import Any, Protocol

from alloccheck.schemas.models import BusinessRule, Dataset, Finding

logger = logging.getLogger(__name__)


class AssistStrategy(Protocol):
    def convert_to_rule(self, text: str) -> BusinessRule: ...

    def recommend_rules(self, dataset: Dataset) -> list[BusinessRule]: ...

    def correction_suggestions(self, findings: Sequence[Finding]) -> list[str]: ...

    def query(self, text: str, dataset: Dataset, limit: int = 10) -> list[Any]: ...


def _has_any(text: str, words: Iterable[str]) -> bool:
    return any(w in text for w in words)


def _rule_id(text: str) -> str:
    digest = hashlib.sha1(text.strip().lower().encode("utf-8")).hexdigest()
    return f"rule-{digest[:12]}"


# (keywords, condition, action); later matches override earlier ones
_CONTEXT_HINTS: tuple[tuple[tuple[str, ...], str, str], ...] = (
    (("phase",), "When scheduling tasks by phase", "Apply phase-based constraints"),
    (
        ("skill", "worker"),
        "When matching workers to tasks",
        "Consider skill requirements and worker capabilities",
    ),
    (
        ("priority", "client"),
        "When prioritizing task assignments",
        "Apply priority-based allocation rules",
    ),
)

_DEV_SKILLS = ("javascript", "python", "react", "development", "programming")


class KeywordAssistStrategy:
    """Keyword-heuristic implementation of AssistStrategy."""

    # ---------- rule authoring ----------
    def convert_to_rule(self, text: str) -> BusinessRule:
        """
        Turn a plain-language sentence into a BusinessRule.

        "should/prefer/recommend" → preference; "must/never/always/required" →
        constraint at priority 4; "critical/urgent/high priority" raises the
        priority to 5 and "optional/low priority" lowers it to 2.
        """
        lowered = text.lower()
        rule_type = "constraint"
        priority = 3

        if _has_any(lowered, ("should", "prefer", "recommend")):
            rule_type = "preference"
        if _has_any(lowered, ("must", "never", "always", "required")):
            rule_type = "constraint"
            priority = 4
        if _has_any(lowered, ("high priority", "critical", "urgent")):
            priority = 5
        if _has_any(lowered, ("low priority", "optional")):
            priority = 2

        condition = "When applicable conditions are met"
        action = "Apply the specified rule"
        for words, hint_condition, hint_action in _CONTEXT_HINTS:
            if _has_any(lowered, words):
                condition, action = hint_condition, hint_action

        rule = BusinessRule(
            id=_rule_id(text),
            rule_type=rule_type,
            description=text,
            condition=condition,
            action=action,
            priority=priority,
            active=True,
        )
        logger.debug("Converted %r into %s (%s)", text, rule.id, rule.rule_type)
        return rule

    def recommend_rules(self, dataset: Dataset) -> list[BusinessRule]:
        recs: list[BusinessRule] = []

        if dataset.clients:
            recs.append(
                BusinessRule(
                    id="rec-priority",
                    rule_type="constraint",
                    description="High priority clients (level 4-5) should get tasks assigned first",
                    condition="When client has priority level 4 or 5",
                    action="Prioritize their tasks in allocation queue",
                    priority=5,
                    active=False,
                )
            )

        if dataset.workers:
            recs.append(
                BusinessRule(
                    id="rec-load",
                    rule_type="constraint",
                    description="Workers should not exceed their maximum load per phase",
                    condition="When assigning tasks to workers",
                    action="Check available slots before assignment",
                    priority=4,
                    active=False,
                )
            )
            if any(w.skills for w in dataset.workers):
                recs.append(
                    BusinessRule(
                        id="rec-skills",
                        rule_type="preference",
                        description="Match task required skills with worker expertise",
                        condition="When task requires specific skills",
                        action="Assign to workers with best skill match",
                        priority=4,
                        active=False,
                    )
                )

        if dataset.tasks:
            if any(isinstance(t.duration, (int, float)) and t.duration > 5 for t in dataset.tasks):
                recs.append(
                    BusinessRule(
                        id="rec-duration",
                        rule_type="constraint",
                        description="Long duration tasks should be distributed across phases",
                        condition="When task duration exceeds 5 units",
                        action="Spread across multiple phases if possible",
                        priority=3,
                        active=False,
                    )
                )
            if len({t.category for t in dataset.tasks if t.category}) > 1:
                recs.append(
                    BusinessRule(
                        id="rec-categories",
                        rule_type="preference",
                        description="Balance task categories across workers and phases",
                        condition="When multiple task categories exist",
                        action="Distribute different types of work evenly",
                        priority=3,
                        active=False,
                    )
                )
        return recs

    # ---------- corrections ----------
    def correction_suggestions(self, findings: Sequence[Finding]) -> list[str]:
        """One hint per recognized problem family, in first-seen order."""
        if not findings:
            return []

        suggestions: dict[str, str] = {}
        for f in findings:
            missing = f.message.startswith("Missing")
            if f.field == "ClientID" and missing:
                suggestions.setdefault(
                    "missing-client-id",
                    "Generate unique ClientIDs using format: CLIENT_001, CLIENT_002, etc.",
                )
            elif f.field == "WorkerID" and missing:
                suggestions.setdefault(
                    "missing-worker-id",
                    "Generate unique WorkerIDs using format: WORKER_001, WORKER_002, etc.",
                )
            elif f.field == "TaskID" and missing:
                suggestions.setdefault(
                    "missing-task-id",
                    "Generate unique TaskIDs using format: TASK_001, TASK_002, etc.",
                )
            elif f.field == "PriorityLevel":
                suggestions.setdefault(
                    "priority-level",
                    "Set default priority level to 3 for clients missing priority values",
                )
            elif f.field == "Skills" and missing:
                suggestions.setdefault(
                    "missing-skills", "Add default skills based on worker group or job title"
                )
            elif f.field == "AvailableSlots" and missing:
                suggestions.setdefault(
                    "missing-slots",
                    "Set default available slots [1,2,3] for workers missing slot data",
                )
            elif f.field == "Duration" and "at least 1" in f.message:
                suggestions.setdefault(
                    "invalid-duration",
                    "Set minimum duration of 1 for tasks with invalid duration values",
                )

        if not suggestions:
            return [
                "Review data entries and ensure all required fields are populated",
                "Check for formatting issues in array fields (use comma separation)",
                "Validate numeric fields contain valid numbers greater than 0",
                "Ensure ID fields are unique and not empty",
            ]
        return list(suggestions.values())

    # ---------- search ----------
    def query(self, text: str, dataset: Dataset, limit: int = 10) -> list[Any]:
        """
        Keyword search over the dataset; returns at most `limit` entities.

        Recognized intents are tried in order (priority bands, seniority,
        domains, long tasks, availability, invalid rows); anything else is a
        substring search over names, groups, skills and categories.
        """
        q = text.lower()
        clients, workers, tasks = dataset.clients, dataset.workers, dataset.tasks

        def num(value: Any) -> float:
            return value if isinstance(value, (int, float)) else 0

        if _has_any(q, ("high priority", "priority 4", "priority 5")):
            results: list[Any] = [c for c in clients if num(c.priority_level) >= 4]
        elif _has_any(q, ("low priority", "priority 1", "priority 2")):
            results = [c for c in clients if 0 < num(c.priority_level) <= 2]
        elif _has_any(q, ("senior", "lead")):
            results = [
                w
                for w in workers
                if _has_any(w.qualification_level.lower(), ("senior", "lead"))
                or _has_any(w.worker_name.lower(), ("senior", "lead"))
            ]
        elif _has_any(q, ("junior", "entry")):
            results = [
                w for w in workers if _has_any(w.qualification_level.lower(), ("junior", "entry"))
            ]
        elif _has_any(q, ("marketing", "design")):
            domain = "marketing" if "marketing" in q else "design"
            results = [t for t in tasks if domain in t.category.lower()]
            results += [w for w in workers if any(domain in s.lower() for s in w.skills)]
        elif _has_any(q, ("development", "coding", "programming")):
            results = [
                t
                for t in tasks
                if _has_any(t.category.lower(), ("development", "coding"))
                or "development" in t.task_name.lower()
            ]
            results += [
                w for w in workers if any(_has_any(s.lower(), _DEV_SKILLS) for s in w.skills)
            ]
        elif _has_any(q, ("long tasks", "duration")):
            results = [t for t in tasks if num(t.duration) > 3]
        elif _has_any(q, ("available workers", "free workers")):
            results = [w for w in workers if w.available_slots]
        elif _has_any(q, ("errors", "invalid")):
            results = [c for c in clients if not c.client_id or not c.client_name]
            results += [w for w in workers if not w.worker_id or not w.worker_name or not w.skills]
            results += [
                t
                for t in tasks
                if not t.task_id
                or not t.task_name
                or (isinstance(t.duration, (int, float)) and t.duration < 1)
            ]
        else:
            results = [
                c for c in clients if q in c.client_name.lower() or q in c.group_tag.lower()
            ]
            results += [
                w
                for w in workers
                if q in w.worker_name.lower()
                or q in w.worker_group.lower()
                or any(q in s.lower() for s in w.skills)
            ]
            results += [t for t in tasks if q in t.task_name.lower() or q in t.category.lower()]

        return results[:limit]


__all__ = ["AssistStrategy", "KeywordAssistStrategy"]

# tests/assist/test_strategy.py
from __future__ import annotations

from alloccheck.assist import AssistStrategy, KeywordAssistStrategy
from alloccheck.schemas.models import Client, Dataset, Finding, Task, Worker


def mk_dataset() -> Dataset:
    return Dataset(
        clients=[
            Client(ClientID="C1", ClientName="Acme Corp", PriorityLevel=5, GroupTag="Enterprise"),
            Client(ClientID="C2", ClientName="Beta", PriorityLevel=2, GroupTag="SMB"),
        ],
        workers=[
            Worker(WorkerID="W1", WorkerName="Ann", Skills=["python", "react"], AvailableSlots=[1],
                   QualificationLevel="Senior", WorkerGroup="Core"),
            Worker(WorkerID="W2", WorkerName="Bob", Skills=["design"], AvailableSlots=[],
                   QualificationLevel="Junior"),
        ],
        tasks=[
            Task(TaskID="T1", TaskName="API development", Category="Development", Duration=6),
            Task(TaskID="T2", TaskName="Logo", Category="Design", Duration=2),
        ],
    )


def mk_finding(field: str, message: str) -> Finding:
    return Finding(
        id=f"f-{field}",
        kind="error",
        message=message,
        field=field,
        entity_type="client",
        entity_id="C1",
        severity="high",
    )


def test_keyword_strategy_satisfies_protocol() -> None:
    strategy: AssistStrategy = KeywordAssistStrategy()
    assert callable(strategy.convert_to_rule)


def test_convert_to_rule_keywords() -> None:
    """
    @brief
    Modal verbs pick the rule type; urgency words pick the priority.
    """
    # --- Arrange ---
    s = KeywordAssistStrategy()

    # --- Act ---
    must = s.convert_to_rule("Tasks must never exceed the phase load")
    prefer = s.convert_to_rule("We should prefer senior workers for skill-heavy tasks")
    urgent = s.convert_to_rule("Critical clients always come first")
    optional = s.convert_to_rule("Optional: group tasks by client")

    # --- Assert ---
    assert must.rule_type == "constraint" and must.priority == 4
    assert must.condition == "When scheduling tasks by phase"
    assert prefer.rule_type == "preference" and prefer.priority == 3
    assert prefer.action == "Consider skill requirements and worker capabilities"
    assert urgent.priority == 5
    assert optional.priority == 2
    assert optional.condition == "When prioritizing task assignments"


def test_convert_to_rule_id_is_stable() -> None:
    s = KeywordAssistStrategy()
    a = s.convert_to_rule("Tasks must finish in order")
    b = s.convert_to_rule("  tasks must finish in order ")
    assert a.id == b.id
    assert a.id.startswith("rule-")
    assert a.description == "Tasks must finish in order"


def test_recommend_rules_depends_on_dataset() -> None:
    # --- Act ---
    recs = KeywordAssistStrategy().recommend_rules(mk_dataset())
    none = KeywordAssistStrategy().recommend_rules(Dataset())

    # --- Assert ---
    assert [r.id for r in recs] == [
        "rec-priority",
        "rec-load",
        "rec-skills",
        "rec-duration",
        "rec-categories",
    ]
    assert not any(r.active for r in recs)
    assert none == []


def test_correction_suggestions_deduplicated() -> None:
    findings = [
        mk_finding("PriorityLevel", "PriorityLevel must be between 1-5, got: 7"),
        mk_finding("PriorityLevel", "Missing required field: PriorityLevel"),
        mk_finding("ClientID", "Missing required field: ClientID"),
    ]
    hints = KeywordAssistStrategy().correction_suggestions(findings)
    assert hints == [
        "Set default priority level to 3 for clients missing priority values",
        "Generate unique ClientIDs using format: CLIENT_001, CLIENT_002, etc.",
    ]


def test_correction_suggestions_fallback_and_empty() -> None:
    s = KeywordAssistStrategy()
    assert s.correction_suggestions([]) == []
    generic = s.correction_suggestions([mk_finding("GroupTag", "Something odd")])
    assert len(generic) == 4


def test_query_intents() -> None:
    """
    @brief
    Recognized phrases map to filters; other text is a substring search.
    """
    # --- Arrange ---
    s = KeywordAssistStrategy()
    ds = mk_dataset()

    # --- Act / Assert ---
    assert [c.client_id for c in s.query("show high priority clients", ds)] == ["C1"]
    assert [c.client_id for c in s.query("low priority", ds)] == ["C2"]
    assert [w.worker_id for w in s.query("senior staff", ds)] == ["W1"]
    assert [w.worker_id for w in s.query("available workers", ds)] == ["W1"]
    assert [t.task_id for t in s.query("long tasks", ds)] == ["T1"]

    design = s.query("design work", ds)
    assert [type(e).__name__ for e in design] == ["Task", "Worker"]

    assert [c.client_id for c in s.query("enterprise", ds)] == ["C1"]
    assert s.query("python", ds, limit=0) == []

import pytest
from pydantic import ValidationError

from alloccheck.schemas.models import (
    BusinessRule,
    Client,
    Config,
    Dataset,
    Finding,
    NormalizerConfig,
    Task,
    ValidationResult,
    Worker,
)


def _finding(kind: str = "error") -> Finding:
    return Finding(
        id="x-1",
        kind=kind,
        message="m",
        field="ClientID",
        entity_type="client",
        entity_id="C1",
        severity="high",
    )


def test_entity_built_by_column_or_attribute_name():
    by_column = Client(ClientID="C1", ClientName="Acme", PriorityLevel=2)
    by_attr = Client(client_id="C1", client_name="Acme", priority_level=2)

    assert by_column == by_attr
    assert by_column.get_column("PriorityLevel") == 2
    assert by_column.get_column("client_name") == "Acme"
    assert by_column.identifier == "C1"
    assert by_column.attributes_json == {}


def test_entity_dumps_canonical_columns():
    w = Worker(WorkerID="W1", Skills=["qa"], AvailableSlots=[1, "x"])
    data = w.model_dump(by_alias=True)

    assert data["WorkerID"] == "W1"
    assert data["AvailableSlots"] == [1, "x"]
    assert set(data) == {
        "WorkerID",
        "WorkerName",
        "Skills",
        "AvailableSlots",
        "MaxLoadPerPhase",
        "WorkerGroup",
        "QualificationLevel",
    }


def test_entities_are_frozen_and_strict():
    t = Task(TaskID="T1")
    with pytest.raises(ValidationError):
        t.task_id = "T2"
    with pytest.raises(ValidationError):
        Task(TaskID="T1", Owner="bob")


def test_get_column_unknown_name_raises():
    with pytest.raises(KeyError):
        Client().get_column("Nope")


def test_replace_entity_returns_new_snapshot():
    ds = Dataset(clients=[Client(ClientID="C1", PriorityLevel=7), Client(ClientID="C2")])

    edited = ds.replace_entity("client", 0, PriorityLevel=3, client_name="Acme")

    assert edited is not ds
    assert edited.clients[0].priority_level == 3
    assert edited.clients[0].client_name == "Acme"
    assert edited.clients[1] == ds.clients[1]
    assert ds.clients[0].priority_level == 7


def test_finding_serializes_with_consumer_keys():
    data = _finding().model_dump(by_alias=True)
    assert data == {
        "id": "x-1",
        "type": "error",
        "message": "m",
        "field": "ClientID",
        "entityType": "client",
        "entityId": "C1",
        "severity": "high",
    }


def test_finding_rejects_unknown_severity():
    with pytest.raises(ValidationError):
        Finding(id="a", kind="error", message="m", entity_type="task", entity_id="T", severity="x")


def test_validation_result_is_valid_derived_from_errors():
    ok = ValidationResult(warnings=[_finding("warning")])
    bad = ValidationResult(errors=[_finding()])

    assert ok.is_valid is True
    assert bad.is_valid is False
    assert bad.model_dump(by_alias=True)["isValid"] is False
    assert ok.has_blocking_issues() is False
    assert ok.has_blocking_issues(fail_on_warnings=True) is True
    assert [f.kind for f in ValidationResult(errors=[_finding()], warnings=[_finding("warning")]).findings] == [
        "error",
        "warning",
    ]


def test_config_defaults():
    cfg = Config()
    assert isinstance(cfg.normalizer, NormalizerConfig)
    assert cfg.output_dir == "data/output"
    assert cfg.normalizer.default_priority == 1
    assert cfg.validation.write_report is True

    data = cfg.model_dump()
    assert "normalizer" in data and "validation" in data


def test_business_rule_alias_and_bounds():
    rule = BusinessRule(id="r", type="preference", description="d", condition="c", action="a")
    assert rule.rule_type == "preference"
    assert rule.model_dump(by_alias=True)["type"] == "preference"
    with pytest.raises(ValidationError):
        BusinessRule(id="r", description="d", condition="c", action="a", priority=9)

    schema = Client.model_json_schema(by_alias=True)
    assert "ClientID" in schema["properties"]

import pytest

from dispatch_engine.assets import AssetStore
from dispatch_engine.environment import FixedFactorProvider
from dispatch_engine.errors import InvalidRecordError, InvalidTransitionError
from dispatch_engine.models import (
    Incident,
    IncidentStatus,
    Severity,
    advance_incident,
    assign_responder,
)
from dispatch_engine.samples import sample_assets, sample_incidents, sample_responders
from dispatch_engine.system import DispatchReadinessEngine


def _engine() -> DispatchReadinessEngine:
    return DispatchReadinessEngine(store=AssetStore(sample_assets()), factors=FixedFactorProvider())


def test_sample_snapshot_runs_through_every_operation() -> None:
    engine = _engine()
    incidents = sample_incidents()
    responders = sample_responders()

    suggestions = engine.build_dispatch_suggestions(incidents, responders)
    assert 0 < len(suggestions) <= 6
    assert suggestions[0].incident_id == "INC-2025-001"
    assert suggestions[0].responder_id == "user-1"

    plan = engine.generate_playbook(incidents[0], responders)
    assert len(plan.steps) == 4
    assert plan.steps[0].owner == "Sarah Jenkins"

    shortages = {f.region: f.shortages for f in engine.forecast_shortages(incidents, responders)}
    assert "Vehicles" in shortages["New York, USA"]

    [resupply] = engine.preallocate_resupply_routes(incidents)
    assert resupply.asset_id == "A-V2"
    assert resupply.to_incident_id == "INC-2025-004"

    readiness = {r.region: r for r in engine.readiness_by_region(incidents, responders)}
    assert readiness["London, UK"].closure_rate == 1.0
    assert all(0.0 <= r.readiness_score <= 1.0 for r in readiness.values())

    flagged = engine.detect_anomalies(incidents, responders)
    assert [a.incident_id for a in flagged] == ["INC-2025-004"]

    assert engine.build_trust_profile(responders[0], []).score == 98


def test_loaders_skip_malformed_records_and_keep_the_rest() -> None:
    engine = _engine()
    rows = [
        {"id": "INC-1", "title": "Flood", "severity": "High", "location_name": "Lagos, Nigeria", "lat": 6.5, "lng": 3.4},
        {"title": "No id"},
        {"id": "  ", "title": "Blank id"},
        {"id": "INC-2", "severity": "Apocalyptic"},
        {"id": "INC-3", "severity": "Low", "location_name": "Lagos, Nigeria", "timestamp": 1767225600000},
    ]

    incidents = engine.load_incidents(rows)

    assert [i.incident_id for i in incidents] == ["INC-1", "INC-3"]
    assert incidents[0].location.latitude == 6.5
    assert incidents[1].created_at.year == 2026


def test_wrongly_typed_fields_skip_only_the_bad_record() -> None:
    engine = _engine()

    incidents = engine.load_incidents(
        [
            {"id": "bad-list", "assignedResponders": 5},
            {"id": "bad-string-list", "assigned_responders": "user-1"},
            {"id": "bad-severity", "severity": ["High"]},
            {"id": "bad-time", "timestamp": 1e300},
            None,
            "INC-9",
            {"id": "ok", "assignedResponders": ["user-1", 2]},
        ]
    )
    responders = engine.load_responders(
        [{"id": "r-bad", "skills": "Medic"}, {"id": "r-bad-2", "skills": {"Medic": True}}, 42, {"id": "r-ok"}]
    )
    assets = engine.load_assets(
        [
            {"id": "bad", "type": "Vehicle", "capacity": "large"},
            {"id": "bad-stock", "type": "MedicalKit", "stock_count": float("inf")},
            {"id": "bad-nan", "type": "MedicalKit", "stockCount": "nan"},
            {"id": "bad-people", "type": "Vehicle", "capacity": {"people": "a few"}},
            {"id": "ok", "type": "Vehicle", "capacity": {"people": 4, "kW": "7.5"}},
        ]
    )

    assert [i.incident_id for i in incidents] == ["ok"]
    assert incidents[0].assigned_responders == ("user-1", "2")
    assert [r.responder_id for r in responders] == ["r-ok"]
    assert [a.asset_id for a in assets] == ["ok"]
    assert assets[0].capacity.people == 4
    assert assets[0].capacity.kw == 7.5


def test_numeric_reporter_id_matches_responder() -> None:
    engine = _engine()
    [incident] = engine.load_incidents(
        [{"id": "INC-7", "severity": "High", "location_name": "X", "reporterId": 7, "confidenceScore": 0.3}]
    )
    [reporter] = engine.load_responders([{"id": 7, "name": "Trusted", "trust_score": 95}])

    assert incident.reporter_id == "7"
    assert engine.detect_anomalies([incident], [reporter]) == []
    assert [a.incident_id for a in engine.detect_anomalies([incident], [])] == ["INC-7"]


def test_responder_loader_applies_default_trust() -> None:
    engine = DispatchReadinessEngine(default_trust=55)

    [responder] = engine.load_responders([{"id": "v-1", "name": "Vol", "skills": ["Medic"], "location": "Lagos"}])

    assert responder.trust_score == 55
    assert responder.location_name == "Lagos"
    assert responder.skills == frozenset({"Medic"})


def test_incident_status_only_moves_forward_one_step() -> None:
    incident = Incident(incident_id="I-1", title="t", severity=Severity.LOW, location_name="X")

    acknowledged = advance_incident(incident, IncidentStatus.ACKNOWLEDGED)
    assert acknowledged.status is IncidentStatus.ACKNOWLEDGED
    assert incident.status is IncidentStatus.REPORTED

    with pytest.raises(InvalidTransitionError):
        advance_incident(acknowledged, IncidentStatus.CLOSED)
    with pytest.raises(InvalidTransitionError):
        advance_incident(acknowledged, IncidentStatus.REPORTED)


def test_assign_responder_is_idempotent() -> None:
    incident = Incident(incident_id="I-1", title="t", severity=Severity.LOW, location_name="X")

    once = assign_responder(incident, "r-1")
    assert assign_responder(once, "r-1").assigned_responders == ("r-1",)


def test_records_require_ids() -> None:
    with pytest.raises(InvalidRecordError):
        Incident(incident_id="", title="t", severity=Severity.LOW, location_name="X")

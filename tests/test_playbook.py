from datetime import datetime, timedelta, timezone

from dispatch_engine.models import Incident, Responder, Severity, SquadMember, StepStatus
from dispatch_engine.playbook import FALLBACK_OWNER, PlaybookGenerator, resource_gaps

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

ALL_SKILLS = [
    "First Aid",
    "Medic",
    "Security",
    "Logistics",
    "Search & Rescue",
    "Driver",
    "Communication",
    "Coordination",
]


def _incident(severity: Severity = Severity.CRITICAL, assigned=()) -> Incident:
    return Incident(
        incident_id="INC-77",
        title="Warehouse fire",
        severity=severity,
        location_name="London, UK",
        assigned_responders=tuple(assigned),
    )


def test_playbook_has_four_timed_steps() -> None:
    plan = PlaybookGenerator().generate(_incident(Severity.CRITICAL), [], now=NOW)

    assert len(plan.steps) == 4
    assert [s.expected_duration_mins for s in plan.steps] == [8, 15, 25, 35]
    assert plan.steps[0].due_at == NOW + timedelta(minutes=8)
    assert plan.steps[-1].due_at == NOW + timedelta(minutes=83)
    dues = [s.due_at for s in plan.steps]
    assert dues == sorted(dues)
    assert [s.step_id for s in plan.steps] == [f"INC-77-pb-{n}" for n in range(1, 5)]
    assert all(s.status is StepStatus.PENDING for s in plan.steps)


def test_low_severity_runs_slowest_profile() -> None:
    plan = PlaybookGenerator().generate(_incident(Severity.LOW), [], now=NOW)

    assert [s.expected_duration_mins for s in plan.steps] == [20, 30, 45, 60]


def test_owner_prefers_squad_then_assigned_then_pool() -> None:
    pool = [
        Responder(responder_id="p1", name="Pool Medic", skills=["Medic"]),
        Responder(responder_id="p2", name="Assigned Guard", skills=["Security"]),
        Responder(responder_id="p3", name="Pool Radio", skills=["Communication"]),
    ]
    squad = [SquadMember("Squad Driver", ["Driver"])]

    plan = PlaybookGenerator().generate(_incident(assigned=["p2"]), pool, squad=squad, now=NOW)
    owners = [s.owner for s in plan.steps]

    assert owners == ["Pool Medic", "Assigned Guard", "Squad Driver", "Pool Radio"]
    assert "Squad assignees: Squad Driver." in plan.summary


def test_owner_fallback_chain() -> None:
    generator = PlaybookGenerator()
    nobody_matches = [Responder(responder_id="x", name="Generalist", skills=["Cooking"])]

    assert generator.pick_owner(["Medic"], [], [], []) == FALLBACK_OWNER
    assert generator.pick_owner(["Medic"], [], [], nobody_matches) == "Generalist"
    assert generator.pick_owner(["Medic"], [SquadMember("Lead", ["Cooking"])], [], nobody_matches) == "Lead"


def test_skill_matching_is_exact_and_case_sensitive() -> None:
    pool = [Responder(responder_id="p", name="Lower", skills=["medic", "first aid"])]

    plan = PlaybookGenerator().generate(_incident(), pool, now=NOW)

    assert plan.steps[0].owner == "Lower"  # falls back to first pool member
    assert "Medic" in plan.resource_gaps
    assert "First Aid" in plan.resource_gaps


def test_resource_gaps_empty_when_pool_covers_all_skills() -> None:
    pool = [
        Responder(responder_id="a", name="A", skills=ALL_SKILLS[:4]),
        Responder(responder_id="b", name="B", skills=ALL_SKILLS[4:]),
    ]

    plan = PlaybookGenerator().generate(_incident(), pool, now=NOW)

    assert plan.required_skills == ALL_SKILLS
    assert plan.resource_gaps == []


def test_resource_gaps_equal_required_minus_pool_skills() -> None:
    pool = [Responder(responder_id="a", name="A", skills=["Medic", "Driver"])]

    assert resource_gaps(ALL_SKILLS, pool) == [s for s in ALL_SKILLS if s not in {"Medic", "Driver"}]
    assert resource_gaps(ALL_SKILLS, []) == ALL_SKILLS

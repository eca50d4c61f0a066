from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from dispatch_engine.models import (
    Incident,
    PlaybookPlan,
    PlaybookStep,
    Responder,
    Severity,
    SquadMember,
    utc_now,
)

logger = logging.getLogger(__name__)

FALLBACK_OWNER = "Ops Lead"


@dataclass(frozen=True)
class StepTemplate:
    title: str
    required_skills: List[str]
    resources_needed: List[str]


BASE_STEPS = [
    StepTemplate("Stabilize and triage", ["First Aid", "Medic"], ["Medkit", "Vitals monitor"]),
    StepTemplate("Secure perimeter and hazards", ["Security", "Logistics"], ["Barricades", "Cones", "Radio"]),
    StepTemplate(
        "Deploy response and route support", ["Search & Rescue", "Driver"], ["Vehicle", "Fuel", "Thermal camera"]
    ),
    StepTemplate("Comms + handoff", ["Communication", "Coordination"], ["Satellite comms", "Power"]),
]

# Minutes per step; Critical runs fastest.
SEVERITY_MINUTES = {
    Severity.CRITICAL: [8, 15, 25, 35],
    Severity.HIGH: [12, 18, 28, 40],
    Severity.MEDIUM: [15, 25, 35, 50],
    Severity.LOW: [20, 30, 45, 60],
}


def resource_gaps(required_skills: Iterable[str], responders: Iterable[Responder]) -> List[str]:
    """Required skills that no responder in the pool holds (exact, case-sensitive)."""
    available = set()
    for responder in responders:
        available.update(responder.skills)
    return [skill for skill in required_skills if skill not in available]


class PlaybookGenerator:
    """Turns an incident into a timed, owner-assigned four-step response plan."""

    def __init__(self, templates: Sequence[StepTemplate] = BASE_STEPS) -> None:
        self.templates = list(templates)

    @staticmethod
    def pick_owner(
        required_skills: Iterable[str],
        squad: Sequence[SquadMember],
        assigned: Sequence[Responder],
        pool: Sequence[Responder],
    ) -> str:
        wanted = set(required_skills)
        for group in (squad, assigned, pool):
            for member in group:
                if wanted & member.skills:
                    return member.name

        for group in (squad, assigned, pool):
            if group:
                return group[0].name
        return FALLBACK_OWNER

    def generate(
        self,
        incident: Incident,
        responders: Iterable[Responder] = (),
        squad: Optional[Iterable[SquadMember]] = None,
        now: Optional[datetime] = None,
    ) -> PlaybookPlan:
        pool = list(responders)
        squad_members = list(squad or [])
        by_id = {r.responder_id: r for r in pool}
        assigned = [by_id[rid] for rid in incident.assigned_responders if rid in by_id]

        durations = SEVERITY_MINUTES.get(incident.severity, SEVERITY_MINUTES[Severity.MEDIUM])
        due_at = now or utc_now()
        steps = []

        for idx, template in enumerate(self.templates):
            expected = durations[idx] if idx < len(durations) else durations[-1]
            due_at = due_at + timedelta(minutes=expected)
            owner = self.pick_owner(template.required_skills, squad_members, assigned, pool)
            logger.debug("Playbook %s step %d owner: %s", incident.incident_id, idx + 1, owner)

            steps.append(
                PlaybookStep(
                    step_id=f"{incident.incident_id}-pb-{idx + 1}",
                    title=template.title,
                    owner=owner,
                    required_skills=list(template.required_skills),
                    resources_needed=list(template.resources_needed),
                    expected_duration_mins=expected,
                    due_at=due_at,
                )
            )

        required = list(dict.fromkeys(skill for step in steps for skill in step.required_skills))
        summary = f"Auto-generated SOP for {incident.title} ({incident.severity.value})."
        if squad_members:
            summary += f" Squad assignees: {', '.join(m.name for m in squad_members)}."
        summary += " Tracks owners, timers, and gaps."

        return PlaybookPlan(
            steps=steps,
            required_skills=required,
            resource_gaps=resource_gaps(required, pool),
            summary=summary,
        )

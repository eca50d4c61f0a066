from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

from dispatch_engine.estimator import round_half_up
from dispatch_engine.logistics import PLAYBOOKS_PER_REGION
from dispatch_engine.models import AnomalyRecord, Incident, ReadinessRecord, Responder, Severity
from dispatch_engine.playbook import PlaybookGenerator

logger = logging.getLogger(__name__)

SEVERITY_RESPONSE_MINS = {
    Severity.CRITICAL: 8,
    Severity.HIGH: 12,
    Severity.MEDIUM: 15,
    Severity.LOW: 20,
}
DEFAULT_RESPONSE_MINS = 15
RESPONSE_TARGET_MINS = 20
MAX_COUNTED_GAPS = 5

ANOMALY_THRESHOLD = 0.6
LOW_TRUST = 0.3
LOW_CONFIDENCE = 0.4
DEFAULT_CONFIDENCE = 0.5
DENYLIST = ("spam", "test", "fake", "hoax")


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def readiness_score(avg_response_mins: float, closure_rate: float, gap_count: int) -> float:
    gap_term = 1.0 if gap_count == 0 else max(0.0, 1 - gap_count / MAX_COUNTED_GAPS)
    raw = 0.5 * (1 - avg_response_mins / RESPONSE_TARGET_MINS) + 0.4 * closure_rate + 0.1 * gap_term
    return clamp(raw)


class ReadinessScorer:
    """Regional readiness scores and suspicious-report screening."""

    def __init__(self, playbooks: Optional[PlaybookGenerator] = None) -> None:
        self.playbooks = playbooks or PlaybookGenerator()

    def readiness_by_region(
        self, incidents: Iterable[Incident], responders: Iterable[Responder]
    ) -> List[ReadinessRecord]:
        regions: "OrderedDict[str, List[Incident]]" = OrderedDict()
        for incident in incidents:
            regions.setdefault(incident.location_name, []).append(incident)
        crews: Dict[str, List[Responder]] = {}
        for responder in responders:
            crews.setdefault(responder.location_name, []).append(responder)

        records = []
        for region, region_incidents in regions.items():
            count = len(region_incidents)
            if count == 0:
                continue

            avg_response = (
                sum(SEVERITY_RESPONSE_MINS.get(i.severity, DEFAULT_RESPONSE_MINS) for i in region_incidents)
                / count
            )
            closure_rate = sum(1 for i in region_incidents if i.status.is_finished) / count

            gaps: Dict[str, None] = {}
            for incident in region_incidents[:PLAYBOOKS_PER_REGION]:
                plan = self.playbooks.generate(incident, crews.get(region, []))
                gaps.update(dict.fromkeys(plan.resource_gaps))

            records.append(
                ReadinessRecord(
                    region=region,
                    avg_response_mins=avg_response,
                    closure_rate=closure_rate,
                    skill_gaps=list(gaps),
                    readiness_score=readiness_score(avg_response, closure_rate, len(gaps)),
                )
            )
        return records

    def detect_anomalies(
        self, incidents: Iterable[Incident], responders: Iterable[Responder]
    ) -> List[AnomalyRecord]:
        by_id = {r.responder_id: r for r in responders}
        anomalies = []

        for incident in incidents:
            score = 0.0
            reasons = []

            reporter = by_id.get(incident.reporter_id) if incident.reporter_id else None
            # trust is stored on a 0-100 scale
            if reporter is None or reporter.trust_score / 100 < LOW_TRUST:
                score += 0.3
                reasons.append("Low or unknown reporter trust.")

            confidence = DEFAULT_CONFIDENCE if incident.confidence_score is None else incident.confidence_score
            if confidence < LOW_CONFIDENCE:
                score += 0.4
                reasons.append(f"Low classifier confidence ({confidence:.2f}).")

            text = f"{incident.description} {incident.translated_description or ''}".lower()
            hits = [term for term in DENYLIST if term in text]
            if hits:
                score += 0.4
                reasons.append(f"Suspicious terms: {', '.join(hits)}.")

            if score >= ANOMALY_THRESHOLD:
                logger.debug("Incident %s flagged (score %.2f)", incident.incident_id, score)
                anomalies.append(
                    AnomalyRecord(
                        incident_id=incident.incident_id,
                        region=incident.location_name,
                        suspicion_score=round_half_up(min(1.0, score), 2),
                        reason=" ".join(reasons),
                    )
                )

        return anomalies

from __future__ import annotations

from datetime import timedelta

from dispatch_engine.assets import AssetStore
from dispatch_engine.environment import RandomFactorProvider
from dispatch_engine.models import SquadMember, utc_now
from dispatch_engine.samples import sample_assets, sample_incidents, sample_responders
from dispatch_engine.system import DispatchReadinessEngine
from dispatch_engine.trust import mission_completion, peer_review, zk_skill_proof


def main() -> None:
    incidents = sample_incidents()
    responders = sample_responders()
    engine = DispatchReadinessEngine(
        store=AssetStore(sample_assets()),
        factors=RandomFactorProvider(seed=7),
    )

    print("=== Dispatch Suggestions ===")
    for s in engine.build_dispatch_suggestions(incidents, responders):
        print(
            f" - [{s.priority.value}] {s.incident_id} -> {s.responder_name} "
            f"({s.distance_km} km, ETA {s.eta_minutes} min; {', '.join(s.route_plan.risk_factors)})"
        )

    plan = engine.generate_playbook(
        incidents[0],
        responders,
        squad=[SquadMember("Bravo Team", ["Search & Rescue", "Driver"])],
    )
    print("\n=== Playbook ===")
    print(plan.summary)
    for step in plan.steps:
        print(f" - {step.title}: {step.owner}, {step.expected_duration_mins} min, due {step.due_at:%H:%M}")
    print(f"Resource gaps: {', '.join(plan.resource_gaps) or 'None'}")

    print("\n=== Shortages ===")
    for forecast in engine.forecast_shortages(incidents, responders):
        print(f" - {forecast.region}: {', '.join(forecast.shortages) or 'None'}")

    print("\n=== Resupply ===")
    for route in engine.preallocate_resupply_routes(incidents):
        print(f" - {route.asset_id} ({route.origin}) -> {route.to_incident_id}, {route.distance_km} km")

    print("\n=== Readiness ===")
    for record in engine.readiness_by_region(incidents, responders):
        print(
            f" - {record.region}: score={record.readiness_score:.2f}, "
            f"closure={record.closure_rate:.0%}, gaps={len(record.skill_gaps)}"
        )

    print("\n=== Anomalies ===")
    for anomaly in engine.detect_anomalies(incidents, responders):
        print(f" - {anomaly.incident_id}: {anomaly.suspicion_score} ({anomaly.reason})")

    now = utc_now()
    profile = engine.build_trust_profile(
        responders[0],
        [
            mission_completion(92, now - timedelta(hours=24)),
            peer_review(85, now - timedelta(hours=200)),
            zk_skill_proof(100, now - timedelta(days=10), proof_ref="zk:first-aid"),
        ],
        now=now,
    )
    print(f"\nTrust profile for {responders[0].name}: {profile.score}/100")


if __name__ == "__main__":
    main()

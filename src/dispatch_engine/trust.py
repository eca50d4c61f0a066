from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from dispatch_engine.errors import InvalidRecordError
from dispatch_engine.estimator import round_half_up
from dispatch_engine.models import (
    Responder,
    TrustComponent,
    TrustProfile,
    TrustSignalType,
    parse_datetime,
    parse_enum,
    optional_str,
    parse_optional_float,
    require_mapping,
    utc_now,
)

# (half-life hours, weight) per signal type. Verified proofs outlast single missions.
SIGNAL_DEFAULTS = {
    TrustSignalType.MISSION_COMPLETION: (72.0, 3.0),
    TrustSignalType.PEER_REVIEW: (108.0, 2.0),
    TrustSignalType.ZK_SKILL_PROOF: (720.0, 4.0),
    TrustSignalType.ON_CHAIN_ATTESTATION: (1440.0, 5.0),
}


def _signal(
    signal_type: TrustSignalType,
    label: str,
    value: float,
    last_updated: Optional[datetime],
    proof_ref: Optional[str],
) -> TrustComponent:
    half_life, weight = SIGNAL_DEFAULTS[signal_type]
    return TrustComponent(
        label=label,
        value=value,
        half_life_hours=half_life,
        weight=weight,
        signal_type=signal_type,
        last_updated=last_updated or utc_now(),
        proof_ref=proof_ref,
    )


def mission_completion(value: float, last_updated: Optional[datetime] = None, label: str = "Mission completion") -> TrustComponent:
    return _signal(TrustSignalType.MISSION_COMPLETION, label, value, last_updated, None)


def peer_review(value: float, last_updated: Optional[datetime] = None, label: str = "Peer review") -> TrustComponent:
    return _signal(TrustSignalType.PEER_REVIEW, label, value, last_updated, None)


def zk_skill_proof(
    value: float,
    last_updated: Optional[datetime] = None,
    proof_ref: Optional[str] = None,
    label: str = "ZK skill proof",
) -> TrustComponent:
    return _signal(TrustSignalType.ZK_SKILL_PROOF, label, value, last_updated, proof_ref)


def on_chain_attestation(
    value: float,
    last_updated: Optional[datetime] = None,
    proof_ref: Optional[str] = None,
    label: str = "On-chain attestation",
) -> TrustComponent:
    return _signal(TrustSignalType.ON_CHAIN_ATTESTATION, label, value, last_updated, proof_ref)


def decayed_value(component: TrustComponent, now: datetime) -> float:
    """``value * 0.5 ** (hours elapsed / half-life)``; future timestamps do not inflate."""
    if component.half_life_hours <= 0:
        return component.value
    hours = max(0.0, (now - component.last_updated).total_seconds() / 3600)
    return component.value * 0.5 ** (hours / component.half_life_hours)


class TrustProfileCalculator:
    """Weighted mean of decayed trust signals, recomputed on every call."""

    def build_profile(
        self,
        responder: Responder,
        components: Iterable[TrustComponent],
        now: Optional[datetime] = None,
    ) -> TrustProfile:
        now = now or utc_now()
        decayed = [replace(c, value=decayed_value(c, now)) for c in components]
        total_weight = sum(c.weight for c in decayed)

        if total_weight > 0:
            raw = sum(c.value * c.weight for c in decayed) / total_weight
        else:
            raw = responder.trust_score

        score = int(max(0, min(100, round_half_up(raw))))
        return TrustProfile(score=score, components=decayed, last_updated=now)


def component_from_dict(data: Mapping[str, Any]) -> TrustComponent:
    """Build a signal from a raw mapping, filling half-life and weight from the signal type."""
    data = require_mapping(data, "Trust component")
    signal_type = parse_enum(TrustSignalType, data.get("type", data.get("signal_type")), "type")
    half_life, weight = SIGNAL_DEFAULTS[signal_type]
    value = parse_optional_float(data.get("value"), "value")
    if value is None:
        raise InvalidRecordError("Trust component requires a value")
    custom_half_life = parse_optional_float(data.get("half_life_hours"), "half_life_hours")
    custom_weight = parse_optional_float(data.get("weight"), "weight")
    return TrustComponent(
        label=str(data.get("label") or signal_type.value),
        value=value,
        half_life_hours=half_life if custom_half_life is None else custom_half_life,
        weight=weight if custom_weight is None else custom_weight,
        signal_type=signal_type,
        last_updated=parse_datetime(data.get("last_updated", data.get("lastUpdated"))),
        proof_ref=optional_str(data.get("proof_ref", data.get("proofRef"))),
    )
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Mapping, Optional, Tuple, Type, TypeVar

from dispatch_engine.errors import InvalidRecordError, InvalidTransitionError

E = TypeVar("E", bound=Enum)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IncidentCategory(str, Enum):
    MEDICAL = "Medical"
    FIRE = "Fire"
    FLOOD = "Flood"
    STORM = "Storm"
    EARTHQUAKE = "Earthquake"
    SECURITY = "Security"
    THEFT = "Theft"
    PUBLIC_HEALTH = "PublicHealth"
    HAZARD = "Hazard"
    KIDNAPPING = "Kidnapping"
    OTHER = "Other"


class Severity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class IncidentStatus(str, Enum):
    REPORTED = "Reported"
    ACKNOWLEDGED = "Acknowledged"
    IN_PROGRESS = "InProgress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"

    def can_advance_to(self, target: "IncidentStatus") -> bool:
        order = list(IncidentStatus)
        return order.index(target) == order.index(self) + 1

    @property
    def is_finished(self) -> bool:
        return self in (IncidentStatus.RESOLVED, IncidentStatus.CLOSED)


class ResponderStatus(str, Enum):
    AVAILABLE = "Available"
    BUSY = "Busy"
    OFF_DUTY = "OffDuty"


class AssetType(str, Enum):
    VEHICLE = "Vehicle"
    GENERATOR = "Generator"
    MEDICAL_KIT = "MedicalKit"
    FUEL_TRUCK = "FuelTruck"
    WATER_PUMP = "WaterPump"


class AssetStatus(str, Enum):
    AVAILABLE = "Available"
    ASSIGNED = "Assigned"
    MAINTENANCE = "Maintenance"
    LOW_FUEL = "LowFuel"


class StepStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    DONE = "Done"
    BLOCKED = "Blocked"


class DispatchPriority(str, Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"

    @property
    def rank(self) -> int:
        return list(DispatchPriority).index(self)


class TrustSignalType(str, Enum):
    MISSION_COMPLETION = "MissionCompletion"
    PEER_REVIEW = "PeerReview"
    ZK_SKILL_PROOF = "ZkSkillProof"
    ON_CHAIN_ATTESTATION = "OnChainAttestation"


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Incident:
    incident_id: str
    title: str
    severity: Severity
    location_name: str
    description: str = ""
    category: IncidentCategory = IncidentCategory.OTHER
    status: IncidentStatus = IncidentStatus.REPORTED
    location: Optional[Coordinates] = None
    created_at: datetime = field(default_factory=utc_now)
    assigned_responders: Tuple[str, ...] = ()
    confidence_score: Optional[float] = None
    reporter_id: Optional[str] = None
    translated_description: Optional[str] = None
    is_private: bool = False

    def __post_init__(self) -> None:
        if not self.incident_id or not str(self.incident_id).strip():
            raise InvalidRecordError("Incident requires a non-empty id")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Incident":
        return cls(
            incident_id=_require_id(data, "id", "Incident"),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            category=parse_enum(IncidentCategory, data.get("category", "Other"), "category"),
            severity=parse_enum(Severity, data.get("severity", "Medium"), "severity"),
            status=parse_enum(IncidentStatus, data.get("status", "Reported"), "status"),
            location_name=str(data.get("location_name", data.get("locationName", ""))),
            location=_parse_coordinates(data),
            created_at=parse_datetime(data.get("created_at", data.get("timestamp"))),
            assigned_responders=tuple(
                str(i)
                for i in _parse_list(
                    data.get("assigned_responders", data.get("assignedResponders")), "assigned_responders"
                )
            ),
            confidence_score=parse_optional_float(
                data.get("confidence_score", data.get("confidenceScore")), "confidence_score"
            ),
            reporter_id=optional_str(data.get("reporter_id", data.get("reporterId"))),
            translated_description=optional_str(
                data.get("translated_description", data.get("translatedDescription"))
            ),
            is_private=bool(data.get("is_private", data.get("isWhisperMode", False))),
        )


@dataclass(frozen=True)
class Responder:
    responder_id: str
    name: str
    skills: frozenset = frozenset()
    status: ResponderStatus = ResponderStatus.AVAILABLE
    location: Optional[Coordinates] = None
    location_name: str = "Field"
    trust_score: float = 80.0

    def __post_init__(self) -> None:
        if not self.responder_id or not str(self.responder_id).strip():
            raise InvalidRecordError("Responder requires a non-empty id")
        if not isinstance(self.skills, frozenset):
            object.__setattr__(self, "skills", frozenset(self.skills))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], default_trust: float = 80.0) -> "Responder":
        data = require_mapping(data, "Responder")
        trust = parse_optional_float(data.get("trust_score", data.get("trustScore")), "trust_score")
        return cls(
            responder_id=_require_id(data, "id", "Responder"),
            name=str(data.get("name", "")),
            skills=frozenset(str(s) for s in _parse_list(data.get("skills"), "skills")),
            status=parse_enum(ResponderStatus, data.get("status", "Available"), "status"),
            location=_parse_coordinates(data),
            location_name=str(data.get("location_name", data.get("location", "Field")) or "Field"),
            trust_score=default_trust if trust is None else trust,
        )


@dataclass(frozen=True)
class SquadMember:
    name: str
    skills: frozenset = frozenset()

    def __post_init__(self) -> None:
        if not isinstance(self.skills, frozenset):
            object.__setattr__(self, "skills", frozenset(self.skills))


@dataclass(frozen=True)
class AssetCapacity:
    people: Optional[int] = None
    kw: Optional[float] = None
    liters: Optional[float] = None


@dataclass(frozen=True)
class Asset:
    asset_id: str
    name: str
    asset_type: AssetType
    location_name: str
    status: AssetStatus = AssetStatus.AVAILABLE
    location: Optional[Coordinates] = None
    fuel_pct: Optional[float] = None
    stock_count: Optional[int] = None
    capacity: AssetCapacity = field(default_factory=AssetCapacity)
    assigned_incident_id: Optional[str] = None
    last_updated: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        if not self.asset_id or not str(self.asset_id).strip():
            raise InvalidRecordError("Asset requires a non-empty id")
        if (self.status is AssetStatus.ASSIGNED) != (self.assigned_incident_id is not None):
            raise InvalidRecordError(
                f"Asset {self.asset_id}: incident reference must be set exactly when Assigned"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Asset":
        data = require_mapping(data, "Asset")
        capacity = _parse_mapping(data.get("capacity"), "capacity")
        return cls(
            asset_id=_require_id(data, "id", "Asset"),
            name=str(data.get("name", "")),
            asset_type=parse_enum(AssetType, data.get("type", data.get("asset_type")), "type"),
            status=parse_enum(AssetStatus, data.get("status", "Available"), "status"),
            location_name=str(data.get("location_name", data.get("locationName", ""))),
            location=_parse_coordinates(data),
            fuel_pct=parse_optional_float(data.get("fuel_pct", data.get("fuelPct")), "fuel_pct"),
            stock_count=_parse_optional_int(data.get("stock_count", data.get("stockCount")), "stock_count"),
            capacity=AssetCapacity(
                people=_parse_optional_int(capacity.get("people"), "capacity.people"),
                kw=parse_optional_float(capacity.get("kw", capacity.get("kW")), "capacity.kw"),
                liters=parse_optional_float(capacity.get("liters"), "capacity.liters"),
            ),
            assigned_incident_id=optional_str(
                data.get("assigned_incident_id", data.get("assignedIncidentId"))
            ),
        )


@dataclass(frozen=True)
class PlaybookStep:
    step_id: str
    title: str
    owner: str
    required_skills: List[str]
    resources_needed: List[str]
    expected_duration_mins: int
    due_at: datetime
    status: StepStatus = StepStatus.PENDING


@dataclass(frozen=True)
class PlaybookPlan:
    steps: List[PlaybookStep]
    required_skills: List[str]
    resource_gaps: List[str]
    summary: str


@dataclass(frozen=True)
class RoutePlan:
    origin: str
    destination: str
    distance_km: float
    eta_minutes: int
    steps: List[str]
    risk_factors: List[str]
    advisory: str


@dataclass(frozen=True)
class DispatchSuggestion:
    incident_id: str
    incident_title: str
    target_location_name: str
    responder_id: str
    responder_name: str
    responder_status: ResponderStatus
    distance_km: float
    eta_minutes: int
    priority: DispatchPriority
    route_plan: RoutePlan


@dataclass(frozen=True)
class ShortageForecast:
    region: str
    shortages: List[str]


@dataclass(frozen=True)
class ResupplySuggestion:
    asset_id: str
    origin: str
    to_incident_id: str
    distance_km: float
    note: str


@dataclass(frozen=True)
class ReadinessRecord:
    region: str
    avg_response_mins: float
    closure_rate: float
    skill_gaps: List[str]
    readiness_score: float


@dataclass(frozen=True)
class AnomalyRecord:
    incident_id: str
    region: str
    suspicion_score: float
    reason: str


@dataclass(frozen=True)
class TrustComponent:
    label: str
    value: float
    half_life_hours: float
    weight: float
    signal_type: TrustSignalType
    last_updated: datetime
    proof_ref: Optional[str] = None


@dataclass(frozen=True)
class TrustProfile:
    score: int
    components: List[TrustComponent]
    last_updated: datetime


def advance_incident(incident: Incident, target: IncidentStatus) -> Incident:
    if not incident.status.can_advance_to(target):
        raise InvalidTransitionError(incident.status.value, target.value)
    return replace(incident, status=target)


def assign_responder(incident: Incident, responder_id: str) -> Incident:
    if responder_id in incident.assigned_responders:
        return incident
    return replace(incident, assigned_responders=incident.assigned_responders + (responder_id,))


def require_mapping(data: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise InvalidRecordError(f"{kind} record must be an object, got {type(data).__name__}")
    return data


def _require_id(data: Mapping[str, Any], key: str, kind: str) -> str:
    value = require_mapping(data, kind).get(key)
    if value is None or not str(value).strip():
        raise InvalidRecordError(f"{kind} record is missing '{key}'")
    return str(value)


def parse_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (TypeError, ValueError) as exc:
        raise InvalidRecordError(f"Invalid {field_name}: {value!r}") from exc


def parse_optional_float(value: Any, field_name: str) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidRecordError(f"Invalid {field_name}: {value!r}") from exc


def _parse_optional_int(value: Any, field_name: str) -> Optional[int]:
    number = parse_optional_float(value, field_name)
    if number is None:
        return None
    try:
        return int(number)
    except (OverflowError, ValueError) as exc:
        raise InvalidRecordError(f"Invalid {field_name}: {value!r}") from exc


def _parse_list(value: Any, field_name: str) -> List[Any]:
    if value is None:
        return []
    # a bare string would otherwise iterate character by character
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, (list, tuple, set, frozenset)):
        raise InvalidRecordError(f"Invalid {field_name}: expected a list, got {value!r}")
    return list(value)


def _parse_mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise InvalidRecordError(f"Invalid {field_name}: expected an object, got {value!r}")
    return value


def optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _parse_coordinates(data: Mapping[str, Any]) -> Optional[Coordinates]:
    lat = parse_optional_float(data.get("latitude", data.get("lat")), "latitude")
    lng = parse_optional_float(data.get("longitude", data.get("lng")), "longitude")
    if lat is None or lng is None:
        return None
    return Coordinates(lat, lng)


def parse_datetime(value: Any) -> datetime:
    if value is None:
        return utc_now()
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise InvalidRecordError(f"Invalid timestamp: {value!r}") from exc
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError as exc:
        raise InvalidRecordError(f"Invalid timestamp: {value!r}") from exc
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

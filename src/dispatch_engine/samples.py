from __future__ import annotations

from datetime import timedelta
from typing import List

from dispatch_engine.models import (
    Asset,
    AssetCapacity,
    AssetStatus,
    AssetType,
    Coordinates,
    Incident,
    IncidentCategory,
    IncidentStatus,
    Responder,
    ResponderStatus,
    Severity,
    utc_now,
)


def sample_responders() -> List[Responder]:
    return [
        Responder(
            responder_id="user-1",
            name="Alex Mercer",
            skills=["First Aid", "Coordination", "Strategy"],
            location=Coordinates(40.7128, -74.0060),
            location_name="New York, USA",
            trust_score=98,
        ),
        Responder(
            responder_id="user-2",
            name="Sarah Jenkins",
            skills=["Medic", "Search & Rescue"],
            status=ResponderStatus.BUSY,
            location=Coordinates(51.5074, -0.1278),
            location_name="London, UK",
            trust_score=94,
        ),
        Responder(
            responder_id="user-3",
            name="Chen Wei",
            skills=["Communication", "Logistics"],
            location=Coordinates(39.9042, 116.4074),
            location_name="Beijing, China",
            trust_score=88,
        ),
        Responder(
            responder_id="user-4",
            name="Dmitri Volkov",
            skills=["Heavy Equipment", "Winter Survival"],
            status=ResponderStatus.OFF_DUTY,
            location=Coordinates(55.7558, 37.6173),
            location_name="Moscow, Russia",
            trust_score=91,
        ),
    ]


def sample_incidents() -> List[Incident]:
    now = utc_now()
    return [
        Incident(
            incident_id="INC-2025-001",
            title="Flash Flood - New York",
            description="Significant flooding reported in subway systems and low-lying areas.",
            category=IncidentCategory.FLOOD,
            severity=Severity.CRITICAL,
            status=IncidentStatus.IN_PROGRESS,
            location_name="New York, USA",
            location=Coordinates(40.7306, -73.9866),
            created_at=now - timedelta(hours=1),
            assigned_responders=("user-2",),
            confidence_score=0.98,
            reporter_id="user-1",
        ),
        Incident(
            incident_id="INC-2025-002",
            title="Building Collapse - Brooklyn",
            description="Partial collapse of a residential block; people trapped.",
            category=IncidentCategory.EARTHQUAKE,
            severity=Severity.HIGH,
            location_name="New York, USA",
            location=Coordinates(40.6782, -73.9442),
            created_at=now - timedelta(minutes=30),
            confidence_score=0.91,
            reporter_id="user-1",
        ),
        Incident(
            incident_id="INC-2025-003",
            title="Wildfire Risk - Beijing Outskirts",
            description="High heat index and dry conditions reported in the hills north of Beijing.",
            category=IncidentCategory.FIRE,
            severity=Severity.MEDIUM,
            status=IncidentStatus.ACKNOWLEDGED,
            location_name="Beijing, China",
            location=Coordinates(40.0799, 116.3150),
            created_at=now - timedelta(hours=4),
            confidence_score=0.89,
            reporter_id="user-3",
        ),
        Incident(
            incident_id="INC-2025-004",
            title="Power outage - Westminster",
            description="test report, please ignore",
            category=IncidentCategory.HAZARD,
            severity=Severity.LOW,
            status=IncidentStatus.RESOLVED,
            location_name="London, UK",
            location=Coordinates(51.4995, -0.1248),
            created_at=now - timedelta(hours=6),
            confidence_score=0.35,
        ),
    ]


def sample_assets() -> List[Asset]:
    return [
        Asset(
            asset_id="A-V1",
            name="Responder Van 1",
            asset_type=AssetType.VEHICLE,
            location_name="New York, USA",
            location=Coordinates(40.71, -74.0),
            fuel_pct=65,
            capacity=AssetCapacity(people=8),
        ),
        Asset(
            asset_id="A-V2",
            name="Responder Truck",
            asset_type=AssetType.VEHICLE,
            status=AssetStatus.LOW_FUEL,
            location_name="London, UK",
            location=Coordinates(51.50, -0.12),
            fuel_pct=22,
            capacity=AssetCapacity(people=3),
        ),
        Asset(
            asset_id="A-G1",
            name="Generator 5kW",
            asset_type=AssetType.GENERATOR,
            location_name="London, UK",
            location=Coordinates(51.51, -0.13),
            fuel_pct=55,
            capacity=AssetCapacity(kw=5),
        ),
        Asset(
            asset_id="A-M1",
            name="Medical Kit Alpha",
            asset_type=AssetType.MEDICAL_KIT,
            location_name="Beijing, China",
            stock_count=12,
        ),
        Asset(
            asset_id="A-F1",
            name="Fuel Truck 10k L",
            asset_type=AssetType.FUEL_TRUCK,
            location_name="New York, USA",
            location=Coordinates(40.70, -74.02),
            capacity=AssetCapacity(liters=10000),
        ),
    ]

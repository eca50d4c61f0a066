from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

RawRecord = Dict[str, Any]
# Batch items stay untyped; the engine loaders skip rows that are not records.
RawBatch = List[Any]


class SnapshotRequest(BaseModel):
    incidents: RawBatch = Field(default_factory=list)
    responders: RawBatch = Field(default_factory=list)


class IncidentsRequest(BaseModel):
    incidents: RawBatch = Field(default_factory=list)


class RoutePlanRequest(BaseModel):
    responder: RawRecord
    incident: RawRecord


class SquadMemberIn(BaseModel):
    name: str
    skills: List[str] = Field(default_factory=list)


class PlaybookRequest(BaseModel):
    incident: RawRecord
    responders: RawBatch = Field(default_factory=list)
    squad: List[SquadMemberIn] = Field(default_factory=list)


class AssignRequest(BaseModel):
    incident_id: str


class FuelUpdate(BaseModel):
    fuel_pct: float


class TrustProfileRequest(BaseModel):
    responder: RawRecord
    components: RawBatch = Field(default_factory=list)
    now: Optional[str] = None

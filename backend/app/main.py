from __future__ import annotations

import io
import logging
from dataclasses import asdict

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse

from dispatch_engine.assets import AssetStore
from dispatch_engine.environment import FixedFactorProvider, RandomFactorProvider
from dispatch_engine.errors import AssetNotFoundError, InvalidRecordError
from dispatch_engine.models import Asset, AssetStatus, Incident, Responder, SquadMember, parse_datetime
from dispatch_engine.samples import sample_assets
from dispatch_engine.system import DispatchReadinessEngine, load_records
from dispatch_engine.trust import component_from_dict

from .config import (
    DEFAULT_TRUST_SCORE,
    ENV_FACTOR_MODE,
    ENV_FACTOR_SEED,
    FIXED_TRAFFIC,
    FIXED_WEATHER,
    LOG_LEVEL,
    SEED_SAMPLE_ASSETS,
)
from .reports import build_ops_pdf, readiness_frame
from .schemas import (
    AssignRequest,
    FuelUpdate,
    IncidentsRequest,
    PlaybookRequest,
    RawRecord,
    RoutePlanRequest,
    SnapshotRequest,
    TrustProfileRequest,
)

logging.basicConfig(level=LOG_LEVEL)
log = logging.getLogger("uvicorn.error")

app = FastAPI(title="Dispatch & Readiness Engine")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def build_engine() -> DispatchReadinessEngine:
    if ENV_FACTOR_MODE == "fixed":
        factors = FixedFactorProvider(FIXED_WEATHER, FIXED_TRAFFIC)
    else:
        factors = RandomFactorProvider(seed=ENV_FACTOR_SEED)
    store = AssetStore(sample_assets() if SEED_SAMPLE_ASSETS else [])
    log.info("Engine ready: factors=%s, assets=%d", ENV_FACTOR_MODE, len(store.list()))
    return DispatchReadinessEngine(store=store, factors=factors, default_trust=DEFAULT_TRUST_SCORE)


engine = build_engine()


def _one_incident(row: RawRecord) -> Incident:
    try:
        return Incident.from_dict(row)
    except InvalidRecordError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid incident: {exc}") from exc


def _one_responder(row: RawRecord) -> Responder:
    try:
        return Responder.from_dict(row, default_trust=DEFAULT_TRUST_SCORE)
    except InvalidRecordError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid responder: {exc}") from exc


def _asset_or_404(fn, *args):
    try:
        return fn(*args)
    except AssetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@app.post("/dispatch/suggestions")
def dispatch_suggestions(body: SnapshotRequest):
    incidents = engine.load_incidents(body.incidents)
    responders = engine.load_responders(body.responders)
    return [asdict(s) for s in engine.build_dispatch_suggestions(incidents, responders)]


@app.post("/routes/plan")
def route_plan(body: RoutePlanRequest):
    plan = engine.build_route_plan(_one_responder(body.responder), _one_incident(body.incident))
    return asdict(plan)


@app.post("/playbooks")
def playbook(body: PlaybookRequest):
    squad = [SquadMember(m.name, m.skills) for m in body.squad]
    plan = engine.generate_playbook(
        _one_incident(body.incident), engine.load_responders(body.responders), squad=squad
    )
    return asdict(plan)


@app.post("/logistics/shortages")
def shortages(body: SnapshotRequest):
    incidents = engine.load_incidents(body.incidents)
    responders = engine.load_responders(body.responders)
    return [asdict(f) for f in engine.forecast_shortages(incidents, responders)]


@app.post("/logistics/resupply")
def resupply(body: IncidentsRequest):
    return [asdict(r) for r in engine.preallocate_resupply_routes(engine.load_incidents(body.incidents))]


@app.get("/assets")
def list_assets():
    return [asdict(a) for a in engine.store.list()]


@app.post("/assets")
def add_asset(row: RawRecord):
    try:
        asset = Asset.from_dict(row)
    except InvalidRecordError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid asset: {exc}") from exc
    return asdict(engine.store.add(asset))


@app.post("/assets/{asset_id}/assign")
def assign_asset(asset_id: str, body: AssignRequest):
    if not _asset_or_404(engine.store.assign_to_incident, asset_id, body.incident_id):
        current = engine.store.get(asset_id)
        raise HTTPException(
            status_code=409, detail=f"Asset {asset_id} is {current.status.value}, not Available"
        )
    log.info("Asset %s assigned to %s", asset_id, body.incident_id)
    return asdict(engine.store.get(asset_id))


@app.post("/assets/{asset_id}/unassign")
def unassign_asset(asset_id: str):
    return asdict(_asset_or_404(engine.store.unassign, asset_id))


@app.post("/assets/{asset_id}/fuel")
def update_fuel(asset_id: str, body: FuelUpdate):
    return asdict(_asset_or_404(engine.store.update_fuel, asset_id, body.fuel_pct))


@app.post("/assets/{asset_id}/maintenance")
def send_to_maintenance(asset_id: str):
    return asdict(_asset_or_404(engine.store.update_status, asset_id, AssetStatus.MAINTENANCE))


@app.post("/readiness")
def readiness(body: SnapshotRequest):
    incidents = engine.load_incidents(body.incidents)
    responders = engine.load_responders(body.responders)
    return [asdict(r) for r in engine.readiness_by_region(incidents, responders)]


@app.post("/readiness/export/csv")
def export_readiness_csv(body: SnapshotRequest):
    incidents = engine.load_incidents(body.incidents)
    responders = engine.load_responders(body.responders)
    df = readiness_frame(engine.readiness_by_region(incidents, responders))
    return StreamingResponse(
        io.StringIO(df.to_csv(index=False)),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=regional_readiness.csv"},
    )


@app.post("/readiness/export/pdf")
def export_readiness_pdf(body: SnapshotRequest):
    incidents = engine.load_incidents(body.incidents)
    responders = engine.load_responders(body.responders)
    content = build_ops_pdf(
        engine.readiness_by_region(incidents, responders),
        engine.forecast_shortages(incidents, responders),
        engine.detect_anomalies(incidents, responders),
    )
    return StreamingResponse(
        io.BytesIO(content),
        media_type="application/pdf",
        headers={"Content-Disposition": "attachment; filename=regional_readiness.pdf"},
    )


@app.post("/anomalies")
def anomalies(body: SnapshotRequest):
    incidents = engine.load_incidents(body.incidents)
    responders = engine.load_responders(body.responders)
    return [asdict(a) for a in engine.detect_anomalies(incidents, responders)]


@app.post("/trust/profile")
def trust_profile(body: TrustProfileRequest):
    responder = _one_responder(body.responder)
    components = load_records(body.components, component_from_dict, "trust component")
    try:
        now = parse_datetime(body.now) if body.now else None
    except InvalidRecordError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return asdict(engine.build_trust_profile(responder, components, now=now))


@app.get("/health")
def health():
    return {"status": "ok"}


def run(host: str = "0.0.0.0", port: int = 8000) -> None:
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()

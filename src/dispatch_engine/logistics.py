from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Tuple

from dispatch_engine.assets import AssetStore
from dispatch_engine.estimator import haversine_km, round_half_up
from dispatch_engine.models import (
    Asset,
    AssetType,
    Incident,
    Responder,
    ResupplySuggestion,
    ShortageForecast,
)
from dispatch_engine.playbook import PlaybookGenerator

logger = logging.getLogger(__name__)

PLAYBOOKS_PER_REGION = 5
FUEL_SHORTAGE_AVG_PCT = 35.0
RESUPPLY_FUEL_PCT = 30.0
RESUPPLY_NOTE = "Route fuel resupply pre-allocation"


def group_by_region(
    incidents: Iterable[Incident], assets: Iterable[Asset] = ()
) -> "OrderedDict[str, Tuple[List[Incident], List[Asset]]]":
    regions: "OrderedDict[str, Tuple[List[Incident], List[Asset]]]" = OrderedDict()
    for incident in incidents:
        regions.setdefault(incident.location_name, ([], []))[0].append(incident)
    for asset in assets:
        regions.setdefault(asset.location_name, ([], []))[1].append(asset)
    return regions


class ResourceLogisticsForecaster:
    """Compares playbook resource needs with the asset registry, region by region."""

    def __init__(self, store: AssetStore, playbooks: Optional[PlaybookGenerator] = None) -> None:
        self.store = store
        self.playbooks = playbooks or PlaybookGenerator()

    def required_resources(self, incidents: Iterable[Incident], responders: List[Responder]) -> List[str]:
        required: Dict[str, None] = {}
        for incident in list(incidents)[:PLAYBOOKS_PER_REGION]:
            plan = self.playbooks.generate(incident, responders)
            for step in plan.steps:
                for resource in step.resources_needed:
                    required[resource] = None
        return list(required)

    def forecast_shortages(
        self, incidents: Iterable[Incident], responders: Iterable[Responder]
    ) -> List[ShortageForecast]:
        pool = list(responders)
        results = []

        for region, (region_incidents, region_assets) in group_by_region(incidents, self.store.list()).items():
            required = [r.lower() for r in self.required_resources(region_incidents, pool)]
            shortages = []

            vehicles = sum(1 for a in region_assets if a.asset_type is AssetType.VEHICLE)
            if len(region_incidents) > vehicles:
                shortages.append("Vehicles")

            if any("fuel" in r for r in required):
                fuelled = [a.fuel_pct for a in region_assets if a.fuel_pct is not None]
                avg_fuel = sum(fuelled) / len(fuelled) if fuelled else 0.0
                if avg_fuel < FUEL_SHORTAGE_AVG_PCT:
                    shortages.append("Fuel")

            if any("med" in r for r in required):
                kits = sum(
                    1
                    for a in region_assets
                    if a.asset_type is AssetType.MEDICAL_KIT and (a.stock_count or 0) > 0
                )
                if kits < len(region_incidents):
                    shortages.append("Medical Kits")

            if shortages:
                logger.debug("Region %s short on: %s", region, ", ".join(shortages))
            results.append(ShortageForecast(region=region, shortages=shortages))

        return results

    def preallocate_resupply_routes(self, incidents: Iterable[Incident]) -> List[ResupplySuggestion]:
        targets = [i for i in incidents if i.location is not None]
        suggestions = []

        for asset in self.store.list():
            if asset.fuel_pct is None or asset.fuel_pct >= RESUPPLY_FUEL_PCT:
                continue
            if asset.location is None:
                logger.debug("Low-fuel asset %s has no coordinates; skipping", asset.asset_id)
                continue

            nearest = None
            nearest_km = 0.0
            for incident in targets:
                distance = haversine_km(asset.location, incident.location)
                if nearest is None or distance < nearest_km:
                    nearest, nearest_km = incident, distance

            if nearest is not None:
                suggestions.append(
                    ResupplySuggestion(
                        asset_id=asset.asset_id,
                        origin=asset.location_name,
                        to_incident_id=nearest.incident_id,
                        distance_km=round_half_up(nearest_km, 1),
                        note=RESUPPLY_NOTE,
                    )
                )

        return suggestions

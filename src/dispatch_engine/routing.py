from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from dispatch_engine.environment import EnvironmentalFactorProvider, RandomFactorProvider
from dispatch_engine.estimator import haversine_km, round_half_up, travel_minutes
from dispatch_engine.models import (
    Coordinates,
    DispatchPriority,
    DispatchSuggestion,
    Incident,
    IncidentStatus,
    Responder,
    ResponderStatus,
    RoutePlan,
    Severity,
)

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 6

SEVERITY_PRIORITY = {
    Severity.CRITICAL: DispatchPriority.CRITICAL,
    Severity.HIGH: DispatchPriority.HIGH,
    Severity.MEDIUM: DispatchPriority.MEDIUM,
    Severity.LOW: DispatchPriority.MEDIUM,
}

_ORIGIN_FALLBACK = Coordinates(0.0, 0.0)


class RoutePlanBuilder:
    """Builds a narrative route brief for one responder heading to one incident."""

    def __init__(self, factors: Optional[EnvironmentalFactorProvider] = None) -> None:
        self.factors = factors or RandomFactorProvider()

    def build(self, responder: Responder, incident: Incident) -> RoutePlan:
        weather = self.factors.weather()
        traffic = self.factors.traffic()

        origin = responder.location or _ORIGIN_FALLBACK
        target = incident.location or _ORIGIN_FALLBACK
        distance_km = round_half_up(haversine_km(origin, target), 2)
        eta_minutes = travel_minutes(distance_km, weather.multiplier, traffic.multiplier)

        mid_lat = (origin.latitude + target.latitude) / 2
        mid_lng = (origin.longitude + target.longitude) / 2
        origin_name = responder.location_name or "Field"

        steps = [
            f"Depart current position ({origin_name}) and head toward staging corridor ({distance_km} km total).",
            f"Maintain {weather.label.lower()} protocol; {weather.advisory}",
            f"{traffic.label} traffic expected near corridor midpoint ({mid_lat:.3f}, {mid_lng:.3f}).",
            f"Final approach: switch to local access routes for {incident.location_name}.",
        ]

        return RoutePlan(
            origin=origin_name,
            destination=incident.location_name,
            distance_km=distance_km,
            eta_minutes=eta_minutes,
            steps=steps,
            risk_factors=[weather.label, traffic.label],
            advisory=weather.advisory,
        )


class DispatchMatcher:
    """Pairs each open incident with its nearest eligible responder."""

    def __init__(self, route_builder: Optional[RoutePlanBuilder] = None, limit: int = MAX_SUGGESTIONS) -> None:
        self.route_builder = route_builder or RoutePlanBuilder()
        self.limit = limit

    @staticmethod
    def eligible(responders: Iterable[Responder]) -> List[Responder]:
        return [
            r for r in responders if r.location is not None and r.status is not ResponderStatus.OFF_DUTY
        ]

    @staticmethod
    def nearest(incident: Incident, candidates: Iterable[Responder]) -> Optional[Responder]:
        best = None
        best_distance = 0.0
        for responder in candidates:
            distance = haversine_km(responder.location, incident.location)
            # strict comparison keeps the first-seen responder on ties
            if best is None or distance < best_distance:
                best, best_distance = responder, distance
        return best

    def suggest(self, incidents: Iterable[Incident], responders: Iterable[Responder]) -> List[DispatchSuggestion]:
        candidates = self.eligible(responders)
        suggestions = []

        for incident in incidents:
            if incident.status is IncidentStatus.CLOSED:
                continue
            if incident.location is None:
                logger.debug("Incident %s has no coordinates; skipping dispatch", incident.incident_id)
                continue

            responder = self.nearest(incident, candidates)
            if responder is None:
                logger.debug("No eligible responder for incident %s", incident.incident_id)
                continue

            route = self.route_builder.build(responder, incident)
            suggestions.append(
                DispatchSuggestion(
                    incident_id=incident.incident_id,
                    incident_title=incident.title,
                    target_location_name=incident.location_name,
                    responder_id=responder.responder_id,
                    responder_name=responder.name,
                    responder_status=responder.status,
                    distance_km=route.distance_km,
                    eta_minutes=route.eta_minutes,
                    priority=SEVERITY_PRIORITY[incident.severity],
                    route_plan=route,
                )
            )

        suggestions.sort(key=lambda item: (item.priority.rank, item.eta_minutes))
        return suggestions[: self.limit]

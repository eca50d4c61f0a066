from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, List, Mapping, Optional, TypeVar

from dispatch_engine.assets import AssetStore
from dispatch_engine.environment import EnvironmentalFactorProvider
from dispatch_engine.errors import InvalidRecordError
from dispatch_engine.logistics import ResourceLogisticsForecaster
from dispatch_engine.models import (
    AnomalyRecord,
    Asset,
    DispatchSuggestion,
    Incident,
    PlaybookPlan,
    ReadinessRecord,
    Responder,
    ResupplySuggestion,
    RoutePlan,
    ShortageForecast,
    SquadMember,
    TrustComponent,
    TrustProfile,
)
from dispatch_engine.playbook import PlaybookGenerator
from dispatch_engine.readiness import ReadinessScorer
from dispatch_engine.routing import DispatchMatcher, RoutePlanBuilder
from dispatch_engine.trust import TrustProfileCalculator

logger = logging.getLogger(__name__)

T = TypeVar("T")


def load_records(rows: Iterable[Any], parse: Callable[[Mapping[str, Any]], T], kind: str) -> List[T]:
    """Parse each row, dropping (and logging) malformed ones instead of failing the batch."""
    records = []
    for index, row in enumerate(rows):
        try:
            records.append(parse(row))
        except InvalidRecordError as exc:
            logger.warning("Skipping %s record #%d: %s", kind, index, exc)
    return records


class DispatchReadinessEngine:
    def __init__(
        self,
        store: Optional[AssetStore] = None,
        factors: Optional[EnvironmentalFactorProvider] = None,
        playbooks: Optional[PlaybookGenerator] = None,
        default_trust: float = 80.0,
    ) -> None:
        self.store = store or AssetStore()
        self.playbooks = playbooks or PlaybookGenerator()
        self.route_builder = RoutePlanBuilder(factors)
        self.matcher = DispatchMatcher(self.route_builder)
        self.logistics = ResourceLogisticsForecaster(self.store, self.playbooks)
        self.readiness = ReadinessScorer(self.playbooks)
        self.trust = TrustProfileCalculator()
        self.default_trust = default_trust

    def load_incidents(self, rows: Iterable[Mapping[str, Any]]) -> List[Incident]:
        return load_records(rows, Incident.from_dict, "incident")

    def load_responders(self, rows: Iterable[Mapping[str, Any]]) -> List[Responder]:
        return load_records(
            rows, lambda row: Responder.from_dict(row, default_trust=self.default_trust), "responder"
        )

    def load_assets(self, rows: Iterable[Mapping[str, Any]]) -> List[Asset]:
        return load_records(rows, Asset.from_dict, "asset")

    def build_dispatch_suggestions(
        self, incidents: Iterable[Incident], responders: Iterable[Responder]
    ) -> List[DispatchSuggestion]:
        return self.matcher.suggest(incidents, responders)

    def build_route_plan(self, responder: Responder, incident: Incident) -> RoutePlan:
        return self.route_builder.build(responder, incident)

    def generate_playbook(
        self,
        incident: Incident,
        responders: Iterable[Responder] = (),
        squad: Optional[Iterable[SquadMember]] = None,
        now: Optional[datetime] = None,
    ) -> PlaybookPlan:
        return self.playbooks.generate(incident, responders, squad=squad, now=now)

    def forecast_shortages(
        self, incidents: Iterable[Incident], responders: Iterable[Responder]
    ) -> List[ShortageForecast]:
        return self.logistics.forecast_shortages(incidents, responders)

    def preallocate_resupply_routes(self, incidents: Iterable[Incident]) -> List[ResupplySuggestion]:
        return self.logistics.preallocate_resupply_routes(incidents)

    def readiness_by_region(
        self, incidents: Iterable[Incident], responders: Iterable[Responder]
    ) -> List[ReadinessRecord]:
        return self.readiness.readiness_by_region(incidents, responders)

    def detect_anomalies(
        self, incidents: Iterable[Incident], responders: Iterable[Responder]
    ) -> List[AnomalyRecord]:
        return self.readiness.detect_anomalies(incidents, responders)

    def build_trust_profile(
        self,
        responder: Responder,
        components: Iterable[TrustComponent],
        now: Optional[datetime] = None,
    ) -> TrustProfile:
        return self.trust.build_profile(responder, components, now=now)

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from dispatch_engine.errors import AssetNotFoundError, InvalidRecordError
from dispatch_engine.models import Asset, AssetStatus, utc_now

logger = logging.getLogger(__name__)

LOW_FUEL_PCT = 25.0


def _status_for_fuel(asset: Asset) -> AssetStatus:
    if asset.status in (AssetStatus.ASSIGNED, AssetStatus.MAINTENANCE):
        return asset.status
    if asset.fuel_pct is not None and asset.fuel_pct < LOW_FUEL_PCT:
        return AssetStatus.LOW_FUEL
    if asset.status is AssetStatus.LOW_FUEL and asset.fuel_pct is not None:
        return AssetStatus.AVAILABLE
    return asset.status


class AssetStore:
    """In-memory asset registry.

    Records are immutable snapshots; every mutation swaps in a new record
    under a single lock so status and incident reference change together.
    """

    def __init__(self, assets: Iterable[Asset] = ()) -> None:
        self._lock = threading.Lock()
        self._assets: Dict[str, Asset] = {}
        for asset in assets:
            self.add(asset)

    def add(self, asset: Asset) -> Asset:
        normalized = replace(asset, status=_status_for_fuel(asset))
        with self._lock:
            self._assets[asset.asset_id] = normalized
        return normalized

    def get(self, asset_id: str) -> Optional[Asset]:
        with self._lock:
            return self._assets.get(asset_id)

    def list(self) -> List[Asset]:
        with self._lock:
            return list(self._assets.values())

    def incident_assets(self, incident_id: str) -> List[Asset]:
        return [a for a in self.list() if a.assigned_incident_id == incident_id]

    def _require(self, asset_id: str) -> Asset:
        asset = self._assets.get(asset_id)
        if asset is None:
            raise AssetNotFoundError(asset_id)
        return asset

    def update_fuel(self, asset_id: str, fuel_pct: float) -> Asset:
        with self._lock:
            asset = self._require(asset_id)
            fuel = max(0.0, min(100.0, float(fuel_pct)))
            updated = replace(asset, fuel_pct=fuel, last_updated=utc_now())
            updated = replace(updated, status=_status_for_fuel(updated))
            self._assets[asset_id] = updated
            return updated

    def update_status(self, asset_id: str, status: AssetStatus) -> Asset:
        if status is AssetStatus.ASSIGNED:
            raise InvalidRecordError("Use assign_to_incident to assign an asset")
        with self._lock:
            asset = self._require(asset_id)
            updated = replace(asset, status=status, assigned_incident_id=None, last_updated=utc_now())
            if updated.status is AssetStatus.AVAILABLE:
                updated = replace(updated, status=_status_for_fuel(updated))
            self._assets[asset_id] = updated
            return updated

    def assign_to_incident(self, asset_id: str, incident_id: str) -> bool:
        """Assign only if the asset is currently Available; returns whether it was."""
        with self._lock:
            asset = self._require(asset_id)
            if asset.status is not AssetStatus.AVAILABLE:
                logger.warning(
                    "Asset %s not assignable to %s (status %s)", asset_id, incident_id, asset.status.value
                )
                return False
            self._assets[asset_id] = replace(
                asset,
                status=AssetStatus.ASSIGNED,
                assigned_incident_id=incident_id,
                last_updated=utc_now(),
            )
            return True

    def unassign(self, asset_id: str) -> Asset:
        with self._lock:
            asset = self._require(asset_id)
            updated = replace(
                asset, status=AssetStatus.AVAILABLE, assigned_incident_id=None, last_updated=utc_now()
            )
            updated = replace(updated, status=_status_for_fuel(updated))
            self._assets[asset_id] = updated
            return updated

from __future__ import annotations

import math

from dispatch_engine.models import Coordinates

EARTH_RADIUS_KM = 6371.0
BASELINE_SPEED_KMH = 60.0
MIN_ETA_MINUTES = 3


def round_half_up(value: float, ndigits: int = 0):
    """Round with .5 going up, unlike the banker's rounding of ``round()``.

    Returns an ``int`` for whole numbers, a ``float`` otherwise.
    """
    if ndigits == 0:
        return math.floor(value + 0.5)
    scale = 10 ** ndigits
    return math.floor(value * scale + 0.5) / scale


def haversine_km(origin: Coordinates, target: Coordinates) -> float:
    lat1, lon1 = math.radians(origin.latitude), math.radians(origin.longitude)
    lat2, lon2 = math.radians(target.latitude), math.radians(target.longitude)
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def travel_minutes(distance_km: float, *multipliers: float) -> int:
    """Travel time at the baseline speed, scaled by each condition multiplier.

    Rounded to whole minutes and never below ``MIN_ETA_MINUTES``.
    """
    minutes = (distance_km / BASELINE_SPEED_KMH) * 60
    for multiplier in multipliers:
        minutes *= multiplier
    return max(MIN_ETA_MINUTES, round_half_up(minutes))

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Protocol


@dataclass(frozen=True)
class WeatherFactor:
    label: str
    multiplier: float
    advisory: str


@dataclass(frozen=True)
class TrafficFactor:
    label: str
    multiplier: float


WEATHER_FACTORS: List[WeatherFactor] = [
    WeatherFactor("Clear", 1.0, "Routes nominal."),
    WeatherFactor("Heavy Rain", 1.25, "Avoid low-lying underpasses; expect reduced visibility."),
    WeatherFactor("High Winds", 1.2, "Watch for debris and power lines."),
    WeatherFactor(
        "Flooded Roads", 1.35, "Reroute around known flood zones; do not cross standing water."
    ),
    WeatherFactor("Snow/Ice", 1.4, "Use chains where applicable; extend braking distance."),
]

TRAFFIC_FACTORS: List[TrafficFactor] = [
    TrafficFactor("Free Flow", 1.0),
    TrafficFactor("Moderate", 1.15),
    TrafficFactor("Heavy", 1.3),
    TrafficFactor("Incident Nearby", 1.2),
    TrafficFactor("Checkpoint", 1.1),
]


class EnvironmentalFactorProvider(Protocol):
    def weather(self) -> WeatherFactor: ...

    def traffic(self) -> TrafficFactor: ...


class RandomFactorProvider:
    """Uniform sampling over the factor tables; pass a seed for repeatable runs."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def weather(self) -> WeatherFactor:
        return self._rng.choice(WEATHER_FACTORS)

    def traffic(self) -> TrafficFactor:
        return self._rng.choice(TRAFFIC_FACTORS)


class FixedFactorProvider:
    def __init__(self, weather: str = "Clear", traffic: str = "Free Flow") -> None:
        self._weather = _lookup(WEATHER_FACTORS, weather)
        self._traffic = _lookup(TRAFFIC_FACTORS, traffic)

    def weather(self) -> WeatherFactor:
        return self._weather

    def traffic(self) -> TrafficFactor:
        return self._traffic


def _lookup(factors, label: str):
    for factor in factors:
        if factor.label.lower() == label.lower():
            return factor
    known = ", ".join(f.label for f in factors)
    raise ValueError(f"Unknown factor '{label}' (expected one of: {known})")

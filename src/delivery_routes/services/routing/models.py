"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Sequence, Union

from ...models.domain import Coordinate, Stop

MatrixSource = Literal["external", "haversine"]


@dataclass(slots=True, frozen=True)
class LookupOk:
    distance: float
    duration: float


@dataclass(slots=True, frozen=True)
class LookupFailed:
    reason: str


DistanceLookup = Union[LookupOk, LookupFailed]


@dataclass(slots=True, frozen=True)
class DistanceMatrix:
    """Pairwise distances (meters) and optional durations (seconds) indexed by stop position."""

    distances: tuple[tuple[float, ...], ...]
    durations: Optional[tuple[tuple[float, ...], ...]] = None
    source: MatrixSource = "haversine"

    def __len__(self) -> int:
        return len(self.distances)

    def distance(self, origin: int, destination: int) -> float:
        return self.distances[origin][destination]

    def route_distance(self, route: Sequence[int]) -> float:
        rows = self.distances
        return sum(rows[route[k]][route[k + 1]] for k in range(len(route) - 1))

    def route_duration(self, route: Sequence[int]) -> Optional[float]:
        if self.durations is None:
            return None
        rows = self.durations
        return sum(rows[route[k]][route[k + 1]] for k in range(len(route) - 1))


@dataclass(slots=True)
class RouteImprovement:
    distance_saved: float
    percentage_improved: float


@dataclass(slots=True)
class OptimizedRoute:
    stops: List[Stop]
    total_distance: float
    total_duration: float
    improvement: RouteImprovement
    matrix_source: Optional[MatrixSource] = None


@dataclass(slots=True)
class RouteSnapshot:
    stops: List[Stop]
    distance: float


@dataclass(slots=True)
class ComparisonImprovement:
    distance: float
    percentage: float


@dataclass(slots=True)
class RouteComparison:
    original: RouteSnapshot
    optimized: RouteSnapshot
    improvement: ComparisonImprovement


@dataclass(slots=True)
class DirectionsStep:
    instruction: str
    distance: float
    distance_text: str
    duration: float
    duration_text: str
    start_location: Coordinate
    end_location: Coordinate


@dataclass(slots=True)
class DirectionsRoute:
    distance: float
    distance_text: str
    duration: float
    duration_text: str
    polyline: str
    start_address: str
    end_address: str
    steps: List[DirectionsStep] = field(default_factory=list)

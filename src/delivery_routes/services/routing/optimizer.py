"""Single-vehicle route optimization: nearest neighbor construction plus 2-opt."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Sequence

from ...models.domain import Coordinate, Stop, depot_stop
from .distance_client import MapsClient
from .exceptions import EmptyInputError
from .heuristics import nearest_neighbor, route_distance, two_opt
from .matrix import DistanceMatrixConfig, DistanceMatrixProvider
from .models import (
    ComparisonImprovement,
    DirectionsRoute,
    OptimizedRoute,
    RouteComparison,
    RouteImprovement,
    RouteSnapshot,
)

logger = logging.getLogger(__name__)


def _percentage(saved: float, baseline: float) -> float:
    return saved / baseline * 100.0 if baseline > 0 else 0.0


def optimize_route(
    stops: Sequence[Stop],
    depot: Coordinate | None = None,
    use_external_service: bool = False,
    *,
    provider: DistanceMatrixProvider | None = None,
    config: DistanceMatrixConfig | None = None,
) -> OptimizedRoute:
    """Order ``stops`` to approximately minimize travel distance.

    With a depot, the route starts there and the depot is left out of the
    returned stops. Sequence numbers are assigned on copies, 1-based.
    Pass either ``provider`` or ``config``, not both; a provider carries its own config.
    """
    if provider is not None and config is not None:
        raise ValueError("Pass either a matrix provider or a matrix config, not both.")
    if not stops:
        raise EmptyInputError("No stops provided for route optimization.")

    if len(stops) == 1:
        return OptimizedRoute(
            stops=[replace(stops[0], sequence=1)],
            total_distance=0.0,
            total_duration=0.0,
            improvement=RouteImprovement(distance_saved=0.0, percentage_improved=0.0),
        )

    provider = provider or DistanceMatrixProvider(config)
    config = provider.config

    # Depot, when given, always occupies index 0 of the working list.
    leading = [depot_stop(depot)] if depot is not None else []
    offset = len(leading)
    working = [*leading, *stops]

    matrix = provider.build_matrix(working, use_external_service)

    naive_distance = route_distance(range(len(working)), matrix)
    initial = nearest_neighbor(matrix, 0)
    route = two_opt(initial, matrix)
    final_distance = route_distance(route, matrix)

    distance_saved = naive_distance - final_distance
    road_duration = matrix.route_duration(route)
    if road_duration is not None:
        total_duration = road_duration
    else:
        total_duration = final_distance / (config.average_speed_kmh / 3.6)

    stop_indices = route[offset:]
    ordered = [
        replace(stops[index - offset], sequence=position)
        for position, index in enumerate(stop_indices, start=1)
    ]

    logger.info(
        f"Optimized {len(stops)} stops ({matrix.source} distances, depot={'yes' if depot is not None else 'no'}): "
        f"{naive_distance:.0f} m -> {final_distance:.0f} m"
    )

    return OptimizedRoute(
        stops=ordered,
        total_distance=final_distance,
        total_duration=total_duration,
        improvement=RouteImprovement(
            distance_saved=distance_saved,
            percentage_improved=_percentage(distance_saved, naive_distance),
        ),
        matrix_source=matrix.source,
    )


def compare_routes(original_stops: Sequence[Stop], optimized: OptimizedRoute) -> RouteComparison:
    """Report before/after figures using only what the optimized result already carries."""
    original_distance = optimized.total_distance + optimized.improvement.distance_saved
    return RouteComparison(
        original=RouteSnapshot(stops=list(original_stops), distance=original_distance),
        optimized=RouteSnapshot(stops=list(optimized.stops), distance=optimized.total_distance),
        improvement=ComparisonImprovement(
            distance=optimized.improvement.distance_saved,
            percentage=optimized.improvement.percentage_improved,
        ),
    )


def get_route_with_directions(
    optimized_stops: Sequence[Stop],
    depot: Coordinate | None = None,
    client: MapsClient | None = None,
) -> DirectionsRoute:
    """Fetch turn-by-turn directions for stops already in visiting order."""
    if not optimized_stops:
        raise EmptyInputError("No stops provided for directions.")

    client = client or MapsClient()
    coordinates = [stop.coordinates for stop in optimized_stops]
    if depot is not None:
        origin, waypoints = depot, coordinates[:-1]
    else:
        origin, waypoints = coordinates[0], coordinates[1:-1]

    return client.directions(
        origin,
        coordinates[-1],
        waypoints,
        optimize_waypoints=False,
    )

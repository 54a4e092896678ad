"""Distance matrix construction with road distances and a haversine fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ...config import settings
from ...models.domain import Coordinate, Stop
from ..geospatial import haversine_distance
from .distance_client import MapsClient
from .exceptions import ExternalServiceError
from .models import DistanceMatrix, LookupFailed

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DistanceMatrixConfig:
    api_key: str | None = settings.maps_api_key
    base_url: str = settings.maps_api_base_url
    travel_mode: str = settings.travel_mode
    timeout_seconds: float = settings.distance_service_timeout_seconds
    max_retries: int = settings.distance_service_max_retries
    backoff_seconds: float = settings.distance_service_backoff_seconds
    max_destinations_per_request: int = settings.max_destinations_per_request
    average_speed_kmh: float = settings.average_speed_kmh


def _freeze(rows: list[list[float]]) -> tuple[tuple[float, ...], ...]:
    return tuple(tuple(row) for row in rows)


def haversine_matrix(coordinates: Sequence[Coordinate]) -> DistanceMatrix:
    """Symmetric great-circle distance matrix with a zero diagonal."""
    n = len(coordinates)
    distances = [[0.0] * n for _ in range(n)]
    for i in range(n):
        for j in range(i + 1, n):
            value = haversine_distance(coordinates[i], coordinates[j])
            distances[i][j] = value
            distances[j][i] = value
    return DistanceMatrix(distances=_freeze(distances), durations=None, source="haversine")


class DistanceMatrixProvider:
    """Builds distance matrices, preferring the road distance service when asked to.

    A matrix never mixes sources: any failure while collecting road distances
    discards what was fetched and the whole matrix is computed with haversine.
    """

    def __init__(self, config: DistanceMatrixConfig | None = None, client: MapsClient | None = None) -> None:
        self.config = config or DistanceMatrixConfig()
        self._client = client

    def _get_client(self) -> MapsClient:
        if self._client is not None:
            return self._client
        return MapsClient(
            api_key=self.config.api_key,
            base_url=self.config.base_url,
            travel_mode=self.config.travel_mode,
            timeout=self.config.timeout_seconds,
            max_retries=self.config.max_retries,
            backoff_seconds=self.config.backoff_seconds,
            max_destinations_per_request=self.config.max_destinations_per_request,
        )

    def _external_matrix(self, coordinates: Sequence[Coordinate]) -> DistanceMatrix:
        client = self._get_client()
        n = len(coordinates)
        distances = [[0.0] * n for _ in range(n)]
        durations = [[0.0] * n for _ in range(n)]

        for i, origin in enumerate(coordinates):
            lookups = client.distance_row(origin, coordinates)
            if len(lookups) != n:
                raise ExternalServiceError(f"Expected {n} distances for stop {i}, got {len(lookups)}.")
            for j, lookup in enumerate(lookups):
                if isinstance(lookup, LookupFailed):
                    raise ExternalServiceError(f"No road distance from stop {i} to stop {j}: {lookup.reason}")
                if i != j:
                    distances[i][j] = lookup.distance
                    durations[i][j] = lookup.duration

        return DistanceMatrix(distances=_freeze(distances), durations=_freeze(durations), source="external")

    def build_matrix(self, stops: Sequence[Stop], use_external_service: bool = False) -> DistanceMatrix:
        coordinates = [stop.coordinates for stop in stops]

        if use_external_service and len(coordinates) > 1:
            if self._client is None and not self.config.api_key:
                logger.warning("Road distances requested but no maps API key is configured. Using haversine fallback.")
            else:
                try:
                    matrix = self._external_matrix(coordinates)
                    logger.info(f"Built road distance matrix for {len(coordinates)} stops")
                    return matrix
                except ExternalServiceError as e:
                    logger.warning(f"Road distance lookup failed: {e}. Using haversine fallback.")
                except Exception as e:
                    logger.error(f"Unexpected error getting road distances: {e}. Using haversine fallback.")

        logger.debug(f"Computing haversine distance matrix for {len(coordinates)} stops")
        return haversine_matrix(coordinates)


def build_matrix(
    stops: Sequence[Stop],
    use_external_service: bool = False,
    config: DistanceMatrixConfig | None = None,
) -> DistanceMatrix:
    return DistanceMatrixProvider(config).build_matrix(stops, use_external_service)

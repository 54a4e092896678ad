"""HTTP client for the road distance and directions web services."""

from __future__ import annotations

import logging
import re
import time
from typing import Sequence

import httpx

from ...config import settings
from ...models.domain import Coordinate
from ..outputs.formatter import format_distance, format_duration, split_into_batches
from .exceptions import ExternalServiceError
from .models import DirectionsRoute, DirectionsStep, DistanceLookup, LookupFailed, LookupOk

# Seconds allowed to establish a connection, independent of the read timeout.
CONNECT_TIMEOUT_SECONDS = 10.0

# Intermediate waypoints accepted by one directions request.
MAX_DIRECTIONS_WAYPOINTS = 25

_HTML_TAG = re.compile(r"<[^>]*>")

logger = logging.getLogger(__name__)


class MapsClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        travel_mode: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        max_destinations_per_request: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.maps_api_key
        if not self.api_key:
            raise ExternalServiceError("Maps API key is not configured.")
        self.base_url = (base_url or settings.maps_api_base_url).rstrip("/")
        self.travel_mode = travel_mode or settings.travel_mode
        self.timeout = timeout if timeout is not None else settings.distance_service_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.distance_service_max_retries
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.distance_service_backoff_seconds
        )
        self.max_destinations_per_request = (
            max_destinations_per_request
            if max_destinations_per_request is not None
            else settings.max_destinations_per_request
        )
        self.transport = transport

    def _get_client(self) -> httpx.Client:
        """Create a short-lived HTTP client; one per request keeps calls independent across threads."""
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=CONNECT_TIMEOUT_SECONDS),
            transport=self.transport,
        )

    def _get_json(self, endpoint: str, params: dict) -> dict:
        """Issue a GET against ``{base_url}/{endpoint}/json`` with retries, returning the decoded body."""
        url = f"{self.base_url}/{endpoint}/json"
        query = {**params, "key": self.api_key}

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=query)
                    response.raise_for_status()
                    data = response.json()
                    if not isinstance(data, dict):
                        raise ValueError(f"Unexpected {endpoint} payload type: {type(data).__name__}")
                    break
                except httpx.HTTPStatusError as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ExternalServiceError(
                            f"{endpoint} request failed with HTTP {e.response.status_code}"
                        ) from e
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"{endpoint} request timed out after {self.max_retries} retries: {e}")
                        raise ExternalServiceError(f"{endpoint} request timed out") from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"{endpoint} timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except (httpx.HTTPError, ValueError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ExternalServiceError(f"{endpoint} request failed: {e}") from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"{endpoint} error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                    time.sleep(wait_time)
        finally:
            client.close()

        status = data.get("status")
        if status != "OK":
            detail = data.get("error_message", "")
            raise ExternalServiceError(f"{endpoint} returned status {status} {detail}".rstrip())
        return data

    def _distance_batch(self, origin: Coordinate, destinations: Sequence[Coordinate]) -> list[DistanceLookup]:
        params = {
            "origins": origin.as_query(),
            "destinations": "|".join(coord.as_query() for coord in destinations),
            "mode": self.travel_mode,
            "units": "metric",
        }
        data = self._get_json("distancematrix", params)

        try:
            elements = data["rows"][0]["elements"]
        except (KeyError, IndexError, TypeError) as e:
            raise ExternalServiceError("distancematrix response has no rows.") from e
        if len(elements) != len(destinations):
            raise ExternalServiceError(
                f"distancematrix returned {len(elements)} elements for {len(destinations)} destinations."
            )

        lookups: list[DistanceLookup] = []
        for element in elements:
            element_status = element.get("status")
            if element_status != "OK":
                lookups.append(LookupFailed(reason=str(element_status)))
                continue
            try:
                lookups.append(
                    LookupOk(
                        distance=float(element["distance"]["value"]),
                        duration=float(element["duration"]["value"]),
                    )
                )
            except (KeyError, TypeError, ValueError):
                lookups.append(LookupFailed(reason="malformed element"))
        return lookups

    def distance_row(self, origin: Coordinate, destinations: Sequence[Coordinate]) -> list[DistanceLookup]:
        """Look up road distance and duration from one origin to every destination.

        Destinations are sent in batches of ``max_destinations_per_request``. Element
        level failures come back as ``LookupFailed``; request level failures raise
        ``ExternalServiceError``.
        """
        lookups: list[DistanceLookup] = []
        for batch in split_into_batches(list(destinations), self.max_destinations_per_request):
            lookups.extend(self._distance_batch(origin, batch))
        return lookups

    def directions(
        self,
        origin: Coordinate,
        destination: Coordinate,
        waypoints: Sequence[Coordinate] = (),
        *,
        optimize_waypoints: bool = False,
        avoid: Sequence[str] = (),
        mode: str | None = None,
    ) -> DirectionsRoute:
        """Get a driving route through the waypoints, in the given order unless asked to optimize.

        Returns the overview polyline plus turn-by-turn steps for every leg.
        Raises ``ValueError`` before any request when there are more than
        ``MAX_DIRECTIONS_WAYPOINTS`` waypoints.
        """
        if len(waypoints) > MAX_DIRECTIONS_WAYPOINTS:
            raise ValueError(
                f"Directions support at most {MAX_DIRECTIONS_WAYPOINTS} waypoints, got {len(waypoints)}."
            )
        params = {
            "origin": origin.as_query(),
            "destination": destination.as_query(),
            "mode": mode or self.travel_mode,
            "units": "metric",
        }
        if waypoints:
            prefix = "optimize:true|" if optimize_waypoints else ""
            params["waypoints"] = prefix + "|".join(coord.as_query() for coord in waypoints)
        if avoid:
            params["avoid"] = "|".join(avoid)

        data = self._get_json("directions", params)
        try:
            route = data["routes"][0]
            legs = route["legs"]
            distance = float(sum(leg["distance"]["value"] for leg in legs))
            duration = float(sum(leg["duration"]["value"] for leg in legs))
            steps = [_parse_step(step) for leg in legs for step in leg["steps"]]
            if len(legs) == 1:
                distance_text = legs[0]["distance"]["text"]
                duration_text = legs[0]["duration"]["text"]
            else:
                distance_text = format_distance(distance)
                duration_text = format_duration(duration)
            return DirectionsRoute(
                distance=distance,
                distance_text=distance_text,
                duration=duration,
                duration_text=duration_text,
                polyline=route["overview_polyline"]["points"],
                start_address=legs[0].get("start_address", ""),
                end_address=legs[-1].get("end_address", ""),
                steps=steps,
            )
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ExternalServiceError(f"directions response is malformed: {e}") from e


def _parse_location(raw: dict) -> Coordinate:
    return Coordinate(lat=float(raw["lat"]), lng=float(raw["lng"]))


def _parse_step(step: dict) -> DirectionsStep:
    return DirectionsStep(
        instruction=_HTML_TAG.sub("", step.get("html_instructions", "")),
        distance=float(step["distance"]["value"]),
        distance_text=step["distance"]["text"],
        duration=float(step["duration"]["value"]),
        duration_text=step["duration"]["text"],
        start_location=_parse_location(step["start_location"]),
        end_location=_parse_location(step["end_location"]),
    )


def decode_polyline(polyline: str) -> list[tuple[float, float]]:
    """Decode an encoded polyline string into ``(lat, lng)`` pairs.

    Both coordinates are zigzag-encoded deltas in 5-bit chunks at 1e-5 precision.
    """
    coordinates = []
    index = 0
    lat = 0
    lng = 0

    def next_delta() -> int:
        nonlocal index
        shift = 0
        result = 0
        while True:
            b = ord(polyline[index]) - 63
            index += 1
            result |= (b & 0x1F) << shift
            shift += 5
            if b < 0x20:
                break
        return ~(result >> 1) if (result & 1) else (result >> 1)

    while index < len(polyline):
        lat += next_delta()
        lng += next_delta()
        coordinates.append((lat / 1e5, lng / 1e5))

    return coordinates


def check_health(client: MapsClient | None = None) -> bool:
    """Check the distance service by requesting one short, well-known leg."""
    try:
        client = client or MapsClient(max_retries=0)
        lookups = client.distance_row(
            Coordinate(lat=52.517037, lng=13.388860),
            [Coordinate(lat=52.496891, lng=13.385983)],
        )
    except (ValueError, ExternalServiceError) as e:
        logger.info(f"Distance service health check failed: {e}")
        return False
    return all(isinstance(lookup, LookupOk) for lookup in lookups)

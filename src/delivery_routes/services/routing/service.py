"""Routing orchestration service: request payloads in, response schemas out."""

from __future__ import annotations

from datetime import datetime

from ...schemas.routing import (
    CompareRoutesResponse,
    ComparisonImprovementModel,
    CoordinateModel,
    DirectionsModel,
    DirectionsStepModel,
    ImprovementModel,
    OptimizeRouteRequest,
    OptimizeRouteResponse,
    OriginalSnapshotModel,
    RouteSnapshotModel,
    SequencedStopModel,
)
from ..outputs.formatter import calculate_eta, format_distance, format_duration
from ..outputs.routing_formatter import optimized_route_to_csv, optimized_route_to_json
from .distance_client import decode_polyline
from .matrix import DistanceMatrixProvider
from .models import DirectionsRoute, OptimizedRoute
from .optimizer import compare_routes, get_route_with_directions, optimize_route


def _coordinate_model(lat: float, lng: float) -> CoordinateModel:
    return CoordinateModel(lat=lat, lng=lng)


def _directions_model(route: DirectionsRoute) -> DirectionsModel:
    return DirectionsModel(
        distance=route.distance,
        distance_text=route.distance_text,
        duration=route.duration,
        duration_text=route.duration_text,
        polyline=route.polyline,
        path=[_coordinate_model(lat, lng) for lat, lng in decode_polyline(route.polyline)],
        start_address=route.start_address,
        end_address=route.end_address,
        steps=[
            DirectionsStepModel(
                instruction=step.instruction,
                distance=step.distance,
                distance_text=step.distance_text,
                duration=step.duration,
                duration_text=step.duration_text,
                start_location=_coordinate_model(step.start_location.lat, step.start_location.lng),
                end_location=_coordinate_model(step.end_location.lat, step.end_location.lng),
            )
            for step in route.steps
        ],
    )


def _run_optimization(payload: OptimizeRouteRequest, provider: DistanceMatrixProvider | None = None) -> OptimizedRoute:
    stops = [stop.to_domain() for stop in payload.stops]
    depot = payload.depot.to_domain() if payload.depot else None
    return optimize_route(stops, depot, payload.use_external_service, provider=provider)


def optimize_stops(
    payload: OptimizeRouteRequest,
    *,
    provider: DistanceMatrixProvider | None = None,
    now: datetime | None = None,
) -> OptimizeRouteResponse:
    result = _run_optimization(payload, provider)

    directions = None
    if payload.include_directions:
        depot = payload.depot.to_domain() if payload.depot else None
        directions = _directions_model(get_route_with_directions(result.stops, depot))

    return OptimizeRouteResponse(
        stops=[SequencedStopModel.from_domain(stop) for stop in result.stops],
        total_distance=result.total_distance,
        total_duration=result.total_duration,
        total_distance_text=format_distance(result.total_distance),
        total_duration_text=format_duration(result.total_duration),
        estimated_arrival=calculate_eta(result.total_duration, now),
        improvement=ImprovementModel(
            distance_saved=result.improvement.distance_saved,
            percentage_improved=result.improvement.percentage_improved,
        ),
        matrix_source=result.matrix_source,
        directions=directions,
    )


def compare_stops(
    payload: OptimizeRouteRequest,
    *,
    provider: DistanceMatrixProvider | None = None,
) -> CompareRoutesResponse:
    result = _run_optimization(payload, provider)
    comparison = compare_routes([stop.to_domain() for stop in payload.stops], result)
    return CompareRoutesResponse(
        original=OriginalSnapshotModel(stops=list(payload.stops), distance=comparison.original.distance),
        optimized=RouteSnapshotModel(
            stops=[SequencedStopModel.from_domain(stop) for stop in comparison.optimized.stops],
            distance=comparison.optimized.distance,
        ),
        improvement=ComparisonImprovementModel(
            distance=comparison.improvement.distance,
            percentage=comparison.improvement.percentage,
        ),
    )


def export_stops(
    payload: OptimizeRouteRequest,
    export_format: str = "json",
    *,
    provider: DistanceMatrixProvider | None = None,
) -> dict | str:
    result = _run_optimization(payload, provider)
    if export_format == "csv":
        return optimized_route_to_csv(result)
    if export_format == "json":
        return optimized_route_to_json(result)
    raise ValueError(f"Unsupported export format '{export_format}'.")

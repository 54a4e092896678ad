"""Serializers for optimized route outputs."""

from __future__ import annotations

import csv
import io

from ..routing.models import OptimizedRoute
from .formatter import format_distance, format_duration


def optimized_route_to_json(result: OptimizedRoute) -> dict:
    return {
        "total_distance": result.total_distance,
        "total_duration": result.total_duration,
        "total_distance_text": format_distance(result.total_distance),
        "total_duration_text": format_duration(result.total_duration),
        "matrix_source": result.matrix_source,
        "improvement": {
            "distance_saved": result.improvement.distance_saved,
            "percentage_improved": result.improvement.percentage_improved,
        },
        "stops": [
            {
                "sequence": stop.sequence,
                "id": stop.id,
                "order_ref": stop.order_ref,
                "display_name": stop.display_name,
                "address": stop.address,
                "lat": stop.coordinates.lat,
                "lng": stop.coordinates.lng,
            }
            for stop in result.stops
        ],
    }


def optimized_route_to_csv(result: OptimizedRoute) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "sequence",
        "stop_id",
        "order_ref",
        "display_name",
        "address",
        "lat",
        "lng",
        "total_distance",
        "total_duration",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for stop in result.stops:
        writer.writerow(
            {
                "sequence": stop.sequence,
                "stop_id": stop.id,
                "order_ref": stop.order_ref,
                "display_name": stop.display_name,
                "address": stop.address,
                "lat": stop.coordinates.lat,
                "lng": stop.coordinates.lng,
                "total_distance": result.total_distance,
                "total_duration": result.total_duration,
            }
        )
    return buffer.getvalue()

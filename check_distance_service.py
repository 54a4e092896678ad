#!/usr/bin/env python3
"""Manual check that the road distance service is reachable and returns usable distances."""

import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from delivery_routes.config import settings
from delivery_routes.models.domain import Coordinate, Stop
from delivery_routes.services.routing.distance_client import MapsClient, check_health
from delivery_routes.services.routing.exceptions import ExternalServiceError
from delivery_routes.services.routing.matrix import DistanceMatrixProvider


def main():
    print("=" * 60)
    print("Distance Service Connection Test")
    print("=" * 60)
    print()

    print("1. Checking configuration...")
    if not settings.maps_api_key:
        print("   [ERROR] Maps API key is not configured")
        print("   Please set DR_MAPS_API_KEY in your .env file")
        return 1
    print(f"   [OK] Base URL: {settings.maps_api_base_url}")
    print(f"   [OK] Travel mode: {settings.travel_mode}")
    print()

    print("2. Testing health check...")
    if not check_health():
        print("   [ERROR] Distance service is not responding")
        return 1
    print("   [OK] Distance service is healthy and accessible!")
    print()

    print("3. Building a road distance matrix...")
    stops = [
        Stop(id="A", address="Berlin", coordinates=Coordinate(lat=52.517037, lng=13.388860), order_ref="", display_name="A"),
        Stop(id="B", address="Berlin", coordinates=Coordinate(lat=52.496891, lng=13.385983), order_ref="", display_name="B"),
    ]
    try:
        matrix = DistanceMatrixProvider(client=MapsClient()).build_matrix(stops, use_external_service=True)
    except (ValueError, ExternalServiceError) as e:
        print(f"   [ERROR] Error building matrix: {e}")
        return 1
    if matrix.source != "external":
        print("   [ERROR] Fell back to straight-line distances; check the logs for the lookup error")
        return 1
    print(f"   [OK] Sample distance: {matrix.distance(0, 1):.2f} meters")
    print(f"   [OK] Sample duration: {matrix.durations[0][1]:.2f} seconds")
    print()

    print("=" * 60)
    print("[SUCCESS] Distance service is connected and working!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())

import pytest

from delivery_routes.services.routing.matrix import DistanceMatrixConfig


@pytest.fixture
def offline_config() -> DistanceMatrixConfig:
    return DistanceMatrixConfig(api_key=None, max_retries=0, backoff_seconds=0.0, average_speed_kmh=30.0)

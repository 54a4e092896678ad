"""Domain models for delivery stops and their coordinates."""

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True, frozen=True)
class Coordinate:
    """A WGS84 latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude {self.lat} is outside [-90, 90].")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"Longitude {self.lng} is outside [-180, 180].")

    def as_query(self) -> str:
        return f"{self.lat},{self.lng}"


@dataclass(slots=True)
class Stop:
    """A delivery or pickup location to visit.

    ``sequence`` stays unset until an optimization run assigns it (1-based).
    """

    id: str
    address: str
    coordinates: Coordinate
    order_ref: str
    display_name: str
    sequence: Optional[int] = None


DEPOT_STOP_ID = "depot"


def depot_stop(coordinates: Coordinate) -> Stop:
    """Build the synthetic stop that stands in for the depot in a working list."""

    return Stop(
        id=DEPOT_STOP_ID,
        address="Depot",
        coordinates=coordinates,
        order_ref="",
        display_name="Warehouse",
    )

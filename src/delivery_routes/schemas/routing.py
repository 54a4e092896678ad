"""Routing request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import Coordinate, Stop


class CoordinateModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def to_domain(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)


class StopModel(BaseModel):
    id: str
    address: str = ""
    coordinates: CoordinateModel
    order_ref: str = Field(default="", description="Opaque order reference carried through unchanged.")
    display_name: str = ""

    def to_domain(self) -> Stop:
        return Stop(
            id=self.id,
            address=self.address,
            coordinates=self.coordinates.to_domain(),
            order_ref=self.order_ref,
            display_name=self.display_name,
        )


class OptimizeRouteRequest(BaseModel):
    stops: List[StopModel]
    depot: Optional[CoordinateModel] = Field(
        default=None,
        description="Fixed start of the route (e.g. the branch). Not returned as a stop.",
    )
    use_external_service: bool = Field(
        default=False,
        description="Use road distances from the maps service, falling back to straight-line distances.",
    )
    include_directions: bool = Field(
        default=False,
        description="Also fetch turn-by-turn directions for the optimized order.",
    )


class SequencedStopModel(BaseModel):
    id: str
    address: str
    coordinates: CoordinateModel
    order_ref: str
    display_name: str
    sequence: int

    @classmethod
    def from_domain(cls, stop: Stop) -> "SequencedStopModel":
        return cls(
            id=stop.id,
            address=stop.address,
            coordinates=CoordinateModel(lat=stop.coordinates.lat, lng=stop.coordinates.lng),
            order_ref=stop.order_ref,
            display_name=stop.display_name,
            sequence=stop.sequence or 0,
        )


class ImprovementModel(BaseModel):
    distance_saved: float
    percentage_improved: float


class DirectionsStepModel(BaseModel):
    instruction: str
    distance: float
    distance_text: str
    duration: float
    duration_text: str
    start_location: CoordinateModel
    end_location: CoordinateModel


class DirectionsModel(BaseModel):
    distance: float
    distance_text: str
    duration: float
    duration_text: str
    polyline: str
    path: List[CoordinateModel]
    start_address: str
    end_address: str
    steps: List[DirectionsStepModel]


class OptimizeRouteResponse(BaseModel):
    stops: List[SequencedStopModel]
    total_distance: float = Field(..., description="Meters.")
    total_duration: float = Field(..., description="Seconds.")
    total_distance_text: str
    total_duration_text: str
    estimated_arrival: datetime
    improvement: ImprovementModel
    matrix_source: Optional[Literal["external", "haversine"]] = None
    directions: Optional[DirectionsModel] = None


class RouteSnapshotModel(BaseModel):
    stops: List[SequencedStopModel]
    distance: float


class OriginalSnapshotModel(BaseModel):
    stops: List[StopModel]
    distance: float


class ComparisonImprovementModel(BaseModel):
    distance: float
    percentage: float


class CompareRoutesResponse(BaseModel):
    original: OriginalSnapshotModel
    optimized: RouteSnapshotModel
    improvement: ComparisonImprovementModel

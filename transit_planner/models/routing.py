# transit_planner/models/routing.py

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from transit_planner.models.transit import Stop


class TripRequest(BaseModel):
    """
    Request body for the /plan endpoint.
    """
    from_stop_id: int
    to_stop_id: int


class Segment(BaseModel):
    """
    One leg of an itinerary.

    - kind="ride": a run of >= 2 stops on a single route.
    - kind="walk": exactly 2 stops on foot, no route.
    """
    kind: Literal["ride", "walk"]
    stops: List[Stop]
    distance_m: float
    route_id: Optional[str] = None
    route_name: Optional[str] = None
    color: Optional[str] = None
    transport_type: Optional[str] = None

    @property
    def is_walking(self) -> bool:
        return self.kind == "walk"


class Itinerary(BaseModel):
    """
    A planned trip: the segments in travel order plus aggregate totals.

    A trip from a stop to itself is a valid itinerary with no segments.
    """
    stops: List[Stop]
    segments: List[Segment] = []
    total_distance_m: float = 0.0
    estimated_time_min: float = 0.0
    transfers: int = 0


class RouteNotFound(BaseModel):
    """
    Both stops exist, but the network does not connect them.
    """
    from_stop_id: int
    to_stop_id: int
    message: str = "No route found between the selected stops."


class InvalidQuery(BaseModel):
    """
    One or both requested stop ids are not in the current stop catalog.
    """
    unknown_stop_ids: List[int]
    message: str = "Unknown stop id."


class NetworkStats(BaseModel):
    """
    Summary of the currently installed network snapshot.
    """
    version: int
    stops: int
    routes: int
    ride_edges: int
    walking_edges: int
    components: int
    avg_routes_per_stop: float


class StopMatch(BaseModel):
    stop: Stop
    relevance: int


class NearestStop(BaseModel):
    stop: Stop
    distance_m: float


class StopDetail(BaseModel):
    """
    A stop with the catalog routes whose stop lists pass through it.
    """
    stop: Stop
    route_ids: List[str] = Field(default_factory=list)
    route_names: List[str] = Field(default_factory=list)

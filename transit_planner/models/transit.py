# transit_planner/models/transit.py

import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

_ROUTE_NUMBER_RE = re.compile(r"^(\w+)\s")


def route_number(name: str) -> Optional[str]:
    # "b17 Rynok - Vokzal" -> "b17"
    match = _ROUTE_NUMBER_RE.match(name)
    return match.group(1) if match else None


class Stop(BaseModel):
    """
    A physical stopping point. Immutable once loaded into the StopIndex.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    lat: float
    lon: float
    # Route numbers served here, e.g. ["17", "b1", "m17"]
    routes: List[str] = []


class RouteStop(BaseModel):
    """
    One entry of a route's stop list.

    `stop_id` is None for virtual stops: key points that could not be matched
    to a catalog stop. They are kept for display but never become graph edges.
    """
    model_config = ConfigDict(frozen=True)

    stop_id: Optional[int] = None
    name: str
    lat: Optional[float] = None
    lon: Optional[float] = None
    virtual: bool = False


class Route(BaseModel):
    """
    A transit line with its resolved, ordered stop list.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    stops: List[RouteStop] = []
    color: str = "#9C27B0"
    transport_type: str = "minibus"

    @property
    def short_name(self) -> str:
        return route_number(self.name) or self.name[:20]

    @property
    def stop_ids(self) -> List[Optional[int]]:
        return [s.stop_id for s in self.stops]

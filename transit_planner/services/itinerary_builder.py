# transit_planner/services/itinerary_builder.py
from typing import List, Optional

import networkx as nx

from transit_planner.models.routing import Itinerary, Segment
from transit_planner.models.transit import Stop
from transit_planner.services.catalog import RouteCatalog, StopIndex
from transit_planner.services.path_finder import traverse_edge

DEFAULT_AVERAGE_SPEED_KMH = 20.0
DEFAULT_TRANSFER_PENALTY_MINUTES = 3.0


def estimate_time_min(
    distance_m: float,
    transfers: int,
    average_speed_kmh: float = DEFAULT_AVERAGE_SPEED_KMH,
    transfer_penalty_minutes: float = DEFAULT_TRANSFER_PENALTY_MINUTES,
) -> float:
    """
    Riding time at a constant average speed plus a fixed wait per transfer.
    """
    if average_speed_kmh <= 0:
        raise ValueError("average_speed_kmh must be positive")
    return (distance_m / 1000.0) / average_speed_kmh * 60.0 + transfers * transfer_penalty_minutes


class ItineraryBuilder:
    """
    Turns a stop-id path into ride and walk segments.

    Rides are grouped by route: consecutive hops stay in one segment while the
    route in effect keeps serving them. A hop that needs another route closes
    the segment and opens a new one at the transfer stop. Every walking hop is
    its own segment and breaks route continuity.
    """

    def __init__(
        self,
        stops: StopIndex,
        routes: RouteCatalog,
        average_speed_kmh: float = DEFAULT_AVERAGE_SPEED_KMH,
        transfer_penalty_minutes: float = DEFAULT_TRANSFER_PENALTY_MINUTES,
    ) -> None:
        self.stops = stops
        self.routes = routes
        self.average_speed_kmh = average_speed_kmh
        self.transfer_penalty_minutes = transfer_penalty_minutes

    def build(self, path: List[int], G: nx.DiGraph) -> Itinerary:
        path_stops = [self._stop(stop_id) for stop_id in path]

        segments: List[Segment] = []
        total_distance = 0.0
        active: Optional[str] = None
        buffer: List[int] = path[:1]
        buffer_distance = 0.0

        for u, v in zip(path[:-1], path[1:]):
            if not G.has_edge(u, v):
                raise ValueError(f"Path hop {u} -> {v} is not an edge of the graph")

            edge = G.edges[u, v]
            distance = float(edge["distance_m"])
            total_distance += distance

            if edge.get("walking"):
                self._flush_ride(segments, buffer, active, buffer_distance)
                segments.append(
                    Segment(
                        kind="walk",
                        stops=[self._stop(u), self._stop(v)],
                        distance_m=distance,
                    )
                )
                buffer, active, buffer_distance = [v], None, 0.0
                continue

            _, boarded = traverse_edge(edge, active)
            if active is not None and boarded != active:
                # transfer
                self._flush_ride(segments, buffer, active, buffer_distance)
                buffer, active, buffer_distance = [u, v], boarded, distance
            else:
                buffer.append(v)
                buffer_distance += distance
                active = boarded

        self._flush_ride(segments, buffer, active, buffer_distance)

        rides = sum(1 for s in segments if s.kind == "ride")
        transfers = max(0, rides - 1)

        return Itinerary(
            stops=path_stops,
            segments=segments,
            total_distance_m=total_distance,
            estimated_time_min=estimate_time_min(
                total_distance,
                transfers,
                self.average_speed_kmh,
                self.transfer_penalty_minutes,
            ),
            transfers=transfers,
        )

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _stop(self, stop_id: int) -> Stop:
        stop = self.stops.get(stop_id)
        if stop is None:
            raise ValueError(f"Stop {stop_id} is not in the stop index")
        return stop

    def _flush_ride(
        self,
        segments: List[Segment],
        buffer: List[int],
        route_id: Optional[str],
        distance_m: float,
    ) -> None:
        if len(buffer) < 2:
            return

        route = self.routes.get(route_id)
        segments.append(
            Segment(
                kind="ride",
                stops=[self._stop(stop_id) for stop_id in buffer],
                distance_m=distance_m,
                route_id=route_id,
                route_name=self.routes.display_name(route_id),
                color=route.color if route else None,
                transport_type=route.transport_type if route else None,
            )
        )

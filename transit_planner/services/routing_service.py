# transit_planner/services/routing_service.py

from time import perf_counter
from typing import List, Optional, Union

import networkx as nx

from transit_planner.core.config import settings
from transit_planner.core.logger import logger
from transit_planner.models.routing import (
    InvalidQuery,
    Itinerary,
    NearestStop,
    NetworkStats,
    RouteNotFound,
    StopDetail,
    StopMatch,
)
from transit_planner.services.graph_builder import count_edges
from transit_planner.services.graph_manager import GraphManager
from transit_planner.services.itinerary_builder import ItineraryBuilder
from transit_planner.services.path_finder import find_path, transfer_penalty_m

TripResult = Union[Itinerary, RouteNotFound, InvalidQuery]


class RoutingService:
    """
    High-level trip planning service:
    - reads the current network snapshot
    - validates the requested stops
    - runs the transfer-aware search
    - turns the path into ride/walk segments
    """

    def __init__(
        self,
        graph_manager: GraphManager | None = None,
        transfer_penalty_minutes: float = settings.TRANSFER_PENALTY_MINUTES,
        walking_penalty_m: float = settings.WALKING_PENALTY_M,
        average_speed_kmh: float = settings.AVERAGE_SPEED_KMH,
    ) -> None:
        self.graph_manager = graph_manager or GraphManager()
        self.transfer_penalty_minutes = transfer_penalty_minutes
        self.walking_penalty_m = walking_penalty_m
        self.average_speed_kmh = average_speed_kmh
        logger.info("RoutingService initialised.")

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def plan_trip(self, from_stop_id: int, to_stop_id: int) -> TripResult:
        """
        Plan a trip between two stops.

        Returns an Itinerary on success, RouteNotFound when the stops exist
        but are not connected, and InvalidQuery when a stop id is unknown.
        """
        t0 = perf_counter()
        snapshot = self.graph_manager.current()
        stops = snapshot.data.stops

        logger.info(
            "Received trip request {} -> {} (network v{})",
            from_stop_id,
            to_stop_id,
            snapshot.version,
        )

        unknown = [sid for sid in dict.fromkeys((from_stop_id, to_stop_id)) if sid not in stops]
        if unknown:
            logger.warning("Trip request with unknown stop ids: {}", unknown)
            return InvalidQuery(
                unknown_stop_ids=unknown,
                message="Unknown stop id(s): " + ", ".join(str(sid) for sid in unknown),
            )

        builder = ItineraryBuilder(
            stops,
            snapshot.data.routes,
            average_speed_kmh=self.average_speed_kmh,
            transfer_penalty_minutes=self.transfer_penalty_minutes,
        )

        if from_stop_id == to_stop_id:
            return builder.build([from_stop_id], snapshot.graph)

        t_sp0 = perf_counter()
        result = find_path(
            snapshot.graph,
            from_stop_id,
            to_stop_id,
            transfer_penalty=transfer_penalty_m(self.transfer_penalty_minutes),
            walk_penalty=self.walking_penalty_m,
        )
        t_sp1 = perf_counter()

        if result is None:
            logger.info(
                "No route {} -> {} (search took {:.2f} ms)",
                from_stop_id,
                to_stop_id,
                (t_sp1 - t_sp0) * 1000.0,
            )
            return RouteNotFound(from_stop_id=from_stop_id, to_stop_id=to_stop_id)

        logger.info(
            "Path found with {} stops, cost {:.1f} in {:.2f} ms",
            len(result.stops),
            result.cost,
            (t_sp1 - t_sp0) * 1000.0,
        )

        itinerary = builder.build(result.stops, snapshot.graph)

        logger.info(
            "Itinerary: {} segments, distance={:.1f} m, time={:.1f} min, transfers={}; "
            "total planning time {:.2f} ms",
            len(itinerary.segments),
            itinerary.total_distance_m,
            itinerary.estimated_time_min,
            itinerary.transfers,
            (perf_counter() - t0) * 1000.0,
        )
        return itinerary

    def search_stops(self, query: str) -> List[StopMatch]:
        stops = self.graph_manager.current().data.stops
        return [
            StopMatch(stop=stop, relevance=relevance)
            for stop, relevance in stops.search(
                query,
                min_length=settings.SEARCH_MIN_QUERY_LENGTH,
                limit=settings.SEARCH_MAX_RESULTS,
            )
        ]

    def nearest_stop(self, lat: float, lon: float) -> Optional[NearestStop]:
        stops = self.graph_manager.current().data.stops
        found = stops.nearest(lat, lon, max_distance_m=settings.NEAREST_STOP_MAX_DISTANCE_M)
        if found is None:
            return None
        stop, distance = found
        return NearestStop(stop=stop, distance_m=distance)

    def stop_detail(self, stop_id: int) -> Optional[StopDetail]:
        data = self.graph_manager.current().data
        stop = data.stops.get(stop_id)
        if stop is None:
            return None
        routes = data.routes.routes_through(stop_id)
        return StopDetail(
            stop=stop,
            route_ids=[r.id for r in routes],
            route_names=[r.short_name for r in routes],
        )

    def network_stats(self) -> NetworkStats:
        snapshot = self.graph_manager.current()
        ride, walking = count_edges(snapshot.graph)
        stats = snapshot.data.stats()
        return NetworkStats(
            version=snapshot.version,
            stops=stats["stops"],
            routes=stats["routes"],
            ride_edges=ride,
            walking_edges=walking,
            components=nx.number_weakly_connected_components(snapshot.graph),
            avg_routes_per_stop=stats["avg_routes_per_stop"],
        )

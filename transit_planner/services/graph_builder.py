# transit_planner/services/graph_builder.py
from time import perf_counter
from typing import Iterable, List, Tuple

import networkx as nx

from transit_planner.core.logger import logger
from transit_planner.models.transit import Route, Stop
from transit_planner.services.geo import haversine_distance_m

DEFAULT_MAX_WALKING_DISTANCE_M = 300.0


def build_graph(
    stops: Iterable[Stop],
    routes: Iterable[Route],
    max_walking_distance_m: float = DEFAULT_MAX_WALKING_DISTANCE_M,
) -> nx.DiGraph:
    """
    Build the stop graph used by the planner.

    Nodes are stop ids (attributes: name, lat, lon). Every edge carries:
      - distance_m: great-circle distance between the two stops
      - routes:     tuple of route ids running between them, first-seen order
                    (empty for walking edges)
      - walking:    True for synthesized walking edges

    Every relationship is stored in both directions. Routes sharing a pair of
    consecutive stops are merged into a single edge, so there is at most one
    edge per ordered stop pair.
    """
    t0 = perf_counter()

    G = nx.DiGraph()
    stop_list: List[Stop] = []
    for stop in stops:
        if stop.id in G:
            continue
        G.add_node(stop.id, name=stop.name, lat=stop.lat, lon=stop.lon)
        stop_list.append(stop)

    num_skipped = 0
    for route in routes:
        for a, b in zip(route.stops[:-1], route.stops[1:]):
            u, v = a.stop_id, b.stop_id
            # virtual stops and ids missing from the catalog never become edges
            if u is None or v is None or u not in G or v not in G or u == v:
                num_skipped += 1
                continue

            distance = _node_distance_m(G, u, v)
            _add_ride_edge(G, u, v, distance, route.id)
            _add_ride_edge(G, v, u, distance, route.id)

    _add_walking_edges(G, stop_list, max_walking_distance_m)

    ride, walking = count_edges(G)
    logger.info(
        "Graph built: {} stops, {} ride edges, {} walking edges "
        "({} unresolved route hops skipped) in {:.2f} ms",
        G.number_of_nodes(),
        ride,
        walking,
        num_skipped,
        (perf_counter() - t0) * 1000.0,
    )
    return G


def count_edges(G: nx.DiGraph) -> Tuple[int, int]:
    """
    Return (ride_edges, walking_edges), counting each direction separately.
    """
    walking = sum(1 for _, _, is_walking in G.edges(data="walking") if is_walking)
    return G.number_of_edges() - walking, walking


# ---------------------------------------------------------------------- #
# Internal helpers
# ---------------------------------------------------------------------- #

def _node_distance_m(G: nx.DiGraph, u: int, v: int) -> float:
    a = G.nodes[u]
    b = G.nodes[v]
    return haversine_distance_m(a["lat"], a["lon"], b["lat"], b["lon"])


def _add_ride_edge(G: nx.DiGraph, u: int, v: int, distance_m: float, route_id: str) -> None:
    if G.has_edge(u, v):
        data = G.edges[u, v]
        if route_id not in data["routes"]:
            data["routes"] = data["routes"] + (route_id,)
        return

    G.add_edge(u, v, distance_m=distance_m, routes=(route_id,), walking=False)


def _add_walking_edges(G: nx.DiGraph, stops: List[Stop], max_distance_m: float) -> None:
    """
    Connect every pair of stops within walking distance that no route links.

    Pairwise over the whole catalog, which is fine for a city network of a few
    thousand stops.
    """
    for i, s1 in enumerate(stops):
        for s2 in stops[i + 1:]:
            distance = haversine_distance_m(s1.lat, s1.lon, s2.lat, s2.lon)
            if distance > max_distance_m:
                continue

            if not G.has_edge(s1.id, s2.id):
                G.add_edge(s1.id, s2.id, distance_m=distance, routes=(), walking=True)
            if not G.has_edge(s2.id, s1.id):
                G.add_edge(s2.id, s1.id, distance_m=distance, routes=(), walking=True)

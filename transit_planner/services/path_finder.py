# transit_planner/services/path_finder.py
import heapq
import itertools
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

import networkx as nx

from transit_planner.core.logger import logger

# A transfer penalty of one minute is worth this many metres of riding
METERS_PER_PENALTY_MINUTE = 1_000.0

DEFAULT_TRANSFER_PENALTY_M = 3 * METERS_PER_PENALTY_MINUTE
DEFAULT_WALK_PENALTY_M = 200.0


@dataclass
class NodeRecord:
    """
    Best known way of reaching a node: its cost, where it came from and the
    route ridden on arrival (None after walking or at the origin).
    """
    cost: float
    predecessor: Optional[int]
    active_route: Optional[str]


@dataclass(frozen=True)
class PathResult:
    stops: List[int]
    cost: float


def transfer_penalty_m(minutes: float) -> float:
    return minutes * METERS_PER_PENALTY_MINUTE


def traverse_edge(
    edge: Mapping[str, Any],
    active_route: Optional[str],
    transfer_penalty: float = DEFAULT_TRANSFER_PENALTY_M,
    walk_penalty: float = DEFAULT_WALK_PENALTY_M,
) -> Tuple[float, Optional[str]]:
    """
    Price one hop given the route in effect on arrival at its tail.

    Returns (cost, route in effect at its head).

    - Walking: distance + walk penalty; continuity is lost.
    - Riding a route already in effect: distance only.
    - Riding anything else: the first route on the edge is boarded, and if a
      route was in effect the transfer penalty is added.
    """
    distance = float(edge["distance_m"])

    if edge.get("walking"):
        return distance + walk_penalty, None

    routes = edge.get("routes") or ()
    if active_route is not None and active_route in routes:
        return distance, active_route

    boarded = routes[0] if routes else None
    if active_route is not None and boarded is not None:
        return distance + transfer_penalty, boarded
    return distance, boarded


def find_path(
    G: nx.DiGraph,
    from_id: int,
    to_id: int,
    transfer_penalty: float = DEFAULT_TRANSFER_PENALTY_M,
    walk_penalty: float = DEFAULT_WALK_PENALTY_M,
) -> Optional[PathResult]:
    """
    Transfer-aware Dijkstra between two stops.

    Edge cost depends on the route used to reach the current node, so each
    node's best record carries that route alongside cost and predecessor.
    Returns None when the destination cannot be reached (or either stop is
    not in the graph).
    """
    if from_id not in G or to_id not in G:
        return None
    if from_id == to_id:
        return PathResult(stops=[from_id], cost=0.0)

    best: Dict[int, NodeRecord] = {from_id: NodeRecord(0.0, None, None)}
    visited: set = set()
    # the counter keeps pops stable among equal costs
    counter = itertools.count()
    heap: List[Tuple[float, int, int]] = [(0.0, next(counter), from_id)]

    while heap:
        cost, _, node = heapq.heappop(heap)
        if node in visited or cost > best[node].cost:
            continue
        if node == to_id:
            break

        visited.add(node)
        record = best[node]

        for neighbour, edge in G.adj[node].items():
            if neighbour in visited:
                continue

            step, active = traverse_edge(edge, record.active_route, transfer_penalty, walk_penalty)
            new_cost = cost + step

            current = best.get(neighbour)
            if current is None or new_cost < current.cost:
                best[neighbour] = NodeRecord(new_cost, node, active)
                heapq.heappush(heap, (new_cost, next(counter), neighbour))

    target = best.get(to_id)
    if target is None:
        logger.debug("No path {} -> {} ({} stops settled)", from_id, to_id, len(visited))
        return None

    path: List[int] = []
    current_id: Optional[int] = to_id
    while current_id is not None:
        path.append(current_id)
        current_id = best[current_id].predecessor
    path.reverse()

    logger.debug(
        "Path {} -> {}: {} stops, cost {:.1f} ({} stops settled)",
        from_id,
        to_id,
        len(path),
        target.cost,
        len(visited),
    )
    return PathResult(stops=path, cost=target.cost)


def path_cost(
    G: nx.DiGraph,
    path: List[int],
    transfer_penalty: float = DEFAULT_TRANSFER_PENALTY_M,
    walk_penalty: float = DEFAULT_WALK_PENALTY_M,
) -> float:
    """
    Price a stop sequence under the same rules as find_path.

    Raises ValueError if two consecutive stops are not connected.
    """
    total = 0.0
    active: Optional[str] = None
    for u, v in zip(path[:-1], path[1:]):
        if not G.has_edge(u, v):
            raise ValueError(f"Stops {u} and {v} are not connected")
        step, active = traverse_edge(G.edges[u, v], active, transfer_penalty, walk_penalty)
        total += step
    return total

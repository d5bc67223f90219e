# transit_planner/services/catalog.py
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from transit_planner.models.transit import Route, Stop
from transit_planner.services.geo import haversine_distance_m


def normalize_name(name: str) -> str:
    """
    Normalise a stop name for matching: lower case, 'ё' folded to 'е',
    whitespace collapsed.
    """
    return " ".join(name.lower().replace("ё", "е").split())


class StopIndex:
    """
    Read-only catalog of stops with the lookups the planner and the API need.

    Stops are expected to be already filtered and deduplicated by the loader;
    a repeated id here keeps the first stop.
    """

    def __init__(self, stops: Iterable[Stop]) -> None:
        self._by_id: Dict[int, Stop] = {}
        self._by_name: Dict[str, List[Stop]] = {}

        for stop in stops:
            if stop.id in self._by_id:
                continue
            self._by_id[stop.id] = stop
            self._by_name.setdefault(normalize_name(stop.name), []).append(stop)

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self):
        return iter(self._by_id.values())

    def __contains__(self, stop_id: object) -> bool:
        return stop_id in self._by_id

    def get(self, stop_id: int) -> Optional[Stop]:
        return self._by_id.get(stop_id)

    def by_name(self, name: str) -> List[Stop]:
        return list(self._by_name.get(normalize_name(name), []))

    def search(self, query: str, min_length: int = 2, limit: int = 50) -> List[Tuple[Stop, int]]:
        """
        Substring search over stop names, ranked by relevance.

        Exact match scores 1000, prefix match 500, any other substring
        100 minus its position. Queries shorter than `min_length` match nothing.
        """
        if not query or len(query) < min_length:
            return []

        needle = normalize_name(query)
        results: List[Tuple[Stop, int]] = []
        for stop in self._by_id.values():
            name = normalize_name(stop.name)
            position = name.find(needle)
            if position == -1:
                continue
            if name == needle:
                relevance = 1000
            elif position == 0:
                relevance = 500
            else:
                relevance = 100 - position
            results.append((stop, relevance))

        # stable sort keeps catalog order among equal scores
        results.sort(key=lambda item: item[1], reverse=True)
        return results[:limit]

    def find_by_coords(self, lat: float, lon: float, tolerance: float = 0.001) -> Optional[Stop]:
        """
        First stop whose coordinates are within `tolerance` degrees on both axes.
        """
        for stop in self._by_id.values():
            if abs(stop.lat - lat) < tolerance and abs(stop.lon - lon) < tolerance:
                return stop
        return None

    def nearest(self, lat: float, lon: float, max_distance_m: Optional[float] = None) -> Optional[Tuple[Stop, float]]:
        best: Optional[Tuple[Stop, float]] = None
        for stop in self._by_id.values():
            d = haversine_distance_m(lat, lon, stop.lat, stop.lon)
            if best is None or d < best[1]:
                best = (stop, d)

        if best is None or (max_distance_m is not None and best[1] > max_distance_m):
            return None
        return best


class RouteCatalog:
    """
    Ordered list of routes, as loaded.
    """

    def __init__(self, routes: Iterable[Route]) -> None:
        self._routes: List[Route] = list(routes)
        self._by_id: Dict[str, Route] = {}
        for route in self._routes:
            self._by_id.setdefault(route.id, route)

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self):
        return iter(self._routes)

    def get(self, route_id: Optional[str]) -> Optional[Route]:
        if route_id is None:
            return None
        return self._by_id.get(route_id)

    def display_name(self, route_id: Optional[str]) -> str:
        if route_id is None:
            return "Unknown"
        route = self._by_id.get(route_id)
        if route is None:
            return f"Route #{route_id}"
        return route.short_name

    def routes_through(self, stop_id: int) -> List[Route]:
        return [r for r in self._routes if stop_id in r.stop_ids]


@dataclass(frozen=True)
class TransitSnapshot:
    """
    Stops and routes as produced by one data load.
    """
    stops: StopIndex
    routes: RouteCatalog

    def stats(self) -> Dict[str, float]:
        total = len(self.stops)
        served = sum(len(s.routes) for s in self.stops)
        return {
            "stops": total,
            "routes": len(self.routes),
            "avg_routes_per_stop": served / total if total else 0.0,
        }

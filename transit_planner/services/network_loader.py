# transit_planner/services/network_loader.py
import json
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from transit_planner.core.logger import logger
from transit_planner.models.transit import Route, RouteStop, Stop, route_number
from transit_planner.services.catalog import RouteCatalog, StopIndex, TransitSnapshot

ROUTE_COLORS = [
    "#E91E63", "#9C27B0", "#3F51B5", "#2196F3",
    "#00BCD4", "#4CAF50", "#8BC34A", "#CDDC39",
    "#FF9800", "#FF5722", "#795548", "#607D8B",
]

TRANSPORT_TYPE_PREFIX = {
    "b": "bus",
    "m": "minibus",
    "t": "trolleybus",
}

# Bus lines whose number carries no "b" prefix
BUS_ROUTES_WITHOUT_PREFIX = {"17", "18", "22", "33", "41"}

# Key points are matched to catalog stops within ~50 m
KEY_POINT_TOLERANCE_DEG = 0.0005

# Used when the main data file cannot be read
FALLBACK_NETWORK: Dict[str, Any] = {
    "bus_stops": [
        {"id": 1000, "name": "Gagarin Street", "latitude": 38.619821, "longitude": 68.77741,
         "routes": "17,b1,b17,b18,b22,m17"},
        {"id": 1001, "name": "Barzob Market", "latitude": 38.616789, "longitude": 68.781125,
         "routes": "17,b1,b17,b18,b22,m17"},
        {"id": 1002, "name": "Border Guards Square", "latitude": 38.614719, "longitude": 68.783884,
         "routes": "b1,b17,b18,b22,b33,b3a,b41,m1,m12"},
        {"id": 1003, "name": "Customs", "latitude": 38.56889686130528, "longitude": 68.78567566865574,
         "routes": "m11,m2,m25,b11"},
    ],
    "bus_routes": [],
}


class NetworkDataError(ValueError):
    """
    Raised when a network data file is present but cannot be used.
    """


def transport_type_for(number: Optional[str]) -> str:
    """
    Guess the vehicle type from a route number ("b17" -> bus, "m2" -> minibus).
    """
    if not number:
        return "minibus"

    number = number.lower()
    prefixed = TRANSPORT_TYPE_PREFIX.get(number[0])
    if prefixed:
        return prefixed

    digits = "".join(ch for ch in number if ch.isdigit())
    if digits in BUS_ROUTES_WITHOUT_PREFIX:
        return "bus"

    return "minibus"


def load_network(
    data_file: str | Path,
    key_points_file: str | Path | None = None,
    min_latitude: float = 30.0,
    min_longitude: float = 60.0,
) -> TransitSnapshot:
    """
    Read the network files from disk and build a TransitSnapshot.

    - A missing main file falls back to FALLBACK_NETWORK (with a warning).
    - A missing or unreadable key-points file only produces a warning; routes
      then keep whatever explicit stop lists they carry.
    - A main file that exists but is not valid JSON raises NetworkDataError.
    """
    data_path = Path(data_file)
    if data_path.exists():
        main_data = _read_json(data_path)
        logger.info("Network data loaded from {}", data_path)
    else:
        logger.warning("Network data file {} not found, using fallback sample data", data_path)
        main_data = FALLBACK_NETWORK

    key_points: Dict[str, Any] = {}
    if key_points_file is not None:
        kp_path = Path(key_points_file)
        try:
            key_points = _read_json(kp_path).get("key_points", {}) or {}
            logger.info("Key points loaded for {} routes", len(key_points))
        except (OSError, NetworkDataError) as exc:
            logger.warning("Could not load key points from {}: {}", kp_path, exc)

    return parse_network(main_data, key_points, min_latitude, min_longitude)


def parse_network(
    main_data: Dict[str, Any],
    key_points: Optional[Dict[str, Any]] = None,
    min_latitude: float = 30.0,
    min_longitude: float = 60.0,
) -> TransitSnapshot:
    """
    Turn raw network records into a TransitSnapshot.

    Derived route data (resolved stop list, color, transport type) is computed
    here into new Route objects; the input records are left untouched.
    """
    if not isinstance(main_data, dict):
        raise NetworkDataError("Network data must be a JSON object")

    stops = StopIndex(_parse_stops(main_data.get("bus_stops") or [], min_latitude, min_longitude))
    routes = RouteCatalog(_parse_routes(main_data.get("bus_routes") or [], key_points or {}, stops))

    snapshot = TransitSnapshot(stops=stops, routes=routes)
    logger.info(
        "Network parsed: {} stops, {} routes",
        len(stops),
        len(routes),
    )
    return snapshot


# ---------------------------------------------------------------------- #
# Internal helpers
# ---------------------------------------------------------------------- #

def _read_json(path: Path) -> Dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise NetworkDataError(f"{path} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise NetworkDataError(f"{path} must contain a JSON object")
    return data


def _parse_stops(records: List[Dict[str, Any]], min_latitude: float, min_longitude: float) -> List[Stop]:
    stops: List[Stop] = []
    seen: set = set()
    num_dropped = 0

    for record in records:
        try:
            stop_id = int(record["id"])
            lat = float(record["latitude"])
            lon = float(record["longitude"])
        except (KeyError, TypeError, ValueError):
            num_dropped += 1
            continue

        if not math.isfinite(lat) or not math.isfinite(lon) or lat <= min_latitude or lon <= min_longitude:
            num_dropped += 1
            continue

        if stop_id in seen:
            logger.debug("Duplicate stop id {} ignored", stop_id)
            continue
        seen.add(stop_id)

        stops.append(
            Stop(
                id=stop_id,
                name=str(record.get("name") or ""),
                lat=lat,
                lon=lon,
                routes=_parse_served_routes(record.get("routes")),
            )
        )

    if num_dropped:
        logger.warning("Dropped {} stop records with missing or implausible coordinates", num_dropped)
    return stops


def _parse_served_routes(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(part).strip() for part in value]


def _parse_routes(
    records: List[Dict[str, Any]],
    key_points: Dict[str, Any],
    stops: StopIndex,
) -> List[Route]:
    routes: List[Route] = []

    for index, record in enumerate(records):
        name = str(record.get("name") or "")
        route_id = str(record.get("id", index))

        if record.get("stop_ids") is not None:
            route_stops = _stops_from_ids(record["stop_ids"], stops)
        elif name in key_points:
            route_stops = _stops_from_key_points(key_points[name], stops)
        else:
            route_stops = []

        number = route_number(name)
        routes.append(
            Route(
                id=route_id,
                name=name,
                stops=route_stops,
                color=record.get("color") or ROUTE_COLORS[index % len(ROUTE_COLORS)],
                transport_type=record.get("transport_type") or transport_type_for(number),
            )
        )

        resolved = sum(1 for s in route_stops if s.stop_id is not None)
        if route_stops and resolved < len(route_stops):
            logger.debug(
                "Route {} ({}): {} of {} stops resolved",
                route_id,
                name,
                resolved,
                len(route_stops),
            )

    return routes


def _stops_from_ids(stop_ids: List[Any], stops: StopIndex) -> List[RouteStop]:
    result: List[RouteStop] = []
    for raw_id in stop_ids:
        try:
            stop = stops.get(int(raw_id))
        except (TypeError, ValueError):
            stop = None

        if stop is None:
            result.append(RouteStop(name=str(raw_id), virtual=True))
        else:
            result.append(RouteStop(stop_id=stop.id, name=stop.name, lat=stop.lat, lon=stop.lon))
    return result


def _stops_from_key_points(points: Any, stops: StopIndex) -> List[RouteStop]:
    """
    Resolve key points to catalog stops: by name first, then by coordinates.
    Key points that match nothing become virtual stops.
    """
    if not isinstance(points, list):
        return []

    result: List[RouteStop] = []
    num_bad_coords = 0
    for kp in points:
        if not isinstance(kp, dict):
            continue
        name = str(kp.get("stopName") or "")
        base = kp.get("basePoint")
        lat, lon = _key_point_coords(base)
        if base is not None and lat is None:
            num_bad_coords += 1

        matches = stops.by_name(name) if name else []
        stop = matches[0] if matches else None
        if stop is None and lat is not None and lon is not None:
            stop = stops.find_by_coords(lat, lon, KEY_POINT_TOLERANCE_DEG)

        if stop is None:
            result.append(RouteStop(name=name, lat=lat, lon=lon, virtual=True))
        else:
            result.append(RouteStop(stop_id=stop.id, name=stop.name, lat=stop.lat, lon=stop.lon))

    if num_bad_coords:
        logger.warning("Ignored malformed coordinates on {} key points", num_bad_coords)
    return result


def _key_point_coords(base: Any) -> Tuple[Optional[float], Optional[float]]:
    """
    (lat, lon) of a key point's basePoint, or (None, None) if unusable.
    """
    if not isinstance(base, dict):
        return None, None
    try:
        lat = float(base["latitude"])
        lon = float(base["longitude"])
    except (KeyError, TypeError, ValueError):
        return None, None
    if not math.isfinite(lat) or not math.isfinite(lon):
        return None, None
    return lat, lon

# tests/conftest.py
import os
import sys
from typing import Dict, List, Tuple

import pytest

# Add the project root directory to sys.path so that "import transit_planner" works
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from transit_planner.services.catalog import TransitSnapshot  # noqa: E402
from transit_planner.services.graph_manager import GraphManager  # noqa: E402
from transit_planner.services.network_loader import parse_network  # noqa: E402
from transit_planner.services.routing_service import RoutingService  # noqa: E402

# All test networks sit around 38.55N 68.78E so they pass the coordinate filter.
# 0.01 degree of latitude is ~1112 m.
BASE_LAT = 38.55
BASE_LON = 68.78


def make_network(
    stops: List[Tuple[int, float, float]],
    routes: Dict[str, List[int]],
) -> TransitSnapshot:
    """
    Build a snapshot from (id, lat, lon) stops and route id -> stop ids.
    """
    return parse_network(
        {
            "bus_stops": [
                {"id": sid, "name": f"Stop {sid}", "latitude": lat, "longitude": lon}
                for sid, lat, lon in stops
            ],
            "bus_routes": [
                {"id": rid, "name": f"{rid} Line", "stop_ids": ids}
                for rid, ids in routes.items()
            ],
        }
    )


def make_service(data: TransitSnapshot) -> RoutingService:
    manager = GraphManager(max_walking_distance_m=300.0)
    manager.install(data)
    return RoutingService(
        graph_manager=manager,
        transfer_penalty_minutes=3.0,
        walking_penalty_m=200.0,
        average_speed_kmh=20.0,
    )


@pytest.fixture
def line_network() -> TransitSnapshot:
    """Stops 1-2-3 on one route R, ~1112 m apart."""
    return make_network(
        [
            (1, BASE_LAT, BASE_LON),
            (2, BASE_LAT + 0.01, BASE_LON),
            (3, BASE_LAT + 0.02, BASE_LON),
        ],
        {"R": [1, 2, 3]},
    )


@pytest.fixture
def walk_network() -> TransitSnapshot:
    """R1 = [1, 2], R2 = [3, 4]; stops 2 and 3 are ~250 m apart."""
    return make_network(
        [
            (1, BASE_LAT, BASE_LON),
            (2, BASE_LAT + 0.01, BASE_LON),
            (3, BASE_LAT + 0.01225, BASE_LON),
            (4, BASE_LAT + 0.02225, BASE_LON),
        ],
        {"R1": [1, 2], "R2": [3, 4]},
    )


@pytest.fixture
def detour_network() -> TransitSnapshot:
    """
    R1 = [1, 2, 5, 4] runs a ~2 km detour from 2 to 4 via 5;
    R2 = [2, 4] links 2 and 4 directly (~1112 m) but needs a transfer.
    """
    return make_network(
        [
            (1, BASE_LAT, BASE_LON),
            (2, BASE_LAT + 0.01, BASE_LON),
            (4, BASE_LAT + 0.02, BASE_LON),
            (5, BASE_LAT + 0.015, BASE_LON + 0.01),
        ],
        {"R1": [1, 2, 5, 4], "R2": [2, 4]},
    )


@pytest.fixture
def split_network() -> TransitSnapshot:
    """Two clusters ~16 km apart, no route or walk between them."""
    return make_network(
        [
            (1, BASE_LAT, BASE_LON),
            (2, BASE_LAT + 0.01, BASE_LON),
            (10, BASE_LAT + 0.15, BASE_LON),
            (11, BASE_LAT + 0.16, BASE_LON),
        ],
        {"A": [1, 2], "B": [10, 11]},
    )

# tests/test_network_loader.py
import json

import pytest

from transit_planner.services.graph_manager import GraphManager
from transit_planner.services.network_loader import (
    FALLBACK_NETWORK,
    ROUTE_COLORS,
    NetworkDataError,
    load_network,
    parse_network,
    transport_type_for,
)


MAIN = {
    "bus_stops": [
        {"id": 1, "name": "Rynok", "latitude": "38.60", "longitude": "68.78", "routes": "b1, m2 ,17"},
        {"id": 2, "name": "Vokzal", "latitude": 38.61, "longitude": 68.79, "routes": ["b1"]},
        {"id": 3, "name": "Park", "latitude": 38.62, "longitude": 68.80},
        {"id": 2, "name": "Vokzal duplicate", "latitude": 38.70, "longitude": 68.90},
        {"id": 4, "name": "Zero", "latitude": 0, "longitude": 0},
        {"id": 5, "name": "West", "latitude": 38.6, "longitude": 50.0},
        {"id": 6, "name": "Broken", "latitude": "n/a", "longitude": 68.0},
        {"id": 7, "name": "NaN", "latitude": float("nan"), "longitude": 68.0},
        {"id": 8, "name": "Inf", "latitude": "inf", "longitude": 68.8},
        {"name": "No id", "latitude": 38.6, "longitude": 68.8},
    ],
    "bus_routes": [
        {"id": 10, "name": "b1 Rynok - Park"},
        {"id": 11, "name": "m2 Vokzal", "color": "#000000", "stop_ids": [2, 1, 42]},
        {"id": 12, "name": "NoKeyPoints"},
    ],
}

KEY_POINTS = {
    "b1 Rynok - Park": [
        {"stopName": "RYNOK", "basePoint": {"latitude": 38.0, "longitude": 68.0}},
        {"stopName": "Unknown name", "basePoint": {"latitude": 38.6102, "longitude": 68.7898}},
        {"stopName": "Nowhere", "basePoint": {"latitude": 38.9, "longitude": 68.9}},
        {"stopName": "Park"},
    ],
}


def test_stops_are_filtered_and_deduplicated():
    data = parse_network(MAIN)

    assert sorted(s.id for s in data.stops) == [1, 2, 3]
    assert data.stops.get(2).name == "Vokzal"
    assert data.stops.get(1).lat == pytest.approx(38.60)


def test_served_routes_are_normalised():
    data = parse_network(MAIN)

    assert data.stops.get(1).routes == ["b1", "m2", "17"]
    assert data.stops.get(2).routes == ["b1"]
    assert data.stops.get(3).routes == []


def test_coordinate_bounds_are_configurable():
    data = parse_network(MAIN, min_latitude=38.61, min_longitude=60.0)

    # the first stop 2 is filtered out, so its later duplicate is the one kept
    assert sorted(s.id for s in data.stops) == [2, 3]
    assert data.stops.get(2).name == "Vokzal duplicate"


def test_key_points_resolve_by_name_then_coordinates():
    data = parse_network(MAIN, KEY_POINTS)
    route = data.routes.get("10")

    assert route.stop_ids == [1, 2, None, 3]
    virtual = route.stops[2]
    assert virtual.virtual is True
    assert virtual.name == "Nowhere"
    assert (virtual.lat, virtual.lon) == (38.9, 68.9)


def test_explicit_stop_ids_take_precedence():
    data = parse_network(MAIN, KEY_POINTS)
    route = data.routes.get("11")

    assert route.stop_ids == [2, 1, None]
    assert route.stops[2].virtual is True
    assert route.color == "#000000"


def test_route_without_stop_list_is_empty():
    data = parse_network(MAIN, KEY_POINTS)
    assert data.routes.get("12").stops == []


def test_derived_route_fields():
    data = parse_network(MAIN, KEY_POINTS)
    b1, m2, other = list(data.routes)

    assert b1.color == ROUTE_COLORS[0]
    assert other.color == ROUTE_COLORS[2]
    assert b1.transport_type == "bus"
    assert m2.transport_type == "minibus"
    assert b1.short_name == "b1"
    assert other.short_name == "NoKeyPoints"


def test_input_records_are_not_mutated():
    records = json.loads(json.dumps(MAIN["bus_routes"]))
    parse_network({"bus_stops": MAIN["bus_stops"], "bus_routes": records}, KEY_POINTS)
    assert records == MAIN["bus_routes"]


@pytest.mark.parametrize(
    "number, expected",
    [
        ("b17", "bus"),
        ("B3a", "bus"),
        ("m12", "minibus"),
        ("t4", "trolleybus"),
        ("17", "bus"),
        ("41", "bus"),
        ("8", "minibus"),
        (None, "minibus"),
    ],
)
def test_transport_type_for(number, expected):
    assert transport_type_for(number) == expected


def test_load_network_from_files(tmp_path):
    main_file = tmp_path / "main.json"
    kp_file = tmp_path / "key_points.json"
    main_file.write_text(json.dumps(MAIN), encoding="utf-8")
    kp_file.write_text(json.dumps({"key_points": KEY_POINTS}), encoding="utf-8")

    data = load_network(main_file, kp_file)

    assert len(data.stops) == 3
    assert data.routes.get("10").stop_ids == [1, 2, None, 3]


def test_missing_main_file_uses_fallback(tmp_path):
    data = load_network(tmp_path / "missing.json")

    assert len(data.stops) == len(FALLBACK_NETWORK["bus_stops"])
    assert len(data.routes) == 0


def test_missing_key_points_file_is_tolerated(tmp_path):
    main_file = tmp_path / "main.json"
    main_file.write_text(json.dumps(MAIN), encoding="utf-8")

    data = load_network(main_file, tmp_path / "missing_kp.json")
    assert data.routes.get("10").stops == []


def test_invalid_json_raises(tmp_path):
    main_file = tmp_path / "main.json"
    main_file.write_text("{not json", encoding="utf-8")

    with pytest.raises(NetworkDataError):
        load_network(main_file)


def test_non_object_root_raises():
    with pytest.raises(NetworkDataError):
        parse_network([1, 2, 3])


def test_infinite_coordinates_are_dropped_before_graph_build():
    data = parse_network(MAIN)

    assert 8 not in data.stops
    snapshot = GraphManager(max_walking_distance_m=300.0).install(data)
    assert set(snapshot.graph.nodes) == {1, 2, 3}


MALFORMED_KEY_POINTS = {
    "b1 Rynok - Park": [
        {"stopName": "Nope", "basePoint": [38.61, 68.79]},
        {"stopName": "Bad coords", "basePoint": {"latitude": "n/a", "longitude": 68.79}},
        {"stopName": "Park", "basePoint": {"latitude": "n/a", "longitude": 68.80}},
        {"stopName": "Half", "basePoint": {"latitude": 38.61}},
    ],
}


def test_malformed_key_point_coordinates_become_virtual_stops():
    data = parse_network(MAIN, MALFORMED_KEY_POINTS)
    route = data.routes.get("10")

    assert route.stop_ids == [None, None, 3, None]
    for kp in (route.stops[0], route.stops[1], route.stops[3]):
        assert kp.virtual is True
        assert (kp.lat, kp.lon) == (None, None)
    assert route.stops[0].name == "Nope"


def test_malformed_key_points_file_still_loads(tmp_path):
    main_file = tmp_path / "main.json"
    kp_file = tmp_path / "key_points.json"
    main_file.write_text(json.dumps(MAIN), encoding="utf-8")
    kp_file.write_text(json.dumps({"key_points": MALFORMED_KEY_POINTS}), encoding="utf-8")

    data = load_network(main_file, kp_file)

    assert len(data.stops) == 3
    assert data.routes.get("10").stop_ids == [None, None, 3, None]

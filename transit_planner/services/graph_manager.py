# transit_planner/services/graph_manager.py
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import networkx as nx

from transit_planner.core.config import settings
from transit_planner.core.logger import logger
from transit_planner.services.catalog import TransitSnapshot
from transit_planner.services.graph_builder import build_graph
from transit_planner.services.network_loader import load_network


@dataclass(frozen=True)
class NetworkSnapshot:
    """
    One loaded network: its stops/routes, the graph built from them, and a
    version stamp. Never mutated after installation.
    """
    version: int
    data: TransitSnapshot
    graph: nx.DiGraph


class GraphManager:
    # Owns the network snapshot shared by all queries.

    def __init__(self, max_walking_distance_m: Optional[float] = None) -> None:
        self.max_walking_distance_m = (
            settings.MAX_WALKING_DISTANCE_M
            if max_walking_distance_m is None
            else max_walking_distance_m
        )
        self._snapshot: Optional[NetworkSnapshot] = None
        self._version = 0
        self._lock = threading.Lock()
        logger.info("GraphManager initialised (no network loaded yet).")

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    @property
    def version(self) -> int:
        snapshot = self._snapshot
        return snapshot.version if snapshot is not None else 0

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    def current(self) -> NetworkSnapshot:
        """
        The snapshot queries should read. Callers keep the returned object for
        the whole query so a concurrent reload cannot change it under them.
        """
        snapshot = self._snapshot
        if snapshot is None:
            raise RuntimeError("Network not loaded. Call install() or load_from_files() first.")
        return snapshot

    def install(self, data: TransitSnapshot) -> NetworkSnapshot:
        """
        Build a graph for `data` and make it the current snapshot.

        The version is reserved first and the graph built outside the lock;
        the old snapshot stays untouched and in-flight queries keep using it.
        If a later load finished first, this older one is not installed and
        the current snapshot is returned instead.
        """
        with self._lock:
            self._version += 1
            version = self._version

        graph = build_graph(data.stops, data.routes, self.max_walking_distance_m)

        with self._lock:
            current = self._snapshot
            if current is not None and current.version > version:
                logger.warning(
                    "Network v{} superseded by v{} while building, not installed",
                    version,
                    current.version,
                )
                return current
            snapshot = NetworkSnapshot(version=version, data=data, graph=graph)
            self._snapshot = snapshot

        logger.info(
            "Network snapshot v{} installed: {} stops, {} routes",
            snapshot.version,
            len(data.stops),
            len(data.routes),
        )
        return snapshot

    def load_from_files(
        self,
        data_file: str | Path = settings.DATA_FILE,
        key_points_file: str | Path | None = settings.KEY_POINTS_FILE,
    ) -> NetworkSnapshot:
        data = load_network(
            data_file,
            key_points_file,
            min_latitude=settings.MIN_LATITUDE,
            min_longitude=settings.MIN_LONGITUDE,
        )
        return self.install(data)

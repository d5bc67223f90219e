# transit_planner/api/v1/dependencies.py
from fastapi import HTTPException

from transit_planner.services.graph_manager import GraphManager
from transit_planner.services.routing_service import RoutingService

# Single shared instances
graph_manager = GraphManager()
routing_service = RoutingService(graph_manager=graph_manager)


def get_routing_service() -> RoutingService:
    if not routing_service.graph_manager.is_loaded:
        raise HTTPException(status_code=503, detail="Transit network not loaded yet")
    return routing_service

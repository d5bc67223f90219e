# transit_planner/api/v1/routes_health.py
from fastapi import APIRouter, Depends

from transit_planner.api.v1.dependencies import get_routing_service
from transit_planner.core.config import settings
from transit_planner.models.routing import NetworkStats
from transit_planner.services.routing_service import RoutingService

router = APIRouter(
    prefix="/health",
    tags=["health"],
)

network_router = APIRouter(
    prefix="/network",
    tags=["health"],
)


@router.get("/", summary="Health check")
async def health_check():
    """
    Simple health check endpoint to verify that the API is running.
    """
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


@network_router.get("/", response_model=NetworkStats, summary="Loaded network summary")
async def network_stats(service: RoutingService = Depends(get_routing_service)) -> NetworkStats:
    return service.network_stats()

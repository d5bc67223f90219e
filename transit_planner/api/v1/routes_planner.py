# transit_planner/api/v1/routes_planner.py
from fastapi import APIRouter, Depends, HTTPException

from transit_planner.api.v1.dependencies import get_routing_service
from transit_planner.models.routing import InvalidQuery, Itinerary, RouteNotFound, TripRequest
from transit_planner.services.routing_service import RoutingService

router = APIRouter(
    prefix="/plan",
    tags=["planner"],
)


@router.post(
    "/",
    response_model=Itinerary,
    summary="Plan a trip between two stops",
)
async def plan_trip(
    request: TripRequest,
    service: RoutingService = Depends(get_routing_service),
) -> Itinerary:
    """
    Plan a trip from one stop to another.

    - 400 if either stop id is unknown.
    - 404 if the stops exist but no route connects them.
    """
    result = service.plan_trip(request.from_stop_id, request.to_stop_id)

    if isinstance(result, InvalidQuery):
        raise HTTPException(status_code=400, detail=result.model_dump())
    if isinstance(result, RouteNotFound):
        raise HTTPException(status_code=404, detail=result.model_dump())
    return result

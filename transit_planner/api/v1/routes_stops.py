# transit_planner/api/v1/routes_stops.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from transit_planner.api.v1.dependencies import get_routing_service
from transit_planner.models.routing import NearestStop, StopDetail, StopMatch
from transit_planner.services.routing_service import RoutingService

router = APIRouter(
    prefix="/stops",
    tags=["stops"],
)


@router.get("/search", response_model=List[StopMatch], summary="Search stops by name")
async def search_stops(
    q: str = Query(..., description="Part of a stop name"),
    service: RoutingService = Depends(get_routing_service),
) -> List[StopMatch]:
    return service.search_stops(q)


@router.get("/nearest", response_model=NearestStop, summary="Nearest stop to a point")
async def nearest_stop(
    lat: float,
    lon: float,
    service: RoutingService = Depends(get_routing_service),
) -> NearestStop:
    found = service.nearest_stop(lat, lon)
    if found is None:
        raise HTTPException(status_code=404, detail="No stop within reach of this point")
    return found


@router.get("/{stop_id}", response_model=StopDetail, summary="Stop details")
async def stop_detail(
    stop_id: int,
    service: RoutingService = Depends(get_routing_service),
) -> StopDetail:
    detail = service.stop_detail(stop_id)
    if detail is None:
        raise HTTPException(status_code=404, detail=f"Stop {stop_id} not found")
    return detail

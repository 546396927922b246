"""
Routing Router
Stop sequencing for the route planner
"""

import logging
from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict

from route_sequencer import optimize_route, route_distance_km

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/routes", tags=["Routing"])


class Stop(BaseModel):
    """A point to visit; unknown fields (address, notes, ...) pass through"""

    model_config = ConfigDict(extra="allow")

    lat: float
    lng: float
    name: Optional[str] = None


class OptimizeRequest(BaseModel):
    stops: List[Stop]


@router.post("/optimize")
def optimize_stops(request: OptimizeRequest):
    """
    Reorder stops by nearest neighbor, keeping the first one as the origin.

    Returns the ordered stops, whether the order was recomputed, and the
    straight-line length of the route before and after.
    """
    stops = [stop.model_dump() for stop in request.stops]
    ordered = optimize_route(stops)

    original_km = route_distance_km(stops)
    optimized_km = route_distance_km(ordered)
    logger.info(
        f"Route with {len(stops)} stops: {original_km:.1f} km -> {optimized_km:.1f} km"
    )

    return {
        "stops": ordered,
        "optimized": ordered is not stops,
        "distance_km": {
            "original": round(original_km, 2),
            "optimized": round(optimized_km, 2),
        },
    }

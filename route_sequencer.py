"""
Route Sequencer
Orders route stops with a greedy nearest-neighbor heuristic

The first stop is the depot and never moves. From there the route always
continues to the closest stop not yet visited (great-circle distance). This is
a heuristic, not an exact TSP solver: O(n^2) over tens of stops.
"""

import logging
import math
from typing import Any, List, Mapping, Sequence, Tuple

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0

# Fewer stops than this are returned untouched
MIN_STOPS_TO_OPTIMIZE = 3


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in km between two lat/lon points given in degrees"""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) * math.sin(d_lat / 2)
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2)
        * math.sin(d_lon / 2)
    )
    # Rounding can push `a` just outside [0, 1] near the poles and antipodes
    a = min(max(a, 0.0), 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def _coordinate(stop: Any, key: str) -> float:
    value = stop.get(key) if isinstance(stop, Mapping) else getattr(stop, key, None)
    if isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _position(stop: Any) -> Tuple[float, float]:
    return _coordinate(stop, "lat"), _coordinate(stop, "lng")


def _distance_or_inf(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """Distance between positions; unusable coordinates count as infinitely far"""
    distance = haversine_km(a[0], a[1], b[0], b[1])
    return math.inf if math.isnan(distance) else distance


def optimize_route(stops: Sequence[Any]) -> List[Any]:
    """
    Reorder stops by nearest neighbor, keeping the first stop fixed.

    Args:
        stops: dicts (or objects) with `lat` and `lng`; any other fields are
               carried through since the same objects are returned

    Returns:
        The same stops in visiting order. Inputs with fewer than three stops
        are returned unchanged. When two stops are equally close the one that
        came first in the input wins. Stops without usable coordinates are
        never dropped; they end up last, in input order.
    """
    if len(stops) < MIN_STOPS_TO_OPTIMIZE:
        return stops

    optimized = [stops[0]]
    remaining = list(stops[1:])
    current = _position(stops[0])

    while remaining:
        nearest_index = 0
        min_distance = _distance_or_inf(current, _position(remaining[0]))

        for index in range(1, len(remaining)):
            distance = _distance_or_inf(current, _position(remaining[index]))
            if distance < min_distance:
                min_distance = distance
                nearest_index = index

        nearest = remaining.pop(nearest_index)
        optimized.append(nearest)

        # Keep measuring from the last usable position
        position = _position(nearest)
        if not (math.isnan(position[0]) or math.isnan(position[1])):
            current = position

    return optimized


def route_distance_km(stops: Sequence[Any]) -> float:
    """Total length of the path through stops in the given order"""
    total = 0.0
    for previous, following in zip(stops, stops[1:]):
        a, b = _position(previous), _position(following)
        distance = haversine_km(a[0], a[1], b[0], b[1])
        if math.isnan(distance):
            logger.debug("Skipping leg with unusable coordinates")
            continue
        total += distance
    return total

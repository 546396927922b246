"""
Ranking Router
Driver conduct ranking built from Traccar events and stored schedule deviations
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from conduct_scoring_engine import ScoreRecord, calculate_scores, fleet_summary
from json_file_store import JsonFileStore, get_file_store
from traccar_api_client import TraccarAPIClient, TraccarAPIError, get_traccar_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ranking", tags=["Ranking"])

SCHEDULE_EVENTS_RESOURCE = "schedule_events"


class RankingRequest(BaseModel):
    """Pre-fetched inputs for an offline ranking"""

    vehicles: List[Dict[str, Any]] = Field(default_factory=list)
    behavior_events: List[Dict[str, Any]] = Field(default_factory=list)
    schedule_events: List[Dict[str, Any]] = Field(default_factory=list)


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def current_month_window(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """First instant of this month to first instant of the next one (UTC)"""
    now = _utc(now or datetime.now(timezone.utc))
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


def _parse_time(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return _utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        return None


def schedule_events_in_window(
    events: List[Any], date_from: datetime, date_to: datetime
) -> List[Dict[str, Any]]:
    """Stored deviations whose eventTime (or created_at) falls in [date_from, date_to)"""
    selected = []
    for event in events:
        if not isinstance(event, dict):
            continue
        when = _parse_time(event.get("eventTime")) or _parse_time(
            event.get("created_at")
        )
        if when is not None and date_from <= when < date_to:
            selected.append(event)
    return selected


def _ranking_payload(records: List[ScoreRecord]) -> List[Dict[str, Any]]:
    return [
        {"position": position, **record.to_dict()}
        for position, record in enumerate(records, start=1)
    ]


@router.get("")
def get_ranking(
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    client: TraccarAPIClient = Depends(get_traccar_client),
    store: JsonFileStore = Depends(get_file_store),
):
    """
    Conduct ranking for a period (defaults to the current month).

    Returns:
        {
            "ranking": [{"position": 1, "id": 2, "name": "B", "score": 100, ...}],
            "fleet_stats": {...},
            "period": {"from": "...", "to": "..."},
            "timestamp": "..."
        }
    """
    default_from, default_to = current_month_window()
    date_from = _utc(date_from) if date_from else default_from
    date_to = _utc(date_to) if date_to else default_to

    if date_from > date_to:
        raise HTTPException(status_code=400, detail="'from' must not be after 'to'")

    try:
        vehicles = client.get_devices()
    except TraccarAPIError as e:
        raise HTTPException(status_code=502, detail=f"Could not load devices: {e}")

    behavior_events: List[Dict[str, Any]] = []
    device_ids = [v["id"] for v in vehicles if isinstance(v, dict) and "id" in v]
    if device_ids:
        try:
            behavior_events = client.get_events(date_from, date_to, device_ids=device_ids)
        except TraccarAPIError as e:
            logger.warning(f"Ranking without driving events: {e}")

    schedule_events = schedule_events_in_window(
        store.list_items(SCHEDULE_EVENTS_RESOURCE), date_from, date_to
    )

    records = calculate_scores(vehicles, behavior_events, schedule_events)
    logger.info(
        f"Ranking: {len(records)} vehicles, {len(behavior_events)} driving events, "
        f"{len(schedule_events)} schedule deviations"
    )

    return {
        "ranking": _ranking_payload(records),
        "fleet_stats": fleet_summary(records),
        "period": {"from": date_from.isoformat(), "to": date_to.isoformat()},
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.post("/calculate")
def calculate_ranking(request: RankingRequest):
    """Rank caller-supplied vehicles and events without touching Traccar"""
    records = calculate_scores(
        request.vehicles, request.behavior_events, request.schedule_events
    )
    return {
        "ranking": _ranking_payload(records),
        "fleet_stats": fleet_summary(records),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

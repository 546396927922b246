"""
Conduct Scoring Engine
Scores vehicles 0-100 from driving-behavior and schedule-deviation events

Every vehicle starts at 100 and loses a fixed penalty per event attributed to
it. The result is ranked best-first and feeds the ranking dashboard.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

import numpy as np

logger = logging.getLogger(__name__)

MAX_SCORE = 100


class EventKind(Enum):
    """Event types that carry a penalty"""

    OVERSPEED = "deviceOverspeed"
    HARD_BRAKING = "hardBraking"
    HARD_ACCELERATION = "hardAcceleration"
    HARD_CORNERING = "hardCornering"
    SCHEDULE_LATE_START = "schedule_late_start"


# Shared by behavior and schedule channels
SCORE_WEIGHTS: Dict[str, int] = {
    EventKind.OVERSPEED.value: 10,
    EventKind.HARD_BRAKING.value: 5,
    EventKind.HARD_ACCELERATION.value: 5,
    EventKind.HARD_CORNERING.value: 5,
    EventKind.SCHEDULE_LATE_START.value: 20,
}

# Penalty when an event type is not in SCORE_WEIGHTS
BEHAVIOR_DEFAULT_PENALTY = 0
SCHEDULE_DEFAULT_PENALTY = 15

# Which violation counter each kind increments
_BEHAVIOR_COUNTERS = {
    EventKind.OVERSPEED: "speeding",
    EventKind.HARD_BRAKING: "braking",
    EventKind.HARD_ACCELERATION: "acceleration",
    EventKind.HARD_CORNERING: "cornering",
}
_SCHEDULE_COUNTERS = {
    EventKind.SCHEDULE_LATE_START: "late",
}


def _get(obj: Any, key: str, default: Any = None) -> Any:
    """Read a field from a dict or an attribute-style object"""
    if isinstance(obj, Mapping):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _as_device_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    # Fractional, inf and nan ids never name a device
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


@dataclass(frozen=True)
class ConductEvent:
    """
    A single penalizable event attributed to a device.

    `kind` is None for event types outside EventKind; `raw_type` always keeps
    the string reported by the platform so unknown types can still be weighed.
    """

    device_id: Optional[int]
    raw_type: str
    kind: Optional[EventKind] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ConductEvent":
        """Build from a platform event ({deviceId, type, ...}); never raises"""
        if isinstance(data, ConductEvent):
            return data

        raw_type = _get(data, "type")
        raw_type = raw_type if isinstance(raw_type, str) else ""

        try:
            kind: Optional[EventKind] = EventKind(raw_type)
        except ValueError:
            kind = None

        return cls(
            device_id=_as_device_id(_get(data, "deviceId")),
            raw_type=raw_type,
            kind=kind,
        )


@dataclass
class ViolationCounts:
    """Per-vehicle infraction tallies"""

    speeding: int = 0
    braking: int = 0
    acceleration: int = 0
    cornering: int = 0
    late: int = 0

    def total(self) -> int:
        return (
            self.speeding + self.braking + self.acceleration + self.cornering + self.late
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "speeding": self.speeding,
            "braking": self.braking,
            "acceleration": self.acceleration,
            "cornering": self.cornering,
            "late": self.late,
        }


@dataclass
class ScoreRecord:
    """Conduct score of one vehicle for one observation window"""

    id: Any
    name: str
    score: int = MAX_SCORE
    violations: ViolationCounts = field(default_factory=ViolationCounts)

    @property
    def rating(self) -> str:
        """Dashboard label: excellent (>=90), regular (>=70) or critical"""
        if self.score >= 90:
            return "excellent"
        if self.score >= 70:
            return "regular"
        return "critical"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "score": self.score,
            "violations": self.violations.to_dict(),
            "rating": self.rating,
        }


def _apply(
    record: ScoreRecord,
    event: ConductEvent,
    default_penalty: int,
    counters: Dict[EventKind, str],
) -> None:
    record.score -= SCORE_WEIGHTS.get(event.raw_type, default_penalty)

    counter = counters.get(event.kind) if event.kind else None
    if counter:
        setattr(record.violations, counter, getattr(record.violations, counter) + 1)


def calculate_scores(
    vehicles: Iterable[Any],
    behavior_events: Iterable[Any],
    schedule_events: Optional[Iterable[Any]] = None,
) -> List[ScoreRecord]:
    """
    Score every vehicle and rank them best-first.

    Args:
        vehicles: {id, name} dicts (or objects) from the device registry
        behavior_events: {deviceId, type} driving events from the platform
        schedule_events: {deviceId, type} schedule-deviation events

    Returns:
        One ScoreRecord per vehicle, sorted by score descending. Equal scores
        keep the order in which the vehicles were given.

    Events for unknown devices are skipped. Nothing here raises on bad data.
    """
    records: Dict[Optional[int], ScoreRecord] = {}
    ordered: List[ScoreRecord] = []

    for vehicle in vehicles or []:
        vehicle_id = _get(vehicle, "id")
        name = _get(vehicle, "name")
        record = ScoreRecord(id=vehicle_id, name=name if name is not None else "")
        ordered.append(record)

        device_id = _as_device_id(vehicle_id)
        if device_id is not None:
            records[device_id] = record

    skipped = 0
    channels = (
        (behavior_events, BEHAVIOR_DEFAULT_PENALTY, _BEHAVIOR_COUNTERS),
        (schedule_events, SCHEDULE_DEFAULT_PENALTY, _SCHEDULE_COUNTERS),
    )
    for events, default_penalty, counters in channels:
        for raw_event in events or []:
            event = ConductEvent.from_dict(raw_event)
            record = records.get(event.device_id) if event.device_id is not None else None
            if record is None:
                skipped += 1
                continue
            _apply(record, event, default_penalty, counters)

    if skipped:
        logger.debug(f"Skipped {skipped} events for unknown devices")

    for record in ordered:
        record.score = max(0, record.score)

    return sorted(ordered, key=lambda r: r.score, reverse=True)


def fleet_summary(records: List[ScoreRecord]) -> Dict[str, Any]:
    """Aggregate statistics over a ranking"""
    totals = ViolationCounts()
    for record in records:
        for counter, value in record.violations.to_dict().items():
            setattr(totals, counter, getattr(totals, counter) + value)

    if not records:
        return {
            "vehicle_count": 0,
            "avg_score": None,
            "median_score": None,
            "best_score": None,
            "worst_score": None,
            "violations": totals.to_dict(),
        }

    scores = np.array([r.score for r in records], dtype=float)
    return {
        "vehicle_count": len(records),
        "avg_score": round(float(np.mean(scores)), 1),
        "median_score": round(float(np.median(scores)), 1),
        "best_score": int(np.max(scores)),
        "worst_score": int(np.min(scores)),
        "violations": totals.to_dict(),
    }

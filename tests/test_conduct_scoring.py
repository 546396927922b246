"""
Unit tests for the Conduct Scoring Engine
"""

import copy

import pytest

from conduct_scoring_engine import (
    BEHAVIOR_DEFAULT_PENALTY,
    SCHEDULE_DEFAULT_PENALTY,
    SCORE_WEIGHTS,
    ConductEvent,
    EventKind,
    ScoreRecord,
    ViolationCounts,
    calculate_scores,
    fleet_summary,
)


def _by_id(records):
    return {r.id: r for r in records}


class TestConductEvent:
    """Test parsing of platform events"""

    def test_known_kind(self):
        event = ConductEvent.from_dict({"deviceId": 7, "type": "hardBraking"})
        assert event.device_id == 7
        assert event.kind is EventKind.HARD_BRAKING
        assert event.raw_type == "hardBraking"

    def test_unknown_kind_keeps_raw_type(self):
        event = ConductEvent.from_dict({"deviceId": 7, "type": "geofenceEnter"})
        assert event.kind is None
        assert event.raw_type == "geofenceEnter"

    def test_malformed_fields_are_absent(self):
        event = ConductEvent.from_dict({"deviceId": "abc", "type": 42})
        assert event.device_id is None
        assert event.raw_type == ""
        assert event.kind is None

    def test_numeric_string_device_id(self):
        assert ConductEvent.from_dict({"deviceId": "12", "type": "x"}).device_id == 12

    def test_whole_float_device_id(self):
        assert ConductEvent.from_dict({"deviceId": 7.0, "type": "x"}).device_id == 7

    @pytest.mark.parametrize("device_id", [1.9, float("inf"), float("-inf"), float("nan")])
    def test_non_integral_device_id_is_absent(self, device_id):
        assert ConductEvent.from_dict({"deviceId": device_id, "type": "x"}).device_id is None


class TestScoreRecord:
    """Test ScoreRecord dataclass"""

    @pytest.mark.parametrize(
        "score,rating",
        [(100, "excellent"), (90, "excellent"), (89, "regular"), (70, "regular"), (69, "critical"), (0, "critical")],
    )
    def test_rating(self, score, rating):
        assert ScoreRecord(id=1, name="A", score=score).rating == rating

    def test_to_dict(self):
        record = ScoreRecord(
            id=1, name="A", score=85, violations=ViolationCounts(speeding=1, braking=1)
        )
        assert record.to_dict() == {
            "id": 1,
            "name": "A",
            "score": 85,
            "violations": {
                "speeding": 1,
                "braking": 1,
                "acceleration": 0,
                "cornering": 0,
                "late": 0,
            },
            "rating": "regular",
        }


class TestCalculateScores:
    """Test calculate_scores"""

    def test_reference_example(self):
        vehicles = [{"id": 1, "name": "A"}, {"id": 2, "name": "B"}]
        events = [
            {"deviceId": 1, "type": "deviceOverspeed"},
            {"deviceId": 1, "type": "hardBraking"},
        ]

        result = calculate_scores(vehicles, events, [])

        assert [r.id for r in result] == [2, 1]
        assert result[0].name == "B"
        assert result[0].score == 100
        assert result[1].score == 85
        assert result[1].violations.to_dict() == {
            "speeding": 1,
            "braking": 1,
            "acceleration": 0,
            "cornering": 0,
            "late": 0,
        }

    def test_zero_event_vehicles_score_100(self, sample_vehicles):
        result = calculate_scores(sample_vehicles, [])

        assert len(result) == 3
        for record in result:
            assert record.score == 100
            assert record.violations.total() == 0

    def test_schedule_events_default_to_empty(self, sample_vehicles):
        assert calculate_scores(sample_vehicles, []) == calculate_scores(
            sample_vehicles, [], []
        )

    def test_each_behavior_kind_counts(self):
        vehicles = [{"id": 1, "name": "A"}]
        events = [
            {"deviceId": 1, "type": "deviceOverspeed"},
            {"deviceId": 1, "type": "hardBraking"},
            {"deviceId": 1, "type": "hardAcceleration"},
            {"deviceId": 1, "type": "hardCornering"},
        ]

        (record,) = calculate_scores(vehicles, events)

        assert record.score == 100 - 10 - 5 - 5 - 5
        assert record.violations.to_dict() == {
            "speeding": 1,
            "braking": 1,
            "acceleration": 1,
            "cornering": 1,
            "late": 0,
        }

    def test_unknown_device_is_ignored(self):
        vehicles = [{"id": 1, "name": "A"}]
        events = [{"deviceId": 99, "type": "deviceOverspeed"}]
        schedule = [{"deviceId": 99, "type": "schedule_late_start"}]

        result = calculate_scores(vehicles, events, schedule)

        assert [r.id for r in result] == [1]
        assert result[0].score == 100

    def test_unknown_behavior_type_costs_nothing(self, sample_vehicles, sample_behavior_events):
        result = _by_id(calculate_scores(sample_vehicles, sample_behavior_events))

        # hardCornering (5) + ignitionOn (default 0)
        assert result[3].score == 95
        assert result[3].violations.cornering == 1
        assert BEHAVIOR_DEFAULT_PENALTY == 0

    def test_late_start_schedule_event(self):
        vehicles = [{"id": 1, "name": "A"}]
        schedule = [{"deviceId": 1, "type": "schedule_late_start"}]

        (record,) = calculate_scores(vehicles, [], schedule)

        assert record.score == 80
        assert record.violations.late == 1

    def test_unknown_schedule_type_uses_fallback_penalty(self):
        vehicles = [{"id": 1, "name": "A"}]
        schedule = [{"deviceId": 1, "type": "schedule_late_arrival"}]

        (record,) = calculate_scores(vehicles, [], schedule)

        assert record.score == 100 - SCHEDULE_DEFAULT_PENALTY == 85
        assert record.violations.late == 0

    def test_weighted_type_on_wrong_channel_counts_no_violation(self):
        vehicles = [{"id": 1, "name": "A"}]
        behavior = [{"deviceId": 1, "type": "schedule_late_start"}]
        schedule = [{"deviceId": 1, "type": "deviceOverspeed"}]

        (record,) = calculate_scores(vehicles, behavior, schedule)

        assert record.score == 100 - 20 - 10
        assert record.violations.total() == 0

    def test_score_clamped_at_zero(self):
        vehicles = [{"id": 1, "name": "A"}]
        events = [{"deviceId": 1, "type": "deviceOverspeed"}] * 25

        (record,) = calculate_scores(vehicles, events)

        assert record.score == 0
        assert record.violations.speeding == 25

    def test_scores_always_in_range(self, sample_vehicles):
        kinds = list(SCORE_WEIGHTS) + ["unknown", None]
        events = [
            {"deviceId": (i % 4) + 1, "type": kinds[i % len(kinds)]} for i in range(60)
        ]

        for record in calculate_scores(sample_vehicles, events, events):
            assert 0 <= record.score <= 100

    def test_ties_keep_vehicle_order(self):
        vehicles = [{"id": 3, "name": "C"}, {"id": 1, "name": "A"}, {"id": 2, "name": "B"}]
        events = [{"deviceId": 1, "type": "hardBraking"}]

        result = calculate_scores(vehicles, events)

        assert [r.id for r in result] == [3, 2, 1]

    def test_idempotent_and_pure(self, sample_vehicles, sample_behavior_events):
        vehicles_before = copy.deepcopy(sample_vehicles)
        events_before = copy.deepcopy(sample_behavior_events)

        first = calculate_scores(sample_vehicles, sample_behavior_events)
        second = calculate_scores(sample_vehicles, sample_behavior_events)

        assert [r.to_dict() for r in first] == [r.to_dict() for r in second]
        assert sample_vehicles == vehicles_before
        assert sample_behavior_events == events_before

    def test_malformed_input_never_raises(self):
        vehicles = [{"id": 1, "name": "A"}, {"name": "no id"}, {}]
        events = [{}, {"deviceId": None}, {"type": "hardBraking"}, "garbage", None]

        result = calculate_scores(vehicles, events, None)

        assert len(result) == 3
        assert all(r.score == 100 for r in result)

    def test_fractional_device_id_matches_no_vehicle(self):
        result = calculate_scores(
            [{"id": 1, "name": "A"}], [{"deviceId": 1.9, "type": "hardBraking"}]
        )
        assert result[0].score == 100

    def test_infinite_ids_never_raise(self):
        events = [{"deviceId": float("inf"), "type": "hardBraking"}]

        result = calculate_scores(
            [{"id": 1, "name": "A"}, {"id": float("inf"), "name": "Bad"}], events
        )

        assert [r.score for r in result] == [100, 100]

    def test_string_vehicle_ids_match_numeric_events(self):
        result = calculate_scores(
            [{"id": "5", "name": "E"}], [{"deviceId": 5, "type": "hardBraking"}]
        )
        assert result[0].score == 95


class TestFleetSummary:
    """Test fleet_summary"""

    def test_summary(self, sample_vehicles, sample_behavior_events):
        records = calculate_scores(sample_vehicles, sample_behavior_events)

        summary = fleet_summary(records)

        assert summary["vehicle_count"] == 3
        assert summary["best_score"] == 100
        assert summary["worst_score"] == 85
        assert summary["median_score"] == 95.0
        assert summary["avg_score"] == round((100 + 85 + 95) / 3, 1)
        assert summary["violations"]["speeding"] == 1
        assert summary["violations"]["cornering"] == 1

    def test_empty(self):
        summary = fleet_summary([])
        assert summary["vehicle_count"] == 0
        assert summary["avg_score"] is None

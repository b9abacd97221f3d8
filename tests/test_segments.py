import pytest
from datetime import date, datetime, timedelta

from waypoints.models import CheckpointVisit, VisitStatus
from waypoints.policy import default_policy
from waypoints.segments import extract_day_segments, extract_history_segments, find_anchor

DAY = date(2024, 3, 5)


def visit(name: str, seq: int, hour: int = None, minute: int = 0) -> CheckpointVisit:
    completed = datetime(2024, 3, 5, hour, minute) if hour is not None else None
    return CheckpointVisit.new(name, seq, completed)


def test_durations_are_measured_from_previous_checkpoint():
    """
    Each segment is the gap since the previous completion; cumulative is since the anchor.
    """
    day = extract_day_segments(DAY, [
        visit("Park Point 2", 2, 7, 45),
        visit("Leave Office", 0, 7, 30),
        visit("Park Point 1", 1, 7, 40),
    ])

    assert [s.checkpoint_name for s in day.segments] == ["Park Point 1", "Park Point 2"]
    assert [s.duration_from_previous_minutes for s in day.segments] == [10.0, 5.0]
    assert [s.cumulative_from_start_minutes for s in day.segments] == [10.0, 15.0]


@pytest.mark.parametrize("gap", [-30, 0, 7.5, 45, 180, 181, 600])
def test_gap_is_clamped_into_sane_bounds(gap):
    anchor_time = datetime(2024, 3, 5, 8, 0)
    day = extract_day_segments(DAY, [
        CheckpointVisit.new("Leave Office", 0, anchor_time),
        CheckpointVisit.new("Stop", 1, anchor_time + timedelta(minutes=gap)),
    ])

    segment = day.segments[0]
    assert segment.duration_from_previous_minutes == max(0, min(180, gap))
    assert segment.cumulative_from_start_minutes == max(0, gap)


def test_anchor_falls_back_to_leave_pattern_when_no_sequence_zero():
    """
    Visits before the anchor (e.g. office work scans) do not produce segments.
    """
    day = extract_day_segments(DAY, [
        visit("Sort mail", 1, 7, 0),
        visit("Leave Office", 2, 7, 30),
        visit("Park Point 1", 3, 7, 50),
    ])

    assert len(day.segments) == 1
    assert day.segments[0].checkpoint_name == "Park Point 1"
    assert day.segments[0].duration_from_previous_minutes == 20.0
    assert day.segments[0].cumulative_from_start_minutes == 20.0


def test_anchor_falls_back_to_earliest_completion():
    visits = [visit("X", 3, 8, 10), visit("Y", 4, 8, 0), visit("Z", 5, 8, 20)]

    assert find_anchor(visits, default_policy()).checkpoint_name == "Y"

    day = extract_day_segments(DAY, visits)
    assert [s.checkpoint_name for s in day.segments] == ["Z"]
    assert day.segments[0].duration_from_previous_minutes == 20.0


def test_pending_visits_are_ignored():
    day = extract_day_segments(DAY, [
        visit("Leave Office", 0, 7, 30),
        visit("Park Point 1", 1),
        visit("Park Point 2", 2, 7, 50),
    ])

    assert [s.checkpoint_name for s in day.segments] == ["Park Point 2"]
    assert day.segments[0].duration_from_previous_minutes == 20.0


def test_days_without_usable_segments_are_skipped():
    assert extract_day_segments(DAY, []) is None
    assert extract_day_segments(DAY, [visit("Park Point 1", 1)]) is None
    assert extract_day_segments(DAY, [visit("Leave Office", 0, 7, 30)]) is None


def test_history_records_are_grouped_by_day_newest_first():
    records = [
        {"date": "2024-03-04", "checkpointName": "Leave Office", "sequenceNumber": 0, "completedAt": "2024-03-04T07:00:00"},
        {"date": "2024-03-04", "checkpointName": "Park Point 1", "sequenceNumber": 1, "completedAt": "2024-03-04T07:12:00"},
        {"date": "2024-03-05", "checkpoint_name": "Leave Office", "sequence_number": 0, "completed_at": "2024-03-05T07:00:00Z"},
        {"date": "2024-03-05", "checkpoint_name": "Park Point 1", "sequence_number": 1, "completed_at": "2024-03-05T07:08:00Z"},
        # a day where nothing was scanned
        {"date": "2024-03-06", "checkpoint_name": "Leave Office", "sequence_number": 0, "completed_at": None},
        {"date": "2024-03-06", "checkpoint_name": "Park Point 1", "sequence_number": 1, "completed_at": "not a time"},
    ]

    days = extract_history_segments(records)

    assert [d.day for d in days] == [date(2024, 3, 5), date(2024, 3, 4)]
    assert days[0].segments[0].duration_from_previous_minutes == 8.0
    assert days[1].segments[0].duration_from_previous_minutes == 12.0


def test_legacy_record_keys_are_understood():
    record = {"address": "Park Point 3", "sequence_number": 4, "delivery_time": "2024-03-05T09:15:00", "status": "completed"}

    parsed = CheckpointVisit.from_record(record)

    assert parsed.checkpoint_name == "Park Point 3"
    assert parsed.sequence_number == 4
    assert parsed.completed_at == datetime(2024, 3, 5, 9, 15)
    assert parsed.status == VisitStatus.COMPLETED
    assert parsed.day == date(2024, 3, 5)


def day_records(park_point_2_sequence, include_sequence=True):
    """
    Leave at 07:00, Park Point 1 at 07:12, Park Point 2 at 07:20.
    Park Point 2's sequence is the one under test.
    """
    records = [
        {"date": "2024-03-05", "checkpoint_name": "Leave Office", "sequence_number": 0, "completed_at": "2024-03-05T07:00:00"},
        {"date": "2024-03-05", "checkpoint_name": "Park Point 1", "sequence_number": 1, "completed_at": "2024-03-05T07:12:00"},
        {"date": "2024-03-05", "checkpoint_name": "Park Point 2", "completed_at": "2024-03-05T07:20:00"},
    ]
    if include_sequence:
        records[2]["sequence_number"] = park_point_2_sequence
    return records


@pytest.mark.parametrize("bad_sequence", ["n/a", "1.5", "", float("nan")])
def test_malformed_sequence_numbers_drop_the_record(bad_sequence):
    days = extract_history_segments(day_records(bad_sequence))

    assert len(days) == 1
    assert [s.checkpoint_name for s in days[0].segments] == ["Park Point 1"]
    assert days[0].segments[0].duration_from_previous_minutes == 12.0


def test_missing_sequence_number_is_not_treated_as_the_start():
    days = extract_history_segments(day_records(None, include_sequence=False))

    assert [s.checkpoint_name for s in days[0].segments] == ["Park Point 1"]
    assert days[0].segments[0].duration_from_previous_minutes == 12.0
    assert days[0].segments[0].cumulative_from_start_minutes == 12.0


def test_whole_number_sequences_from_csv_are_accepted():
    days = extract_history_segments(day_records("2.0"))

    assert [s.checkpoint_name for s in days[0].segments] == ["Park Point 1", "Park Point 2"]
    assert days[0].segments[1].duration_from_previous_minutes == 8.0


def test_sequence_parsing():
    assert CheckpointVisit.from_record({"checkpoint_name": "A", "sequence_number": "n/a"}).sequence_number is None
    assert CheckpointVisit.from_record({"checkpoint_name": "A"}).sequence_number is None
    assert CheckpointVisit.from_record({"checkpoint_name": "A", "sequenceNumber": "7"}).sequence_number == 7
    assert CheckpointVisit.from_record({"checkpoint_name": "A", "order": 3.0}).sequence_number == 3


def test_earliest_completion_anchor_with_mixed_zone_timestamps():
    """
    No sequence 0 and no start-like name, one UTC-stamped and one naive scan:
    ordered on wall-clock time instead of failing.
    """
    visits = [
        CheckpointVisit.new("Corner Box", 1, "2024-03-05T07:10:00Z"),
        CheckpointVisit.new("Mail Drop", 2, "2024-03-05T07:20:00"),
    ]

    assert find_anchor(visits, default_policy()).checkpoint_name == "Corner Box"

    day = extract_day_segments(DAY, visits)
    assert [s.checkpoint_name for s in day.segments] == ["Mail Drop"]
    assert day.segments[0].duration_from_previous_minutes == 10.0

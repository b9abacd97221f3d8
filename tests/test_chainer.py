import pytest
from datetime import date, datetime, timedelta, timezone

from prediction.chainer import PredictionInputError, chain_predictions
from prediction.clock import AbsoluteTime, LocalClockTime, parse_start_time, resolve_start_time
from waypoints.models import CheckpointVisit, ConfidenceTier, WaypointAverage

TODAY = date(2024, 3, 5)


def at(hour: int, minute: int) -> datetime:
    return datetime(2024, 3, 5, hour, minute)


@pytest.fixture
def averages():
    return {
        "A": WaypointAverage("A", 10, 7, ConfidenceTier.MEDIUM),
        "B": WaypointAverage("B", 5, 12, ConfidenceTier.HIGH),
        "C": WaypointAverage("C", 5, 3, ConfidenceTier.LOW),
    }


def pending(*names):
    return [CheckpointVisit.new(name, index + 1) for index, name in enumerate(names)]


def test_each_prediction_chains_off_the_previous_one(averages):
    results = chain_predictions(pending("A", "B"), "07:30", averages, on_date=TODAY)

    assert [r.predicted_at for r in results] == [at(7, 40), at(7, 45)]
    assert [r.predicted_minutes_from_start for r in results] == [10, 15]
    assert [r.confidence_tier for r in results] == [ConfidenceTier.MEDIUM, ConfidenceTier.HIGH]
    assert results[1].sample_size == 12


def test_actual_completion_overrides_and_resynchronizes(averages):
    checkpoints = [
        CheckpointVisit.new("A", 1, at(7, 50)),
        CheckpointVisit.new("B", 2),
    ]

    a, b = chain_predictions(checkpoints, "07:30", averages, on_date=TODAY)

    assert a.confidence_tier == ConfidenceTier.ACTUAL
    assert a.predicted_at == at(7, 50)
    assert a.actual_minutes == 20
    # landed 10 minutes after the 07:40 the chain expected
    assert a.variance_minutes == 10
    assert b.predicted_at == at(7, 55)
    assert b.predicted_minutes_from_start == 25


def test_pause_offset_is_displayed_once_and_never_compounds(averages):
    results = chain_predictions(pending("A", "B", "C"), "07:30", averages, pause_offset_minutes=15, on_date=TODAY)

    # unpaused chain: 07:40, 07:45, 07:50 -> each shown 15 minutes later
    assert [r.predicted_at for r in results] == [at(7, 55), at(8, 0), at(8, 5)]
    assert results[2].predicted_minutes_from_start == 35


def test_unknown_checkpoint_uses_default_duration(averages):
    results = chain_predictions(pending("A", "Unmapped Stop", "B"), "07:30", averages, on_date=TODAY)

    assert results[1].predicted_at == at(7, 46)
    assert results[1].confidence_tier == ConfidenceTier.LOW
    assert results[1].sample_size == 0
    assert results[2].predicted_at == at(7, 51)


def test_unparseable_start_fails_closed(averages):
    results = chain_predictions(pending("A", "B"), "garbage", averages)

    assert len(results) == 2
    assert all(r.predicted_at is None for r in results)
    assert all(r.predicted_minutes_from_start is None for r in results)
    assert all(r.confidence_tier == ConfidenceTier.NONE for r in results)


def test_empty_list_gives_empty_result(averages):
    assert chain_predictions([], "07:30", averages) == []


def test_same_inputs_same_output(averages):
    checkpoints = [CheckpointVisit.new("A", 1, at(7, 42)), *pending("B", "C")]

    first = chain_predictions(checkpoints, "07:30", averages, pause_offset_minutes=5, on_date=TODAY)
    second = chain_predictions(checkpoints, "07:30", averages, pause_offset_minutes=5, on_date=TODAY)

    assert first == second


def test_duplicate_names_are_predicted_per_position(averages):
    results = chain_predictions(pending("A", "A"), "07:30", averages, on_date=TODAY)

    assert [r.predicted_at for r in results] == [at(7, 40), at(7, 50)]


def test_clock_start_lands_on_the_day_of_the_list(averages):
    checkpoints = [CheckpointVisit.new("A", 1, "2024-03-05T07:50:00"), *pending("B")]

    results = chain_predictions(checkpoints, "07:30", averages)

    assert results[0].actual_minutes == 20
    assert results[1].predicted_at == at(7, 55)


def test_full_timestamps_with_zones(averages):
    checkpoints = [
        {"checkpointName": "A", "sequenceNumber": 1, "completedAt": "2024-03-05T13:50:00Z", "status": "completed"},
        {"checkpointName": "B", "sequenceNumber": 2, "status": "pending"},
    ]

    a, b = chain_predictions(checkpoints, "2024-03-05T13:30:00+00:00", averages)

    assert a.actual_minutes == 20
    assert b.predicted_at == datetime(2024, 3, 5, 13, 55, tzinfo=timezone.utc)


def test_averages_may_be_given_as_a_list(averages):
    results = chain_predictions(pending("B"), at(7, 30), list(averages.values()))

    assert results[0].predicted_at == at(7, 35)


@pytest.mark.parametrize("bad", ["A,B", None, {"name": "A"}])
def test_non_list_checkpoints_are_rejected(bad, averages):
    with pytest.raises(PredictionInputError):
        chain_predictions(bad, "07:30", averages)


def test_bad_entries_and_negative_pause_are_rejected(averages):
    with pytest.raises(PredictionInputError):
        chain_predictions([42], "07:30", averages)
    with pytest.raises(PredictionInputError):
        chain_predictions(pending("A"), "07:30", averages, pause_offset_minutes=-5)


def test_start_time_union():
    assert parse_start_time("7:05") == LocalClockTime(7, 5)
    assert parse_start_time("25:00") is None
    assert parse_start_time("2024-03-05T07:30:00") == AbsoluteTime(at(7, 30))
    assert parse_start_time(12) is None

    resolved = resolve_start_time("07:30", on_date=TODAY, tz_name="America/Chicago")
    assert resolved.hour == 7 and resolved.minute == 30
    assert resolved.utcoffset() == timedelta(hours=-6)

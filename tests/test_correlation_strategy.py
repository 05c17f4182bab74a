import pytest

from telemetry.core.filtering.options import CorrectionOptions, Method
from telemetry.core.filtering.orchestrator import clean_sensor_data, correct_records
from telemetry.core.filtering.strategies.correlation import CorrelationStrategy


def test_single_watt_dropout_is_interpolated(make_records):
    records = make_records([5, 5, 5, 5, 5], watt=[100, 100, 5, 100, 100])
    result = correct_records(records, method=Method.CORRELATION)

    flags = [bool(r.get("watt_corrected")) for r in result.corrected_records]
    assert flags == [False, False, True, False, False]
    assert result.corrected_records[2]["watt"] == pytest.approx(100)
    assert result.corrected_records[2]["watt_original"] == 5
    assert result.stats.fixed_fields == {"stroke_rate": 0, "watt": 1}


def test_stationary_session_is_untouched(make_records):
    records = make_records([0, 0, 0], watt=[0, 0, 0])
    result = correct_records(records, method=Method.AUTO)
    assert result.corrected_records == records
    assert result.stats.noisy_points == 0
    assert result.stats.quality_score == 100.0


def test_auto_uses_correlation(make_records):
    records = make_records([5] * 5, watt=[100, 100, 5, 100, 100])
    cleaned = clean_sensor_data(records, fields=["watt"])
    assert cleaned[2]["watt"] == pytest.approx(100)


def test_interpolates_between_unequal_neighbours(make_records):
    records = make_records([6] * 5, stroke_rate=[40, 40, 2, 2, 60])
    result = correct_records(records, method=Method.CORRELATION, fields=["stroke_rate"])
    values = [r["stroke_rate"] for r in result.corrected_records]
    assert values[2] == pytest.approx(40 + 20 / 3)
    # index 3 sees the corrected index 2 as its previous valid neighbour
    assert values[3] == pytest.approx(values[2] + (60 - values[2]) / 2)


def test_ratio_profile_learned_from_enough_pairs(make_records):
    speeds = [8 + (i % 4) for i in range(20)]
    records = make_records(speeds, watt=[s * 12 for s in speeds])
    result = correct_records(records, method=Method.CORRELATION, fields=["watt"])
    profile = result.diagnostics["watt"]
    assert profile["samples"] == 20
    assert profile["ratio_mean"] == pytest.approx(12)
    assert profile["correlation"] == pytest.approx(1.0)


def test_no_profile_for_short_sessions(make_records):
    records = make_records([8] * 10, watt=[100] * 10)
    result = correct_records(records, method=Method.CORRELATION, fields=["watt"])
    assert result.diagnostics == {}


def test_replacement_respects_minimum_valid_value(make_records):
    strategy = CorrelationStrategy(CorrectionOptions())
    records = make_records([4, 4, 4], watt=[None, 2, None])
    strategy.prepare(records, ["watt"])
    value = strategy.replacement(records, 1, "watt", 4)
    assert value >= 30


def test_expected_value_floors():
    strategy = CorrelationStrategy(CorrectionOptions())
    assert strategy.expected_value("stroke_rate", 8) == 20
    assert strategy.expected_value("stroke_rate", 4) == 10
    assert strategy.expected_value("watt", 2) == 20


def test_plausibility_floor_flags_low_stroke_rate(make_records):
    strategy = CorrelationStrategy(CorrectionOptions())
    records = make_records([8, 8], stroke_rate=[12, 12])
    assert strategy.is_dropout(records, 1, "stroke_rate", 12, 8)
    assert not strategy.is_dropout(records, 1, "stroke_rate", 12, 6)

import copy

import pytest

from telemetry.core.filtering.options import CorrectionOptions, Method
from telemetry.core.filtering.orchestrator import (
    apply_fix,
    correct_records,
    filter_sensor_data,
    get_original_value,
    is_corrected_point,
    reference_is_stable,
)
from telemetry.core.errors import MissingDataError


def _noisy_session(make_records):
    return make_records(
        [5, 5, 5, 5, 5, 5],
        stroke_rate=[40, 41, 2, 40, 39, 40],
        watt=[100, 100, 5, 100, 0, 100],
    )


@pytest.mark.parametrize("method", [m.value for m in Method])
def test_every_method_keeps_length_order_and_input(make_records, method):
    records = _noisy_session(make_records)
    snapshot = copy.deepcopy(records)

    result = correct_records(records, method=method)

    assert records == snapshot
    assert len(result.corrected_records) == len(records)
    assert [r["timer_time"] for r in result.corrected_records] == [r["timer_time"] for r in records]
    assert result.stats.total_points == 6
    assert 0 <= result.stats.quality_score <= 100


@pytest.mark.parametrize("method", ["threshold", "movingAverage", "correlation", "contextual", "auto"])
def test_second_pass_finds_nothing_new(make_records, method):
    first = correct_records(_noisy_session(make_records), method=method)
    second = correct_records(first.corrected_records, method=method)
    for before, after in zip(first.corrected_records, second.corrected_records):
        assert before["stroke_rate"] == after["stroke_rate"]
        assert before["watt"] == after["watt"]
    assert second.stats.noisy_points == 0


def test_corrected_values_respect_field_minimum(make_records):
    result = correct_records(_noisy_session(make_records), method=Method.CORRELATION)
    for record in result.corrected_records:
        if record.get("watt_corrected"):
            assert record["watt"] >= 30
        if record.get("stroke_rate_corrected"):
            assert record["stroke_rate"] >= 10


def test_quality_score_counts_points_not_fields(make_records):
    result = correct_records(_noisy_session(make_records), method=Method.CORRELATION)
    # index 2 is fixed in both fields, index 4 in watt only
    assert result.stats.fixed_fields == {"stroke_rate": 1, "watt": 2}
    assert result.stats.noisy_points == 2
    assert result.stats.quality_score == pytest.approx(100 * (1 - 2 / 6))


def test_first_point_is_never_corrected(make_records):
    records = make_records([5, 5, 5], watt=[0, 100, 100])
    result = correct_records(records, method=Method.CORRELATION, fields=["watt"])
    assert result.corrected_records[0]["watt"] == 0
    assert not is_corrected_point(result.corrected_records, 0, "watt")


def test_missing_reference_skips_point(make_records):
    records = make_records([5, 5, 5], watt=[100, 5, 100])
    del records[1]["enhanced_speed"]
    result = correct_records(records, method=Method.CORRELATION, fields=["watt"])
    assert result.corrected_records[1]["watt"] == 5
    assert result.stats.noisy_points == 0


def test_reference_gate(make_records):
    options = CorrectionOptions()
    records = make_records([10, 11, 20, 0.5])
    assert reference_is_stable(records, 1, options)
    assert not reference_is_stable(records, 2, options)
    assert not reference_is_stable(make_records([0.9, 0.9]), 1, options)
    with pytest.raises(MissingDataError):
        reference_is_stable([{"watt": 1}, {"watt": 2}], 1, options)


def test_empty_input():
    result = correct_records([], method="threshold")
    assert result.corrected_records == []
    assert result.stats.total_points == 0
    assert result.stats.quality_score == 100.0


def test_unknown_method_rejected():
    with pytest.raises(ValueError):
        CorrectionOptions.from_dict({"method": "median"})


def test_options_accept_camel_case_and_ignore_unknown():
    options = CorrectionOptions.from_dict({
        "method": "moving_average",
        "referenceField": "speed",
        "dropThreshold": 0.3,
        "somethingElse": 1,
        "windowSize": None,
    })
    assert options.method == Method.MOVING_AVERAGE
    assert options.reference_field == "speed"
    assert options.drop_threshold == 0.3
    assert options.window_size == 5


def test_custom_reference_field():
    records = [{"timer_time": i, "speed": 5, "watt": w} for i, w in enumerate([100, 100, 5, 100])]
    out = filter_sensor_data(records, method="correlation", fields=["watt"], referenceField="speed")
    assert out[2]["watt"] == pytest.approx(100)


def test_original_value_kept_from_first_fix():
    record = {"watt": 5}
    apply_fix(record, "watt", 50)
    apply_fix(record, "watt", 80)
    assert record == {"watt": 80, "watt_original": 5, "watt_corrected": True}


def test_original_value_helpers(make_records):
    result = correct_records(make_records([5] * 4, watt=[100, 100, 5, 100]), method="auto", fields=["watt"])
    out = result.corrected_records
    assert is_corrected_point(out, 2, "watt")
    assert not is_corrected_point(out, 1, "watt")
    assert not is_corrected_point(out, 10, "watt")
    assert get_original_value(out, 2, "watt") == 5
    assert get_original_value(out, 1, "watt") == 100
    assert get_original_value(out, -1, "watt") is None


def test_annotations_follow_the_record_spelling(make_records):
    records = make_records([5] * 6, **{"stroke rate": [40, 41, 2, 40, 39, 40]})
    result = correct_records(records, method=Method.CORRELATION, fields=["stroke_rate"])
    fixed = result.corrected_records[2]

    assert fixed["stroke rate_corrected"] is True
    assert fixed["stroke rate_original"] == 2
    assert fixed["stroke rate"] >= 10
    assert "stroke_rate" not in fixed
    assert "stroke_rate_corrected" not in fixed
    assert is_corrected_point(result.corrected_records, 2, "stroke_rate")
    assert get_original_value(result.corrected_records, 2, "stroke_rate") == 2
    assert get_original_value(result.corrected_records, 1, "stroke_rate") == 41


def test_apply_fix_uses_existing_key():
    record = {"Watt": 5}
    apply_fix(record, "watt", 60)
    assert record == {"Watt": 60, "Watt_original": 5, "Watt_corrected": True}


@pytest.mark.parametrize("method", [m.value for m in Method])
def test_clean_series_is_left_untouched(make_records, method):
    records = make_records(
        [10] * 10,
        stroke_rate=[30, 31, 30, 32, 31, 30, 31, 32, 30, 31],
        watt=[150, 152, 151, 149, 150, 153, 151, 150, 152, 151],
    )
    result = correct_records(records, method=method)

    assert result.stats.noisy_points == 0
    for before, after in zip(records, result.corrected_records):
        assert after["stroke_rate"] == before["stroke_rate"]
        assert after["watt"] == before["watt"]
        assert not any(key.endswith(("_original", "_corrected")) for key in after)


def test_bare_field_string_is_one_field():
    assert CorrectionOptions.from_dict({"fields": "watt"}).fields == ["watt"]
    assert CorrectionOptions.from_dict({"fields": ("watt", "stroke_rate")}).fields == ["watt", "stroke_rate"]

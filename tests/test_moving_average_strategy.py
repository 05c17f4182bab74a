import pytest

from telemetry.core.filtering.options import Method
from telemetry.core.filtering.orchestrator import correct_records


def test_low_outlier_replaced_by_window_mean(make_records):
    watts = [100.0] * 15
    watts[7] = 5.0
    records = make_records([10] * 15, watt=watts)

    result = correct_records(records, method=Method.MOVING_AVERAGE, fields=["watt"], window_size=15)

    corrected = [i for i, r in enumerate(result.corrected_records) if r.get("watt_corrected")]
    assert corrected == [7]
    assert result.corrected_records[7]["watt"] == pytest.approx((14 * 100 + 5) / 15)
    assert result.corrected_records[7]["watt_original"] == 5.0


def test_high_spike_is_left_alone(make_records):
    watts = [100.0] * 15
    watts[7] = 400.0
    records = make_records([10] * 15, watt=watts)
    result = correct_records(records, method=Method.MOVING_AVERAGE, fields=["watt"], window_size=15)
    assert result.stats.noisy_points == 0


def test_small_window_cannot_isolate_single_outlier(make_records):
    # in five samples no point can sit two population deviations from the mean
    records = make_records([10] * 9, watt=[100, 100, 100, 100, 0, 100, 100, 100, 100])
    result = correct_records(records, method=Method.MOVING_AVERAGE, fields=["watt"], window_size=5)
    assert result.stats.noisy_points == 0

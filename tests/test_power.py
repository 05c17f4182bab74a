import pytest

from telemetry.core.analytics.pace import average_pace, format_pace, pace_series, speed_to_pace
from telemetry.core.analytics.power import intensity_factor, normalized_power, training_stress_score
from telemetry.core.analytics.zones import TimeSeriesPoint


def test_normalized_power_basic():
    # constant power should equal itself
    powers = [200] * 120
    assert 195 <= normalized_power(powers) <= 205


def test_normalized_power_rewards_variability():
    steady = [200] * 120
    surges = ([100] * 30 + [300] * 30) * 2
    assert normalized_power(surges) > normalized_power(steady)


def test_normalized_power_empty():
    assert normalized_power([]) == 0.0


def test_intensity_factor_and_tss():
    assert intensity_factor(200, 250) == pytest.approx(0.8)
    assert intensity_factor(200, None) is None
    # one hour at FTP is 100 TSS
    assert training_stress_score(250, 250, 3600) == pytest.approx(100)
    assert training_stress_score(250, 0, 3600) is None


def test_pace_conversion():
    assert speed_to_pace(12) == pytest.approx(5.0)
    assert speed_to_pace(0) == 0.0
    assert average_pace([10, 14, None]) == pytest.approx(5.0)
    assert average_pace([]) is None
    assert format_pace(5.5) == "5:30"
    assert format_pace(0) is None


def test_pace_series_keeps_timestamps():
    series = [TimeSeriesPoint(timer_time=0, value=10), TimeSeriesPoint(timer_time=5, value=0)]
    paces = pace_series(series)
    assert [p.timer_time for p in paces] == [0, 5]
    assert [p.value for p in paces] == [6.0, 0.0]

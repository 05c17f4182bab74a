"""Per-field statistics over a session's record list."""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..errors import InsufficientSampleError
from .fields import get_value
from .pace import average_pace
from .power import intensity_factor, normalized_power, training_stress_score
from .stats import StatisticalSummary, describe, pearson_correlation
from .time_utils import format_time
from .zones import (
    HEART_RATE_ZONES,
    TimeSeriesPoint,
    Zone,
    distribution_as_dicts,
    distribution_for_records,
    power_zone_distribution,
)


def field_values(records: Sequence[Mapping[str, Any]], field: str) -> List[float]:
    values = []
    for record in records:
        value = get_value(record, field)
        if value is not None:
            values.append(value)
    return values


def available_fields(records: Sequence[Mapping[str, Any]]) -> List[str]:
    names = set()
    for record in records:
        names.update(record.keys())
    return sorted(names)


def field_statistics(records: Sequence[Mapping[str, Any]], field: str) -> Optional[StatisticalSummary]:
    try:
        return describe(field_values(records, field))
    except InsufficientSampleError:
        return None


def field_correlation(records: Sequence[Mapping[str, Any]], field_a: str, field_b: str) -> Optional[float]:
    """Pearson correlation over records where both fields are numeric.

    ``None`` when no record carries both fields; otherwise the value of
    ``pearson_correlation`` (0.0 for fewer than three pairs or a flat series).
    """
    xs: List[float] = []
    ys: List[float] = []
    for record in records:
        a = get_value(record, field_a)
        b = get_value(record, field_b)
        if a is not None and b is not None:
            xs.append(a)
            ys.append(b)
    if not xs:
        return None
    return pearson_correlation(xs, ys)


def moving_average(series: Sequence[TimeSeriesPoint], window: int = 30) -> List[TimeSeriesPoint]:
    """Trailing moving average; series shorter than ``window`` come back as-is."""
    if window <= 0 or len(series) < window:
        return list(series)
    out: List[TimeSeriesPoint] = []
    running = sum(p.value for p in series[:window - 1])
    for idx in range(window - 1, len(series)):
        running += series[idx].value
        out.append(TimeSeriesPoint(timer_time=series[idx].timer_time, value=running / window))
        running -= series[idx - window + 1].value
    return out


def find_peaks(series: Sequence[TimeSeriesPoint], min_prominence: float = 0.1) -> List[TimeSeriesPoint]:
    """Strict local maxima standing at least ``min_prominence`` above both neighbours."""
    peaks = []
    for idx in range(1, len(series) - 1):
        prev, current, nxt = series[idx - 1], series[idx], series[idx + 1]
        if current.value > prev.value and current.value > nxt.value:
            prominence = min(current.value - prev.value, current.value - nxt.value)
            if prominence >= min_prominence:
                peaks.append(current)
    return peaks


def session_duration(records: Sequence[Mapping[str, Any]], time_field: str = "timer_time") -> float:
    times = [t for t in (get_value(r, time_field) for r in records) if t is not None]
    if len(times) < 2:
        return 0.0
    return times[-1] - times[0]


def power_summary(
    records: Sequence[Mapping[str, Any]],
    field: str = "watt",
    ftp: Optional[float] = None,
    time_field: str = "timer_time",
) -> Optional[Dict[str, Any]]:
    """Average/max/NP (and IF/TSS when ``ftp`` is known) for a power field."""
    powers = [get_value(r, field) for r in records]
    valid = [p for p in powers if p is not None and p > 0]
    if not valid:
        return None

    np_value = normalized_power(valid)
    result: Dict[str, Any] = {
        'avg_power': round(sum(valid) / len(valid), 1),
        'max_power': max(valid),
        'normalized_power': round(np_value, 1),
        'intensity_factor': None,
        'training_stress_score': None,
        'zone_distribution': None,
    }
    factor = intensity_factor(np_value, ftp)
    if factor is not None:
        result['intensity_factor'] = round(factor, 2)
        tss = training_stress_score(np_value, ftp, session_duration(records, time_field))
        result['training_stress_score'] = round(tss, 1) if tss is not None else None
        result['zone_distribution'] = power_zone_distribution(valid, ftp)
    return result


def speed_summary(records: Sequence[Mapping[str, Any]], field: str = "enhanced_speed") -> Optional[Dict[str, Any]]:
    stats = field_statistics(records, field)
    if stats is None:
        return None
    return {
        'avg_speed': stats.mean,
        'max_speed': stats.max,
        'avg_pace': average_pace(field_values(records, field)),
    }


def heart_rate_summary(
    records: Sequence[Mapping[str, Any]],
    zones: Optional[Sequence[Zone]] = None,
    field: str = "heart_rate",
    time_field: str = "timer_time",
) -> Optional[Dict[str, Any]]:
    """Heart-rate statistics and time in zone (built-in zones by default)."""
    stats = field_statistics(records, field)
    if stats is None:
        return None
    table = list(zones) if zones else HEART_RATE_ZONES
    return {
        'avg_heart_rate': round(stats.mean, 1),
        'max_heart_rate': stats.max,
        'min_heart_rate': stats.min,
        'zone_distribution': distribution_as_dicts(
            distribution_for_records(records, field, table, time_field)
        ),
    }


def cadence_summary(records: Sequence[Mapping[str, Any]], field: str = "cadence") -> Optional[Dict[str, Any]]:
    stats = field_statistics(records, field)
    if stats is None:
        return None
    return {
        'avg_cadence': stats.mean or None,
        'max_cadence': stats.max,
    }


def field_value_at_time(
    records: Sequence[Mapping[str, Any]],
    field: str,
    target: float,
    is_percentage: bool = False,
    time_field: str = "timer_time",
) -> Optional[float]:
    """Value of ``field`` at the sample closest to ``target``.

    With ``is_percentage`` the target is a position through the session,
    0 being the first sample and 100 the last. Ties go to the earlier sample.
    """
    points = []
    for record in records:
        t = get_value(record, time_field)
        value = get_value(record, field)
        if t is not None and value is not None:
            points.append((t, value))
    if not points:
        return None

    if is_percentage:
        target = points[0][0] + session_duration(records, time_field) * target / 100
    closest = min(points, key=lambda p: abs(p[0] - target))
    return closest[1]


TEXT_SUMMARY_SKIPPED = frozenset({
    "timestamp", "message_index", "total_elapsed_time", "event", "total_cycles",
    "first_lap_index", "num_laps", "left_right_balance", "trigger", "laps",
    "records", "nec_lat", "nec_long", "swc_lat", "swc_long",
})
TEXT_SUMMARY_RULE = "_" * 39


def _summary_value(key: str, value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return str(value)
    if "position" in key:
        return str(value)
    if key.endswith("_time"):
        return format_time(value)
    return f"{value:.2f}"


def text_summary(summary: Mapping[str, Any], entity: str = "Session") -> str:
    """Plain-text rendering of a session or lap summary message.

    Bookkeeping keys and empty values are skipped, durations (``*_time``)
    are rendered as clock time and other numbers with two decimals.
    """
    lines = [
        f"{key}: {_summary_value(key, value)}"
        for key, value in summary.items()
        if key not in TEXT_SUMMARY_SKIPPED and value is not None
    ]
    return f"{entity} Summary:\n{TEXT_SUMMARY_RULE}\n" + "\n".join(lines) + f"\n{TEXT_SUMMARY_RULE}\n"

"""Time-in-zone distribution over a timed series.

Zones are closed intervals ``[min, max]``. A point that falls inside several
zones is credited to every one of them (or only the first with
``first_match``), so percentages only add up to 100 for disjoint tables that
cover the whole value range. FTP power zones count samples instead of time.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .fields import FieldKey, canonical_field, get_value
from .stats import to_number
from .time_utils import format_hms, format_time


@dataclass(frozen=True)
class Zone:
    min: float
    max: float
    name: str

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


@dataclass
class ZoneDistributionItem:
    zone: Zone
    duration: float
    percentage: float


@dataclass
class TimeSeriesPoint:
    timer_time: float
    value: float


HEART_RATE_ZONES: List[Zone] = [
    Zone(0, 137, "Zone 1 - Recovery"),
    Zone(138, 153, "Zone 2 - Endurance"),
    Zone(154, 163, "Zone 3 - Aerobic"),
    Zone(164, 172, "Zone 4 - Threshold"),
    Zone(173, math.inf, "Zone 5 - VO2 Max"),
]

KAYAK_POWER_ZONES: List[Zone] = [
    Zone(0, 100, "Zone 1 - Recovery"),
    Zone(101, 150, "Zone 2 - Endurance"),
    Zone(151, 200, "Zone 3 - Aerobic"),
    Zone(201, 230, "Zone 4 - Threshold"),
    Zone(231, math.inf, "Zone 5 - Anaerobic"),
]

STROKE_RATE_ZONES: List[Zone] = [
    Zone(0, 55, "Zone 1 - Easy"),
    Zone(56, 70, "Zone 2 - Distance"),
    Zone(71, 85, "Zone 3 - Threshold"),
    Zone(86, 100, "Zone 4 - Race"),
    Zone(101, math.inf, "Zone 5 - Sprint"),
]

# km/h
SPEED_ZONES: List[Zone] = [
    Zone(0, 8, "Zone 1 - Easy"),
    Zone(8, 11, "Zone 2 - Endurance"),
    Zone(11, 13.5, "Zone 3 - Threshold"),
    Zone(13.5, 16, "Zone 4 - Anaerobic"),
    Zone(16, math.inf, "Zone 5 - Sprint"),
]

DEFAULT_ZONE_TABLES: Dict[FieldKey, List[Zone]] = {
    FieldKey.HEART_RATE: HEART_RATE_ZONES,
    FieldKey.WATT: KAYAK_POWER_ZONES,
    FieldKey.POWER: KAYAK_POWER_ZONES,
    FieldKey.STROKE_RATE: STROKE_RATE_ZONES,
    FieldKey.SPEED: SPEED_ZONES,
}


def default_zones(field: str) -> Optional[List[Zone]]:
    """Built-in zone table for a known field, or ``None``."""
    return DEFAULT_ZONE_TABLES.get(canonical_field(field))


# fraction of FTP where each power zone ends; the last zone is open-ended
FTP_ZONE_RATIOS = (0.55, 0.75, 0.90, 1.05, 1.20, 1.50)
FTP_ZONE_NAMES = (
    "Zone 1 - Active Recovery",
    "Zone 2 - Endurance",
    "Zone 3 - Tempo",
    "Zone 4 - Lactate Threshold",
    "Zone 5 - VO2 Max",
    "Zone 6 - Anaerobic Capacity",
    "Zone 7 - Neuromuscular Power",
)


def ftp_power_zones(ftp: float) -> List[Zone]:
    """Seven power zones scaled to ``ftp`` (whole-watt boundaries)."""
    if not ftp or ftp <= 0:
        return []
    bounds = [0] + [int(ftp * ratio) for ratio in FTP_ZONE_RATIOS] + [math.inf]
    return [Zone(bounds[i], bounds[i + 1], name) for i, name in enumerate(FTP_ZONE_NAMES)]


def power_zone_distribution(power_data: Iterable[Any], ftp: float) -> List[Dict[str, Any]]:
    """Samples per FTP zone, one sample counted as one second.

    A sample belongs to the first zone with ``min <= p < max``; missing and
    non-positive samples are left out of the total.
    """
    zones = ftp_power_zones(ftp)
    if not zones:
        return []
    counts = [0] * len(zones)
    valid = 0
    for raw in power_data:
        p = to_number(raw)
        if p is None or p <= 0:
            continue
        valid += 1
        for i, zone in enumerate(zones):
            if zone.min <= p < zone.max:
                counts[i] += 1
                break
    out = []
    for zone, count in zip(zones, counts):
        out.append({
            "zone": zone.name,
            "min": zone.min,
            "max": None if math.isinf(zone.max) else zone.max,
            "samples": count,
            "time": format_time(count),
            "percentage": round(count / valid * 100, 1) if valid else 0.0,
        })
    return out


def zone_from_dict(raw: Mapping[str, Any]) -> Zone:
    """Build a zone from ``{"min", "max", "name"}``; a null max means unbounded."""
    upper = raw.get("max")
    return Zone(
        min=float(raw.get("min", 0) or 0),
        max=math.inf if upper is None else float(upper),
        name=str(raw.get("name", "")),
    )


def field_time_series(
    records: Sequence[Mapping[str, Any]],
    field: str,
    time_field: str = "timer_time",
) -> List[TimeSeriesPoint]:
    """Extract ``(timer_time, value)`` points for ``field``.

    Records without a time value are skipped; a missing field value is read
    as 0 so the point still accounts for elapsed time.
    """
    series: List[TimeSeriesPoint] = []
    for record in records:
        t = get_value(record, time_field)
        if t is None:
            continue
        value = get_value(record, field)
        series.append(TimeSeriesPoint(timer_time=t, value=value if value is not None else 0.0))
    return series


def calculate_zone_distribution(
    series: Sequence[TimeSeriesPoint],
    zones: Sequence[Zone],
    first_match: bool = False,
) -> List[ZoneDistributionItem]:
    """Seconds and share of session time spent in each zone.

    Each point carries the time elapsed since the previous point (the first
    point carries 0). Percentages are relative to ``last - first`` time, not
    to the sum of zone durations. Returns ``[]`` for fewer than two points.
    With ``first_match`` a point is credited only to the first zone holding it.
    """
    if series is None or len(series) < 2 or not zones:
        return []

    zone_time = [0.0] * len(zones)
    previous_time: Optional[float] = None
    for point in series:
        duration = 0.0 if previous_time is None else point.timer_time - previous_time
        previous_time = point.timer_time
        for idx, zone in enumerate(zones):
            if zone.contains(point.value):
                zone_time[idx] += duration
                if first_match:
                    break

    total = series[-1].timer_time - series[0].timer_time
    return [
        ZoneDistributionItem(
            zone=zone,
            duration=zone_time[idx],
            percentage=(zone_time[idx] / total) * 100 if total > 0 else 0.0,
        )
        for idx, zone in enumerate(zones)
    ]


def distribution_for_records(
    records: Sequence[Mapping[str, Any]],
    field: str,
    zones: Sequence[Zone],
    time_field: str = "timer_time",
) -> List[ZoneDistributionItem]:
    return calculate_zone_distribution(field_time_series(records, field, time_field), zones)


def change_rate_series(series: Sequence[TimeSeriesPoint], window: int = 5) -> List[TimeSeriesPoint]:
    """Rate of change over the next ``window`` points, in hundredths per second."""
    out: List[TimeSeriesPoint] = []
    n = len(series)
    for idx, point in enumerate(series):
        end = series[min(max(idx + window, 0), n - 1)]
        value_diff = end.value - point.value
        time_diff = (end.timer_time - point.timer_time) or 1
        out.append(TimeSeriesPoint(timer_time=point.timer_time, value=math.floor(value_diff / time_diff * 100)))
    return out


def zone_histogram_text(items: Iterable[ZoneDistributionItem]) -> str:
    """Render a distribution as text bars, one zone per line."""
    items = list(items)
    if not items:
        return ""
    width = max(len(item.zone.name) for item in items)
    lines = []
    for item in items:
        pct = int(math.floor(item.percentage))
        bar = "█" * max(0, min(pct, 100))
        lines.append(f" {item.zone.name.ljust(width)} {format_hms(item.duration)} : {bar} {pct}%")
    return "\n".join(lines)


def distribution_as_dicts(items: Iterable[ZoneDistributionItem]) -> List[Dict[str, Any]]:
    """JSON-friendly form; an unbounded upper limit is encoded as ``None``."""
    out = []
    for item in items:
        out.append({
            "zone": {
                "min": item.zone.min,
                "max": None if math.isinf(item.zone.max) else item.zone.max,
                "name": item.zone.name,
            },
            "duration": item.duration,
            "percentage": round(item.percentage, 2),
        })
    return out

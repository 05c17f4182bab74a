"""Speed to pace conversion.

Speeds are km/h, pace is minutes per kilometre. A non-positive speed has no
pace and is reported as 0.
"""

from typing import Any, List, Optional, Sequence

from .stats import clean_values
from .zones import TimeSeriesPoint


def speed_to_pace(speed_kmh: Optional[float]) -> float:
    if speed_kmh is None or speed_kmh <= 0:
        return 0.0
    return 60.0 / speed_kmh


def pace_series(series: Sequence[TimeSeriesPoint]) -> List[TimeSeriesPoint]:
    return [TimeSeriesPoint(timer_time=p.timer_time, value=speed_to_pace(p.value)) for p in series]


def average_pace(speeds: Sequence[Any]) -> Optional[float]:
    """Pace at the mean speed, or ``None`` when there is no usable speed."""
    arr = clean_values(speeds)
    if not arr.size:
        return None
    avg = float(arr.mean())
    if avg <= 0:
        return None
    return 60.0 / avg


def format_pace(pace_min_per_km: Optional[float]) -> Optional[str]:
    """Render ``5.5`` as ``"5:30"``."""
    if pace_min_per_km is None or pace_min_per_km <= 0:
        return None
    total_seconds = int(round(pace_min_per_km * 60))
    return f"{total_seconds // 60}:{total_seconds % 60:02d}"

"""Statistical primitives over numeric sequences.

All helpers drop ``None``/NaN (and non-numeric values) before aggregating.
Empty input yields ``0.0`` so they can be called inside per-point loops;
``describe`` is the exception and raises ``InsufficientSampleError``.
"""

import math
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

import numpy as np

from ..errors import InsufficientSampleError

TREND_STRENGTH_THRESHOLD = 5.0


def to_number(raw: Any) -> Optional[float]:
    if raw is None or isinstance(raw, bool):
        return None
    if not isinstance(raw, (int, float, np.integer, np.floating)):
        return None
    value = float(raw)
    if math.isnan(value):
        return None
    return value


def clean_values(values: Iterable[Any]) -> np.ndarray:
    cleaned = [v for v in (to_number(raw) for raw in values) if v is not None]
    return np.asarray(cleaned, dtype=float)


def mean(values: Iterable[Any]) -> float:
    arr = clean_values(values)
    if not arr.size:
        return 0.0
    return float(arr.mean())


def median(values: Iterable[Any]) -> float:
    arr = clean_values(values)
    if not arr.size:
        return 0.0
    return float(np.median(arr))


def variance(values: Iterable[Any]) -> float:
    """Population variance."""
    arr = clean_values(values)
    if not arr.size:
        return 0.0
    return float(arr.var())


def std(values: Iterable[Any]) -> float:
    """Population standard deviation."""
    return math.sqrt(variance(values))


@dataclass
class StatisticalSummary:
    count: int
    min: float
    max: float
    mean: float
    median: float
    std: float
    variance: float
    sum: float
    q1: float
    q3: float
    iqr: float
    range: float


def describe(values: Iterable[Any]) -> StatisticalSummary:
    """Full summary of a numeric sample.

    Quartiles use the lower-index convention ``sorted[floor(n * p)]``.

    Raises:
        InsufficientSampleError: when no numeric value remains after cleaning.
    """
    arr = np.sort(clean_values(values))
    count = int(arr.size)
    if count == 0:
        raise InsufficientSampleError(required=1, actual=0)

    var = float(arr.var())
    q1 = float(arr[int(count * 0.25)])
    q3 = float(arr[int(count * 0.75)])
    return StatisticalSummary(
        count=count,
        min=float(arr[0]),
        max=float(arr[-1]),
        mean=float(arr.mean()),
        median=float(np.median(arr)),
        std=math.sqrt(var),
        variance=var,
        sum=float(arr.sum()),
        q1=q1,
        q3=q3,
        iqr=q3 - q1,
        range=float(arr[-1] - arr[0]),
    )


def pearson_correlation(xs: Sequence[Any], ys: Sequence[Any]) -> float:
    """Pearson product-moment correlation of two equal-length series.

    Returns 0.0 for mismatched lengths, fewer than three pairs, or when either
    series is constant. Pairs where either side is not numeric are dropped.
    """
    if xs is None or ys is None or len(xs) != len(ys):
        return 0.0
    pairs = [
        (x, y)
        for x, y in ((to_number(a), to_number(b)) for a, b in zip(xs, ys))
        if x is not None and y is not None
    ]
    if len(pairs) < 3:
        return 0.0

    x = np.asarray([p[0] for p in pairs], dtype=float)
    y = np.asarray([p[1] for p in pairs], dtype=float)
    dx = x - x.mean()
    dy = y - y.mean()
    denominator = math.sqrt(float((dx * dx).sum()) * float((dy * dy).sum()))
    if denominator == 0:
        return 0.0
    r = float((dx * dy).sum()) / denominator
    return max(-1.0, min(1.0, r))


def linear_trend_slope(values: Sequence[Any]) -> float:
    """Least-squares slope of ``values`` against their index."""
    arr = clean_values(values)
    n = arr.size
    if n < 2:
        return 0.0
    idx = np.arange(n, dtype=float)
    dx = idx - idx.mean()
    denominator = float((dx * dx).sum())
    if denominator == 0:
        return 0.0
    return float((dx * (arr - arr.mean())).sum()) / denominator


def trend_direction(values: Sequence[Any], threshold_pct: float = TREND_STRENGTH_THRESHOLD) -> str:
    """Classify a series as ``"up"``, ``"down"`` or ``"stable"``.

    Trend strength is ``|slope| / mean * 100``; only strengths above
    ``threshold_pct`` count as a trend.
    """
    arr = clean_values(values)
    if arr.size < 3:
        return "stable"
    avg = float(arr.mean())
    if avg == 0:
        return "stable"
    slope = linear_trend_slope(arr)
    strength = abs(slope) / abs(avg) * 100
    if strength <= threshold_pct:
        return "stable"
    return "up" if slope > 0 else "down"


def coefficient_of_variation(values: Iterable[Any]) -> float:
    arr = clean_values(values)
    if arr.size < 2:
        return 0.0
    avg = float(arr.mean())
    if avg == 0:
        return 0.0
    return float(arr.std()) / abs(avg)

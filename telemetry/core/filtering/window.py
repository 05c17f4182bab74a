"""Windowed contextual analysis around a suspect reading.

For a candidate index the analyzer gathers the valid neighbours of the
field, relates them to the reference signal, and places the point inside
the workout (phase) and on an effort scale (intensity). The result drives
both the adaptive detection thresholds and the replacement value.

Phase and intensity multipliers are (drop-threshold factor, min-valid
factor): lenient phases raise the allowed drop and lower the floor.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, MutableMapping, Optional, Sequence, Tuple

from ..analytics.fields import FieldKey, get_value
from ..analytics.stats import (
    clean_values,
    coefficient_of_variation,
    mean,
    median,
    pearson_correlation,
    std,
    trend_direction,
)
from .options import CorrectionOptions

logger = logging.getLogger(__name__)

Record = MutableMapping[str, Any]


class WorkoutPhase(str, Enum):
    warmup = "warmup"
    main = "main"
    interval = "interval"
    recovery = "recovery"
    cooldown = "cooldown"


class Intensity(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


WARMUP_FRACTION = 0.15
COOLDOWN_FRACTION = 0.85
PHASE_SUB_WINDOW = 3
VOLATILITY_CV = 0.15

# reference speed breakpoints (km/h)
INTENSITY_LOW_BELOW = 8.0
INTENSITY_HIGH_FROM = 12.0

PHASE_MULTIPLIERS = {
    WorkoutPhase.warmup: (1.3, 0.8),
    WorkoutPhase.cooldown: (1.3, 0.8),
    WorkoutPhase.recovery: (1.2, 0.85),
    WorkoutPhase.interval: (0.85, 1.1),
    WorkoutPhase.main: (1.0, 1.0),
}

INTENSITY_MULTIPLIERS = {
    Intensity.low: (1.2, 0.85),
    Intensity.medium: (1.0, 1.0),
    Intensity.high: (0.9, 1.1),
}

LOW_CONFIDENCE = 0.5
LOW_CONFIDENCE_MULTIPLIERS = (1.15, 0.9)

PHASE_REPLACEMENT_SCALE = {
    WorkoutPhase.interval: 1.1,
    WorkoutPhase.recovery: 0.9,
}

CORRELATION_MIN = 0.3
MAX_SMOOTHING_WEIGHT = 0.4
RECOVERY_FACTOR = 1.5


@dataclass
class WindowAnalysis:
    valid_values: List[float] = field(default_factory=list)
    reference_values: List[Optional[float]] = field(default_factory=list)
    mean: float = 0.0
    median: float = 0.0
    std: float = 0.0
    correlation: float = 0.0
    confidence: float = 0.0
    phase: WorkoutPhase = WorkoutPhase.main
    intensity: Intensity = Intensity.medium
    trend: str = "stable"
    has_recovery: bool = False

    @property
    def count(self) -> int:
        return len(self.valid_values)


@dataclass
class AdaptiveThresholds:
    drop_pct: float
    min_valid: float


class WindowAnalyzer:
    """Context around one index of the working set."""

    def __init__(self, records: Sequence[Record], options: CorrectionOptions):
        self.records = records
        self.options = options
        speeds = clean_values(get_value(r, options.reference_field) for r in records)
        self.session_speed = float(speeds.mean()) if speeds.size else 0.0
        times = [get_value(r, options.time_field) for r in records]
        known = [t for t in times if t is not None]
        self._times = times
        self._start = known[0] if known else None
        self._end = known[-1] if known else None

    # classification

    def elapsed_fraction(self, index: int) -> float:
        t = self._times[index] if 0 <= index < len(self._times) else None
        if t is not None and self._start is not None and self._end is not None and self._end > self._start:
            return (t - self._start) / (self._end - self._start)
        n = len(self.records)
        return index / (n - 1) if n > 1 else 0.0

    def classify_phase(self, index: int) -> WorkoutPhase:
        if not self.options.contextual_awareness:
            return WorkoutPhase.main
        fraction = self.elapsed_fraction(index)
        if fraction < WARMUP_FRACTION:
            return WorkoutPhase.warmup
        if fraction > COOLDOWN_FRACTION:
            return WorkoutPhase.cooldown

        lo = max(0, index - PHASE_SUB_WINDOW)
        hi = min(len(self.records), index + PHASE_SUB_WINDOW + 1)
        local = self.records[lo:hi]
        speeds = [get_value(r, self.options.reference_field) for r in local]
        heart_rates = [get_value(r, FieldKey.HEART_RATE) for r in local]
        volatile = (
            coefficient_of_variation(speeds) > VOLATILITY_CV
            or coefficient_of_variation(heart_rates) > VOLATILITY_CV
        )
        if not volatile:
            return WorkoutPhase.main
        return WorkoutPhase.interval if mean(speeds) > self.session_speed else WorkoutPhase.recovery

    def classify_intensity(self, reference_values: Sequence[Optional[float]]) -> Intensity:
        if not self.options.contextual_awareness:
            return Intensity.medium
        local = mean(reference_values)
        if local < INTENSITY_LOW_BELOW:
            return Intensity.low
        if local < INTENSITY_HIGH_FROM:
            return Intensity.medium
        return Intensity.high

    # analysis

    def neighbours(self, index: int, field_name: str, min_valid: float) -> Tuple[List[float], List[Optional[float]]]:
        size = self.options.analysis_window_size
        values: List[float] = []
        references: List[Optional[float]] = []
        for j in range(max(0, index - size), min(len(self.records), index + size + 1)):
            if j == index:
                continue
            value = get_value(self.records[j], field_name)
            if value is not None and value >= min_valid:
                values.append(value)
                references.append(get_value(self.records[j], self.options.reference_field))
        return values, references

    def has_recovery(self, index: int, field_name: str, min_valid: float) -> bool:
        size = self.options.analysis_window_size
        for j in range(index + 1, min(len(self.records), index + size + 1)):
            value = get_value(self.records[j], field_name)
            if value is not None and value >= min_valid * RECOVERY_FACTOR:
                return True
        return False

    def analyze(self, index: int, field_name: str, min_valid: float) -> WindowAnalysis:
        values, references = self.neighbours(index, field_name, min_valid)
        size = max(1, self.options.analysis_window_size)
        analysis = WindowAnalysis(
            valid_values=values,
            reference_values=references,
            phase=self.classify_phase(index),
            has_recovery=self.has_recovery(index, field_name, min_valid),
        )
        # intensity from the raw local reference, even with no valid neighbours
        lo = max(0, index - size)
        hi = min(len(self.records), index + size + 1)
        analysis.intensity = self.classify_intensity(
            [get_value(r, self.options.reference_field) for r in self.records[lo:hi]]
        )
        if not values:
            return analysis

        analysis.mean = mean(values)
        analysis.median = median(values)
        analysis.std = std(values)
        analysis.confidence = min(1.0, len(values) / (size * 0.8))
        paired = [(v, r) for v, r in zip(values, references) if r is not None]
        if len(paired) >= 3:
            analysis.correlation = pearson_correlation([p[0] for p in paired], [p[1] for p in paired])
        analysis.trend = trend_direction(values)
        return analysis

    def adaptive_thresholds(self, index: int, field_name: str) -> Tuple[AdaptiveThresholds, WindowAnalysis]:
        """Detection thresholds for ``index``, with the analysis they came from."""
        base_drop = self.options.max_drop_pct(field_name)
        base_min = self.options.min_valid_value(field_name)
        analysis = self.analyze(index, field_name, base_min)
        if not self.options.adaptive_thresholds:
            return AdaptiveThresholds(base_drop, base_min), analysis

        drop_factor, min_factor = PHASE_MULTIPLIERS[analysis.phase]
        i_drop, i_min = INTENSITY_MULTIPLIERS[analysis.intensity]
        drop_factor *= i_drop
        min_factor *= i_min
        if analysis.confidence < LOW_CONFIDENCE:
            drop_factor *= LOW_CONFIDENCE_MULTIPLIERS[0]
            min_factor *= LOW_CONFIDENCE_MULTIPLIERS[1]
        return AdaptiveThresholds(base_drop * drop_factor, base_min * min_factor), analysis

    # replacement

    def _valid_at(self, index: int, field_name: str, min_valid: float) -> Optional[float]:
        if 0 <= index < len(self.records):
            value = get_value(self.records[index], field_name)
            if value is not None and value >= min_valid:
                return value
        return None

    def replacement_value(
        self,
        index: int,
        field_name: str,
        min_valid: float,
        analysis: WindowAnalysis,
    ) -> float:
        opts = self.options
        previous = self._valid_at(index - 1, field_name, min_valid)
        following = self._valid_at(index + 1, field_name, min_valid)

        if analysis.count == 0:
            value = previous if previous is not None else min_valid * 2
        elif analysis.count < opts.min_valid_points_in_window:
            value = analysis.median
        else:
            value = self._blend(index, analysis, previous, following)

        value = max(value, min_valid)
        raw_previous = get_value(self.records[index - 1], field_name) if index > 0 else None
        if raw_previous is not None and raw_previous > 0:
            value = min(value, raw_previous * 2)
        return round(value, 1)

    def _blend(
        self,
        index: int,
        analysis: WindowAnalysis,
        previous: Optional[float],
        following: Optional[float],
    ) -> float:
        opts = self.options
        if analysis.trend == "up" and analysis.has_recovery:
            value = max(analysis.mean, analysis.median)
        elif analysis.trend == "down":
            value = min(analysis.mean, analysis.median)
        elif analysis.mean > 0 and analysis.std > 0.25 * analysis.mean:
            value = analysis.median
        else:
            value = analysis.mean * 0.6 + analysis.median * 0.4

        reference = get_value(self.records[index], opts.reference_field)
        if opts.multi_field_correlation and abs(analysis.correlation) > CORRELATION_MIN and reference:
            ratios = [v / r for v, r in zip(analysis.valid_values, analysis.reference_values) if r]
            if ratios:
                projected = reference * (sum(ratios) / len(ratios))
                value = value * 0.7 + projected * 0.3

        if opts.temporal_smoothing:
            anchors = [v for v in (previous, following) if v is not None]
            if anchors:
                weight = min(MAX_SMOOTHING_WEIGHT, MAX_SMOOTHING_WEIGHT * analysis.confidence)
                value = value * (1 - weight) + (sum(anchors) / len(anchors)) * weight

        if opts.contextual_awareness:
            value *= PHASE_REPLACEMENT_SCALE.get(analysis.phase, 1.0)
        return value

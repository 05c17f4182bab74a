"""Tuning knobs for the sensor-noise correction engine."""

import logging
from dataclasses import dataclass, field, fields as dataclass_fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from ... import config
from ..analytics.fields import FieldKey, canonical_field

logger = logging.getLogger(__name__)


class Method(str, Enum):
    THRESHOLD = "threshold"
    MOVING_AVERAGE = "movingAverage"
    CORRELATION = "correlation"
    KALMAN = "kalman"
    CONTEXTUAL = "contextual"
    AUTO = "auto"

    @classmethod
    def parse(cls, raw: Any) -> "Method":
        if isinstance(raw, Method):
            return raw
        text = str(raw or "auto").strip()
        for member in cls:
            if text == member.value or text.lower() == member.value.lower():
                return member
        if text.lower() in ("moving_average", "moving-average"):
            return cls.MOVING_AVERAGE
        raise ValueError(f"Unknown filter method '{raw}'. Valid methods: {[m.value for m in cls]}")


# (base drop %, minimum valid value) used by the contextual strategy
CONTEXTUAL_BASE_DROP_PCT: Dict[FieldKey, float] = {
    FieldKey.STROKE_RATE: 50.0,
    FieldKey.WATT: 60.0,
}


@dataclass
class CorrectionOptions:
    """Everything a correction run can be tuned with.

    Defaults come from ``telemetry.config`` (and therefore the environment).
    Reference-stability constants are kept separate per strategy because the
    strategies were tuned independently.
    """

    method: Method = field(default_factory=lambda: Method.parse(config.FILTER_METHOD))
    fields: List[str] = field(default_factory=lambda: list(config.FILTER_FIELDS))
    reference_field: str = config.REFERENCE_FIELD
    time_field: str = config.TIME_FIELD

    # orchestrator gate
    speed_stability_threshold: float = config.SPEED_STABILITY_THRESHOLD  # percent
    min_motion_speed: float = config.MIN_MOTION_SPEED

    # shared
    drop_threshold: float = config.DROP_THRESHOLD  # fraction
    min_valid_stroke_rate: float = config.MIN_VALID_STROKE_RATE
    min_valid_watt: float = config.MIN_VALID_WATT

    # threshold strategy
    min_stable_reading: float = 10.0
    reference_change_limit: float = 0.2  # fraction

    # moving average strategy
    window_size: int = 5
    outlier_sigma: float = 2.0

    # correlation strategy
    min_correlation_samples: int = 10
    ratio_sigma: float = 2.0
    ratio_slack: float = 0.8

    # kalman strategy
    process_noise: float = 0.05
    measurement_noise: float = 1.0
    kalman_motion_threshold: float = 1.0
    kalman_low_value: float = 10.0

    # contextual strategy
    analysis_window_size: int = config.ANALYSIS_WINDOW_SIZE
    min_valid_points_in_window: int = config.MIN_VALID_POINTS_IN_WINDOW
    max_stroke_rate_drop: float = CONTEXTUAL_BASE_DROP_PCT[FieldKey.STROKE_RATE]
    max_watt_drop: float = CONTEXTUAL_BASE_DROP_PCT[FieldKey.WATT]
    multi_field_correlation: bool = True
    adaptive_thresholds: bool = True
    temporal_smoothing: bool = True
    contextual_awareness: bool = True

    _ALIASES = {
        "referenceField": "reference_field",
        "timeField": "time_field",
        "dropThreshold": "drop_threshold",
        "speedStabilityThreshold": "speed_stability_threshold",
        "minMotionSpeed": "min_motion_speed",
        "minValidStrokeRate": "min_valid_stroke_rate",
        "minValidWatt": "min_valid_watt",
        "minStableReading": "min_stable_reading",
        "windowSize": "window_size",
        "analysisWindowSize": "analysis_window_size",
        "minValidPointsInWindow": "min_valid_points_in_window",
        "maxStrokeRateDrop": "max_stroke_rate_drop",
        "maxWattDrop": "max_watt_drop",
        "multiFieldCorrelation": "multi_field_correlation",
        "adaptiveThresholds": "adaptive_thresholds",
        "temporalSmoothing": "temporal_smoothing",
        "contextualAwareness": "contextual_awareness",
    }

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]] = None) -> "CorrectionOptions":
        """Build options from snake_case or camelCase keys; unknown keys are ignored."""
        known = {f.name for f in dataclass_fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in (raw or {}).items():
            name = cls._ALIASES.get(key, key)
            if name not in known:
                logger.debug("[sensor-filter][options] ignoring unknown option %s", key)
                continue
            if value is None:
                continue
            kwargs[name] = value
        if "method" in kwargs:
            kwargs["method"] = Method.parse(kwargs["method"])
        if "fields" in kwargs:
            value = kwargs["fields"]
            if isinstance(value, str):
                value = [value]
            kwargs["fields"] = [str(f) for f in value]
        return cls(**kwargs)

    def min_valid_value(self, field_name: str) -> float:
        key = canonical_field(field_name)
        if key == FieldKey.STROKE_RATE:
            return self.min_valid_stroke_rate
        if key in (FieldKey.WATT, FieldKey.POWER):
            return self.min_valid_watt
        return 0.0

    def max_drop_pct(self, field_name: str) -> float:
        key = canonical_field(field_name)
        if key == FieldKey.STROKE_RATE:
            return self.max_stroke_rate_drop
        if key in (FieldKey.WATT, FieldKey.POWER):
            return self.max_watt_drop
        return self.drop_threshold * 100

"""Sensor-noise correction driver.

``correct_records`` deep-copies the input into a working list, picks one
strategy from ``options.method`` and walks the list once, left to right.
Fixes are written into the working list immediately, so every later index
sees the already-corrected values. The caller's records are never touched.

A point is only eligible for correction when the reference field is both
stable over the step (``speed_stability_threshold`` percent) and above
``min_motion_speed``: a real slowdown is expected to pull the other fields
down with it.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, MutableMapping, Optional, Sequence, Type

from ..analytics.fields import annotation_key, get_value, require_value, set_value
from ..errors import MissingDataError
from .options import CorrectionOptions, Method
from .strategies.base import CorrectionStrategy, Fix
from .strategies.contextual import ContextualStrategy
from .strategies.correlation import CorrelationStrategy
from .strategies.kalman import KalmanStrategy
from .strategies.moving_average import MovingAverageStrategy
from .strategies.threshold import ThresholdStrategy

logger = logging.getLogger(__name__)

STRATEGIES: Dict[Method, Type[CorrectionStrategy]] = {
    Method.THRESHOLD: ThresholdStrategy,
    Method.MOVING_AVERAGE: MovingAverageStrategy,
    Method.CORRELATION: CorrelationStrategy,
    Method.KALMAN: KalmanStrategy,
    Method.CONTEXTUAL: ContextualStrategy,
    Method.AUTO: CorrelationStrategy,
}


@dataclass
class CorrectionStats:
    total_points: int = 0
    noisy_points: int = 0
    fixed_fields: Dict[str, int] = field(default_factory=dict)
    quality_score: float = 100.0
    phase_analysis: Optional[Dict[str, int]] = None

    def as_dict(self) -> Dict[str, Any]:
        out = {
            'total_points': self.total_points,
            'noisy_points': self.noisy_points,
            'fixed_fields': dict(self.fixed_fields),
            'quality_score': round(self.quality_score, 2),
        }
        if self.phase_analysis is not None:
            out['phase_analysis'] = dict(self.phase_analysis)
        return out


@dataclass
class CorrectionResult:
    corrected_records: List[Dict[str, Any]]
    stats: CorrectionStats
    method: Method = Method.AUTO
    diagnostics: Optional[Dict[str, Any]] = None


def build_strategy(options: CorrectionOptions) -> CorrectionStrategy:
    return STRATEGIES[options.method](options)


def reference_is_stable(
    records: Sequence[Mapping[str, Any]],
    index: int,
    options: CorrectionOptions,
) -> bool:
    """Whether index ``index`` may be corrected.

    Raises:
        MissingDataError: when either reference value is absent.
    """
    current = require_value(records[index], options.reference_field, index)
    previous = require_value(records[index - 1], options.reference_field, index - 1)
    variation = abs((current - previous) / max(previous, 0.01) * 100)
    return variation <= options.speed_stability_threshold and current > options.min_motion_speed


def apply_fix(record: MutableMapping[str, Any], field_name: str, value: float) -> None:
    """Write a corrected value with its ``_original``/``_corrected`` annotations.

    The first correction of a field in a run keeps the pre-correction value.
    """
    original_key = annotation_key(record, field_name, "original")
    corrected_key = annotation_key(record, field_name, "corrected")
    if not record.get(corrected_key):
        record[original_key] = get_value(record, field_name)
    set_value(record, field_name, value)
    record[corrected_key] = True


def correct_records(
    records: Sequence[Mapping[str, Any]],
    options: Optional[CorrectionOptions] = None,
    **overrides: Any,
) -> CorrectionResult:
    """Detect and repair sensor dropouts in ``records``.

    Args:
        records: decoded records, in time order.
        options: full option set; ``overrides`` are applied on top of it
            (or on top of the defaults).

    Returns:
        ``CorrectionResult`` with the corrected copy and run statistics.
    """
    if options is None:
        options = CorrectionOptions.from_dict(overrides)
    elif overrides:
        merged = {k: getattr(options, k) for k in options.__dataclass_fields__}
        merged.update(overrides)
        options = CorrectionOptions.from_dict(merged)

    working: List[Dict[str, Any]] = copy.deepcopy(list(records or []))
    total = len(working)
    fields = list(options.fields)
    stats = CorrectionStats(total_points=total, fixed_fields={f: 0 for f in fields})
    if total == 0:
        return CorrectionResult(corrected_records=working, stats=stats, method=options.method)

    strategy = build_strategy(options)
    strategy.prepare(working, fields)

    logger.info(
        "[sensor-filter][start] method=%s points=%d fields=%s reference=%s",
        options.method.value, total, fields, options.reference_field,
    )

    noisy_indices = set()
    fixed_points = {f: set() for f in fields}
    skipped = 0
    for index in range(total):
        eligible = False
        if index > 0:
            try:
                eligible = reference_is_stable(working, index, options)
            except MissingDataError:
                skipped += 1
        for field_name in fields:
            fixes: List[Fix] = strategy.visit(working, index, field_name, eligible)
            for fix in fixes:
                apply_fix(working[fix.index], field_name, fix.value)
                fixed_points[field_name].add(fix.index)
                noisy_indices.add(fix.index)

    stats.fixed_fields = {f: len(points) for f, points in fixed_points.items()}
    stats.noisy_points = len(noisy_indices)
    stats.quality_score = 100.0 * (1 - stats.noisy_points / total)

    diagnostics = strategy.diagnostics()
    if isinstance(strategy, ContextualStrategy):
        stats.phase_analysis = dict(strategy.phase_counts)

    logger.info(
        "[sensor-filter][done] method=%s noisy=%d/%d fixed=%s skipped=%d quality=%.1f",
        options.method.value, stats.noisy_points, total, stats.fixed_fields, skipped, stats.quality_score,
    )
    return CorrectionResult(
        corrected_records=working,
        stats=stats,
        method=options.method,
        diagnostics=diagnostics,
    )


def filter_sensor_data(records: Sequence[Mapping[str, Any]], **options: Any) -> List[Dict[str, Any]]:
    """Corrected records only; ``options`` as accepted by ``CorrectionOptions.from_dict``."""
    return correct_records(records, CorrectionOptions.from_dict(options)).corrected_records


def clean_sensor_data(
    records: Sequence[Mapping[str, Any]],
    fields: Optional[Sequence[str]] = None,
    reference_field: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Correlation-based cleaning, the best performer on recorded sessions."""
    return filter_sensor_data(
        records,
        method=Method.AUTO,
        fields=list(fields) if fields else None,
        reference_field=reference_field,
    )


def fix_sensor_noise(
    records: Sequence[Mapping[str, Any]],
    options: Optional[Mapping[str, Any]] = None,
) -> CorrectionResult:
    """Windowed contextual correction with phase statistics."""
    raw = dict(options or {})
    raw['method'] = Method.CONTEXTUAL
    return correct_records(records, CorrectionOptions.from_dict(raw))


def is_corrected_point(records: Sequence[Mapping[str, Any]], index: int, field_name: str) -> bool:
    if not records or index < 0 or index >= len(records):
        return False
    record = records[index]
    return bool(record.get(annotation_key(record, field_name, "corrected")))


def get_original_value(records: Sequence[Mapping[str, Any]], index: int, field_name: str) -> Optional[Any]:
    if not records or index < 0 or index >= len(records):
        return None
    record = records[index]
    original_key = annotation_key(record, field_name, "original")
    if original_key in record:
        return record[original_key]
    return get_value(record, field_name)

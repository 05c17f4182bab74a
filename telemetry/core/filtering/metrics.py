"""Before/after comparison of a correction run."""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..analytics.fields import annotation_key, get_value, resolve_key
from ..errors import ShapeMismatchError

logger = logging.getLogger(__name__)

DROPOUT_VALUE = 5


def _is_dropout(value: float) -> bool:
    return value < DROPOUT_VALUE or value == 0


def calculate_filter_improvement_metrics(
    original: Optional[Sequence[Mapping[str, Any]]],
    filtered: Optional[Sequence[Mapping[str, Any]]],
    fields: Sequence[str] = ("stroke_rate", "watt"),
) -> Dict[str, Any]:
    """Dropout counts, corrected-point counts and mean shifts per field.

    Misuse (missing input, different lengths) is reported as an ``error``
    entry in the returned dict rather than raised.
    """
    if original is None or filtered is None:
        return {'error': 'Missing data for comparison'}

    if len(original) != len(filtered):
        mismatch = ShapeMismatchError(len(original), len(filtered))
        logger.error("[sensor-filter][metrics] %s", mismatch)
        return mismatch.as_dict()

    metrics: Dict[str, Any] = {
        'total_points': len(original),
        'corrected_points': {},
        'dropout_reduction': {},
        'average_values': {},
    }

    for field in fields:
        if original and resolve_key(original[0], field) is None:
            continue

        corrected = 0
        original_dropouts = 0
        filtered_dropouts = 0
        original_sum = 0.0
        filtered_sum = 0.0
        valid_points = 0

        for before, after in zip(original, filtered):
            if after and after.get(annotation_key(after, field, "corrected")) is True:
                corrected += 1

            original_value = get_value(before, field)
            filtered_value = get_value(after, field)

            if original_value is not None:
                if _is_dropout(original_value):
                    original_dropouts += 1
                original_sum += original_value
                valid_points += 1

            if filtered_value is not None:
                if _is_dropout(filtered_value):
                    filtered_dropouts += 1
                filtered_sum += filtered_value

        metrics['corrected_points'][field] = corrected
        metrics['dropout_reduction'][field] = {
            'original': original_dropouts,
            'filtered': filtered_dropouts,
            'reduction': original_dropouts - filtered_dropouts,
            'percent_reduction': (
                (original_dropouts - filtered_dropouts) / original_dropouts * 100
                if original_dropouts > 0 else 0.0
            ),
        }
        metrics['average_values'][field] = {
            'original': original_sum / valid_points if valid_points > 0 else 0.0,
            'filtered': filtered_sum / valid_points if valid_points > 0 else 0.0,
        }

    return metrics


def debug_filter_difference(
    original: Sequence[Mapping[str, Any]],
    filtered: Sequence[Mapping[str, Any]],
    fields: Sequence[str] = ("stroke_rate", "watt"),
    max_examples: int = 5,
) -> Dict[str, Any]:
    """Summarize which values a filter changed and log the outcome."""
    if not original or len(original) != len(filtered):
        logger.info("[sensor-filter][diff] cannot compare: length mismatch or empty data")
        return {'total_changes': 0, 'fields': {}}

    summary: Dict[str, Dict[str, Any]] = {}
    total_changes = 0
    for field in fields:
        changed = 0
        diff_sum = 0.0
        examples: List[Dict[str, Any]] = []
        for idx, (before, after) in enumerate(zip(original, filtered)):
            a = get_value(before, field)
            b = get_value(after, field)
            if a is None or b is None or a == b:
                continue
            changed += 1
            difference = b - a
            diff_sum += abs(difference)
            if len(examples) < max_examples and abs(difference) > 5:
                examples.append({'index': idx, 'original': a, 'filtered': b, 'difference': difference})
        summary[field] = {
            'points_changed': changed,
            'avg_difference': diff_sum / changed if changed else 0.0,
            'examples': examples,
        }
        total_changes += changed

    if total_changes:
        logger.info("[sensor-filter][diff] filter changed %d values: %s", total_changes,
                    {f: s['points_changed'] for f, s in summary.items()})
    else:
        logger.warning("[sensor-filter][diff] filter did not change any data points")
    return {'total_changes': total_changes, 'fields': summary}

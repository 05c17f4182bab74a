from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from ...analytics.fields import FieldKey, canonical_field
from ...analytics.stats import pearson_correlation
from .base import CorrectionStrategy, Fix, Record


@dataclass
class RatioProfile:
    correlation: float
    ratio_mean: float
    ratio_std: float
    samples: int


@dataclass(frozen=True)
class PlausibilityFloor:
    """Lowest believable value once the reference exceeds ``reference_above``."""
    reference_above: float
    minimum: float
    # floor for the reference-derived fallback estimate
    expected_reference_above: float
    expected_high: float
    expected_low: float


PLAUSIBILITY_FLOORS: Dict[FieldKey, PlausibilityFloor] = {
    FieldKey.STROKE_RATE: PlausibilityFloor(7.0, 15.0, 5.0, 20.0, 10.0),
    FieldKey.WATT: PlausibilityFloor(5.0, 50.0, 3.0, 50.0, 20.0),
}


class CorrelationStrategy(CorrectionStrategy):
    """Judge each reading against what the reference field predicts.

    The first pass learns, per field, the target/reference ratio over valid
    pairs. Dropouts are then repaired from the nearest valid neighbours, with
    a reference-derived estimate as the last resort.
    """

    name = "correlation"

    def __init__(self, options):
        super().__init__(options)
        self.profiles: Dict[str, RatioProfile] = {}

    def prepare(self, records: Sequence[Record], fields: Sequence[str]) -> None:
        for field in fields:
            xs, ys = [], []
            for i in range(len(records)):
                target = self.value_at(records, i, field)
                reference = self.reference_at(records, i)
                if target is None or reference is None or target <= 0 or reference <= 0:
                    continue
                xs.append(reference)
                ys.append(target)
            if len(xs) <= self.options.min_correlation_samples:
                continue
            ratios = np.asarray(ys, dtype=float) / np.asarray(xs, dtype=float)
            self.profiles[field] = RatioProfile(
                correlation=pearson_correlation(xs, ys),
                ratio_mean=float(ratios.mean()),
                ratio_std=float(ratios.std()),
                samples=len(xs),
            )

    def is_dropout(self, records: Sequence[Record], index: int, field: str, value: float, reference: float) -> bool:
        opts = self.options
        if value < 5 and reference > 3:
            return True

        profile = self.profiles.get(field)
        if profile is not None and reference > 2:
            ratio_min = max(0.0, profile.ratio_mean - opts.ratio_sigma * profile.ratio_std)
            if value < reference * ratio_min * opts.ratio_slack:
                return True

        previous = self.value_at(records, index - 1, field) if index > 0 else None
        if previous is not None and previous > 10 and value < previous * 0.7 and reference > 1:
            return True

        floor = PLAUSIBILITY_FLOORS.get(canonical_field(field))
        if floor is not None and reference > floor.reference_above and value < floor.minimum:
            return True
        return False

    def expected_value(self, field: str, reference: float) -> float:
        profile = self.profiles.get(field)
        expected = reference * (profile.ratio_mean if profile else 1.0)
        floor = PLAUSIBILITY_FLOORS.get(canonical_field(field))
        if floor is not None:
            low = floor.expected_high if reference > floor.expected_reference_above else floor.expected_low
            expected = max(expected, low)
        return expected

    def _nearest_valid(self, records: Sequence[Record], index: int, field: str, step: int) -> Optional[int]:
        min_valid = self.options.min_valid_value(field)
        j = index + step
        while 0 <= j < len(records):
            value = self.value_at(records, j, field)
            if value is not None and value > 0 and value >= min_valid:
                return j
            j += step
        return None

    def replacement(self, records: Sequence[Record], index: int, field: str, reference: float) -> float:
        before = self._nearest_valid(records, index, field, -1)
        after = self._nearest_valid(records, index, field, 1)
        if before is not None and after is not None:
            v0 = self.value_at(records, before, field)
            v1 = self.value_at(records, after, field)
            value = v0 + (v1 - v0) * (index - before) / (after - before)
        elif before is not None:
            value = self.value_at(records, before, field)
        elif after is not None:
            value = self.value_at(records, after, field)
        else:
            value = self.expected_value(field, reference)
        return max(value, self.options.min_valid_value(field))

    def visit(self, records: Sequence[Record], index: int, field: str, eligible: bool) -> List[Fix]:
        if not eligible:
            return []
        reference = self.reference_at(records, index)
        value = self.value_at(records, index, field)
        if reference is None or reference <= 0 or value is None:
            return []
        if not self.is_dropout(records, index, field, value, reference):
            return []
        return [Fix(index, self.replacement(records, index, field, reference))]

    def diagnostics(self):
        return {
            field: {
                'correlation': round(p.correlation, 3),
                'ratio_mean': round(p.ratio_mean, 3),
                'ratio_std': round(p.ratio_std, 3),
                'samples': p.samples,
            }
            for field, p in self.profiles.items()
        }

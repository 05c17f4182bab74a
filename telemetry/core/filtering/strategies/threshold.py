from typing import List, Sequence

from .base import CorrectionStrategy, Fix, Record


class ThresholdStrategy(CorrectionStrategy):
    """Sudden low readings while the reference holds steady.

    A point is a dropout when it falls by more than ``drop_threshold`` from
    the previous value, lands below ``min_stable_reading``, and the reference
    moved by less than ``reference_change_limit`` over the same step. The gap
    is bridged linearly up to the next stable reading, or held at the last
    good value when the signal never comes back.
    """

    name = "threshold"

    def visit(self, records: Sequence[Record], index: int, field: str, eligible: bool) -> List[Fix]:
        if not eligible or index == 0:
            return []
        opts = self.options
        current = self.value_at(records, index, field)
        previous = self.value_at(records, index - 1, field)
        if current is None or previous is None:
            return []
        if not (current < previous * (1 - opts.drop_threshold) and current < opts.min_stable_reading):
            return []

        ref_current = self.reference_at(records, index)
        ref_previous = self.reference_at(records, index - 1)
        if ref_current is None or ref_previous is None:
            return []
        reference_change = abs(ref_current - ref_previous) / max(0.1, abs(ref_previous))
        if reference_change >= opts.reference_change_limit:
            return []

        next_stable = index + 1
        while next_stable < len(records):
            value = self.value_at(records, next_stable, field)
            if value is not None and value >= opts.min_stable_reading:
                break
            next_stable += 1

        floor = max(opts.min_stable_reading, opts.min_valid_value(field))
        if next_stable >= len(records):
            return [Fix(j, max(previous, floor)) for j in range(index, len(records))]

        target = self.value_at(records, next_stable, field)
        gap = next_stable - (index - 1)
        step = (target - previous) / gap
        return [
            Fix(j, max(previous + step * (j - (index - 1)), floor))
            for j in range(index, next_stable)
        ]

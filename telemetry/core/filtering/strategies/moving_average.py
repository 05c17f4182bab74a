from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ...analytics.stats import clean_values
from .base import CorrectionStrategy, Fix, Record


class MovingAverageStrategy(CorrectionStrategy):
    """Replace low-side outliers with the centered moving average.

    Window statistics are computed once from the untouched series, so fixes
    do not feed back into later windows. High spikes are left alone: sensors
    drop out low, not high.
    """

    name = "movingAverage"

    def __init__(self, options):
        super().__init__(options)
        self._window_stats: Dict[str, List[Optional[Tuple[float, float]]]] = {}

    def prepare(self, records: Sequence[Record], fields: Sequence[str]) -> None:
        half = max(1, int(self.options.window_size)) // 2
        n = len(records)
        for field in fields:
            values = [self.value_at(records, i, field) for i in range(n)]
            stats: List[Optional[Tuple[float, float]]] = []
            for i in range(n):
                window = clean_values(values[max(0, i - half):min(n, i + half + 1)])
                if not window.size:
                    stats.append(None)
                    continue
                stats.append((float(window.mean()), float(np.std(window))))
            self._window_stats[field] = stats

    def visit(self, records: Sequence[Record], index: int, field: str, eligible: bool) -> List[Fix]:
        if not eligible:
            return []
        stats = self._window_stats.get(field)
        if not stats or stats[index] is None:
            return []
        value = self.value_at(records, index, field)
        if value is None:
            return []
        local_mean, local_std = stats[index]
        if value < local_mean - self.options.outlier_sigma * local_std:
            return [Fix(index, local_mean)]
        return []

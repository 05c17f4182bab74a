import logging
from collections import Counter
from typing import List, Optional, Sequence

from ..window import WindowAnalyzer
from .base import CorrectionStrategy, Fix, Record

logger = logging.getLogger(__name__)


class ContextualStrategy(CorrectionStrategy):
    """Window-aware detection with thresholds adapted to workout context."""

    name = "contextual"

    def __init__(self, options):
        super().__init__(options)
        self.analyzer: Optional[WindowAnalyzer] = None
        self.phase_counts: Counter = Counter()

    def prepare(self, records: Sequence[Record], fields: Sequence[str]) -> None:
        self.analyzer = WindowAnalyzer(records, self.options)

    def visit(self, records: Sequence[Record], index: int, field: str, eligible: bool) -> List[Fix]:
        if not eligible or index == 0 or self.analyzer is None:
            return []
        current = self.value_at(records, index, field)
        previous = self.value_at(records, index - 1, field)
        if current is None or previous is None or previous <= 0:
            return []

        thresholds, analysis = self.analyzer.adaptive_thresholds(index, field)
        drop_pct = (previous - current) / previous * 100
        below_floor = current < thresholds.min_valid and previous > thresholds.min_valid
        if drop_pct <= thresholds.drop_pct and not below_floor:
            return []

        value = self.analyzer.replacement_value(index, field, thresholds.min_valid, analysis)
        self.phase_counts[analysis.phase.value] += 1
        logger.debug(
            "[sensor-filter][contextual] %s %s -> %s drop=%.1f%% window=%d trend=%s recovery=%s phase=%s point=%d",
            field, current, value, drop_pct, analysis.count, analysis.trend,
            analysis.has_recovery, analysis.phase.value, index,
        )
        return [Fix(index, value)]

    def diagnostics(self):
        return {'phase_analysis': dict(self.phase_counts)}

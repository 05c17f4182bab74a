"""Shared contract of the correction strategies.

A strategy is driven by the orchestrator one index at a time, left to right,
over a working list it may read freely (including fixes applied at earlier
indices). Strategies never apply corrections: they return ``Fix`` objects and
the orchestrator applies and annotates them. The one write a strategy makes
is diagnostic: Kalman records its estimate under ``<field>_filtered`` on every
visited record.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, MutableMapping, Optional, Sequence

from ...analytics.fields import get_value
from ..options import CorrectionOptions

Record = MutableMapping[str, Any]


@dataclass
class Fix:
    index: int
    value: float


class CorrectionStrategy:
    """Base class; subclasses override ``visit`` and optionally ``prepare``."""

    name = "base"

    def __init__(self, options: CorrectionOptions):
        self.options = options

    def prepare(self, records: Sequence[Record], fields: Sequence[str]) -> None:
        """First pass over the untouched working set."""

    def visit(self, records: Sequence[Record], index: int, field: str, eligible: bool) -> List[Fix]:
        raise NotImplementedError

    def diagnostics(self) -> Optional[Dict[str, Any]]:
        return None

    # helpers

    def value_at(self, records: Sequence[Record], index: int, field: str) -> Optional[float]:
        if index < 0 or index >= len(records):
            return None
        return get_value(records[index], field)

    def reference_at(self, records: Sequence[Record], index: int) -> Optional[float]:
        return self.value_at(records, index, self.options.reference_field)

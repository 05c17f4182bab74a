"""Error types raised by the telemetry analytics and filtering code.

Only ``describe`` and the orchestrator's point accessor raise these; the hot
loops turn boundary conditions into neutral values instead.
"""

from typing import Any, Dict


class TelemetryError(Exception):
    """Base class for telemetry processing errors."""


class MissingDataError(TelemetryError):
    """A required field (time or reference) is absent for a record."""

    def __init__(self, field: str, index: int = -1) -> None:
        self.field = field
        self.index = index
        where = f" at index {index}" if index >= 0 else ""
        super().__init__(f"Missing value for field '{field}'{where}")


class InsufficientSampleError(TelemetryError):
    """Too few samples for the requested statistic."""

    def __init__(self, required: int, actual: int, what: str = "statistics") -> None:
        self.required = required
        self.actual = actual
        super().__init__(f"Cannot calculate {what}: need at least {required} values, got {actual}")


class ShapeMismatchError(TelemetryError):
    """Original and filtered record lists differ in length."""

    def __init__(self, original_length: int, filtered_length: int) -> None:
        self.original_length = original_length
        self.filtered_length = filtered_length
        super().__init__(
            f"Data length mismatch: original={original_length}, filtered={filtered_length}"
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            'error': 'Data length mismatch',
            'original_length': self.original_length,
            'filtered_length': self.filtered_length,
        }

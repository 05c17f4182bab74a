from typing import Dict, List, Sequence

from ...analytics.fields import annotation_key
from .base import CorrectionStrategy, Fix, Record


class KalmanFilter:
    """Scalar Kalman filter with constant process and measurement noise."""

    def __init__(
        self,
        initial_value: float = 0.0,
        initial_covariance: float = 1.0,
        process_noise: float = 0.01,
        measurement_noise: float = 1.0,
    ):
        self.x = initial_value
        self.covariance = initial_covariance
        self.process_noise = process_noise
        self.measurement_noise = measurement_noise

    def predict(self) -> float:
        self.covariance = self.covariance + self.process_noise
        return self.x

    def update(self, measurement: float, is_valid: bool = True) -> float:
        # an invalid measurement is replaced by the prediction itself, which
        # leaves the state and the (inflated) covariance as they are
        if not is_valid:
            return self.x
        gain = self.covariance / (self.covariance + self.measurement_noise)
        self.x = self.x + gain * (measurement - self.x)
        self.covariance = (1 - gain) * self.covariance
        return self.x


class KalmanStrategy(CorrectionStrategy):
    """Coast a per-field Kalman filter through implausible readings.

    Every record receives ``<field>_filtered``; readings judged invalid are
    replaced by the filter estimate at eligible points.
    """

    name = "kalman"

    def __init__(self, options):
        super().__init__(options)
        self.filters: Dict[str, KalmanFilter] = {}

    def prepare(self, records: Sequence[Record], fields: Sequence[str]) -> None:
        opts = self.options
        for field in fields:
            initial = None
            for i in range(len(records)):
                value = self.value_at(records, i, field)
                if value is not None and value > 0:
                    initial = value
                    break
            if initial is not None:
                self.filters[field] = KalmanFilter(initial, 1.0, opts.process_noise, opts.measurement_noise)
            else:
                self.filters[field] = KalmanFilter(0.0, 10.0, opts.process_noise, opts.measurement_noise)

    def is_valid(self, records: Sequence[Record], index: int, field: str) -> bool:
        opts = self.options
        value = self.value_at(records, index, field)
        if value is None or value == 0:
            return False

        previous = self.value_at(records, index - 1, field) if index > 0 else None
        if previous is not None and previous > 0:
            if value < previous * (1 - opts.drop_threshold):
                return False
            two_back = self.value_at(records, index - 2, field) if index > 1 else None
            if two_back is not None and two_back > 0 and value < two_back * 0.5:
                return False

        reference = self.reference_at(records, index)
        if reference is not None and reference > opts.kalman_motion_threshold and value < opts.kalman_low_value:
            return False
        return True

    def visit(self, records: Sequence[Record], index: int, field: str, eligible: bool) -> List[Fix]:
        kf = self.filters.get(field)
        if kf is None:
            return []
        predicted = kf.predict()
        valid = self.is_valid(records, index, field)
        measurement = self.value_at(records, index, field) if valid else predicted
        filtered = kf.update(measurement, valid)

        records[index][annotation_key(records[index], field, "filtered")] = filtered
        if not valid and eligible:
            return [Fix(index, filtered)]
        return []

    def diagnostics(self):
        return {
            field: {'estimate': round(kf.x, 3), 'covariance': round(kf.covariance, 4)}
            for field, kf in self.filters.items()
        }

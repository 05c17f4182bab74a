from collections import deque
from typing import Any, Optional, Sequence

from .stats import to_number


def normalized_power(powers: Sequence[Any], window: int = 30) -> float:
    """Compute normalized power using an O(n) rolling average and 4th-power mean.

    Args:
        powers: sequence of power values (assumed 1Hz sampling); missing
            samples count as 0 W
        window: rolling average window length in seconds (default 30)
    """
    if not powers:
        return 0.0
    window = max(1, int(window))
    q = deque()
    s = 0.0
    rolling = []
    for p in powers:
        v = to_number(p) or 0.0
        q.append(v)
        s += v
        if len(q) > window:
            s -= q.popleft()
        rolling.append(s / len(q))
    fourth_powers = [x ** 4 for x in rolling]
    mean_fourth = sum(fourth_powers) / len(fourth_powers)
    return mean_fourth ** 0.25


def intensity_factor(np_value: float, ftp: Optional[float]) -> Optional[float]:
    if not ftp or ftp <= 0:
        return None
    return np_value / ftp


def training_stress_score(np_value: float, ftp: Optional[float], duration_seconds: float) -> Optional[float]:
    """TSS = duration * NP * IF / (FTP * 3600) * 100."""
    factor = intensity_factor(np_value, ftp)
    if factor is None:
        return None
    return (duration_seconds * np_value * factor) / (ftp * 3600) * 100

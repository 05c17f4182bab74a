from typing import Optional


def format_time(seconds: float) -> Optional[str]:
    try:
        seconds = int(seconds)
        if seconds < 0:
            seconds = 0
        if seconds < 60:
            return f"{seconds}s"
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        secs = seconds % 60
        if hours == 0:
            return f"{minutes}:{secs:02d}"
        return f"{hours}:{minutes:02d}:{secs:02d}"
    except (ValueError, TypeError, OverflowError):
        return None


def format_hms(seconds: float) -> str:
    """Always ``hh:mm:ss``; invalid input renders as ``00:00:00``."""
    try:
        total = max(0, int(seconds))
    except (ValueError, TypeError, OverflowError):
        total = 0
    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"

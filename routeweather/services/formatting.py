"""Display strings for distances, durations and arrival times."""

import math
from datetime import datetime


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_distance(meters: float) -> str:
    """``850`` -> ``"850m"``, ``12345`` -> ``"12.3km"``."""
    if meters < 1000:
        return f"{_round_half_up(meters)}m"
    return f"{meters / 1000:.1f}km"


def format_duration(seconds: float) -> str:
    """``5400`` -> ``"1h 30m"``.  Minutes are truncated."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_time(minutes: float) -> str:
    """Travel-time offset in minutes, e.g. ``83.4`` -> ``"1h 23m"``."""
    hours = int(minutes // 60)
    mins = _round_half_up(minutes % 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def format_clock(moment: datetime) -> str:
    return moment.strftime("%H:%M")

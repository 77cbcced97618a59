"""
Parsing and formatting of Go style durations ("300ms", "5s", "1m30s").
"""

import math
import re

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: str) -> float:
    """
    Converts a duration string into seconds.

    Accepts Go style strings made of one or more number+unit components
    (ns, us, ms, s, m, h), or a bare number which is read as seconds.

    Raises:
        ValueError: If the string is empty, malformed or not positive.
    """
    text = (value or "").strip()
    if not text:
        raise ValueError("empty duration")

    try:
        seconds = float(text)
    except ValueError:
        seconds = None

    if seconds is None:
        pos = 0
        seconds = 0.0
        for component in _COMPONENT.finditer(text):
            if component.start() != pos:
                break
            seconds += float(component.group(1)) * _UNITS[component.group(2)]
            pos = component.end()
        if pos != len(text):
            raise ValueError(f"invalid duration {value!r}")

    if not math.isfinite(seconds) or seconds <= 0:
        raise ValueError(f"duration must be positive, got {value!r}")
    return seconds


def format_duration(seconds: float) -> str:
    """Renders seconds the way Go prints a time.Duration, e.g. 5s, 1m30s, 250ms."""
    if seconds < 1:
        millis = seconds * 1000
        return f"{round(millis, 3):g}ms"

    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    out = ""
    if hours:
        out += f"{int(hours)}h"
    if hours or minutes:
        out += f"{int(minutes)}m"
    out += f"{round(secs, 3):g}s"
    return out

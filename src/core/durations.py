"""
Duration conversion between vendor encodings and seconds.
"""

import math
import re

from core.errors import InvalidInput

# ADP encodes durations as 'PT7H', 'PT30M', 'PT8H30M'
ISO_DURATION_RE = re.compile(r"^PT(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?$")

SECONDS_PER_HOUR = 3600


def parse_duration(raw: str | int | float | None, unit: str = "seconds") -> int:
    """
    Convert a vendor duration to whole seconds.

    Args:
        raw: 'PT[nH][nM]' token, a number, or None/empty for no time
        unit: how numbers are interpreted, "seconds" (TSheets) or "hours" (Unanet)

    Raises:
        InvalidInput: on malformed tokens, negative values or an unknown unit
    """
    if isinstance(raw, str):
        raw = raw.strip()
    if raw is None or raw == "":
        return 0

    if isinstance(raw, str):
        token = raw.upper()
        match = ISO_DURATION_RE.match(token)
        if match and (match.group("hours") or match.group("minutes")):
            hours = int(match.group("hours") or 0)
            minutes = int(match.group("minutes") or 0)
            return hours * SECONDS_PER_HOUR + minutes * 60
        try:
            raw = float(token)
        except ValueError:
            raise InvalidInput(f"Unrecognized duration '{raw}'")

    if isinstance(raw, bool) or not isinstance(raw, (int, float)) or math.isnan(raw):
        raise InvalidInput(f"Unrecognized duration '{raw}'")
    if raw < 0:
        raise InvalidInput(f"Duration cannot be negative: {raw}")

    if unit == "seconds":
        return int(round(raw))
    if unit == "hours":
        return hours_to_seconds(raw)
    raise InvalidInput(f"Unknown duration unit '{unit}'")


def hours_to_seconds(hours: float) -> int:
    return int(round(hours * SECONDS_PER_HOUR))


def seconds_to_hours(seconds: int | float) -> float:
    """Convert seconds to hours, floored to 2 decimal places."""
    return math.floor(int(seconds) / 36) / 100

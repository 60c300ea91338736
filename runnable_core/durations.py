"""Parse human readable durations ("1s", "2m", "1.5h") into milliseconds."""

import logging
import math
import re
import sys
from collections.abc import Mapping

from runnable_core.errors import InvalidDurationError

log = logging.getLogger(__name__)

SECOND = 1000
MINUTE = SECOND * 60
HOUR = MINUTE * 60
DAY = HOUR * 24
WEEK = DAY * 7
YEAR = DAY * 365.25
FOREVER = sys.maxsize

UNIT_TO_MS: Mapping[str, float] = {
    "": 1,
    "ms": 1,
    "msec": 1,
    "msecs": 1,
    "millisecond": 1,
    "milliseconds": 1,
    "s": SECOND,
    "sec": SECOND,
    "secs": SECOND,
    "second": SECOND,
    "seconds": SECOND,
    "m": MINUTE,
    "min": MINUTE,
    "mins": MINUTE,
    "minute": MINUTE,
    "minutes": MINUTE,
    "h": HOUR,
    "hr": HOUR,
    "hrs": HOUR,
    "hour": HOUR,
    "hours": HOUR,
    "d": DAY,
    "day": DAY,
    "days": DAY,
    "w": WEEK,
    "week": WEEK,
    "weeks": WEEK,
    "y": YEAR,
    "yr": YEAR,
    "yrs": YEAR,
    "year": YEAR,
    "years": YEAR,
}

DURATION_PATTERN = re.compile(
    r"^(?P<value>-?(?:\d+)?\.?\d+)\s*(?P<unit>[a-z]*)$", re.IGNORECASE
)


def parse_duration(value: str) -> int:
    """Convert a duration string to whole milliseconds.

    Args:
        value: Number with an optional unit, e.g. "1s", "2 minutes", "150"

    Returns:
        The duration in milliseconds, rounded to the nearest integer

    Raises:
        InvalidDurationError: If the string does not match the grammar

    """
    match = DURATION_PATTERN.match(value.strip())
    if match is None:
        raise InvalidDurationError(value)

    unit = match.group("unit").lower()
    if unit not in UNIT_TO_MS:
        raise InvalidDurationError(value)

    ms = round(float(match.group("value")) * UNIT_TO_MS[unit])
    log.debug("Parsed duration %r as %dms", value, ms)
    return ms


def to_milliseconds(value: int | float | str) -> int:
    """Normalize a numeric or string duration to whole milliseconds.

    Infinite values saturate to ``FOREVER``, keeping their sign.

    Raises:
        InvalidDurationError: If ``value`` is NaN or an unparsable string

    """
    if isinstance(value, str):
        return parse_duration(value)
    if math.isnan(value):
        raise InvalidDurationError(value)
    if math.isinf(value):
        return FOREVER if value > 0 else -FOREVER
    return int(value)

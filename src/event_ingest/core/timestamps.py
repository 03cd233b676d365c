"""
Parsing of upstream event timestamps.

Upstream timestamps have no zone designator and up to nine fractional
digits, e.g. "2021-03-14T12:00:00.123456789". They are UTC.
"""

import calendar
import re
from datetime import datetime, timezone

from .errors import CursorParseError


EVENT_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"

_TIMESTAMP_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(?P<frac>\d{1,9}))?$"
)


def parse_event_timestamp(raw: str) -> datetime:
    """
    Parse an upstream timestamp into an aware UTC datetime.

    Fractional seconds beyond microseconds are truncated.

    Raises:
        CursorParseError if the string does not match the format
    """
    if not isinstance(raw, str):
        raise CursorParseError(repr(raw), f"Timestamp is not a string: {raw!r}")

    match = _TIMESTAMP_RE.match(raw.strip())
    if not match:
        raise CursorParseError(raw)

    try:
        parsed = datetime.strptime(match.group("base"), EVENT_TIMESTAMP_FORMAT)
    except ValueError as e:
        raise CursorParseError(raw, f"Invalid timestamp {raw!r}: {e}") from e

    frac = match.group("frac")
    if frac:
        parsed = parsed.replace(microsecond=int(frac[:6].ljust(6, "0")))

    return parsed.replace(tzinfo=timezone.utc)


def to_unix_seconds(raw: str) -> int:
    """Parse an upstream timestamp and return whole unix seconds."""
    return calendar.timegm(parse_event_timestamp(raw).utctimetuple())

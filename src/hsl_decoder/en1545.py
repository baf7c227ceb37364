"""
hsl_decoder.en1545

EN1545 date and time handling for HSL card data.

Dates on the card are day counts since 1.1.1997 and times are minutes since
local midnight. Both describe local wall-clock values, so the UTC offset is
resolved at the decoded instant itself, not at the time of decoding.

A day count of 0 is how the card marks an unset date. It decodes to a
timestamp in 1997, which callers detect with is_sentinel().
"""

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional, Tuple

EPOCH_YEAR = 1997
EPOCH_OFFSET_MS = 852_076_800_000  # 1997-01-01T00:00:00Z in ms since the Unix epoch
DAY_MS = 86_400_000
MINUTE_MS = 60_000
MINUTES_PER_DAY = 1440

EN1545_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(milliseconds=EPOCH_OFFSET_MS)
_EPOCH_WALL_CLOCK = datetime(EPOCH_YEAR, 1, 1)


def _utc_offset(instant: datetime, tz: Optional[tzinfo]) -> timedelta:
    # astimezone() without a zone uses the system local rules for that instant
    local = instant.astimezone(tz) if tz is not None else instant.astimezone()
    return local.utcoffset() or timedelta(0)


def _to_zone(instant: datetime, tz: Optional[tzinfo]) -> datetime:
    return instant.astimezone(tz) if tz is not None else instant.astimezone()


def decode_datetime(days: int, minutes: int, tz: Optional[tzinfo] = None) -> datetime:
    """
    Convert an EN1545 day count and minute count to an aware datetime.

    Args:
        days: Days since 1.1.1997.
        minutes: Minutes since local midnight.
        tz: Zone whose rules the card values are local to; the system local
            zone when omitted.

    Returns:
        The instant, expressed in ``tz`` (or the system local zone).
    """
    as_if_utc = EN1545_EPOCH + timedelta(milliseconds=days * DAY_MS + minutes * MINUTE_MS)
    return _to_zone(as_if_utc - _utc_offset(as_if_utc, tz), tz)


def decode_date(days: int, tz: Optional[tzinfo] = None) -> datetime:
    """Convert an EN1545 day count to local midnight of that day."""
    return decode_datetime(days, 0, tz)


def decode_end_of_day(days: int, tz: Optional[tzinfo] = None) -> datetime:
    """Convert an EN1545 day count to 23:59:59 local time of that day."""
    return decode_datetime(days, MINUTES_PER_DAY - 1, tz) + timedelta(seconds=59)


def encode_datetime(value: datetime, tz: Optional[tzinfo] = None) -> Tuple[int, int]:
    """Inverse of decode_datetime: returns (days, minutes) of the local wall clock."""
    wall_clock = _to_zone(value, tz).replace(tzinfo=None)
    delta = wall_clock - _EPOCH_WALL_CLOCK
    return delta.days, delta.seconds // 60


def encode_date(value: datetime, tz: Optional[tzinfo] = None) -> int:
    """Inverse of decode_date: returns the day count of the local date."""
    return encode_datetime(value, tz)[0]


def is_sentinel(value: datetime) -> bool:
    """True when a decoded date is the card's 'not set' value (day count 0)."""
    return value.year == EPOCH_YEAR

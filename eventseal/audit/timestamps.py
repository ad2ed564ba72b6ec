"""Nanosecond-precision UTC timestamps with a fixed canonical text form.

:class:`datetime.datetime` stops at microseconds, while audit records carry
nanosecond acceptance times. :class:`EventTimestamp` stores integer
nanoseconds since the Unix epoch and renders them as
``YYYY-MM-DDTHH:MM:SS.fffffffffZ``: always nine fraction digits, always the
``Z`` designator. Signing never relies on ``str(datetime)`` or ``isoformat()``.

Calendar fields are computed from the integer directly (proleptic Gregorian),
so any instant renders, including ones outside the year range of
:class:`datetime.datetime`. Years outside 0000-9999 are written with as many
digits as they need, negative years with a leading ``-``.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

NS_PER_SECOND = 1_000_000_000
_NS_PER_MICROSECOND = 1_000
_SECONDS_PER_DAY = 86_400
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_ISO_PATTERN = re.compile(
    r"^(?P<year>-?\d{4,})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"T(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d{1,9}))?"
    r"(?P<zone>Z|[+-]\d{2}:\d{2})$"
)


def _days_from_civil(year: int, month: int, day: int) -> int:
    """Days since 1970-01-01 for a proleptic Gregorian date."""
    year -= month <= 2
    era = year // 400
    year_of_era = year - era * 400
    day_of_year = (153 * (month + (-3 if month > 2 else 9)) + 2) // 5 + day - 1
    day_of_era = year_of_era * 365 + year_of_era // 4 - year_of_era // 100 + day_of_year
    return era * 146_097 + day_of_era - 719_468


def _civil_from_days(days: int) -> tuple[int, int, int]:
    """Inverse of :func:`_days_from_civil`."""
    days += 719_468
    era = days // 146_097
    day_of_era = days - era * 146_097
    year_of_era = (
        day_of_era - day_of_era // 1460 + day_of_era // 36_524 - day_of_era // 146_096
    ) // 365
    day_of_year = day_of_era - (365 * year_of_era + year_of_era // 4 - year_of_era // 100)
    shifted_month = (5 * day_of_year + 2) // 153
    day = day_of_year - (153 * shifted_month + 2) // 5 + 1
    month = shifted_month + 3 if shifted_month < 10 else shifted_month - 9
    year = year_of_era + era * 400 + (month <= 2)
    return year, month, day


@dataclass(frozen=True, order=True, slots=True)
class EventTimestamp:
    """UTC instant expressed as nanoseconds since the Unix epoch."""

    epoch_ns: int

    @classmethod
    def from_epoch_ns(cls, epoch_ns: int) -> EventTimestamp:
        return cls(int(epoch_ns))

    @classmethod
    def from_datetime(cls, value: datetime, nanoseconds: int = 0) -> EventTimestamp:
        """Build a timestamp from ``value`` plus sub-microsecond ``nanoseconds``.

        Naive datetimes are taken to be UTC; aware datetimes are converted.

        Args:
            value: Source datetime (microsecond precision)
            nanoseconds: Extra nanoseconds below the microsecond (0-999)

        Raises:
            ValueError: If ``nanoseconds`` is outside 0-999
        """
        if not 0 <= nanoseconds < _NS_PER_MICROSECOND:
            raise ValueError(f"nanoseconds must be in [0, 999], got {nanoseconds}")

        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)

        # Aware subtraction applies the offset without building an
        # out-of-range datetime, so datetime.min/max with offsets are fine.
        delta = value - _EPOCH
        whole_seconds = delta.days * _SECONDS_PER_DAY + delta.seconds
        epoch_ns = (
            whole_seconds * NS_PER_SECOND
            + delta.microseconds * _NS_PER_MICROSECOND
            + nanoseconds
        )
        return cls(epoch_ns)

    @classmethod
    def now(cls) -> EventTimestamp:
        return cls(time.time_ns())

    @classmethod
    def parse(cls, text: str) -> EventTimestamp:
        """Parse an ISO-8601 timestamp with up to nine fractional digits.

        Accepts a ``Z`` designator or a ``+HH:MM``/``-HH:MM`` offset, and
        every year :meth:`isoformat` can produce.

        Raises:
            ValueError: If ``text`` is not a supported ISO-8601 timestamp
        """
        match = _ISO_PATTERN.match(text.strip())
        if match is None:
            raise ValueError(f"Invalid timestamp '{text}': expected ISO-8601 with UTC offset")

        year, month, day = (int(match.group(name)) for name in ("year", "month", "day"))
        hour, minute, second = (int(match.group(name)) for name in ("hour", "minute", "second"))

        days = _days_from_civil(year, month, day)
        if _civil_from_days(days) != (year, month, day):
            raise ValueError(f"Invalid timestamp '{text}': no such calendar date")
        if hour > 23 or minute > 59 or second > 59:
            raise ValueError(f"Invalid timestamp '{text}': time of day out of range")

        offset_seconds = 0
        zone = match.group("zone")
        if zone != "Z":
            offset_hours, offset_minutes = int(zone[1:3]), int(zone[4:6])
            if offset_hours > 23 or offset_minutes > 59:
                raise ValueError(f"Invalid timestamp '{text}': UTC offset out of range")
            offset_seconds = (offset_hours * 3600 + offset_minutes * 60) * (
                -1 if zone[0] == "-" else 1
            )

        seconds = (
            days * _SECONDS_PER_DAY + hour * 3600 + minute * 60 + second - offset_seconds
        )
        fraction = (match.group("fraction") or "").ljust(9, "0")
        return cls(seconds * NS_PER_SECOND + int(fraction))

    def to_datetime(self) -> datetime:
        """Return an aware UTC datetime, truncated to microseconds.

        Raises:
            OverflowError: If the instant is outside the range of ``datetime``
        """
        return _EPOCH + timedelta(microseconds=self.epoch_ns // _NS_PER_MICROSECOND)

    def isoformat(self) -> str:
        """Render the canonical ``YYYY-MM-DDTHH:MM:SS.fffffffffZ`` form."""
        seconds, nanos = divmod(self.epoch_ns, NS_PER_SECOND)
        days, second_of_day = divmod(seconds, _SECONDS_PER_DAY)
        year, month, day = _civil_from_days(days)
        hour, rest = divmod(second_of_day, 3600)
        minute, second = divmod(rest, 60)
        sign = "-" if year < 0 else ""
        return (
            f"{sign}{abs(year):04d}-{month:02d}-{day:02d}"
            f"T{hour:02d}:{minute:02d}:{second:02d}"
            f".{nanos:09d}Z"
        )

    def __str__(self) -> str:
        return self.isoformat()


TimestampLike = EventTimestamp | datetime | int


def to_event_timestamp(value: TimestampLike) -> EventTimestamp:
    """Coerce a supported timestamp value into an :class:`EventTimestamp`.

    ``int`` values are nanoseconds since the Unix epoch.

    Raises:
        TypeError: If ``value`` is not an EventTimestamp, datetime, or int
    """
    if isinstance(value, EventTimestamp):
        return value
    if isinstance(value, datetime):
        return EventTimestamp.from_datetime(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return EventTimestamp(value)
    raise TypeError(
        f"Unsupported timestamp type {type(value).__name__!r}; "
        "expected EventTimestamp, datetime, or epoch nanoseconds"
    )


def format_timestamp(value: TimestampLike) -> str:
    """Return the canonical text form used in signing input."""
    return to_event_timestamp(value).isoformat()

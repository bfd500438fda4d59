"""Parsing and rendering of PostgreSQL date, time and timestamp text."""

from __future__ import annotations

import re
from datetime import datetime, time, timedelta, timezone

__all__ = ["parse_time", "parse_time_string", "append_time"]

_TIME_FORMAT_LEN = len("15:04:05.999999999")

_DATE = r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
_CLOCK = (
    r"(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<frac>\d{1,9}))?"
)

_TIME_RE = re.compile(_CLOCK)
_DATE_RE = re.compile(_DATE)
_RFC3339_RE = re.compile(
    _DATE + "T" + _CLOCK + r"(?:(?P<z>Z)|(?P<sign>[+-])(?P<oh>\d{2}):(?P<om>\d{2}))"
)
_TZ_HMS_RE = re.compile(
    _DATE + " " + _CLOCK + r"(?P<sign>[+-])(?P<oh>\d{2}):(?P<om>\d{2}):(?P<os>\d{2})"
)
_TZ_HM_RE = re.compile(_DATE + " " + _CLOCK + r"(?P<sign>[+-])(?P<oh>\d{2}):(?P<om>\d{2})")
_TZ_H_RE = re.compile(_DATE + " " + _CLOCK + r"(?P<sign>[+-])(?P<oh>\d{2})")
_TIMESTAMP_RE = re.compile(_DATE + " " + _CLOCK)


def _error(s: str) -> ValueError:
    return ValueError(f"pg: can't parse time {s!r}")


def _match(pattern: re.Pattern, s: str) -> re.Match:
    m = pattern.fullmatch(s)
    if m is None:
        raise _error(s)
    return m


def _microseconds(frac: str | None) -> int:
    # Sub-microsecond digits are truncated.
    return int((frac or "0")[:6].ljust(6, "0"))


def _offset(m: re.Match) -> timezone:
    if m.groupdict().get("z"):
        return timezone.utc
    seconds = (
        int(m.group("oh")) * 3600
        + int(m.groupdict().get("om") or 0) * 60
        + int(m.groupdict().get("os") or 0)
    )
    if m.group("sign") == "-":
        seconds = -seconds
    if seconds == 0:
        return timezone.utc
    return timezone(timedelta(seconds=seconds))


def _build_datetime(m: re.Match, tz: timezone, s: str) -> datetime:
    try:
        return datetime(
            int(m.group("year")),
            int(m.group("month")),
            int(m.group("day")),
            int(m.group("hour")),
            int(m.group("minute")),
            int(m.group("second")),
            _microseconds(m.group("frac")),
            tzinfo=tz,
        )
    except ValueError as err:
        raise _error(s) from err


def parse_time(data: bytes) -> datetime | time:
    """Parse PostgreSQL date/time text given as bytes."""
    return parse_time_string(bytes(data).decode("utf-8"))


def parse_time_string(s: str) -> datetime | time:
    """Parse PostgreSQL date/time text.

    A bare time of day is returned as a UTC ``datetime.time``; every other
    form is returned as an aware ``datetime``. Values without an offset are
    taken to be UTC.
    """
    length = len(s)
    if length <= _TIME_FORMAT_LEN:
        if length < 3:
            raise _error(s)
        if s[2] == ":":
            m = _match(_TIME_RE, s)
            try:
                return time(
                    int(m.group("hour")),
                    int(m.group("minute")),
                    int(m.group("second")),
                    _microseconds(m.group("frac")),
                    tzinfo=timezone.utc,
                )
            except ValueError as err:
                raise _error(s) from err
        m = _match(_DATE_RE, s)
        try:
            return datetime(
                int(m.group("year")),
                int(m.group("month")),
                int(m.group("day")),
                tzinfo=timezone.utc,
            )
        except ValueError as err:
            raise _error(s) from err

    if s[10] == "T":
        m = _match(_RFC3339_RE, s)
        try:
            tz = _offset(m)
        except ValueError as err:
            raise _error(s) from err
        return _build_datetime(m, tz, s)

    for index, pattern in ((9, _TZ_HMS_RE), (6, _TZ_HM_RE), (3, _TZ_H_RE)):
        if s[length - index] in "+-":
            m = _match(pattern, s)
            try:
                tz = _offset(m)
            except ValueError as err:
                raise _error(s) from err
            return _build_datetime(m, tz, s)

    return _build_datetime(_match(_TIMESTAMP_RE, s), timezone.utc, s)


def append_time(tm: datetime, flags: int = 0) -> str:
    """Render ``tm`` as a UTC timestamptz literal.

    The literal is quoted only when ``flags`` is exactly the quote flag.
    Naive datetimes are taken to be UTC.
    """
    if tm.tzinfo is None:
        tm = tm.replace(tzinfo=timezone.utc)
    tm = tm.astimezone(timezone.utc)
    text = (
        f"{tm.year:04d}-{tm.month:02d}-{tm.day:02d} "
        f"{tm.hour:02d}:{tm.minute:02d}:{tm.second:02d}"
    )
    if tm.microsecond:
        text += "." + f"{tm.microsecond:06d}".rstrip("0")
    text += "+00:00:00"
    if flags == 1:
        return f"'{text}'"
    return text
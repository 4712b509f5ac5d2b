"""Date and date-time formats used by IMAP and message headers."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
_MONTH_INDEX = {m.lower(): i + 1 for i, m in enumerate(_MONTHS)}
_WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
_WEEKDAY_SET = {w.lower() for w in _WEEKDAYS}

_COMMENT = re.compile(r"[ \t]+\(.*\)$")

_ENVELOPE = re.compile(
    r"(?:(?P<wd>[A-Za-z]{3}), )?"
    r" ?(?P<d>\d{1,2}) (?P<mon>[A-Za-z]{3}) (?P<y>\d{4}|\d{2}) "
    r"(?P<H>\d{1,2}):(?P<M>\d{2})(?::(?P<S>\d{2}))? "
    r"(?P<z>[+-]\d{4}|[A-Za-z]{3,5})"
)
_DATE_TIME = re.compile(
    r" ?(?P<d>\d{1,2})-(?P<mon>[A-Za-z]{3})-(?P<y>\d{4}) "
    r"(?P<H>\d{1,2}):(?P<M>\d{2}):(?P<S>\d{2}) (?P<z>[+-]\d{4})"
)
_DATE = re.compile(r" ?(?P<d>\d{1,2})-(?P<mon>[A-Za-z]{3})-(?P<y>\d{4})")


def _zone(z: str) -> timezone:
    if z[0] in "+-":
        hours, minutes = int(z[1:3]), int(z[3:5])
        if hours > 24 or minutes > 60:
            raise ValueError(f"invalid time zone offset {z!r}")
        delta = timedelta(hours=hours, minutes=minutes)
        return timezone(-delta if z[0] == "-" else delta)
    return timezone(timedelta(0), z.upper())


def _build(m: re.Match, value: str) -> datetime:
    groups = m.groupdict()
    month = _MONTH_INDEX.get(groups["mon"].lower())
    if month is None:
        raise ValueError(f"date {value} could not be parsed")
    year = int(groups["y"])
    if len(groups["y"]) == 2:
        year += 1900 if year >= 69 else 2000
    tz = _zone(groups["z"]) if groups.get("z") else timezone.utc
    return datetime(
        year, month, int(groups["d"]),
        int(groups.get("H") or 0), int(groups.get("M") or 0), int(groups.get("S") or 0),
        tzinfo=tz,
    )


def parse_message_datetime(value: str) -> datetime:
    """Parse a date in any of the RFC 5322 section 3.3 layouts."""
    cleaned = _COMMENT.sub("", value)
    m = _ENVELOPE.fullmatch(cleaned)
    if m is None or (m["wd"] and m["wd"].lower() not in _WEEKDAY_SET):
        raise ValueError(f"date {cleaned} could not be parsed")
    try:
        return _build(m, cleaned)
    except ValueError:
        raise ValueError(f"date {cleaned} could not be parsed") from None


def parse_date_time(value: str) -> datetime:
    """Parse an IMAP date-time such as ' 2-Nov-2009 23:00:00 -0600'."""
    m = _DATE_TIME.fullmatch(value)
    if m is None:
        raise ValueError(f"invalid date-time {value!r}")
    return _build(m, value)


def parse_date(value: str) -> datetime:
    """Parse an IMAP date such as '2-Nov-2009', giving midnight UTC."""
    m = _DATE.fullmatch(value)
    if m is None:
        raise ValueError(f"invalid date {value!r}")
    return _build(m, value)


def _offset(value: datetime) -> str:
    delta = value.utcoffset() or timedelta(0)
    minutes = int(delta.total_seconds()) // 60
    sign = "-" if minutes < 0 else "+"
    minutes = abs(minutes)
    return f"{sign}{minutes // 60:02d}{minutes % 60:02d}"


def format_date_time(value: datetime) -> str:
    """Format an IMAP date-time with a space-padded day."""
    return (f"{value.day:2d}-{_MONTHS[value.month - 1]}-{value.year:04d} "
            f"{value:%H:%M:%S} {_offset(value)}")


def format_date(value: datetime) -> str:
    """Format an IMAP date with a space-padded day."""
    return f"{value.day:2d}-{_MONTHS[value.month - 1]}-{value.year:04d}"


def format_envelope_date_time(value: datetime) -> str:
    """Format a date as used in message headers."""
    return (f"{_WEEKDAYS[value.weekday()]}, {value.day:02d} {_MONTHS[value.month - 1]} "
            f"{value.year:04d} {value:%H:%M:%S} {_offset(value)}")
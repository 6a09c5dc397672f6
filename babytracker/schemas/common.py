"""Wire formats for calendar dates and wall-clock times.

Dates travel as ``YYYY-MM-DD`` and times as 24-hour ``HH:mm`` or
``HH:mm:ss``. They are kept apart (no combined timestamp, no time zone).
"""

import re
from datetime import date, time
from typing import Annotated

from pydantic import BeforeValidator, PlainSerializer

from babytracker.core.exceptions import ValidationError

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^\d{2}:\d{2}(:\d{2})?$")


def parse_date(value: str) -> date:
    """Parse ``YYYY-MM-DD``; raises :class:`ValidationError` otherwise."""
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def parse_time(value: str) -> time:
    """Parse ``HH:mm`` or ``HH:mm:ss``; raises :class:`ValidationError` otherwise."""
    if not isinstance(value, str) or not _TIME_RE.match(value):
        raise ValidationError(f"Invalid time {value!r}, expected HH:mm or HH:mm:ss")
    try:
        return time.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid time {value!r}, expected HH:mm or HH:mm:ss")


def format_time(value: time) -> str:
    return value.strftime("%H:%M:%S") if value.second else value.strftime("%H:%M")


def _coerce(parser):
    def _validate(value):
        if isinstance(value, (date, time)):
            return value
        try:
            return parser(value)
        except ValidationError as exc:
            # pydantic reports ValueError as a field error
            raise ValueError(exc.message)
    return _validate


WireDate = Annotated[date, BeforeValidator(_coerce(parse_date))]
WireTime = Annotated[
    time,
    BeforeValidator(_coerce(parse_time)),
    PlainSerializer(format_time, return_type=str, when_used="json"),
]

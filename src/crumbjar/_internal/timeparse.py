"""Textual date expressions for cookie lifetimes.

Resolves strings such as ``"+1 week"``, ``"tomorrow"`` or
``"2030-01-01 12:00"`` to a Unix timestamp. Relative offsets are
applied with ``dateutil.relativedelta`` so months and years follow the
calendar; absolute dates go through ``dateutil.parser``.
"""

import re
from datetime import datetime, timedelta

from dateutil import parser as date_parser
from dateutil.parser import ParserError
from dateutil.relativedelta import relativedelta

from crumbjar.errors import LifetimeParseError

_OFFSET_RE = re.compile(
    r"([+-]?\d+)\s*"
    r"(sec|second|min|minute|hour|day|week|fortnight|month|year)s?\b",
    re.IGNORECASE,
)

_UNITS: dict[str, relativedelta] = {
    "sec": relativedelta(seconds=1),
    "second": relativedelta(seconds=1),
    "min": relativedelta(minutes=1),
    "minute": relativedelta(minutes=1),
    "hour": relativedelta(hours=1),
    "day": relativedelta(days=1),
    "week": relativedelta(weeks=1),
    "fortnight": relativedelta(weeks=2),
    "month": relativedelta(months=1),
    "year": relativedelta(years=1),
}

_ANCHORS = {"today": 0, "tomorrow": 1, "yesterday": -1}


def parse_expression(text: str, now: float) -> int:
    """Resolve *text* to a Unix timestamp relative to *now*.

    Raises ``LifetimeParseError`` when the expression is not understood.
    """
    expression = text.strip().lower()
    if not expression:
        msg = "Unable to determine cookie availability, empty textual datetime"
        raise LifetimeParseError(msg)

    current = datetime.fromtimestamp(now)

    if expression == "now":
        return int(now)

    if expression in _ANCHORS:
        midnight = current.replace(hour=0, minute=0, second=0, microsecond=0)
        return int((midnight + timedelta(days=_ANCHORS[expression])).timestamp())

    offset = _parse_offsets(expression)
    if offset is not None:
        return int((current + offset).timestamp())

    try:
        parsed = date_parser.parse(text, default=current.replace(microsecond=0))
    except (ParserError, OverflowError, ValueError) as exc:
        msg = (
            "Unable to determine cookie availability, textual datetime "
            f"{text!r} could not be parsed into a Unix timestamp"
        )
        raise LifetimeParseError(msg) from exc
    return int(parsed.timestamp())


def _parse_offsets(expression: str) -> relativedelta | None:
    """Sum every ``N unit`` offset, or return None if anything else remains."""
    if expression.startswith("now "):
        expression = expression[4:]

    total = relativedelta()
    position = 0
    matched = False
    for match in _OFFSET_RE.finditer(expression):
        if expression[position : match.start()].strip():
            return None
        total += _UNITS[match.group(2).lower()] * int(match.group(1))
        position = match.end()
        matched = True

    if not matched or expression[position:].strip():
        return None
    return total

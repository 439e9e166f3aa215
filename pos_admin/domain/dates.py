"""Calendar-date parsing shared by form shaping, validation and the temporal resolver."""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any

_COMPACT_DATE = re.compile(r"^\d{8}$")


def parse_effective_date(value: Any) -> date | None:
    """Interpret an effective-from value as a calendar date.

    Accepts ``date``/``datetime`` objects, ISO-8601 strings (date-only or
    full timestamps, ``Z`` suffix included) and compact ``YYYYMMDD`` strings
    or integers. Timezone-aware timestamps are converted to local time before
    the date is taken. Returns ``None`` for anything else.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, Decimal)):
        return _parse_compact(str(int(value)))
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if _COMPACT_DATE.match(text):
        return _parse_compact(text)
    if len(text) == 10:
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.date()


def _parse_compact(text: str) -> date | None:
    if not _COMPACT_DATE.match(text):
        return None
    try:
        return date(int(text[:4]), int(text[4:6]), int(text[6:]))
    except ValueError:
        return None

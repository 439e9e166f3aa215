"""Client-side filtering and sorting of a record collection for list views."""

from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal
from typing import Any

from pos_admin.domain.entities.form_record import parse_number


def filter_records(
    records: Iterable[Mapping[str, Any]],
    term: str = "",
    fields: Sequence[str] = (),
    **equals: Any,
) -> list[Mapping[str, Any]]:
    """Records containing ``term`` (case-insensitive) in any of ``fields``.

    Keyword arguments add exact-match filters, e.g.
    ``filter_records(rows, "void", ["reason_code"], operation_type="POS")``.
    Empty filter values are ignored.
    """
    needle = term.strip().lower()
    active_equals = {k: v for k, v in equals.items() if v not in (None, "")}
    result = []
    for record in records:
        if needle and not any(needle in str(record.get(f) or "").lower() for f in fields):
            continue
        if any(record.get(k) != v for k, v in active_equals.items()):
            continue
        result.append(record)
    return result


def _sort_key(value: Any) -> tuple[int, Any]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return (2, "")
    if isinstance(value, bool):
        return (0, Decimal(int(value)))
    number = parse_number(value) if isinstance(value, (int, float, Decimal, str)) else None
    if number is not None:
        return (0, number)
    return (1, str(value).lower())


def sort_records(
    records: Iterable[Mapping[str, Any]],
    field: str,
    ascending: bool = True,
) -> list[Mapping[str, Any]]:
    """Sort by ``field``; numbers before text, strings case-insensitively, blanks last."""
    present = []
    blanks = []
    for record in records:
        (blanks if _sort_key(record.get(field))[0] == 2 else present).append(record)
    present.sort(key=lambda r: _sort_key(r.get(field)), reverse=not ascending)
    return present + blanks

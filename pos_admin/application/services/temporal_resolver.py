"""Temporal resolver: picks the currently applicable version of each configuration code.

Versioned configuration records (property codes, outlets, ...) share a
business code and differ by the date they take effect. For a reference date,
the applicable version of a code is the one with the latest effective date
that is not in the future. Comparison is date-only.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from pos_admin.domain.dates import parse_effective_date

logger = logging.getLogger(__name__)


class TemporalResolver:
    """Selects, per code, the record in effect on a reference date."""

    def __init__(self, code_field: str, effective_field: str):
        self._code_field = code_field
        self._effective_field = effective_field

    @property
    def code_field(self) -> str:
        return self._code_field

    @property
    def effective_field(self) -> str:
        return self._effective_field

    def resolve(
        self,
        records: Iterable[Mapping[str, Any]],
        reference_date: date | datetime | None = None,
    ) -> list[Mapping[str, Any]]:
        """Return one applicable record per code, in order of each code's first appearance.

        A record dated exactly on the reference date is applicable. Codes
        whose versions are all future-dated are left out entirely. Two
        versions with the same date resolve to the one seen last.
        """
        as_of = _as_date(reference_date)

        chosen: dict[Any, tuple[date, Mapping[str, Any]] | None] = {}
        for record in records:
            code = record.get(self._code_field)
            chosen.setdefault(code, None)

            effective = parse_effective_date(record.get(self._effective_field))
            if effective is None:
                logger.debug(
                    "Skipping %s=%r: unparseable %s=%r",
                    self._code_field,
                    code,
                    self._effective_field,
                    record.get(self._effective_field),
                )
                continue
            if effective > as_of:
                continue

            best = chosen[code]
            # ">=" so that the later-seen record wins a tie
            if best is None or effective >= best[0]:
                chosen[code] = (effective, record)

        return [entry[1] for entry in chosen.values() if entry is not None]

    def resolve_one(
        self,
        records: Iterable[Mapping[str, Any]],
        code: Any,
        reference_date: date | datetime | None = None,
    ) -> Mapping[str, Any] | None:
        """The applicable record for a single code, or None."""
        matching = [r for r in records if r.get(self._code_field) == code]
        resolved = self.resolve(matching, reference_date)
        return resolved[0] if resolved else None


def _as_date(reference: date | datetime | None) -> date:
    if reference is None:
        return date.today()
    if isinstance(reference, datetime):
        if reference.tzinfo is not None:
            reference = reference.astimezone()
        return reference.date()
    return reference

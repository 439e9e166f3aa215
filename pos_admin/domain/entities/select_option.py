"""Domain entity: one entry of a dependent dropdown."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SelectOption:
    """A dropdown option built from another entity type's record."""

    value: str
    label: str

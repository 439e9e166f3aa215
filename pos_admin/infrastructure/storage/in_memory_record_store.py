"""In-memory record tables for the mock backend, optionally seeded from YAML.

Seed file layout::

    resources:
      property-codes:
        - {id: 1, property_code: HOTEL001, applicable_from: "2024-01-01", ...}
"""

import copy
import logging
from pathlib import Path
from typing import Any

import yaml

from pos_admin.application.interfaces.record_store import RecordStore

logger = logging.getLogger(__name__)

ACTIVE_STATUS_FIELD = "ActiveStatus"


def load_seed_records(path: str | Path) -> dict[str, list[dict[str, Any]]]:
    """Read the seed YAML; a missing file yields empty tables."""
    path = Path(path)
    if not path.exists():
        logger.warning("Seed file not found: %s", path)
        return {}
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    resources = data.get("resources") or {}
    return {str(name): [dict(r) for r in rows or []] for name, rows in resources.items()}


def _matches(record: dict[str, Any], key_field: str, key: str) -> bool:
    if record.get(ACTIVE_STATUS_FIELD, 1) in (0, "0", False):
        return False
    return str(record.get(key_field)) == str(key)


class InMemoryRecordStore(RecordStore):
    """Dict-of-lists store. Returned records are copies; callers cannot mutate the tables."""

    def __init__(self, seed: dict[str, list[dict[str, Any]]] | None = None):
        self._tables: dict[str, list[dict[str, Any]]] = {
            resource: copy.deepcopy(rows) for resource, rows in (seed or {}).items()
        }
        self._sequences: dict[str, int] = {}

    def _table(self, resource: str) -> list[dict[str, Any]]:
        return self._tables.setdefault(resource, [])

    async def get_all(self, resource: str) -> list[dict[str, Any]]:
        return copy.deepcopy(self._table(resource))

    async def get_by_key(self, resource: str, key_field: str, key: str) -> dict[str, Any] | None:
        for record in self._table(resource):
            if _matches(record, key_field, key):
                return copy.deepcopy(record)
        return None

    async def insert(self, resource: str, record: dict[str, Any]) -> dict[str, Any]:
        stored = copy.deepcopy(record)
        self._table(resource).append(stored)
        return copy.deepcopy(stored)

    async def replace(
        self, resource: str, key_field: str, key: str, record: dict[str, Any]
    ) -> dict[str, Any] | None:
        table = self._table(resource)
        for index, existing in enumerate(table):
            if _matches(existing, key_field, key):
                table[index] = copy.deepcopy(record)
                return copy.deepcopy(record)
        return None

    async def next_id(self, resource: str, key_field: str) -> int:
        if resource not in self._sequences:
            ids = [r[key_field] for r in self._table(resource) if isinstance(r.get(key_field), int)]
            self._sequences[resource] = max(ids, default=0)
        self._sequences[resource] += 1
        return self._sequences[resource]

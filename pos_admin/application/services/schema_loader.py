"""Entity schema loader: parses the YAML screen definitions into EntitySchema objects.

Executed once when the mock backend starts and whenever a controller
factory needs the registry.
"""

import logging
import re
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import yaml

from pos_admin.domain.entities import EntitySchema, FieldKind, FieldSpec
from pos_admin.domain.exceptions import SchemaDefinitionError

logger = logging.getLogger(__name__)

_FIELD_KEYS = {
    "name",
    "label",
    "kind",
    "required",
    "max_length",
    "pattern",
    "pattern_message",
    "unique_among_existing",
    "unique_case_insensitive",
    "unique_scope",
    "min_value",
    "max_value",
    "choices",
    "options_from",
    "after_field",
    "uppercase",
    "allowed_chars",
    "truncate",
    "default",
}


class SchemaRegistry(Mapping[str, EntitySchema]):
    """Read-only lookup of entity schemas by entity type (and by REST resource)."""

    def __init__(self, schemas: list[EntitySchema]):
        self._by_type = {s.entity_type: s for s in schemas}
        self._by_resource = {s.resource: s for s in schemas}

    def __getitem__(self, entity_type: str) -> EntitySchema:
        return self._by_type[entity_type]

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_type)

    def __len__(self) -> int:
        return len(self._by_type)

    def by_resource(self, resource: str) -> EntitySchema | None:
        return self._by_resource.get(resource)

    @property
    def resources(self) -> list[str]:
        return list(self._by_resource)


class EntitySchemaLoader:
    """Builds a SchemaRegistry from a YAML file with an ``entities`` list."""

    def __init__(self, path: str | Path):
        self._path = Path(path)

    def load(self) -> SchemaRegistry:
        if not self._path.exists():
            raise SchemaDefinitionError("*", f"Schema file not found: {self._path}")

        data = self._load_yaml(self._path)
        entries = data.get("entities", []) if isinstance(data, dict) else []
        schemas = [self.build_schema(entry) for entry in entries]

        seen: set[str] = set()
        for schema in schemas:
            if schema.entity_type in seen:
                raise SchemaDefinitionError(schema.entity_type, "Entity type declared twice")
            seen.add(schema.entity_type)
        for schema in schemas:
            for spec in schema.fields:
                if spec.options_from and spec.options_from not in seen:
                    raise SchemaDefinitionError(
                        schema.entity_type,
                        f"Field '{spec.name}' takes options from unknown entity '{spec.options_from}'",
                    )

        logger.info("Loaded %d entity schemas from %s", len(schemas), self._path.name)
        return SchemaRegistry(schemas)

    @staticmethod
    def _load_yaml(path: Path) -> Any:
        try:
            with open(path, encoding="utf-8") as f:
                return yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise SchemaDefinitionError("*", f"Invalid YAML in {path.name}: {exc}") from exc

    @classmethod
    def build_schema(cls, entry: dict[str, Any]) -> EntitySchema:
        """Map a raw YAML dict to an EntitySchema, checking cross-references."""
        entity_type = entry.get("entity_type")
        if not entity_type:
            raise SchemaDefinitionError("?", "Missing 'entity_type'")

        fields = tuple(cls._build_field(entity_type, f) for f in entry.get("fields", []))
        if not fields:
            raise SchemaDefinitionError(entity_type, "No fields declared")

        names = [f.name for f in fields]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise SchemaDefinitionError(entity_type, f"Duplicate fields: {', '.join(sorted(duplicates))}")

        schema = EntitySchema(
            entity_type=entity_type,
            resource=entry.get("resource") or entity_type.replace("_", "-"),
            primary_key=entry.get("primary_key", "id"),
            fields=fields,
            title=entry.get("title", ""),
            code_field=entry.get("code_field"),
            label_field=entry.get("label_field"),
            code_lock_on_edit=bool(entry.get("code_lock_on_edit", True)),
            effective_from_field=entry.get("effective_from_field"),
            search_fields=tuple(entry.get("search_fields", [])),
            default_sort=entry.get("default_sort"),
        )
        cls._check_references(schema)
        return schema

    @staticmethod
    def _build_field(entity_type: str, raw: dict[str, Any]) -> FieldSpec:
        if not isinstance(raw, dict) or not raw.get("name"):
            raise SchemaDefinitionError(entity_type, f"Field without a name: {raw!r}")
        unknown = set(raw) - _FIELD_KEYS
        if unknown:
            raise SchemaDefinitionError(
                entity_type, f"Field '{raw['name']}' has unknown keys: {', '.join(sorted(unknown))}"
            )
        try:
            kind = FieldKind(raw.get("kind", "text"))
        except ValueError:
            raise SchemaDefinitionError(
                entity_type, f"Field '{raw['name']}' has unknown kind '{raw.get('kind')}'"
            ) from None

        pattern = raw.get("pattern")
        if pattern:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise SchemaDefinitionError(
                    entity_type, f"Field '{raw['name']}' has an invalid pattern: {exc}"
                ) from exc

        return FieldSpec(
            name=raw["name"],
            label=raw.get("label", ""),
            kind=kind,
            required=bool(raw.get("required", False)),
            max_length=raw.get("max_length"),
            pattern=pattern,
            pattern_message=raw.get("pattern_message"),
            unique_among_existing=bool(raw.get("unique_among_existing", False)),
            unique_case_insensitive=bool(raw.get("unique_case_insensitive", False)),
            unique_scope=tuple(raw.get("unique_scope", [])),
            min_value=raw.get("min_value"),
            max_value=raw.get("max_value"),
            choices=tuple(str(c) for c in raw.get("choices", [])),
            options_from=raw.get("options_from"),
            after_field=raw.get("after_field"),
            uppercase=bool(raw.get("uppercase", False)),
            allowed_chars=raw.get("allowed_chars"),
            truncate=bool(raw.get("truncate", False)),
            default=raw.get("default"),
        )

    @staticmethod
    def _check_references(schema: EntitySchema) -> None:
        names = set(schema.field_names)
        for attr in ("code_field", "label_field", "effective_from_field"):
            value = getattr(schema, attr)
            if value and value not in names:
                raise SchemaDefinitionError(schema.entity_type, f"{attr} '{value}' is not a declared field")
        if schema.is_versioned and not schema.business_code_field:
            raise SchemaDefinitionError(schema.entity_type, "Versioned entities need a code_field")
        for name in (*schema.search_fields, *([schema.default_sort] if schema.default_sort else [])):
            if name not in names:
                raise SchemaDefinitionError(schema.entity_type, f"Unknown list field '{name}'")
        for spec in schema.fields:
            for ref in (*spec.unique_scope, *([spec.after_field] if spec.after_field else [])):
                if ref not in names:
                    raise SchemaDefinitionError(
                        schema.entity_type, f"Field '{spec.name}' refers to unknown field '{ref}'"
                    )

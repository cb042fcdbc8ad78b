"""Collection definitions and the registry of managed source types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final, cast

from indexsync.config.errors import ConfigurationError, MissingPrimaryFieldError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

PRIMARY_FIELD_TYPE: Final[str] = "primary"


@dataclass(frozen=True, slots=True)
class FieldDefinition:
    """One field of a target collection."""

    name: str
    type: str
    entity_attribute: str | None = None
    optional: bool = False

    @property
    def attribute(self) -> str:
        return self.entity_attribute or self.name

    @property
    def is_primary(self) -> bool:
        return self.type == PRIMARY_FIELD_TYPE


@dataclass(frozen=True, slots=True)
class CollectionDefinition:
    """Maps one source type onto one target collection."""

    key: str
    target_name: str
    source_type: type
    fields: tuple[FieldDefinition, ...] = field(default_factory=tuple)

    @property
    def primary_fields(self) -> tuple[FieldDefinition, ...]:
        return tuple(item for item in self.fields if item.is_primary)

    @property
    def is_well_formed(self) -> bool:
        return len(self.primary_fields) == 1

    def ensure_well_formed(self) -> None:
        """Raise ``MissingPrimaryFieldError`` unless exactly one field is ``primary``."""

        if not self.is_well_formed:
            raise MissingPrimaryFieldError(self.target_name)


class CollectionRegistry:
    """Registry of collection definitions keyed by a stable collection key.

    Lookups are keyed by source type. A type that is not registered itself
    resolves through its MRO, so subclasses (proxies, wrappers) land on the
    definition of their registered ancestor.
    """

    def __init__(self, definitions: Iterable[CollectionDefinition] = ()) -> None:
        self._definitions: dict[str, CollectionDefinition] = {}
        self._key_by_type: dict[type, str] = {}
        self._resolved: dict[type, str | None] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: CollectionDefinition) -> None:
        if definition.key in self._definitions:
            raise ConfigurationError(f"Duplicate collection key: {definition.key}")
        existing = self._key_by_type.get(definition.source_type)
        if existing is not None:
            raise ConfigurationError(
                f"{definition.source_type.__qualname__} is already mapped to collection {existing}"
            )
        self._definitions[definition.key] = definition
        self._key_by_type[definition.source_type] = definition.key
        self._resolved.clear()

    def managed_types(self) -> dict[str, type]:
        return {key: definition.source_type for key, definition in self._definitions.items()}

    def definitions(self) -> dict[str, CollectionDefinition]:
        return dict(self._definitions)

    def key_for(self, source_type: type) -> str | None:
        """Return the collection key managing ``source_type`` or ``None``."""

        if source_type in self._resolved:
            return self._resolved[source_type]
        key: str | None = None
        for candidate in source_type.__mro__:
            key = self._key_by_type.get(candidate)
            if key is not None:
                break
        self._resolved[source_type] = key
        return key

    def definition_for(self, source_type: type) -> CollectionDefinition | None:
        key = self.key_for(source_type)
        return None if key is None else self._definitions[key]

    @classmethod
    def from_mapping(
        cls,
        config: Mapping[str, Mapping[str, Any]],
        *,
        types: Mapping[str, type],
    ) -> CollectionRegistry:
        """Build a registry from plain configuration.

        ``config`` maps a collection key to ``{"typesense_name", "entity", "fields"}``
        where ``entity`` names a type in ``types`` and ``fields`` is a list of
        field mappings (``name``, ``type``, optional ``entity_attribute`` and
        ``optional``). ``typesense_name`` defaults to the collection key.
        """

        definitions: list[CollectionDefinition] = []
        for key, raw in config.items():
            entity_name = raw.get("entity")
            if not isinstance(entity_name, str) or entity_name not in types:
                raise ConfigurationError(f"Unknown entity for collection {key}: {entity_name!r}")
            raw_fields = cast("list[Mapping[str, Any]]", raw.get("fields") or [])
            definitions.append(
                CollectionDefinition(
                    key=key,
                    target_name=str(raw.get("typesense_name") or key),
                    source_type=types[entity_name],
                    fields=tuple(_parse_field(key, item) for item in raw_fields),
                )
            )
        return cls(definitions)


def _parse_field(collection: str, raw: Mapping[str, Any]) -> FieldDefinition:
    name = raw.get("name")
    field_type = raw.get("type")
    if not isinstance(name, str) or not isinstance(field_type, str):
        raise ConfigurationError(f"Field definitions of {collection} need a name and a type")
    entity_attribute = raw.get("entity_attribute")
    return FieldDefinition(
        name=name,
        type=field_type,
        entity_attribute=str(entity_attribute) if entity_attribute else None,
        optional=bool(raw.get("optional", False)),
    )

"""Convert persisted objects into search documents using their collection definition."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, date, datetime, time
from typing import TYPE_CHECKING, Any, Final

from indexsync.domain.ports import ConversionError

if TYPE_CHECKING:
    from indexsync.domain.collections import CollectionRegistry, FieldDefinition
    from indexsync.domain.ports import ChangeRecord, TypeResolver

_MISSING: Final = object()


def _to_timestamp(value: object) -> int:
    if isinstance(value, datetime):
        aware = value if value.tzinfo else value.replace(tzinfo=UTC)
        return int(aware.timestamp())
    if isinstance(value, date):
        return int(datetime.combine(value, time.min, tzinfo=UTC).timestamp())
    if isinstance(value, (int, float)):
        return int(value)
    raise TypeError(f"Cannot convert {type(value).__name__} to a timestamp")


def _to_string_list(value: object) -> list[str]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise TypeError(f"Expected a collection, got {type(value).__name__}")
    return [str(item) for item in value]


CASTS: Final[dict[str, Callable[[Any], object]]] = {
    "primary": str,
    "string": str,
    "object": str,
    "int32": int,
    "int64": int,
    "float": float,
    "bool": bool,
    "datetime": _to_timestamp,
    "string[]": _to_string_list,
    "collection": _to_string_list,
}


class DefinitionTransformer:
    """Read the attributes named by a collection's fields and cast them by field type.

    The ``primary`` field is always written under ``id``. Unknown field types
    pass values through unchanged. ``None`` values of optional fields are
    left out of the document. Naive datetimes are read as UTC.
    """

    def __init__(self, registry: CollectionRegistry, *, type_resolver: TypeResolver) -> None:
        self._registry = registry
        self._resolve_type = type_resolver

    def convert(self, entity: object) -> ChangeRecord:
        definition = self._registry.definition_for(self._resolve_type(entity))
        if definition is None:
            raise ConversionError(f"{type(entity).__qualname__} is not a managed type")

        record: ChangeRecord = {}
        for field in definition.fields:
            value = _read_attribute(entity, field.attribute)
            if value is _MISSING:
                raise ConversionError(
                    f"{type(entity).__qualname__} has no attribute {field.attribute!r} "
                    f"required by {definition.target_name}.{field.name}"
                )
            if value is None:
                if field.optional:
                    continue
                if not field.is_primary:
                    record[field.name] = None
                    continue
                raise ConversionError(
                    f"Primary field {field.name!r} of {definition.target_name} is not set"
                )
            record["id" if field.is_primary else field.name] = _cast(definition.key, field, value)
        return record


def _read_attribute(entity: object, path: str) -> object:
    value: object = entity
    for part in path.split("."):
        if value is None:
            return None
        value = getattr(value, part, _MISSING)
        if value is _MISSING:
            return _MISSING
    return value


def _cast(collection: str, field: FieldDefinition, value: object) -> object:
    cast = CASTS.get(field.type)
    if cast is None:
        return value
    try:
        return cast(value)
    except (TypeError, ValueError) as exc:
        raise ConversionError(
            f"Cannot convert {collection}.{field.name} to {field.type}: {exc}"
        ) from exc

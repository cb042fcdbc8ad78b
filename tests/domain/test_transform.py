from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

import pytest

from indexsync.domain.collections import CollectionDefinition, CollectionRegistry, FieldDefinition
from indexsync.domain.coordinator import resolve_type
from indexsync.domain.ports import ConversionError
from indexsync.domain.transform import DefinitionTransformer
from tests.helpers.models import Author, Note
from tests.helpers.registries import note_registry


@dataclass
class Book:
    id: int
    title: str
    pages: str
    rating: str
    in_print: int
    author: Author | None
    tags: tuple[str, ...] = ()


def _book_transformer() -> DefinitionTransformer:
    registry = CollectionRegistry(
        [
            CollectionDefinition(
                key="book",
                target_name="books",
                source_type=Book,
                fields=(
                    FieldDefinition(name="book_id", type="primary", entity_attribute="id"),
                    FieldDefinition(name="title", type="string"),
                    FieldDefinition(name="pages", type="int32"),
                    FieldDefinition(name="rating", type="float"),
                    FieldDefinition(name="in_print", type="bool"),
                    FieldDefinition(
                        name="author_name",
                        type="string",
                        entity_attribute="author.name",
                        optional=True,
                    ),
                    FieldDefinition(name="tags", type="string[]"),
                ),
            )
        ]
    )
    return DefinitionTransformer(registry, type_resolver=resolve_type)


def test_convert_casts_values_by_field_type() -> None:
    book = Book(
        id=12,
        title="Dune",
        pages="412",
        rating="4.5",
        in_print=1,
        author=Author(id="a1", name="Frank Herbert"),
        tags=("sf", "classic"),
    )

    record = _book_transformer().convert(book)

    assert record == {
        "id": "12",
        "title": "Dune",
        "pages": 412,
        "rating": 4.5,
        "in_print": True,
        "author_name": "Frank Herbert",
        "tags": ["sf", "classic"],
    }


def test_convert_omits_optional_none_values() -> None:
    book = Book(id=1, title="Anon", pages="1", rating="0", in_print=0, author=None)

    record = _book_transformer().convert(book)

    assert "author_name" not in record
    assert record["id"] == "1"


def test_convert_writes_datetimes_as_unix_timestamps() -> None:
    note = Note(id="1", title="Dated", published_at=datetime(2024, 1, 1, tzinfo=UTC))

    record = DefinitionTransformer(note_registry(), type_resolver=resolve_type).convert(note)

    assert record["published_at"] == 1704067200


def test_convert_rejects_invalid_values() -> None:
    book = Book(id=1, title="Bad", pages="many", rating="0", in_print=0, author=None)

    with pytest.raises(ConversionError, match="book.pages"):
        _book_transformer().convert(book)


def test_convert_rejects_missing_attributes() -> None:
    @dataclass
    class Broken(Note):
        pass

    broken = Broken(id="1", title="Broken")
    del broken.__dict__["tags"]

    with pytest.raises(ConversionError, match="tags"):
        DefinitionTransformer(note_registry(), type_resolver=resolve_type).convert(broken)


def test_convert_rejects_unmanaged_objects() -> None:
    with pytest.raises(ConversionError):
        DefinitionTransformer(note_registry(), type_resolver=resolve_type).convert(object())

"""Mapped and plain models used across the test suite."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class Article(Base):
    __tablename__ = "article"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)


class Comment(Base):
    """Persisted but never registered with the search index."""

    __tablename__ = "comment"

    id: Mapped[int] = mapped_column(primary_key=True)
    article_id: Mapped[int | None] = mapped_column(ForeignKey("article.id"), default=None)
    body: Mapped[str] = mapped_column(String(500))


@dataclass
class Note:
    id: str
    title: str
    tags: list[str] = field(default_factory=list)
    published_at: datetime | None = None


class PinnedNote(Note):
    """Subclass that resolves to the collection of ``Note``."""


@dataclass
class Author:
    id: str
    name: str


@dataclass
class Draft:
    id: str
    title: str

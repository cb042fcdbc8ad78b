"""Typesense response schemas for bulk document writes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class TypesenseBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ImportResult(TypesenseBaseModel):
    """One line of the JSONL body returned by ``documents/import``."""

    success: bool
    error: str | None = None
    code: int | None = None
    document: str | None = None
    id: str | None = None


class DeleteResult(TypesenseBaseModel):
    id: str


def parse_import_results(body: str) -> list[ImportResult]:
    return [ImportResult.model_validate_json(line) for line in body.splitlines() if line.strip()]

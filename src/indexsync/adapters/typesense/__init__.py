"""Typesense search backend adapter."""

from __future__ import annotations

from .client import TypesenseAPIError, TypesenseClient, TypesenseImportError
from .schema import DeleteResult, ImportResult, parse_import_results

__all__ = [
    "DeleteResult",
    "ImportResult",
    "TypesenseAPIError",
    "TypesenseClient",
    "TypesenseImportError",
    "parse_import_results",
]

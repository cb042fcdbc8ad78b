"""Typesense document API client."""

from __future__ import annotations

import asyncio
import json
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from indexsync.adapters.http_resilience import ResilientClient
from indexsync.domain.ports import BackendError

from .schema import DeleteResult, ImportResult, parse_import_results

if TYPE_CHECKING:
    from collections.abc import Callable

    from indexsync.config.http_resilience import ResilienceConfig
    from indexsync.config.typesense import TypesenseConfig
    from indexsync.domain.ports import ChangeRecord, ImportAction

log = getLogger(__name__)


class TypesenseAPIError(BackendError):
    """Raised when the Typesense API returns an unexpected response."""


class TypesenseImportError(TypesenseAPIError):
    """Raised when some documents of a bulk import were rejected."""

    def __init__(self, collection: str, failures: list[ImportResult]) -> None:
        details = "; ".join(failure.error or "unknown error" for failure in failures)
        super().__init__(
            f"{len(failures)} document(s) rejected by Typesense collection {collection}: {details}"
        )
        self.collection = collection
        self.failures = failures


class TypesenseClient:
    """Writes documents to Typesense collections.

    Implements the ``SearchBackend`` port. Each call opens its own resilient
    client and runs to completion before returning.
    """

    def __init__(
        self,
        *,
        config: TypesenseConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def import_documents(
        self,
        collection: str,
        documents: list[ChangeRecord],
        action: ImportAction = "create",
    ) -> None:
        if not documents:
            return
        asyncio.run(self._import_async(collection=collection, documents=documents, action=action))

    def delete_document(self, collection: str, document_id: str) -> None:
        asyncio.run(self._delete_async(collection=collection, document_id=document_id))

    async def _import_async(
        self,
        *,
        collection: str,
        documents: list[ChangeRecord],
        action: ImportAction,
    ) -> None:
        body = "\n".join(json.dumps(document, default=str) for document in documents)

        async with self._client_factory(self._resilience) as client:
            response = await client.post(
                f"/collections/{quote(collection, safe='')}/documents/import",
                params={"action": action},
                content=body.encode("utf-8"),
                headers={"Content-Type": "text/plain"},
            )
        _raise_for_status(response, f"import into {collection}")

        try:
            results = parse_import_results(response.text)
        except ValidationError as exc:
            raise TypesenseAPIError(f"Unexpected Typesense import response: {exc}") from exc

        failures = [result for result in results if not result.success]
        if failures:
            log.warning(
                "Typesense rejected %s of %s document(s) in %s",
                len(failures),
                len(documents),
                collection,
            )
            raise TypesenseImportError(collection, failures)
        log.debug("Imported %s document(s) into %s (%s)", len(documents), collection, action)

    async def _delete_async(self, *, collection: str, document_id: str) -> None:
        path = (
            f"/collections/{quote(collection, safe='')}/documents/{quote(document_id, safe='')}"
        )
        async with self._client_factory(self._resilience) as client:
            response = await client.delete(path)

        if response.status_code == httpx.codes.NOT_FOUND:
            log.info("Document %s not found in %s; nothing to delete", document_id, collection)
            return
        _raise_for_status(response, f"delete from {collection}")

        try:
            deleted = DeleteResult.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise TypesenseAPIError("Unexpected Typesense delete response payload") from exc
        log.debug("Deleted document %s from %s", deleted.id, collection)


def _raise_for_status(response: httpx.Response, operation: str) -> None:
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise TypesenseAPIError(
            f"Typesense {operation} failed with status {response.status_code}: {response.text}"
        ) from exc

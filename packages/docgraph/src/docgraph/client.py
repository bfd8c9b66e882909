"""Клиенты базы документов: HTTP API ArangoDB и in-memory хранилище."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Protocol
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from .exceptions import FetchError
from .models import Document
from .settings import DocGraphSettings

logger = logging.getLogger(__name__)


class DocumentFetcher(Protocol):
    """Единственная операция базы, которая нужна построителю графа."""

    def fetch_document(self, collection: str, key: str) -> Document:
        ...


class InMemoryDocumentStore:
    """Хранилище документов в памяти для разработки и unit-тестов."""

    def __init__(self, documents: Iterable[Mapping[str, Any]] = ()) -> None:
        self._documents: dict[str, dict[str, Any]] = {}
        self.fetches: list[str] = []  # для тестов
        for raw in documents:
            self.put(raw)

    def put(self, raw: Mapping[str, Any]) -> None:
        self._documents[str(raw["_id"])] = dict(raw)

    def fetch_document(self, collection: str, key: str) -> Document:
        document_id = f"{collection}/{key}"
        self.fetches.append(document_id)
        raw = self._documents.get(document_id)
        if raw is None:
            raise FetchError(document_id, "document not found")
        return _parse(document_id, raw)


class ArangoDocumentClient:
    """Минимальный HTTP-клиент для чтения документов по ``collection/key``."""

    def __init__(
        self,
        base_url: str,
        database: str = "_system",
        *,
        user: str | None = None,
        password: str | None = None,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._database = database
        auth = (user, password or "") if user else None
        self._client = client or httpx.Client(timeout=timeout, auth=auth)

    @classmethod
    def from_settings(cls, settings: DocGraphSettings) -> "ArangoDocumentClient":
        return cls(
            settings.arango_url,
            settings.arango_database,
            user=settings.arango_user,
            password=settings.arango_password,
            timeout=settings.request_timeout,
        )

    def document_url(self, collection: str, key: str) -> str:
        return (
            f"{self._base_url}/_db/{quote(self._database, safe='')}"
            f"/_api/document/{quote(collection, safe='')}/{quote(key, safe='')}"
        )

    def fetch_document(self, collection: str, key: str) -> Document:
        document_id = f"{collection}/{key}"
        logger.debug("Fetching document %s", document_id)
        try:
            resp = self._client.get(self.document_url(collection, key))
            resp.raise_for_status()
            raw = resp.json()
        except httpx.HTTPStatusError as exc:
            raise FetchError(document_id, f"HTTP {exc.response.status_code}", cause=exc) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise FetchError(document_id, str(exc) or type(exc).__name__, cause=exc) from exc
        return _parse(document_id, raw)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ArangoDocumentClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _parse(document_id: str, raw: Any) -> Document:
    try:
        return Document.model_validate(raw)
    except ValidationError as exc:
        raise FetchError(document_id, "malformed document", cause=exc) from exc


__all__ = ["ArangoDocumentClient", "DocumentFetcher", "InMemoryDocumentStore"]

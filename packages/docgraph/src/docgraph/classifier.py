"""Классификация сырых результатов запроса: список рёбер или список путей."""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Sequence

logger = logging.getLogger(__name__)

RawDocument = Mapping[str, Any] | str | bytes


class ResultShape(str, Enum):
    EDGE_LIST = "edge_list"
    PATH_LIST = "path_list"
    INVALID = "invalid"


def parse_document(raw: RawDocument) -> dict[str, Any] | None:
    """Документ как dict или ``None``, если это не JSON-объект."""

    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, (str, bytes)):
        try:
            value = json.loads(raw)
        except ValueError:
            logger.debug("Skipping unparsable document: %.80r", raw)
            return None
        return value if isinstance(value, dict) else None
    return None


def is_edge(doc: Any) -> bool:
    return isinstance(doc, Mapping) and "_from" in doc and "_to" in doc


def is_vertex(doc: Any) -> bool:
    return isinstance(doc, Mapping) and "_id" in doc


def path_parts(doc: Mapping[str, Any]) -> tuple[list[Any], list[Any]] | None:
    """Пара ``(vertices, edges)``, если документ содержит оба списка."""

    if "vertices" not in doc or "edges" not in doc:
        return None
    vertices = doc["vertices"]
    edges = doc["edges"]
    if not isinstance(vertices, list) or not isinstance(edges, list):
        return None
    return vertices, edges


class ResultShapeClassifier:
    """Определяет форму пачки результатов; каждый предикат считается один раз.

    Пачка считается списком путей по первому документу с непустыми
    ``vertices``/``edges``; смешанные пачки не отклоняются.
    """

    def __init__(self, docs: Sequence[RawDocument]) -> None:
        self._docs = [doc for doc in (parse_document(raw) for raw in docs) if doc is not None]
        self._is_edge: bool | None = None
        self._is_path: bool | None = None

    @property
    def documents(self) -> list[dict[str, Any]]:
        return self._docs

    def is_edge_list(self) -> bool:
        if self._is_edge is None:
            self._is_edge = any(is_edge(doc) for doc in self._docs)
        return self._is_edge

    def is_path_list(self) -> bool:
        if self._is_path is None:
            self._is_path = self._scan_paths()
        return self._is_path

    def _scan_paths(self) -> bool:
        for doc in self._docs:
            parts = path_parts(doc)
            if parts is None:
                continue
            vertices, edges = parts
            if not vertices or not edges:
                continue
            return any(is_edge(edge) for edge in edges) and any(is_vertex(vertex) for vertex in vertices)
        return False

    def classify(self) -> ResultShape:
        if self.is_edge_list():
            return ResultShape.EDGE_LIST
        if self.is_path_list():
            return ResultShape.PATH_LIST
        return ResultShape.INVALID

    def edges(self) -> Iterator[Mapping[str, Any]]:
        """Рёбра пачки, развёрнутые в соответствии с её формой."""

        shape = self.classify()
        if shape is ResultShape.EDGE_LIST:
            yield from (doc for doc in self._docs if is_edge(doc))
        elif shape is ResultShape.PATH_LIST:
            for doc in self._docs:
                parts = path_parts(doc)
                if parts is None:
                    continue
                yield from (edge for edge in parts[1] if is_edge(edge))

    def vertices(self) -> Iterator[Mapping[str, Any]]:
        if self.classify() is not ResultShape.PATH_LIST:
            return
        for doc in self._docs:
            parts = path_parts(doc)
            if parts is None:
                continue
            yield from (vertex for vertex in parts[0] if is_vertex(vertex))

    def is_node_edge_present(self, node_id: str) -> bool:
        return any(_touches(edge, node_id) for edge in self.edges())


def _touches(edge: Mapping[str, Any], node_id: str) -> bool:
    return edge.get("_from") == node_id or edge.get("_to") == node_id


def classify(docs: Iterable[RawDocument]) -> ResultShape:
    return ResultShapeClassifier(list(docs)).classify()


__all__ = ["RawDocument", "ResultShape", "ResultShapeClassifier", "classify", "parse_document"]

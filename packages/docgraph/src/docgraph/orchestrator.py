"""Фасад над классификацией, построением графов и реестром графов."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, Sequence
from uuid import uuid4

from .builder import GraphBuilder
from .classifier import RawDocument, ResultShape, ResultShapeClassifier
from .client import DocumentFetcher
from .exceptions import GraphNotFoundError, OriginNotFoundError, ShapeError
from .models import Graph
from .provenance import NetworkExpansion, NodeExpansion, ProvenanceLog

logger = logging.getLogger(__name__)


class GraphPresenter(Protocol):
    """Отображение графа; раскладка и стили целиком на стороне хоста."""

    def show(self, graph_id: str, graph: Graph) -> None:
        ...

    def refresh(self, graph_id: str, graph: Graph, new_node_ids: Sequence[str]) -> None:
        ...


class NullPresenter:
    def show(self, graph_id: str, graph: Graph) -> None:
        return None

    def refresh(self, graph_id: str, graph: Graph, new_node_ids: Sequence[str]) -> None:
        return None


@dataclass(frozen=True)
class ImportResult:
    graph_id: str
    node_count: int
    edge_count: int


@dataclass
class _RegistryEntry:
    builder: GraphBuilder
    lock: threading.Lock = field(default_factory=threading.Lock)


class GraphOrchestrator:
    """Импортирует и расширяет графы, храня по одному построителю на граф.

    Операции над одним графом сериализуются его собственной блокировкой:
    они разделяют кэши построителя. Разные графы друг друга не ждут.
    """

    def __init__(
        self,
        fetcher: DocumentFetcher | None = None,
        *,
        presenter: GraphPresenter | None = None,
        builder_factory: Callable[[DocumentFetcher | None], GraphBuilder] = GraphBuilder,
        id_factory: Callable[[], str] = lambda: str(uuid4()),
    ) -> None:
        self._fetcher = fetcher
        self._presenter = presenter or NullPresenter()
        self._builder_factory = builder_factory
        self._id_factory = id_factory
        self._registry: dict[str, _RegistryEntry] = {}
        self._registry_lock = threading.Lock()

    def import_network(
        self,
        docs: Sequence[RawDocument],
        query: str,
        connection_id: str | None,
        display_name: str,
    ) -> ImportResult:
        batch = self._validated(docs)
        builder = self._builder_factory(self._fetcher)
        graph = builder.import_full(batch, ProvenanceLog(query=query, connection_id=connection_id), name=display_name)

        graph_id = self._id_factory()
        with self._registry_lock:
            self._registry[graph_id] = _RegistryEntry(builder=builder)
        graph.attributes["graph_id"] = graph_id

        self._notify("show", graph_id, graph)
        return ImportResult(graph_id=graph_id, node_count=graph.node_count, edge_count=graph.edge_count)

    def expand_node(
        self,
        docs: Sequence[RawDocument],
        graph_id: str,
        origin_node_id: str,
        query: str,
        connection_id: str | None,
    ) -> list[str]:
        batch = self._validated(docs)
        if not batch.is_node_edge_present(origin_node_id):
            raise OriginNotFoundError(origin_node_id)
        entry = self._entry(graph_id)
        record = NodeExpansion(node_id=origin_node_id, query=query, connection_id=connection_id)
        with entry.lock:
            new_nodes = entry.builder.expand_node(batch, record)
            new_ids = [node.id for node in new_nodes]
        self._notify("refresh", graph_id, entry.builder.graph, new_ids)
        return new_ids

    def expand_network(
        self,
        docs: Sequence[RawDocument],
        graph_id: str,
        query: str,
        connection_id: str | None,
    ) -> list[str]:
        batch = self._validated(docs)
        entry = self._entry(graph_id)
        record = NetworkExpansion(query=query, connection_id=connection_id)
        with entry.lock:
            new_nodes = entry.builder.expand_network(batch, record)
            new_ids = [node.id for node in new_nodes]
        self._notify("refresh", graph_id, entry.builder.graph, new_ids)
        return new_ids

    def get_graph(self, graph_id: str) -> Graph:
        return self._entry(graph_id).builder.graph

    def list_graphs(self) -> dict[str, str]:
        """Идентификаторы зарегистрированных графов и их отображаемые имена."""

        with self._registry_lock:
            entries = list(self._registry.items())
        return {graph_id: entry.builder.graph.name for graph_id, entry in entries}

    def discard(self, graph_id: str) -> None:
        with self._registry_lock:
            if self._registry.pop(graph_id, None) is None:
                raise GraphNotFoundError(graph_id)
        logger.info("Discarded graph %s", graph_id)

    def _entry(self, graph_id: str) -> _RegistryEntry:
        with self._registry_lock:
            entry = self._registry.get(graph_id)
        if entry is None:
            raise GraphNotFoundError(graph_id)
        return entry

    def _notify(self, hook: str, graph_id: str, *args: Any) -> None:
        # Граф уже изменён: результат возвращается и при сбое отображения.
        try:
            getattr(self._presenter, hook)(graph_id, *args)
        except Exception:
            logger.exception("Presenter %s failed for graph %s", hook, graph_id)

    @staticmethod
    def _validated(docs: Sequence[RawDocument]) -> ResultShapeClassifier:
        batch = ResultShapeClassifier(docs)
        if batch.classify() is ResultShape.INVALID:
            logger.warning("Rejected query result of %d documents: neither edges nor paths", len(docs))
            raise ShapeError()
        return batch


__all__ = ["GraphOrchestrator", "GraphPresenter", "ImportResult", "NullPresenter"]

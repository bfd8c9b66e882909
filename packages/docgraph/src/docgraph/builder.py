"""Построение и инкрементальное расширение графа из результатов запросов."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import ValidationError

from .classifier import ResultShape, ResultShapeClassifier
from .client import DocumentFetcher
from .exceptions import FetchError, ShapeError
from .models import Document, EdgeDocument, Graph, GraphNode, split_document_id
from .provenance import NetworkExpansion, NodeExpansion, ProvenanceLog

logger = logging.getLogger(__name__)


@dataclass
class _MergePlan:
    """Документы и рёбра одной пачки, подготовленные до изменения графа."""

    documents: dict[str, Document] = field(default_factory=dict)
    edges: list[EdgeDocument] = field(default_factory=list)
    adjacency: dict[str, set[str]] = field(default_factory=dict)


class GraphBuilder:
    """Единственный компонент, изменяющий узлы и рёбра своего графа.

    Кэши ``loaded_documents``, ``created_nodes`` и ``seen_adjacency`` живут
    столько же, сколько граф, поэтому повторные расширения не создают
    дубликатов. Экземпляр не потокобезопасен: вызовы для одного графа
    сериализует оркестратор.
    """

    def __init__(self, fetcher: DocumentFetcher | None = None) -> None:
        self._fetcher = fetcher
        self.loaded_documents: dict[str, Document] = {}
        self.created_nodes: dict[str, GraphNode] = {}
        self.seen_adjacency: dict[str, set[str]] = {}
        self._graph: Graph | None = None
        self._provenance: ProvenanceLog | None = None

    @property
    def graph(self) -> Graph:
        if self._graph is None:
            raise RuntimeError("Graph has not been imported yet")
        return self._graph

    @property
    def provenance(self) -> ProvenanceLog:
        if self._provenance is None:
            raise RuntimeError("Graph has not been imported yet")
        return self._provenance

    def import_full(self, batch: ResultShapeClassifier, seed: ProvenanceLog, *, name: str) -> Graph:
        """Создаёт новый граф из классифицированной пачки."""

        if self._graph is not None:
            raise RuntimeError("GraphBuilder already owns a graph; use expand_* instead")
        plan = self._plan(batch)
        graph = Graph(name=name)
        self._graph = graph
        self._commit(plan)
        self._provenance = seed.model_copy(deep=True)
        graph.store_provenance(self._provenance)
        logger.info(
            "Imported graph '%s': nodes=%d edges=%d shape=%s",
            name,
            graph.node_count,
            graph.edge_count,
            batch.classify().value,
        )
        return graph

    def expand_node(self, batch: ResultShapeClassifier, record: NodeExpansion) -> list[GraphNode]:
        return self._expand(batch, record)

    def expand_network(self, batch: ResultShapeClassifier, record: NetworkExpansion) -> list[GraphNode]:
        return self._expand(batch, record)

    def _expand(self, batch: ResultShapeClassifier, record: NodeExpansion | NetworkExpansion) -> list[GraphNode]:
        graph = self.graph
        plan = self._plan(batch)
        new_nodes = self._commit(plan)
        self.provenance.append(record)
        graph.store_provenance(self.provenance)
        logger.info(
            "Expanded graph '%s' (%s): new_nodes=%d nodes=%d edges=%d",
            graph.name,
            type(record).__name__,
            len(new_nodes),
            graph.node_count,
            graph.edge_count,
        )
        return new_nodes

    def _plan(self, batch: ResultShapeClassifier) -> _MergePlan:
        shape = batch.classify()
        if shape is ResultShape.INVALID:
            raise ShapeError()

        plan = _MergePlan()
        for raw_vertex in batch.vertices():
            vertex_id = raw_vertex.get("_id")
            if not isinstance(vertex_id, str):
                continue
            if vertex_id in self.loaded_documents or vertex_id in plan.documents:
                continue
            try:
                plan.documents[vertex_id] = Document.model_validate(raw_vertex)
            except ValidationError as exc:
                logger.debug("Skipping malformed vertex %r: %s", vertex_id, exc)

        for raw_edge in batch.edges():
            edge = self._parse_edge(raw_edge)
            if self._is_seen(edge.from_id, edge.to_id, plan.adjacency):
                continue
            self._resolve(edge.from_id, plan)
            self._resolve(edge.to_id, plan)
            plan.edges.append(edge)
            _mark(plan.adjacency, edge.from_id, edge.to_id)
        return plan

    def _commit(self, plan: _MergePlan) -> list[GraphNode]:
        graph = self.graph
        self.loaded_documents.update(plan.documents)
        new_nodes: list[GraphNode] = []
        for edge in plan.edges:
            source = self._node_for(edge.from_id, new_nodes)
            target = self._node_for(edge.to_id, new_nodes)
            graph.add_edge(edge, source, target)
            _mark(self.seen_adjacency, edge.from_id, edge.to_id)
        return new_nodes

    def _node_for(self, document_id: str, new_nodes: list[GraphNode]) -> GraphNode:
        node = self.created_nodes.get(document_id)
        if node is None:
            node = self.graph.add_node(self.loaded_documents[document_id])
            self.created_nodes[document_id] = node
            new_nodes.append(node)
        return node

    def _resolve(self, document_id: str, plan: _MergePlan) -> Document:
        document = self.loaded_documents.get(document_id) or plan.documents.get(document_id)
        if document is not None:
            return document
        try:
            collection, key = split_document_id(document_id)
        except ValueError as exc:
            raise FetchError(str(document_id), str(exc), cause=exc) from exc
        if self._fetcher is None:
            raise FetchError(document_id, "document is not part of the result and no database client is configured")
        logger.debug("Document %s is not cached, fetching", document_id)
        try:
            document = self._fetcher.fetch_document(collection, key)
        except FetchError:
            raise
        except Exception as exc:
            raise FetchError(document_id, str(exc) or type(exc).__name__, cause=exc) from exc
        plan.documents[document_id] = document
        return document

    def _is_seen(self, from_id: str, to_id: str, pending: dict[str, set[str]]) -> bool:
        return to_id in self.seen_adjacency.get(from_id, ()) or to_id in pending.get(from_id, ())

    @staticmethod
    def _parse_edge(raw: Mapping[str, Any]) -> EdgeDocument:
        if not raw.get("_id"):
            raise ShapeError(
                f"Edge document from {raw.get('_from')!r} to {raw.get('_to')!r} has no '_id' attribute; "
                "the query must return whole edge documents, not projections."
            )
        try:
            return EdgeDocument.model_validate(raw)
        except ValidationError as exc:
            raise ShapeError(f"Malformed edge document {raw.get('_id')!r}: {exc.errors()[0]['msg']}") from exc


def _mark(adjacency: dict[str, set[str]], from_id: str, to_id: str) -> None:
    adjacency.setdefault(from_id, set()).add(to_id)
    adjacency.setdefault(to_id, set()).add(from_id)


__all__ = ["GraphBuilder"]

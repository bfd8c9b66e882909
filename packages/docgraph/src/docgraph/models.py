"""Модели документов из базы и графа в памяти, собранного из них."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .provenance import PROVENANCE_ATTRIBUTE, ProvenanceLog

SYSTEM_FIELDS = ("_id", "_key", "_rev", "_from", "_to")
NAME_FALLBACK = ("Name", "name")


def split_document_id(document_id: str) -> tuple[str, str]:
    """Разбивает идентификатор ``collection/key`` на коллекцию и ключ."""

    if not isinstance(document_id, str):
        raise ValueError(f"Document id must be a string, got {type(document_id).__name__}")
    collection, sep, key = document_id.partition("/")
    if not sep or not collection or not key or "/" in key:
        raise ValueError(f"Malformed document id '{document_id}', expected 'collection/key'")
    return collection, key


def display_name(attributes: Mapping[str, Any], key: str) -> str:
    """Отображаемое имя документа: ``Name`` → ``name`` → ключ."""

    for attr in NAME_FALLBACK:
        value = attributes.get(attr)
        if value is not None:
            return str(value)
    return key


class Document(BaseModel):
    """Документ без схемы, адресуемый как ``collection/key``."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=3)
    key: str
    collection: str
    revision: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _from_raw(cls, data: Any) -> Any:
        if not isinstance(data, Mapping) or "_id" not in data:
            return data
        document_id = data["_id"]
        collection, key = split_document_id(document_id)
        return {
            "id": document_id,
            "key": str(data.get("_key") or key),
            "collection": collection,
            "revision": data.get("_rev"),
            "attributes": {k: v for k, v in data.items() if k not in SYSTEM_FIELDS},
            **cls._extra_fields(data),
        }

    @classmethod
    def _extra_fields(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        return {}

    @property
    def name(self) -> str:
        return display_name(self.attributes, self.key)

    @property
    def label(self) -> str:
        return f"{self.name} ({self.collection})"

    def to_raw(self) -> dict[str, Any]:
        raw: dict[str, Any] = {"_id": self.id, "_key": self.key}
        if self.revision is not None:
            raw["_rev"] = self.revision
        raw.update(self.attributes)
        return raw

    def pretty(self) -> str:
        return json.dumps(self.to_raw(), indent=2, ensure_ascii=False, default=str)


class EdgeDocument(Document):
    """Документ-ребро между двумя документами."""

    from_id: str = Field(alias="from")
    to_id: str = Field(alias="to")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @classmethod
    def _extra_fields(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        return {"from": data.get("_from"), "to": data.get("_to")}

    def to_raw(self) -> dict[str, Any]:
        raw = super().to_raw()
        raw["_from"] = self.from_id
        raw["_to"] = self.to_id
        return raw


@dataclass
class GraphNode:
    """Узел графа, привязанный ровно к одному документу."""

    id: str
    collection: str
    key: str
    revision: str | None
    name: str
    data: str

    def as_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "collection": self.collection,
            "key": self.key,
            "revision": self.revision,
            "name": self.name,
            "data": self.data,
        }


@dataclass
class GraphEdge:
    """Ребро графа между двумя узлами с коллекцией исходного документа."""

    id: str
    collection: str
    key: str
    revision: str | None
    source: GraphNode
    target: GraphNode
    name: str
    data: str

    def as_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "collection": self.collection,
            "key": self.key,
            "revision": self.revision,
            "from": self.source.id,
            "to": self.target.id,
            "name": self.name,
            "data": self.data,
        }


@dataclass
class Graph:
    """Граф в памяти; узлы индексированы идентификатором документа."""

    name: str
    nodes: dict[str, GraphNode] = field(default_factory=dict)
    edges: list[GraphEdge] = field(default_factory=list)
    attributes: dict[str, str] = field(default_factory=dict)

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def node_by_document_id(self, document_id: str) -> GraphNode | None:
        return self.nodes.get(document_id)

    def add_node(self, document: Document) -> GraphNode:
        node = GraphNode(
            id=document.id,
            collection=document.collection,
            key=document.key,
            revision=document.revision,
            name=document.label,
            data=_pretty_or_error(document, "node"),
        )
        self.nodes[document.id] = node
        return node

    def add_edge(self, edge: EdgeDocument, source: GraphNode, target: GraphNode) -> GraphEdge:
        graph_edge = GraphEdge(
            id=edge.id,
            collection=edge.collection,
            key=edge.key,
            revision=edge.revision,
            source=source,
            target=target,
            name=edge.label,
            data=_pretty_or_error(edge, "edge"),
        )
        self.edges.append(graph_edge)
        return graph_edge

    @property
    def provenance(self) -> ProvenanceLog | None:
        raw = self.attributes.get(PROVENANCE_ATTRIBUTE)
        if raw is None:
            return None
        return ProvenanceLog.from_json(raw)

    def store_provenance(self, log: ProvenanceLog) -> None:
        self.attributes[PROVENANCE_ATTRIBUTE] = log.to_json()


def _pretty_or_error(document: Document, kind: str) -> str:
    try:
        return document.pretty()
    except (TypeError, ValueError) as exc:
        return f"Error reading {kind} Data: {exc}"


__all__ = [
    "Document",
    "EdgeDocument",
    "Graph",
    "GraphEdge",
    "GraphNode",
    "display_name",
    "split_document_id",
]

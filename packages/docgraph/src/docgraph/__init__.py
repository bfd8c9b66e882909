"""docgraph: сборка и инкрементальное расширение графа из результатов запросов к базе документов."""

from .builder import GraphBuilder
from .classifier import ResultShape, ResultShapeClassifier, classify
from .client import ArangoDocumentClient, DocumentFetcher, InMemoryDocumentStore
from .exceptions import DocGraphError, FetchError, GraphNotFoundError, OriginNotFoundError, ShapeError
from .models import Document, EdgeDocument, Graph, GraphEdge, GraphNode
from .orchestrator import GraphOrchestrator, GraphPresenter, ImportResult, NullPresenter
from .provenance import NetworkExpansion, NodeExpansion, ProvenanceLog
from .settings import DocGraphSettings, get_settings

__all__ = [
    "GraphBuilder",
    "ResultShape",
    "ResultShapeClassifier",
    "classify",
    "ArangoDocumentClient",
    "DocumentFetcher",
    "InMemoryDocumentStore",
    "DocGraphError",
    "FetchError",
    "GraphNotFoundError",
    "OriginNotFoundError",
    "ShapeError",
    "Document",
    "EdgeDocument",
    "Graph",
    "GraphEdge",
    "GraphNode",
    "GraphOrchestrator",
    "GraphPresenter",
    "ImportResult",
    "NullPresenter",
    "NetworkExpansion",
    "NodeExpansion",
    "ProvenanceLog",
    "DocGraphSettings",
    "get_settings",
]

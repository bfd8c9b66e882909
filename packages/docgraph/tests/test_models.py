from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from docgraph.models import Document, EdgeDocument, Graph, display_name, split_document_id
from docgraph.provenance import NetworkExpansion, NodeExpansion, ProvenanceLog


def test_document_splits_system_fields_from_attributes() -> None:
    doc = Document.model_validate({"_id": "movies/42", "_key": "42", "_rev": "_r", "title": "Heat", "year": 1995})

    assert (doc.id, doc.collection, doc.key, doc.revision) == ("movies/42", "movies", "42", "_r")
    assert list(doc.attributes) == ["title", "year"]
    assert doc.label == "42 (movies)"


def test_document_key_falls_back_to_id() -> None:
    doc = Document.model_validate({"_id": "v/a"})

    assert doc.key == "a"
    assert doc.revision is None


@pytest.mark.parametrize("document_id", ["nokey", "/a", "v/", "v/a/b"])
def test_malformed_ids_are_rejected(document_id: str) -> None:
    with pytest.raises(ValueError):
        split_document_id(document_id)
    with pytest.raises(ValidationError):
        Document.model_validate({"_id": document_id})


def test_display_name_fallback_chain() -> None:
    assert display_name({"Name": "Upper", "name": "lower"}, "k") == "Upper"
    assert display_name({"name": "lower"}, "k") == "lower"
    assert display_name({"Name": None}, "k") == "k"


def test_edge_document_round_trip_keeps_endpoints() -> None:
    raw = {"_id": "e/1", "_key": "1", "_from": "v/a", "_to": "v/b", "weight": 3}
    edge = EdgeDocument.model_validate(raw)

    assert (edge.from_id, edge.to_id) == ("v/a", "v/b")
    assert edge.attributes == {"weight": 3}
    assert json.loads(edge.pretty()) == raw


def test_provenance_serializes_to_single_attribute() -> None:
    graph = Graph(name="imdb")
    log = ProvenanceLog(query="FOR p IN paths RETURN p", connection_id="conn-1")
    log.append(NodeExpansion(node_id="v/b", query="q1", connection_id="conn-1"))
    log.append(NetworkExpansion(query="q2", connection_id="conn-2"))

    graph.store_provenance(log)

    stored = json.loads(graph.attributes["docgraph_provenance"])
    assert stored == {
        "query": "FOR p IN paths RETURN p",
        "connectionId": "conn-1",
        "nodeExpansions": [{"nodeId": "v/b", "query": "q1", "connectionId": "conn-1"}],
        "networkExpansions": [{"query": "q2", "connectionId": "conn-2"}],
    }
    assert graph.provenance == log


def test_expansion_records_are_immutable() -> None:
    record = NodeExpansion(node_id="v/b", query="q", connection_id=None)

    with pytest.raises(ValidationError):
        record.query = "changed"  # type: ignore[misc]


def test_graph_without_provenance() -> None:
    assert Graph(name="empty").provenance is None

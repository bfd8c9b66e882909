from __future__ import annotations

import pytest

from docgraph import GraphOrchestrator, InMemoryDocumentStore

from docgraph_fixtures import VERTICES


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore(VERTICES)


@pytest.fixture
def orchestrator(store: InMemoryDocumentStore) -> GraphOrchestrator:
    return GraphOrchestrator(store)

from __future__ import annotations

from functools import lru_cache
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from .client import ArangoDocumentClient
from .exceptions import FetchError, GraphNotFoundError, OriginNotFoundError, ShapeError
from .orchestrator import GraphOrchestrator
from .settings import get_settings

router = APIRouter(prefix="/v1/graphs", tags=["graphs"])


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    documents: list[dict[str, Any]]
    query: str = ""
    connection_id: str | None = Field(default=None, alias="connectionId")


class ImportGraphRequest(_Payload):
    name: str = "graph"


class ExpandNodeRequest(_Payload):
    origin_node_id: str = Field(..., alias="originNodeId")


class ExpandNetworkRequest(_Payload):
    pass


class ImportGraphResponse(BaseModel):
    graphId: str
    nodeCount: int
    edgeCount: int


class ExpansionResponse(BaseModel):
    newNodeIds: list[str]


@lru_cache
def get_orchestrator() -> GraphOrchestrator:
    return GraphOrchestrator(ArangoDocumentClient.from_settings(get_settings()))


@router.post("", response_model=ImportGraphResponse)
def import_graph(
    payload: ImportGraphRequest, orchestrator: GraphOrchestrator = Depends(get_orchestrator)
) -> ImportGraphResponse:
    try:
        result = orchestrator.import_network(payload.documents, payload.query, payload.connection_id, payload.name)
    except (ShapeError, FetchError) as exc:
        raise _http_error(exc) from exc
    return ImportGraphResponse(graphId=result.graph_id, nodeCount=result.node_count, edgeCount=result.edge_count)


@router.post("/{graph_id}/nodes/expand", response_model=ExpansionResponse)
def expand_node(
    graph_id: str,
    payload: ExpandNodeRequest,
    orchestrator: GraphOrchestrator = Depends(get_orchestrator),
) -> ExpansionResponse:
    try:
        new_ids = orchestrator.expand_node(
            payload.documents, graph_id, payload.origin_node_id, payload.query, payload.connection_id
        )
    except (ShapeError, OriginNotFoundError, FetchError, GraphNotFoundError) as exc:
        raise _http_error(exc) from exc
    return ExpansionResponse(newNodeIds=new_ids)


@router.post("/{graph_id}/expand", response_model=ExpansionResponse)
def expand_network(
    graph_id: str,
    payload: ExpandNetworkRequest,
    orchestrator: GraphOrchestrator = Depends(get_orchestrator),
) -> ExpansionResponse:
    try:
        new_ids = orchestrator.expand_network(payload.documents, graph_id, payload.query, payload.connection_id)
    except (ShapeError, FetchError, GraphNotFoundError) as exc:
        raise _http_error(exc) from exc
    return ExpansionResponse(newNodeIds=new_ids)


@router.get("")
def list_graphs(orchestrator: GraphOrchestrator = Depends(get_orchestrator)) -> dict:
    return {"items": [{"graphId": gid, "name": name} for gid, name in orchestrator.list_graphs().items()]}


@router.get("/{graph_id}/provenance")
def get_provenance(graph_id: str, orchestrator: GraphOrchestrator = Depends(get_orchestrator)) -> dict:
    try:
        provenance = orchestrator.get_graph(graph_id).provenance
    except GraphNotFoundError as exc:
        raise _http_error(exc) from exc
    return provenance.model_dump(by_alias=True) if provenance else {}


@router.delete("/{graph_id}", status_code=204)
def discard_graph(graph_id: str, orchestrator: GraphOrchestrator = Depends(get_orchestrator)) -> None:
    try:
        orchestrator.discard(graph_id)
    except GraphNotFoundError as exc:
        raise _http_error(exc) from exc


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, GraphNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, FetchError):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=422, detail=str(exc))


__all__ = ["router", "get_orchestrator"]

"""Журнал происхождения графа: исходный импорт и все последующие расширения."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

PROVENANCE_ATTRIBUTE = "docgraph_provenance"


class NodeExpansion(BaseModel):
    """Расширение, запущенное от конкретного узла."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    node_id: str = Field(..., alias="nodeId")
    query: str
    connection_id: str | None = Field(default=None, alias="connectionId")


class NetworkExpansion(BaseModel):
    """Расширение всего графа без привязки к узлу."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    query: str
    connection_id: str | None = Field(default=None, alias="connectionId")


ExpansionRecord = NodeExpansion | NetworkExpansion


class ProvenanceLog(BaseModel):
    """Append-only журнал запросов, из которых собран граф."""

    model_config = ConfigDict(populate_by_name=True)

    query: str
    connection_id: str | None = Field(default=None, alias="connectionId")
    node_expansions: list[NodeExpansion] = Field(default_factory=list, alias="nodeExpansions")
    network_expansions: list[NetworkExpansion] = Field(default_factory=list, alias="networkExpansions")

    def append(self, record: ExpansionRecord) -> None:
        if isinstance(record, NodeExpansion):
            self.node_expansions.append(record)
        elif isinstance(record, NetworkExpansion):
            self.network_expansions.append(record)
        else:
            raise TypeError(f"Unsupported expansion record: {type(record).__name__}")

    @property
    def expansion_count(self) -> int:
        return len(self.node_expansions) + len(self.network_expansions)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str) -> "ProvenanceLog":
        return cls.model_validate_json(raw)


__all__ = [
    "PROVENANCE_ATTRIBUTE",
    "ExpansionRecord",
    "NetworkExpansion",
    "NodeExpansion",
    "ProvenanceLog",
]

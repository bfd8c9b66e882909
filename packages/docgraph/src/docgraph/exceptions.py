"""Исключения пакета docgraph."""

from __future__ import annotations


class DocGraphError(RuntimeError):
    """Базовая ошибка импорта или расширения графа."""

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


class ShapeError(DocGraphError):
    """Результат запроса не является ни списком рёбер, ни списком путей."""

    def __init__(self, message: str = "The result of the query must be either a list of edges or a list of paths.") -> None:
        super().__init__(message)


class OriginNotFoundError(DocGraphError):
    """Результат расширения не содержит ребра к выбранному узлу."""

    def __init__(self, node_id: str) -> None:
        super().__init__(f"The result does not contain an edge to the selected node '{node_id}'.")
        self.node_id = node_id


class FetchError(DocGraphError):
    """Не удалось получить документ конечной точки ребра."""

    def __init__(self, document_id: str, reason: str, *, cause: Exception | None = None) -> None:
        super().__init__(f"Failed to fetch document '{document_id}': {reason}", cause=cause)
        self.document_id = document_id


class GraphNotFoundError(DocGraphError):
    """Граф с указанным идентификатором не зарегистрирован."""

    def __init__(self, graph_id: str) -> None:
        super().__init__(f"Graph '{graph_id}' is not registered")
        self.graph_id = graph_id


__all__ = [
    "DocGraphError",
    "ShapeError",
    "OriginNotFoundError",
    "FetchError",
    "GraphNotFoundError",
]

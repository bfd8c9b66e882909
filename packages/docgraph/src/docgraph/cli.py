"""CLI для сборки графа из файлов с результатами запросов."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import typer

from .classifier import classify
from .client import ArangoDocumentClient
from .exceptions import DocGraphError
from .orchestrator import GraphOrchestrator
from .settings import get_settings

logger = logging.getLogger(__name__)

app = typer.Typer(help="Сборка графа из результатов запросов к базе документов.")


def _load_results(path: Path) -> list[Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(f"Не удалось прочитать {path}: {exc}") from exc
    if not isinstance(data, list):
        raise typer.BadParameter(f"{path}: ожидается JSON-массив документов")
    return data


def _split_node_expansion(value: str) -> tuple[str, Path]:
    origin, sep, file_name = value.rpartition("=")
    if not sep or not origin or not file_name:
        raise typer.BadParameter(f"Ожидается ORIGIN=FILE, получено '{value}'")
    return origin, Path(file_name)


@app.command(name="classify")
def classify_file(path: Path = typer.Argument(..., help="JSON-файл с результатом запроса")) -> None:
    """Печатает форму результата: edge_list, path_list или invalid."""

    typer.echo(classify(_load_results(path)).value)


@app.command(name="import")
def import_network(
    path: Path = typer.Argument(..., help="JSON-файл с результатом исходного запроса"),
    query: str = typer.Option("", "--query", help="Текст запроса, сохраняется в журнале происхождения"),
    connection_id: str | None = typer.Option(None, "--connection-id", help="Идентификатор подключения"),
    name: str | None = typer.Option(None, "--name", help="Отображаемое имя графа"),
    expand_node: list[str] = typer.Option(
        [],
        "--expand-node",
        help="Расширение от узла в формате ORIGIN=FILE; можно указывать несколько раз.",
    ),
    expand_network: list[Path] = typer.Option(
        [],
        "--expand-network",
        help="Расширение всего графа из FILE; применяется после --expand-node.",
    ),
    offline: bool = typer.Option(
        False,
        "--offline",
        help="Не обращаться к базе: доступны только документы из самих результатов.",
    ),
) -> None:
    """Импортирует граф, применяет расширения и выводит сводку в stdout."""

    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s - %(message)s")
    node_expansions = [_split_node_expansion(value) for value in expand_node]

    fetcher = None if offline else ArangoDocumentClient.from_settings(settings)
    orchestrator = GraphOrchestrator(fetcher)
    expansions: list[dict[str, Any]] = []
    try:
        result = orchestrator.import_network(_load_results(path), query, connection_id, name or path.stem)
        for origin, file_path in node_expansions:
            new_ids = orchestrator.expand_node(_load_results(file_path), result.graph_id, origin, query, connection_id)
            expansions.append({"kind": "node", "origin": origin, "source": str(file_path), "newNodeIds": new_ids})
        for file_path in expand_network:
            new_ids = orchestrator.expand_network(_load_results(file_path), result.graph_id, query, connection_id)
            expansions.append({"kind": "network", "source": str(file_path), "newNodeIds": new_ids})
    except DocGraphError as exc:
        logger.error("Сборка графа завершилась ошибкой: %s", exc)
        raise typer.Exit(code=1) from exc
    finally:
        if fetcher is not None:
            fetcher.close()

    graph = orchestrator.get_graph(result.graph_id)
    provenance = graph.provenance
    summary = {
        "graphId": result.graph_id,
        "name": graph.name,
        "nodeCount": graph.node_count,
        "edgeCount": graph.edge_count,
        "expansions": expansions,
        "provenance": provenance.model_dump(by_alias=True) if provenance else None,
    }
    typer.echo(json.dumps(summary, ensure_ascii=False, indent=2))


def main() -> None:
    """Точка входа для python -m docgraph.cli."""

    app()


if __name__ == "__main__":  # pragma: no cover - ручной запуск
    main()

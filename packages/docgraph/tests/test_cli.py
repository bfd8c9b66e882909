from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator

import pytest
from typer.testing import CliRunner

from docgraph.cli import app
from docgraph.settings import get_settings

from docgraph_fixtures import edge, path

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("DOCGRAPH_LOG_LEVEL", "WARNING")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _write(tmp_path: Path, name: str, docs: list[Any]) -> Path:
    file_path = tmp_path / name
    file_path.write_text(json.dumps(docs), encoding="utf-8")
    return file_path


def test_cli_classify(tmp_path: Path) -> None:
    paths = _write(tmp_path, "paths.json", [path(edge("e/1", "v/a", "v/b"))])
    vertices = _write(tmp_path, "vertices.json", [{"_id": "v/x"}])

    assert runner.invoke(app, ["classify", str(paths)]).stdout.strip() == "path_list"
    assert runner.invoke(app, ["classify", str(vertices)]).stdout.strip() == "invalid"


def test_cli_import_with_expansions_offline(tmp_path: Path) -> None:
    initial = _write(tmp_path, "initial.json", [path(edge("e/1", "v/a", "v/b"))])
    from_b = _write(tmp_path, "from_b.json", [path(edge("e/2", "v/b", "v/c"))])
    network = _write(tmp_path, "network.json", [path(edge("e/3", "v/c", "v/d")), path(edge("e/2", "v/b", "v/c"))])

    result = runner.invoke(
        app,
        [
            "import",
            str(initial),
            "--offline",
            "--query",
            "FOR v, e, p IN 1..1 ANY 'v/a' GRAPH g RETURN p",
            "--connection-id",
            "local",
            "--name",
            "demo",
            "--expand-node",
            f"v/b={from_b}",
            "--expand-network",
            str(network),
        ],
    )

    assert result.exit_code == 0, result.output
    summary = json.loads(result.stdout)
    assert summary["name"] == "demo"
    assert (summary["nodeCount"], summary["edgeCount"]) == (4, 3)
    assert [item["newNodeIds"] for item in summary["expansions"]] == [["v/c"], ["v/d"]]
    provenance = summary["provenance"]
    assert provenance["connectionId"] == "local"
    assert provenance["nodeExpansions"][0]["nodeId"] == "v/b"
    assert len(provenance["networkExpansions"]) == 1


def test_cli_import_rejects_invalid_result(tmp_path: Path) -> None:
    vertices = _write(tmp_path, "vertices.json", [{"_id": "v/x"}])

    result = runner.invoke(app, ["import", str(vertices), "--offline"])

    assert result.exit_code == 1


def test_cli_import_rejects_expansion_without_origin_edge(tmp_path: Path) -> None:
    initial = _write(tmp_path, "initial.json", [path(edge("e/1", "v/a", "v/b"))])
    unrelated = _write(tmp_path, "unrelated.json", [path(edge("e/3", "v/c", "v/d"))])

    result = runner.invoke(app, ["import", str(initial), "--offline", "--expand-node", f"v/a={unrelated}"])

    assert result.exit_code == 1


def test_cli_applies_node_expansions_before_network_expansions(tmp_path: Path) -> None:
    initial = _write(tmp_path, "initial.json", [path(edge("e/1", "v/a", "v/b"))])
    from_b = _write(tmp_path, "from_b.json", [path(edge("e/2", "v/b", "v/c"))])
    network = _write(tmp_path, "network.json", [path(edge("e/2", "v/b", "v/c"), edge("e/3", "v/c", "v/d"))])

    result = runner.invoke(
        app,
        ["import", str(initial), "--offline", "--expand-network", str(network), "--expand-node", f"v/b={from_b}"],
    )

    assert result.exit_code == 0, result.output
    expansions = json.loads(result.stdout)["expansions"]
    assert [item["kind"] for item in expansions] == ["node", "network"]
    assert [item["newNodeIds"] for item in expansions] == [["v/c"], ["v/d"]]

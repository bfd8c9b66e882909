"""Pytest bootstrap: добавляет локальный src-пакет и тестовые хелперы в `sys.path`.

Файл нужен для локального запуска тестов без установки пакета в окружение:
импорты `docgraph` и `docgraph_fixtures` должны разрешаться из исходников.
"""

from __future__ import annotations

from pathlib import Path
import sys
from typing import Iterable


def _extend_sys_path(paths: Iterable[Path]) -> None:
    """Добавляет директории в начало `sys.path`, пропуская уже известные."""

    for p in paths:
        str_path = str(p)
        if str_path not in sys.path:
            sys.path.insert(0, str_path)


def _collect_src_paths(root: Path) -> list[Path]:
    """Собирает пути к src-каталогу и тестам пакета.

    Args:
        root: Корень репозитория.

    Returns:
        Список существующих путей.
    """

    candidates: list[Path] = [
        root / "packages" / "docgraph" / "src",
        root / "packages" / "docgraph" / "tests",
    ]
    return [p for p in candidates if p.exists()]


# Выполняется при импортировании conftest
_extend_sys_path(_collect_src_paths(Path(__file__).parent.resolve()))

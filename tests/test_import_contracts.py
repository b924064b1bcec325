import ast
from pathlib import Path

import score_monitor.reconciler as reconciler
from score_monitor import scraper

STDLIB_ONLY = {"__future__", "dataclasses", "datetime", "enum", "typing", "unicodedata"}


def _imported_modules(path: Path) -> set:
    tree = ast.parse(path.read_text(encoding="utf-8"))
    names = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.update(alias.name.split(".")[0] for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            names.add("." * node.level + (node.module or ""))
    return names


def test_reconciler_imports_only_stdlib() -> None:
    assert _imported_modules(Path(reconciler.__file__)) <= STDLIB_ONLY


def test_scraper_reuses_reconciler_observation() -> None:
    assert scraper.Observation is reconciler.Observation

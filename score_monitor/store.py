"""JSON file persistence for the score history."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable, List, Mapping

from .reconciler import ScorePoint, TextEntry

logger = logging.getLogger(__name__)


class SchemaError(ValueError):
    """Raised when a history document does not have the expected shape."""


def _entry_from_dict(raw: Mapping[str, Any]) -> TextEntry:
    if not isinstance(raw, Mapping):
        raise SchemaError(f"entry is not an object: {raw!r}")
    score_raw = raw.get("score") or []
    if not isinstance(score_raw, list):
        raise SchemaError(f"score is not a list for {raw.get('name')!r}")
    score: List[ScorePoint] = []
    for p in score_raw:
        if not isinstance(p, Mapping):
            raise SchemaError(f"score point is not an object: {p!r}")
        points = p.get("points", 0)
        # bool is an int subclass; floats and strings are not coerced
        if isinstance(points, bool) or not isinstance(points, int):
            raise SchemaError(f"points is not an integer: {points!r}")
        score.append(ScorePoint(timestamp=str(p.get("timestamp", "")), points=points))
    return TextEntry(
        name=str(raw.get("name") or ""),
        url=str(raw.get("url") or ""),
        score=score,
    )


def entry_to_dict(entry: TextEntry) -> dict:
    return {
        "name": entry.name,
        "url": entry.url,
        "score": [{"timestamp": p.timestamp, "points": p.points} for p in entry.score],
    }


def parse_history(text: str | bytes) -> List[TextEntry]:
    if isinstance(text, bytes):
        text = text.decode("utf-8")
    data = json.loads(text)
    if not isinstance(data, list):
        raise SchemaError("history document is not a JSON array")
    return [_entry_from_dict(item) for item in data]


def load_history(path: Path) -> List[TextEntry]:
    """Read the history file; anything missing or malformed yields []."""
    path = Path(path)
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        logger.info("No existing history at %s; starting fresh.", path)
        return []
    except OSError as e:
        logger.warning("Could not read history %s (%s); starting fresh.", path, e)
        return []

    try:
        entries = parse_history(raw)
    except (ValueError, TypeError, OverflowError, RecursionError) as e:
        # UnicodeDecodeError, JSONDecodeError and SchemaError are ValueErrors;
        # RecursionError comes from very deeply nested arrays
        logger.warning("Ignoring unparseable history %s (%s); starting fresh.", path, e)
        return []

    logger.debug("Loaded %d entries from %s", len(entries), path)
    return entries


def save_history(path: Path, entries: Iterable[TextEntry]) -> None:
    """Write the full history, replacing the file atomically. Errors propagate."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps([entry_to_dict(e) for e in entries], indent=2, ensure_ascii=False)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(payload)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


__all__ = [
    "SchemaError",
    "entry_to_dict",
    "parse_history",
    "load_history",
    "save_history",
]

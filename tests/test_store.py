import json

import pytest

from score_monitor.reconciler import ScorePoint, TextEntry
from score_monitor.store import load_history, save_history


def test_load_missing_file_is_empty(tmp_path):
    assert load_history(tmp_path / "nope.json") == []


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        '{"name": "not a list"}',
        '[1, 2, 3]',
        '[{"name": "A", "url": "u", "score": "oops"}]',
        '[{"name": "A", "url": "u", "score": [{"timestamp": "t", "points": "many"}]}]',
    ],
)
def test_load_malformed_file_is_empty(tmp_path, content):
    path = tmp_path / "history.json"
    path.write_text(content, encoding="utf-8")

    assert load_history(path) == []


@pytest.mark.parametrize(
    "raw",
    [
        b"\xff\xfe[]",
        b"[" * 100000,
        b'[{"name": "A", "url": "u", "score": [{"timestamp": "t", "points": Infinity}]}]',
        b'[{"name": "A", "url": "u", "score": [{"timestamp": "t", "points": 5.9}]}]',
        b'[{"name": "A", "url": "u", "score": [{"timestamp": "t", "points": true}]}]',
        b'[{"name": "A", "url": "u", "score": [{"timestamp": "t", "points": "5"}]}]',
    ],
    ids=["invalid-utf8", "deep-nesting", "infinity", "float", "bool", "string"],
)
def test_load_undecodable_or_mistyped_file_is_empty(tmp_path, raw):
    path = tmp_path / "history.json"
    path.write_bytes(raw)

    assert load_history(path) == []


def test_load_keeps_timestamps_verbatim(tmp_path):
    path = tmp_path / "history.json"
    path.write_text(
        json.dumps(
            [{"name": "A", "url": "u1", "score": [{"timestamp": "2024-12-31T23:59:59.999Z", "points": 3}]}]
        ),
        encoding="utf-8",
    )

    entries = load_history(path)

    assert entries == [TextEntry("A", "u1", [ScorePoint("2024-12-31T23:59:59.999Z", 3)])]


def test_save_writes_readable_json_with_field_order(tmp_path):
    path = tmp_path / "out" / "2025-scores.json"
    entries = [TextEntry("Größe", "u1", [ScorePoint("2025-03-01T12:00:00.000Z", 5)])]

    save_history(path, entries)

    text = path.read_text(encoding="utf-8")
    assert "Größe" in text
    assert text.index('"name"') < text.index('"url"') < text.index('"score"')
    assert text.index('"timestamp"') < text.index('"points"')
    assert json.loads(text) == [
        {"name": "Größe", "url": "u1", "score": [{"timestamp": "2025-03-01T12:00:00.000Z", "points": 5}]}
    ]


def test_save_replaces_previous_content(tmp_path):
    path = tmp_path / "history.json"
    path.write_text("garbage that is longer than the new content" * 10, encoding="utf-8")

    save_history(path, [])

    assert json.loads(path.read_text(encoding="utf-8")) == []
    assert [p.name for p in tmp_path.iterdir()] == ["history.json"]


def test_save_then_load(tmp_path):
    path = tmp_path / "history.json"
    entries = [
        TextEntry("A", "u1", [ScorePoint("t0", 1), ScorePoint("t1", 2)]),
        TextEntry("B", "", [ScorePoint("t0", 0)]),
    ]

    save_history(path, entries)

    assert load_history(path) == entries


def test_save_failure_propagates(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")

    with pytest.raises(OSError):
        save_history(blocker / "history.json", [])

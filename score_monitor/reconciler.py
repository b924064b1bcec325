"""Merge freshly scraped observations into the persisted score history.

The history is append-only: an entry's ``score`` only grows, and only when
the observed points differ from the last recorded value.  Entries that are
not observed in a run are kept as they are.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional

# Letters NFKD leaves whole, folded to the base letters they collate with.
_BASE_LETTERS = str.maketrans({
    "ø": "o",
    "æ": "ae",
    "œ": "oe",
    "ł": "l",
    "đ": "d",
    "ð": "d",
    "þ": "th",
    "ħ": "h",
    "ı": "i",
    "ŧ": "t",
})


@dataclass(frozen=True)
class Observation:
    name: str
    url: str
    points: int

    @property
    def key(self) -> str:
        return self.url or self.name


@dataclass(frozen=True)
class ScorePoint:
    timestamp: str
    points: int


@dataclass
class TextEntry:
    name: str
    url: str
    score: List[ScorePoint] = field(default_factory=list)

    @property
    def key(self) -> str:
        return self.url or self.name

    @property
    def last_points(self) -> Optional[int]:
        return self.score[-1].points if self.score else None


class EventKind(str, Enum):
    NEW = "new"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class ReconcileEvent:
    kind: EventKind
    name: str
    points: int
    previous: Optional[int] = None


@dataclass
class ReconcileResult:
    entries: List[TextEntry]
    events: List[ReconcileEvent]

    def count(self, kind: EventKind) -> int:
        return sum(1 for e in self.events if e.kind is kind)

    @property
    def new_count(self) -> int:
        return self.count(EventKind.NEW)

    @property
    def changed_count(self) -> int:
        return self.count(EventKind.CHANGED)

    @property
    def unchanged_count(self) -> int:
        return self.count(EventKind.UNCHANGED)


def iso_timestamp(moment: datetime) -> str:
    """Format an instant as UTC ISO-8601 with milliseconds and a `Z` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    utc = moment.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def sort_key(name: str) -> str:
    """Case- and accent-insensitive collation key ("Äpfel" sorts with "apfel", "Øre" with "ore")."""
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return stripped.casefold().translate(_BASE_LETTERS)


def reconcile(
    history: Iterable[TextEntry],
    observations: Iterable[Observation],
    observed_at: datetime,
) -> ReconcileResult:
    """Return the updated history plus one event per observation.

    Existing entries are matched by ``url or name``; if the input history
    holds duplicate keys the later one wins.  Matched entries keep their
    stored name and url, only ``score`` may grow.
    """
    timestamp = iso_timestamp(observed_at)
    by_key: Dict[str, TextEntry] = {}
    for entry in history:
        by_key[entry.key] = entry

    events: List[ReconcileEvent] = []
    for obs in observations:
        existing = by_key.get(obs.key)
        if existing is None:
            by_key[obs.key] = TextEntry(
                name=obs.name,
                url=obs.url,
                score=[ScorePoint(timestamp=timestamp, points=obs.points)],
            )
            events.append(ReconcileEvent(EventKind.NEW, obs.name, obs.points))
            continue

        previous = existing.last_points
        if previous is None or previous != obs.points:
            existing.score.append(ScorePoint(timestamp=timestamp, points=obs.points))
            events.append(ReconcileEvent(EventKind.CHANGED, existing.name, obs.points, previous))
        else:
            events.append(ReconcileEvent(EventKind.UNCHANGED, existing.name, obs.points, previous))

    entries = sorted(by_key.values(), key=lambda e: sort_key(e.name))
    return ReconcileResult(entries=entries, events=events)


__all__ = [
    "Observation",
    "ScorePoint",
    "TextEntry",
    "EventKind",
    "ReconcileEvent",
    "ReconcileResult",
    "iso_timestamp",
    "sort_key",
    "reconcile",
]

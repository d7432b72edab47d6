# queue.py
"""
Device-side pending edit log.

Every hole-score edit is appended to a JSON-lines file the moment it is
made, before any network traffic. A separate cursor file records the
sequence number below which every edit is resolved (accepted by the server
or rejected as stale). Nothing is ever rewritten in place; `compact()`
drops resolved lines by writing a new file and swapping it in.

Log line:   {"seq": 7, "entryId": 12, "hole": 4, "strokes": 5,
             "clientUpdatedAt": "2025-08-21T15:04:05.123456+00:00"}
Cursor:     {"cursor": 8}
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional

logger = logging.getLogger(__name__)


class PendingEdit(NamedTuple):
    seq: int
    entry_id: int
    hole: int
    strokes: int
    client_updated_at: datetime

    @property
    def key(self):
        return (self.entry_id, self.hole)

    def to_wire(self) -> Dict:
        return {
            "entryId": self.entry_id,
            "hole": self.hole,
            "strokes": self.strokes,
            "clientUpdatedAt": self.client_updated_at.isoformat(),
        }

    def to_line(self) -> str:
        return json.dumps({"seq": self.seq, **self.to_wire()})

    @classmethod
    def from_line(cls, line: str) -> "PendingEdit":
        raw = json.loads(line)
        return cls(
            seq=int(raw["seq"]),
            entry_id=int(raw["entryId"]),
            hole=int(raw["hole"]),
            strokes=int(raw["strokes"]),
            client_updated_at=datetime.fromisoformat(raw["clientUpdatedAt"]),
        )


def _write_atomic(path: Path, text: str) -> None:
    tmp = path.with_name(path.name + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        f.write(text)
        f.flush()
        os.fsync(f.fileno())
    os.replace(tmp, path)


class PendingEditLog:
    """
    Append-only edit log plus cursor. Safe to share between the UI thread
    (append) and the single flush worker (pending / resolve).
    """

    def __init__(self, path):
        self.path = Path(path)
        self.cursor_path = self.path.with_name(self.path.name + ".cursor")
        self._lock = threading.RLock()
        self._edits: List[PendingEdit] = []
        self._cursor = 0
        self._load()

    # ---- persistence ---------------------------------------------

    def _load(self) -> None:
        torn = False
        if self.path.exists():
            with open(self.path, encoding="utf-8") as f:
                for n, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        self._edits.append(PendingEdit.from_line(line))
                    except (ValueError, KeyError):
                        # a torn final write after a crash; everything before it is intact
                        logger.warning("Skipping unreadable line %s in %s", n, self.path)
                        torn = True
        if self.cursor_path.exists():
            with open(self.cursor_path, encoding="utf-8") as f:
                self._cursor = int(json.load(f).get("cursor", 0))
        if torn:
            _write_atomic(self.path, "".join(e.to_line() + "\n" for e in self._edits))

    def _save_cursor(self) -> None:
        _write_atomic(self.cursor_path, json.dumps({"cursor": self._cursor}))

    @property
    def next_seq(self) -> int:
        return self._edits[-1].seq + 1 if self._edits else max(self._cursor, 0)

    @property
    def cursor(self) -> int:
        return self._cursor

    # ---- operations ----------------------------------------------

    def append(self, entry_id: int, hole: int, strokes: int, client_updated_at: Optional[datetime] = None) -> PendingEdit:
        with self._lock:
            edit = PendingEdit(
                seq=max(self.next_seq, self._cursor),
                entry_id=int(entry_id),
                hole=int(hole),
                strokes=int(strokes),
                client_updated_at=client_updated_at or datetime.now(timezone.utc),
            )
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(edit.to_line() + "\n")
                f.flush()
                os.fsync(f.fileno())
            self._edits.append(edit)
            logger.debug("Queued score: entry %s, hole %s, strokes %s", entry_id, hole, strokes)
            return edit

    def pending(self) -> List[PendingEdit]:
        """
        Unresolved edits in queue order. An edit followed by a newer edit
        for the same (entry, hole) is superseded and left out.
        """
        with self._lock:
            live = [e for e in self._edits if e.seq >= self._cursor]
            latest = {}
            for e in live:
                latest[e.key] = e.seq
            return [e for e in live if latest[e.key] == e.seq]

    def __len__(self) -> int:
        return len(self.pending())

    def resolve(self, seq: int) -> None:
        """
        Mark `seq` resolved. Callers resolve in `pending()` order, so every
        edit below `seq` is either resolved or superseded by a live edit.
        """
        with self._lock:
            if seq + 1 > self._cursor:
                self._cursor = seq + 1
                self._save_cursor()

    def compact(self) -> int:
        """Rewrite the log without resolved lines. Returns lines dropped."""
        with self._lock:
            keep = [e for e in self._edits if e.seq >= self._cursor]
            dropped = len(self._edits) - len(keep)
            if dropped:
                _write_atomic(self.path, "".join(e.to_line() + "\n" for e in keep))
                self._edits = keep
            return dropped


class LocalScoreView:
    """The device's own picture of the scores, updated optimistically."""

    def __init__(self):
        self._lock = threading.Lock()
        self._scores: Dict[int, Dict[int, int]] = {}

    def set(self, entry_id: int, hole: int, strokes: int) -> None:
        with self._lock:
            self._scores.setdefault(int(entry_id), {})[int(hole)] = int(strokes)

    def get(self, entry_id: int, hole: int) -> Optional[int]:
        with self._lock:
            return self._scores.get(int(entry_id), {}).get(int(hole))

    def entry_scores(self, entry_id: int) -> Dict[int, int]:
        with self._lock:
            return dict(self._scores.get(int(entry_id), {}))

    def replace_entry(self, entry_id: int, scores: Dict) -> None:
        with self._lock:
            self._scores[int(entry_id)] = {int(h): int(s) for h, s in scores.items()}

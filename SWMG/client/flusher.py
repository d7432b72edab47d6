# flusher.py
"""
Single-writer flush worker for a scoring device.

Edits are written to the local view and the pending log first, then sent
in queue order whenever the device is online: right after an edit is
queued, when connectivity comes back, and every `interval` seconds. At
most one flush pass runs at a time. A network failure stops the pass and
leaves the edit (and everything after it) queued for the next one.

A stale edit is terminal. The server has already recorded the conflict for
review, so the edit is dropped from the queue and that entry's scores are
refetched and replace the local view.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional, Set

from .queue import LocalScoreView, PendingEditLog
from .transport import RejectedEditError, TransportError

logger = logging.getLogger(__name__)

OFFLINE = "offline"
SYNCING = "syncing"
SYNCED = "synced"


def derive_sync_status(online: bool, pending_count: int, is_flushing: bool = False) -> str:
    if not online:
        return OFFLINE
    if pending_count > 0 or is_flushing:
        return SYNCING
    return SYNCED


def sync_status_text(status: str, pending_count: int = 0) -> str:
    if status == OFFLINE:
        return f"Offline - {pending_count} pending" if pending_count else "Offline"
    if status == SYNCING:
        return f"Syncing {pending_count}..." if pending_count else "Syncing..."
    return "All scores synced"


class FlushReport:
    def __init__(self):
        self.accepted = 0
        self.ignored = 0
        self.rejected = 0
        self.refetched = []
        self.remaining = 0
        self.failed = False
        self.skipped = False

    def __repr__(self):
        return (
            f"FlushReport(accepted={self.accepted}, ignored={self.ignored}, rejected={self.rejected}, "
            f"remaining={self.remaining}, failed={self.failed}, skipped={self.skipped})"
        )


class ScoreQueueFlusher:
    def __init__(
        self,
        log: PendingEditLog,
        transport,
        view: Optional[LocalScoreView] = None,
        interval: float = 15,
        online: bool = True,
        on_refetch: Optional[Callable[[int, dict], None]] = None,
    ):
        self.log = log
        self.transport = transport
        self.view = view or LocalScoreView()
        self.interval = interval
        self.on_refetch = on_refetch
        self._online = online
        self._flush_lock = threading.Lock()
        self._flushing = False
        self._needs_refetch: Set[int] = set()
        self._wake = threading.Event()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ---- state ---------------------------------------------------

    @property
    def online(self) -> bool:
        return self._online

    @property
    def is_flushing(self) -> bool:
        return self._flushing

    @property
    def status(self) -> str:
        return derive_sync_status(self._online, len(self.log), self._flushing)

    @property
    def status_text(self) -> str:
        return sync_status_text(self.status, len(self.log))

    # ---- triggers ------------------------------------------------

    def _trigger(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            self._wake.set()
        else:
            self.flush()

    def queue_edit(self, entry_id: int, hole: int, strokes: int, client_updated_at: Optional[datetime] = None):
        """Record an edit locally, then try to send it if online."""
        self.view.set(entry_id, hole, strokes)
        edit = self.log.append(entry_id, hole, strokes, client_updated_at)
        if self._online:
            self._trigger()
        return edit

    def set_online(self, online: bool) -> None:
        came_back = online and not self._online
        self._online = online
        logger.info("Device is %s", "online" if online else "offline")
        if came_back:
            self._trigger()

    # ---- flush ---------------------------------------------------

    def flush(self) -> FlushReport:
        report = FlushReport()
        if not self._online or not self._flush_lock.acquire(blocking=False):
            report.skipped = True
            report.remaining = len(self.log)
            return report

        self._flushing = True
        logger.info("Flushing %s pending score edits", len(self.log))
        try:
            self._send_pending(report)
            self._refetch(report)
            # runs after failed passes too; the cursor only covers resolved edits
            self.log.compact()
        finally:
            self._flushing = False
            self._flush_lock.release()

        report.remaining = len(self.log)
        if report.accepted or report.ignored or report.rejected:
            logger.info("Flushed score queue: %r", report)
        return report

    def _send_pending(self, report: FlushReport) -> None:
        for edit in self.log.pending():
            try:
                outcome = self.transport.send(edit)
            except TransportError as e:
                logger.warning("Score sync stopped at entry %s hole %s: %s", edit.entry_id, edit.hole, e)
                report.failed = True
                return
            except RejectedEditError as e:
                logger.error("Server rejected entry %s hole %s: %s", edit.entry_id, edit.hole, e)
                self.log.resolve(edit.seq)
                self._needs_refetch.add(edit.entry_id)
                report.rejected += 1
                continue

            status = outcome.get("status")
            if status == "accepted":
                self.log.resolve(edit.seq)
                report.accepted += 1
            elif status == "ignored":
                logger.info(
                    "Stale edit for entry %s hole %s ignored by server (conflict %s)",
                    edit.entry_id, edit.hole, outcome.get("conflictId"),
                )
                self.log.resolve(edit.seq)
                self._needs_refetch.add(edit.entry_id)
                report.ignored += 1
            else:
                logger.warning("Unexpected response for entry %s hole %s: %s", edit.entry_id, edit.hole, outcome)
                report.failed = True
                return

    def _refetch(self, report: FlushReport) -> None:
        if self._needs_refetch:
            logger.info("Refetching scores for entries %s", sorted(self._needs_refetch))
        for entry_id in sorted(self._needs_refetch):
            try:
                scores = self.transport.fetch_entry_scores(entry_id)
            except TransportError as e:
                logger.warning("Refetch of entry %s failed, will retry: %s", entry_id, e)
                report.failed = True
                continue
            except RejectedEditError as e:
                logger.error("Entry %s is gone from the server, dropping its local scores: %s", entry_id, e)
                self.view.replace_entry(entry_id, {})
                self._needs_refetch.discard(entry_id)
                continue
            # edits still queued for this entry are newer than what the server holds
            for edit in self.log.pending():
                if edit.entry_id == entry_id:
                    scores[edit.hole] = edit.strokes
            self.view.replace_entry(entry_id, scores)
            self._needs_refetch.discard(entry_id)
            report.refetched.append(entry_id)
            if self.on_refetch:
                self.on_refetch(entry_id, scores)

    # ---- background timer ----------------------------------------

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="score-queue-flusher", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        self._wake.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        while not self._stop.is_set():
            self._wake.wait(self.interval)
            self._wake.clear()
            if self._stop.is_set():
                break
            if self._online and (len(self.log) or self._needs_refetch):
                try:
                    self.flush()
                except Exception:
                    logger.exception("Score queue flush failed")

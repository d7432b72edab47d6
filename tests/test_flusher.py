import time
from datetime import datetime, timedelta, timezone

import pytest

from SWMG.client import (
    PendingEditLog,
    RejectedEditError,
    ScoreQueueFlusher,
    TransportError,
    derive_sync_status,
    sync_status_text,
)

T0 = datetime(2025, 6, 7, 14, 0, tzinfo=timezone.utc)


class FakeTransport:
    """In-memory server: stale keys are answered with "ignored"."""

    def __init__(self):
        self.server = {}
        self.sent = []
        self.stale = set()
        self.rejected = set()
        self.gone = set()
        self.fetches = 0
        self.down = False
        self.fail_after = None
        self.on_send = None

    def send(self, edit):
        if self.down or (self.fail_after is not None and len(self.sent) >= self.fail_after):
            raise TransportError("connection refused")
        if self.on_send:
            self.on_send(edit)
        self.sent.append(edit)
        if edit.entry_id in self.gone:
            raise RejectedEditError(404, {"error": "not_found"})
        if edit.key in self.rejected:
            raise RejectedEditError(409, {"error": "tournament_final"})
        if edit.key in self.stale:
            return {"status": "ignored", "reason": "stale", "conflictId": 1}
        self.server.setdefault(edit.entry_id, {})[edit.hole] = edit.strokes
        return {"status": "accepted", "score": edit.to_wire()}

    def fetch_entry_scores(self, entry_id):
        self.fetches += 1
        if self.down:
            raise TransportError("connection refused")
        if entry_id in self.gone:
            raise RejectedEditError(404, {"error": "not_found"})
        return dict(self.server.get(entry_id, {}))


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def log(tmp_path):
    return PendingEditLog(tmp_path / "edits.jsonl")


def test_edit_flushes_immediately_when_online(log, transport):
    flusher = ScoreQueueFlusher(log, transport)
    flusher.queue_edit(1, 4, 5, T0)
    assert [e.strokes for e in transport.sent] == [5]
    assert len(log) == 0
    assert flusher.status == "synced"
    assert log.path.read_text() == ""


def test_offline_edits_wait_for_reconnect(log, transport):
    flusher = ScoreQueueFlusher(log, transport, online=False)
    flusher.queue_edit(1, 4, 5, T0)
    flusher.queue_edit(1, 5, 3, T0)
    assert transport.sent == []
    assert flusher.view.get(1, 4) == 5
    assert flusher.status == "offline"
    assert flusher.status_text == "Offline - 2 pending"

    flusher.set_online(True)
    assert [(e.hole, e.strokes) for e in transport.sent] == [(4, 5), (5, 3)]
    assert transport.server == {1: {4: 5, 5: 3}}


def test_network_failure_keeps_queue(log, transport):
    flusher = ScoreQueueFlusher(log, transport, online=False)
    flusher.queue_edit(1, 4, 5, T0)
    flusher.queue_edit(1, 5, 3, T0)
    transport.down = True
    flusher.set_online(True)

    report = flusher.flush()
    assert report.failed
    assert report.remaining == 2
    assert [e.hole for e in log.pending()] == [4, 5]

    transport.down = False
    report = flusher.flush()
    assert (report.accepted, report.remaining, report.failed) == (2, 0, False)


def test_failure_mid_pass_keeps_unsent_edits(log, transport):
    flusher = ScoreQueueFlusher(log, transport, online=False)
    for hole in (1, 2, 3):
        flusher.queue_edit(1, hole, 4, T0)
    transport.fail_after = 1
    flusher.set_online(True)
    assert [e.hole for e in log.pending()] == [2, 3]


def test_superseded_edit_is_not_sent(log, transport):
    flusher = ScoreQueueFlusher(log, transport, online=False)
    flusher.queue_edit(1, 4, 5, T0)
    flusher.queue_edit(1, 4, 6, T0 + timedelta(seconds=5))
    flusher.set_online(True)
    assert [e.strokes for e in transport.sent] == [6]
    assert len(log) == 0


def test_stale_edit_is_dropped_and_entry_refetched(log, transport):
    transport.server = {1: {4: 4, 7: 3}}
    transport.stale.add((1, 4))
    refetched = []
    flusher = ScoreQueueFlusher(log, transport, online=False, on_refetch=lambda eid, scores: refetched.append(eid))
    flusher.queue_edit(1, 4, 6, T0)
    assert flusher.view.get(1, 4) == 6

    flusher.set_online(True)
    assert len(log) == 0
    assert flusher.view.entry_scores(1) == {4: 4, 7: 3}
    assert refetched == [1]


def test_refetch_keeps_edits_still_queued(log, transport):
    transport.server = {1: {4: 4}}
    transport.stale.add((1, 4))
    transport.fail_after = 1
    flusher = ScoreQueueFlusher(log, transport, online=False)
    flusher.queue_edit(1, 4, 6, T0)
    flusher.queue_edit(1, 5, 5, T0)

    flusher.set_online(True)
    # hole 5 never reached the server, so the local value survives the refetch
    assert [e.hole for e in log.pending()] == [5]
    assert flusher.view.entry_scores(1) == {4: 4, 5: 5}


def test_rejected_edit_is_resolved(log, transport):
    transport.rejected.add((1, 4))
    flusher = ScoreQueueFlusher(log, transport, online=False)
    flusher.queue_edit(1, 4, 6, T0)
    flusher.queue_edit(1, 5, 3, T0)
    flusher.set_online(True)
    assert len(log) == 0
    assert flusher.view.entry_scores(1) == {5: 3}


def test_edits_for_deleted_entry_do_not_pile_up(log, transport):
    transport.gone.add(1)
    flusher = ScoreQueueFlusher(log, transport, online=False)
    for hole in range(1, 19):
        flusher.queue_edit(1, hole, 4, T0)
    flusher.queue_edit(2, 1, 5, T0)
    flusher.set_online(True)

    for _ in range(4):
        report = flusher.flush()
        assert not report.failed
    assert len(log) == 0
    assert log.path.read_text() == ""
    # the missing entry is fetched once, then forgotten
    assert transport.fetches == 1
    assert flusher.view.entry_scores(1) == {}
    assert flusher.view.entry_scores(2) == {1: 5}


def test_failed_refetch_still_compacts_the_log(log, transport):
    transport.stale.add((1, 4))
    flusher = ScoreQueueFlusher(log, transport, online=False)
    flusher.queue_edit(1, 4, 6, T0)
    flusher.queue_edit(1, 5, 3, T0)

    def timed_out(entry_id):
        raise TransportError("timed out")

    transport.fetch_entry_scores = timed_out

    flusher.set_online(True)
    report = flusher.flush()
    assert report.failed
    assert report.remaining == 0
    assert log.path.read_text() == ""


def test_second_flush_during_a_pass_returns_immediately(log, transport):
    flusher = ScoreQueueFlusher(log, transport, online=False)
    nested = []

    def reenter(edit):
        nested.append((flusher.is_flushing, flusher.status, flusher.flush()))

    transport.on_send = reenter
    flusher.queue_edit(1, 4, 5, T0)
    flusher.set_online(True)

    is_flushing, status, report = nested[0]
    assert is_flushing is True
    assert status == "syncing"
    assert report.skipped is True
    assert len(transport.sent) == 1
    assert flusher.is_flushing is False


def test_flush_while_offline_is_skipped(log, transport):
    flusher = ScoreQueueFlusher(log, transport, online=False)
    flusher.queue_edit(1, 4, 5, T0)
    report = flusher.flush()
    assert report.skipped
    assert report.remaining == 1


def test_background_worker_flushes_queued_edits(log, transport):
    flusher = ScoreQueueFlusher(log, transport, interval=0.05)
    flusher.start()
    try:
        flusher.queue_edit(1, 4, 5, T0)
        deadline = time.monotonic() + 5
        while len(log) and time.monotonic() < deadline:
            time.sleep(0.01)
    finally:
        flusher.stop(timeout=5)
    assert len(log) == 0
    assert transport.server == {1: {4: 5}}


def test_background_worker_survives_a_failing_pass(log, transport):
    transport.stale.add((1, 4))

    def broken_callback(entry_id, scores):
        raise RuntimeError("score card widget went away")

    flusher = ScoreQueueFlusher(log, transport, interval=0.05, on_refetch=broken_callback, online=False)
    flusher.queue_edit(1, 4, 6, T0)
    flusher.start()
    try:
        flusher.set_online(True)
        deadline = time.monotonic() + 5
        while not transport.fetches and time.monotonic() < deadline:
            time.sleep(0.01)

        flusher.queue_edit(1, 5, 3, T0)
        while 5 not in transport.server.get(1, {}) and time.monotonic() < deadline:
            time.sleep(0.01)
        assert flusher._thread.is_alive()
    finally:
        flusher.stop(timeout=5)
    assert transport.server == {1: {5: 3}}


def test_queue_survives_restart(tmp_path, transport):
    path = tmp_path / "edits.jsonl"
    ScoreQueueFlusher(PendingEditLog(path), transport, online=False).queue_edit(1, 4, 5, T0)

    flusher = ScoreQueueFlusher(PendingEditLog(path), transport)
    report = flusher.flush()
    assert report.accepted == 1
    assert transport.server == {1: {4: 5}}


@pytest.mark.parametrize("online, pending, flushing, expected", [
    (False, 0, False, "offline"),
    (False, 3, False, "offline"),
    (True, 3, False, "syncing"),
    (True, 0, True, "syncing"),
    (True, 0, False, "synced"),
])
def test_derive_sync_status(online, pending, flushing, expected):
    assert derive_sync_status(online, pending, flushing) == expected


def test_sync_status_text():
    assert sync_status_text("offline", 2) == "Offline - 2 pending"
    assert sync_status_text("offline") == "Offline"
    assert sync_status_text("syncing", 1) == "Syncing 1..."
    assert sync_status_text("synced") == "All scores synced"

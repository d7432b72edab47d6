from .flusher import FlushReport, ScoreQueueFlusher, derive_sync_status, sync_status_text
from .queue import LocalScoreView, PendingEdit, PendingEditLog
from .transport import HttpScoreTransport, RejectedEditError, TransportError

__all__ = [
    "FlushReport",
    "HttpScoreTransport",
    "LocalScoreView",
    "PendingEdit",
    "PendingEditLog",
    "RejectedEditError",
    "ScoreQueueFlusher",
    "TransportError",
    "derive_sync_status",
    "sync_status_text",
]

# transport.py
"""HTTP transport between a scoring device and the server API."""

from __future__ import annotations

from typing import Dict

import requests

from .queue import PendingEdit


class TransportError(Exception):
    """Network trouble or a server-side failure; the edit stays queued."""


class RejectedEditError(Exception):
    """
    The server refused the edit outright (validation, unknown entry,
    finalized tournament). Retrying cannot succeed, so the edit is resolved.
    """

    def __init__(self, status_code: int, body: Dict):
        super().__init__(f"edit rejected with HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


REJECT_STATUSES = (400, 404, 409)


class HttpScoreTransport:
    def __init__(self, base_url: str, session: requests.Session = None, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _json(self, response) -> Dict:
        try:
            return response.json()
        except ValueError:
            return {}

    def send(self, edit: PendingEdit) -> Dict:
        try:
            response = self.session.post(f"{self.base_url}/api/scores", json=edit.to_wire(), timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(str(e)) from e

        if response.status_code in REJECT_STATUSES:
            raise RejectedEditError(response.status_code, self._json(response))
        if not response.ok:
            raise TransportError(f"HTTP {response.status_code} for entry {edit.entry_id} hole {edit.hole}")
        return self._json(response)

    def fetch_entry_scores(self, entry_id: int) -> Dict[int, int]:
        """Raises RejectedEditError when the entry no longer exists on the server."""
        try:
            response = self.session.get(f"{self.base_url}/api/entries/{entry_id}/scores", timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(str(e)) from e

        if response.status_code in REJECT_STATUSES:
            raise RejectedEditError(response.status_code, self._json(response))
        try:
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(str(e)) from e
        scores = self._json(response).get("scores", {})
        return {int(h): int(s) for h, s in scores.get(str(entry_id), {}).items()}

import pytest
import requests

from SWMG.client import HttpScoreTransport, RejectedEditError, TransportError


class StubResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self.body = body

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return self.body

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error")


class StubSession:
    def __init__(self, status_code, body):
        self.response = StubResponse(status_code, body)
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        return self.response


def test_fetch_entry_scores():
    session = StubSession(200, {"scores": {"7": {"4": 5, "12": 3}}})
    transport = HttpScoreTransport("http://scores.local/", session=session)
    assert transport.fetch_entry_scores(7) == {4: 5, 12: 3}
    assert session.urls == ["http://scores.local/api/entries/7/scores"]


def test_fetch_of_deleted_entry_is_rejected():
    transport = HttpScoreTransport("http://scores.local", session=StubSession(404, {"error": "not_found"}))
    with pytest.raises(RejectedEditError) as excinfo:
        transport.fetch_entry_scores(7)
    assert excinfo.value.status_code == 404


def test_fetch_server_error_is_retryable():
    transport = HttpScoreTransport("http://scores.local", session=StubSession(503, {}))
    with pytest.raises(TransportError):
        transport.fetch_entry_scores(7)

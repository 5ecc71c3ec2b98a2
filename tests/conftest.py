import json

import pytest
import requests

from codelab_py.client import ApiClient, AuthSession, Challenge

BASE_URL = "http://judge.test/api/v1"


def make_response(status=200, body=None, raw=None):
    response = requests.Response()
    response.status_code = status
    response.url = BASE_URL
    if raw is not None:
        response._content = raw.encode()
    else:
        response._content = json.dumps(body).encode()
    response.headers["Content-Type"] = "application/json"
    return response


def ok(data):
    return make_response(200, {"success": True, "data": data})


class FakeBackend:
    """Stands in for the REST API at the requests.Session level."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, reply):
        """`reply` is a Response, an exception, or a callable taking the call."""
        self.routes[(method, path)] = reply

    def __call__(self, method, url, **kwargs):
        path = url[len(BASE_URL):] if url.startswith(BASE_URL) else url
        call = {"method": method, "path": path, **kwargs}
        self.calls.append(call)

        reply = self.routes.get((method, path))
        if reply is None:
            return make_response(404, {"success": False, "message": "Not found"})
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(call)
        return reply


@pytest.fixture
def backend(monkeypatch):
    fake = FakeBackend()
    monkeypatch.setattr(
        requests.Session,
        "request",
        lambda self, method, url, **kwargs: fake(method, url, **kwargs),
    )
    return fake


@pytest.fixture
def session():
    return AuthSession("tok-123")


@pytest.fixture
def api(backend, session):
    return ApiClient(BASE_URL, session=session, timeout=5)


@pytest.fixture
def challenge():
    return Challenge.from_dict(
        {
            "id": "ch_1",
            "title": "Solution",
            "starterCodes": {
                "python": "def solution():\n    pass",
                "javascript": "function solution() {}",
            },
            "testCases": [
                {"input": [1, 2], "expectedOutput": 3, "isHidden": False},
                {"input": "secret-input", "expectedOutput": "secret-output", "isHidden": True},
            ],
        }
    )


class StubJudge:
    """Records calls and replays queued outcomes (results or exceptions)."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []
        self.hook = None

    def _next(self):
        if self.hook is not None:
            self.hook()
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def run(self, code, language, challenge_id=None):
        self.calls.append(("run", code, language, challenge_id))
        return self._next()

    def submit(self, challenge_id, code, language):
        self.calls.append(("submit", code, language, challenge_id))
        return self._next()


@pytest.fixture
def stub_judge():
    return StubJudge

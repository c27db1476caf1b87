from __future__ import annotations

import json

import pytest
import requests

from conftest import FakeSession, make_response
from services.request_executor import RateLimitedExecutor, RetryExhausted, RetryPolicy


def _executor(responses, sleeps, **kwargs):
    session = FakeSession(responses)
    policy = RetryPolicy(max_attempts=5, default_wait_seconds=60.0, sleep=sleeps.append)
    return RateLimitedExecutor(session=session, policy=policy, **kwargs), session


def test_retry_after_is_honored_then_succeeds():
    sleeps = []
    ex, session = _executor(
        [make_response(429, headers={"Retry-After": "2"}), make_response(200, {"ok": True})],
        sleeps,
    )
    resp = ex.execute("GET", "https://api.test/person/lookup")
    assert resp.json() == {"ok": True}
    assert sleeps == [2.0]
    assert len(session.calls) == 2


def test_five_consecutive_429_raise_retry_exhausted_without_sixth_call():
    sleeps = []
    ex, session = _executor([make_response(429, headers={"Retry-After": "1"}) for _ in range(6)], sleeps)
    with pytest.raises(RetryExhausted) as info:
        ex.execute("GET", "https://api.test/person/lookup")
    assert info.value.attempts == 5
    assert len(session.calls) == 5
    # No wait after the final attempt
    assert sleeps == [1.0, 1.0, 1.0, 1.0]


@pytest.mark.parametrize("headers", [
    {}, {"Retry-After": "soon"}, {"Retry-After": "-3"}, {"Retry-After": "nan"}, {"Retry-After": "inf"},
])
def test_missing_or_unparseable_retry_after_defaults_to_sixty(headers):
    sleeps = []
    ex, _ = _executor([make_response(429, headers=headers), make_response(200)], sleeps)
    ex.execute("GET", "https://api.test/x")
    assert sleeps == [60.0]


def test_non_429_error_propagates_immediately():
    sleeps = []
    ex, session = _executor([make_response(500), make_response(200)], sleeps)
    with pytest.raises(requests.HTTPError):
        ex.execute("GET", "https://api.test/x")
    assert len(session.calls) == 1
    assert sleeps == []


def test_network_error_propagates_immediately():
    sleeps = []
    ex, session = _executor([requests.ConnectionError("boom")], sleeps)
    with pytest.raises(requests.ConnectionError):
        ex.execute("GET", "https://api.test/x")
    assert len(session.calls) == 1


def test_trace_writes_one_line_per_attempt(tmp_path, monkeypatch):
    monkeypatch.setenv("RUN_ID", "run-42")
    log_file = tmp_path / "logs" / "api_calls.jsonl"
    sleeps = []
    ex, _ = _executor(
        [make_response(429, headers={"Retry-After": "0"}), make_response(200)],
        sleeps,
        trace_path=str(log_file),
    )
    ex.execute("get", "https://api.test/person/checkStatus", params={"ids": "7"}, headers={"Api-Key": "secret"})
    lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert [(r["attempt"], r["status_code"]) for r in lines] == [(1, 429), (2, 200)]
    assert lines[0]["method"] == "GET"
    assert lines[0]["run_id"] == "run-42"
    assert lines[0]["extras"] == {"params": {"ids": "7"}}
    assert "secret" not in log_file.read_text(encoding="utf-8")


def test_default_timeout_is_passed_through():
    sleeps = []
    ex, session = _executor([make_response(200)], sleeps, timeout=12)
    ex.execute("GET", "https://api.test/x")
    assert session.calls[0]["timeout"] == 12


def test_limiter_is_consulted_per_attempt():
    class CountingLimiter:
        def __init__(self):
            self.count = 0

        def acquire(self):
            self.count += 1
            return 0.0

    limiter = CountingLimiter()
    sleeps = []
    ex, _ = _executor([make_response(429), make_response(200)], sleeps, limiter=limiter)
    ex.execute("GET", "https://api.test/x")
    assert limiter.count == 2

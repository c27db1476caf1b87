from __future__ import annotations

from conftest import FakeSession, make_response
from services.request_executor import RateLimitedExecutor, RetryPolicy
from services.rocketreach_client import RocketReachClient


def _client(responses):
    session = FakeSession(responses)
    executor = RateLimitedExecutor(session=session, policy=RetryPolicy(sleep=lambda s: None))
    return RocketReachClient(executor, "secret-key", "https://api.test/v2/api/"), session


def test_lookup_sends_identity_params_and_key():
    client, session = _client([make_response(200, {"id": 123, "status": "searching"})])
    data = client.lookup({"name": "Jane Roe", "current_employer": "Acme Inc"})
    assert data == {"id": 123, "status": "searching"}
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://api.test/v2/api/person/lookup"
    assert call["params"] == {"name": "Jane Roe", "current_employer": "Acme Inc"}
    assert call["headers"]["Api-Key"] == "secret-key"


def test_check_status_joins_ids():
    client, session = _client([make_response(200, [{"id": 1}, {"id": 2}])])
    assert client.check_status(["1", 2]) == [{"id": 1}, {"id": 2}]
    assert session.calls[0]["params"] == {"ids": "1,2"}


def test_search_employees_posts_quoted_employer():
    client, session = _client([make_response(200, {"profiles": [{"id": 1, "name": "Jane"}]})])
    profiles = client.search_employees("Acme Inc", location="United States", start=11, page_size=10)
    assert profiles == [{"id": 1, "name": "Jane"}]
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://api.test/v2/api/search"
    assert call["json"] == {
        "query": {"current_employer": ['"Acme Inc"'], "location": ["United States"]},
        "start": 11,
        "page_size": 10,
    }


def test_search_without_profiles_returns_empty_list():
    client, _ = _client([make_response(200, {"pagination": {}})])
    assert client.search_employees("Acme") == []

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest


def pytest_configure():
    # Ensure project root is on sys.path for absolute imports like 'services.merge'
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    # Set test environment knobs
    os.environ.setdefault("RUN_ENV", "test")


@pytest.fixture(autouse=True)
def _fresh_settings():
    from config.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store(tmp_path):
    from db.connection import Store

    s = Store(str(tmp_path / "t.db")).open()
    try:
        yield s
    finally:
        s.close()


def make_response(status_code: int = 200, payload: Any = None, headers: Optional[Dict[str, str]] = None):
    """A real requests.Response carrying a JSON body."""
    import requests

    resp = requests.Response()
    resp.status_code = status_code
    resp._content = json.dumps(payload if payload is not None else {}).encode("utf-8")
    resp.headers.update(headers or {})
    resp.url = "https://api.test/endpoint"
    return resp


class FakeSession:
    """Stands in for requests.Session; replays queued responses or raises queued errors."""

    def __init__(self, responses: List[Any]):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakePeopleSearch:
    """People-search port double keyed by person name.

    ``plans`` maps a name to the sequence of status payloads its lookup goes
    through; the first payload answers the lookup itself. An Exception in the
    sequence is raised instead of returned.
    """

    def __init__(self, plans: Optional[Dict[str, List[Any]]] = None, search_results: Optional[List[Dict[str, Any]]] = None):
        self.plans = {k: list(v) for k, v in (plans or {}).items()}
        self.search_results = search_results or []
        self.lookups: List[Dict[str, str]] = []
        self.status_checks: List[str] = []
        self._by_id: Dict[str, List[Any]] = {}

    def _next(self, queue: List[Any]) -> Any:
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return item

    def lookup(self, params):
        self.lookups.append(dict(params))
        queue = self.plans.get(params.get("name"), [{"status": "failed"}])
        first = self._next(queue)
        if isinstance(first, dict) and first.get("id") is not None:
            self._by_id[str(first["id"])] = queue
        return first

    def check_status(self, ids):
        self.status_checks.append(ids)
        return self._next(self._by_id[str(ids)])

    def search_employees(self, company_name, location=None, start=1, page_size=10):
        return list(self.search_results)


def complete_profile(profile_id: Any, **overrides: Any) -> Dict[str, Any]:
    data = {
        "id": profile_id,
        "status": "complete",
        "current_title": "Engineer",
        "city": "Austin",
        "region": "Texas",
        "country": "United States",
        "country_code": "US",
        "education": [{"school": "UT Austin", "degree": "BS"}],
        "job_history": [
            {"company_name": "Acme Inc", "title": "Engineer", "start_date": "2020-01", "is_current": True},
            {"company_name": "Globex", "title": "Intern", "start_date": "2018-06", "end_date": "2019-08"},
        ],
        "skills": ["python", "sql"],
        "emails": [{"email": "jane@example.com", "type": "personal"}, {"email": "jane@acme.com", "type": "professional"}],
        "phones": [{"number": "+1 512 555 0100"}],
        "profile_pic": "https://img.example.com/jane.png",
    }
    data.update(overrides)
    return data

from __future__ import annotations

import json

import pytest
import requests

from conftest import FakePeopleSearch, complete_profile
from models import DegradeReason, EmployeeRecord, EnrichmentState
from services.enrichment_service import EnrichmentOrchestrator, find_status_entry
from services.request_executor import RetryExhausted


def _record(**overrides):
    data = {
        "id": 7,
        "name": "Jane Roe",
        "linkedin_url": "https://linkedin.com/in/janeroe",
        "current_company": "Acme Inc",
        "title": "Staff Engineer",
        "emails": "jane@old.example",
    }
    data.update(overrides)
    return EmployeeRecord(**data)


def _orchestrator(client, max_polls=60):
    sleeps = []
    orch = EnrichmentOrchestrator(client, poll_interval=5.0, max_polls=max_polls, sleep=sleeps.append, now=lambda: "2026-01-01T00:00:00+00:00")
    return orch, sleeps


def test_lookup_exception_degrades_with_original_record():
    client = FakePeopleSearch({"Jane Roe": [requests.ConnectionError("down")]})
    orch, _ = _orchestrator(client)
    record = _record(is_enriched=True)
    outcome = orch.enrich(record)
    assert outcome.state is EnrichmentState.DEGRADED
    assert outcome.reason is DegradeReason.TRANSPORT_ERROR
    assert outcome.retryable is True
    assert outcome.record.is_enriched is False
    assert outcome.record.model_dump(exclude={"is_enriched"}) == record.model_dump(exclude={"is_enriched"})


def test_retry_exhausted_degrades():
    client = FakePeopleSearch({"Jane Roe": [RetryExhausted("https://api.test", 5)]})
    orch, _ = _orchestrator(client)
    outcome = orch.enrich(_record())
    assert outcome.reason is DegradeReason.RETRY_EXHAUSTED
    assert outcome.retryable is True


def test_missing_profile_id_is_a_permanent_rejection():
    client = FakePeopleSearch({"Jane Roe": [{"status": "searching"}]})
    orch, sleeps = _orchestrator(client)
    outcome = orch.enrich(_record())
    assert outcome.reason is DegradeReason.NO_PROFILE_ID
    assert outcome.retryable is False
    assert "no profile id returned" in outcome.error.lower()
    assert client.status_checks == []
    assert sleeps == []


def test_lookup_query_drops_empty_fields():
    client = FakePeopleSearch({"Jane Roe": [complete_profile(1)]})
    orch, _ = _orchestrator(client)
    orch.enrich(_record(linkedin_url=None, current_employer="  "))
    assert client.lookups == [{"name": "Jane Roe", "current_employer": "Acme Inc"}]


def test_lookup_query_prefers_imported_company_over_service_employer():
    client = FakePeopleSearch({"Jane Roe": [complete_profile(1)], "Ann Lee": [complete_profile(2)]})
    orch, _ = _orchestrator(client)
    orch.enrich(_record(linkedin_url=None, current_employer="ACME Holdings"))
    orch.enrich(_record(name="Ann Lee", linkedin_url=None, current_company="", current_employer="Globex"))
    assert client.lookups == [
        {"name": "Jane Roe", "current_employer": "Acme Inc"},
        {"name": "Ann Lee", "current_employer": "Globex"},
    ]


def test_terminal_failed_status_degrades_permanently():
    client = FakePeopleSearch({"Jane Roe": [{"id": 11, "status": "progress"}, {"id": 11, "status": "failed"}]})
    orch, sleeps = _orchestrator(client)
    outcome = orch.enrich(_record())
    assert outcome.reason is DegradeReason.TERMINAL_FAILED
    assert outcome.retryable is False
    assert "failed" in outcome.error
    assert outcome.profile_id == "11"
    assert sleeps == [5.0]


def test_poll_bound_degrades_instead_of_looping():
    client = FakePeopleSearch({"Jane Roe": [{"id": 3, "status": "waiting"}, {"id": 3, "status": "waiting"}]})
    orch, sleeps = _orchestrator(client, max_polls=4)
    outcome = orch.enrich(_record())
    assert outcome.reason is DegradeReason.POLL_EXHAUSTED
    assert outcome.retryable is True
    assert len(client.status_checks) == 4
    assert sleeps == [5.0] * 4


def test_complete_on_lookup_skips_polling():
    client = FakePeopleSearch({"Jane Roe": [complete_profile(5)]})
    orch, sleeps = _orchestrator(client)
    outcome = orch.enrich(_record())
    assert outcome.enriched
    assert client.status_checks == []
    assert sleeps == []


def test_status_list_shape_locates_own_entry():
    other = complete_profile(99, status="failed")
    mine = complete_profile(12)
    client = FakePeopleSearch({"Jane Roe": [{"id": 12, "status": "progress"}, [other, mine]]})
    orch, _ = _orchestrator(client)
    outcome = orch.enrich(_record())
    assert outcome.enriched
    assert client.status_checks == ["12"]


def test_status_list_without_own_entry_keeps_polling():
    client = FakePeopleSearch({"Jane Roe": [{"id": 12, "status": "progress"}, [complete_profile(99)], complete_profile(12)]})
    orch, sleeps = _orchestrator(client)
    outcome = orch.enrich(_record())
    assert outcome.enriched
    assert len(sleeps) == 2


def test_malformed_status_payload_degrades():
    client = FakePeopleSearch({"Jane Roe": [{"id": 4, "status": "progress"}, "oops"]})
    orch, _ = _orchestrator(client)
    outcome = orch.enrich(_record())
    assert outcome.reason is DegradeReason.MALFORMED_RESPONSE


def test_complete_maps_profile_into_record():
    client = FakePeopleSearch({"Jane Roe": [{"id": 5, "status": "progress"}, complete_profile(5)]})
    orch, _ = _orchestrator(client)
    record = _record()
    outcome = orch.enrich(record)
    enriched = outcome.record
    assert outcome.state is EnrichmentState.COMPLETE
    assert outcome.outcome_tag == "enriched"
    assert enriched.is_enriched is True
    assert json.loads(enriched.skills) == ["python", "sql"]
    assert json.loads(enriched.education)[0]["school"] == "UT Austin"
    assert len(json.loads(enriched.job_history)) == 2
    assert enriched.personal_emails == "jane@example.com"
    assert enriched.professional_emails == "jane@acme.com"
    assert enriched.profile_picture_url == "https://img.example.com/jane.png"
    assert enriched.city == "Austin"
    assert enriched.country_code == "US"
    assert enriched.title == "Engineer"
    assert enriched.last_enriched_at == "2026-01-01T00:00:00+00:00"
    # Identity is untouched and the input object is not mutated
    assert enriched.id == 7 and enriched.linkedin_url == record.linkedin_url
    assert record.is_enriched is False and record.skills is None


def test_unexpected_error_still_returns_record():
    class Broken(FakePeopleSearch):
        def lookup(self, params):
            raise KeyError("surprise")

    orch, _ = _orchestrator(Broken())
    outcome = orch.enrich(_record())
    assert outcome.reason is DegradeReason.UNEXPECTED_ERROR
    assert outcome.record.name == "Jane Roe"


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"id": 1, "status": "complete"}, {"id": 1, "status": "complete"}),
        ({"status": "progress"}, {"status": "progress"}),
        ({"id": 2, "status": "complete"}, None),
        ([{"id": "1", "status": "x"}], {"id": "1", "status": "x"}),
        ([{"id": 2}], None),
    ],
)
def test_find_status_entry_shapes(payload, expected):
    assert find_status_entry(payload, "1") == expected

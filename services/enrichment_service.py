"""
Per-employee enrichment against the people-search service.

A lookup is started with the identity fields we know, then its status is
polled until the service reports ``complete`` or ``failed``:

    PENDING -> LOOKUP_SENT -> POLLING -> COMPLETE | FAILED | DEGRADED

``EnrichmentOrchestrator.enrich`` never raises. Every failure becomes a
DEGRADED outcome carrying the untouched input record (``is_enriched`` False)
and a reason tag, so callers can tell "retry later" from "rejected".
"""
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

import requests

from models import DegradeReason, EmployeeRecord, EnrichmentOutcome, EnrichmentState, LookupProfile
from ports.people_search import PeopleSearchPort
from services.mapping import lookup_query, profile_to_enrichment_fields
from services.request_executor import RetryExhausted


logger = logging.getLogger(__name__)

TERMINAL_STATUSES = ("complete", "failed")


class EnrichmentError(Exception):
    pass


class NoProfileIdError(EnrichmentError):
    pass


class TerminalStatusError(EnrichmentError):
    def __init__(self, name: Optional[str], status: str):
        super().__init__(f"Profile enrichment failed for {name}. Status: {status}")
        self.status = status


class PollExhaustedError(EnrichmentError):
    pass


class MalformedResponseError(EnrichmentError):
    pass


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def find_status_entry(payload: Any, profile_id: str) -> Optional[Dict[str, Any]]:
    """Pick our lookup out of a checkStatus payload (single object or list)."""
    if isinstance(payload, list):
        for item in payload:
            if isinstance(item, dict) and str(item.get("id")) == profile_id:
                return item
        return None
    if isinstance(payload, dict):
        if payload.get("id") is None or str(payload.get("id")) == profile_id:
            return payload
        return None
    raise MalformedResponseError(f"Unexpected status payload type: {type(payload).__name__}")


class EnrichmentOrchestrator:
    def __init__(
        self,
        client: PeopleSearchPort,
        poll_interval: float = 5.0,
        max_polls: int = 60,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], str] = _utc_now,
    ) -> None:
        self.client = client
        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self._sleep = sleep
        self._now = now

    def enrich(self, record: EmployeeRecord) -> EnrichmentOutcome:
        state = EnrichmentState.PENDING
        profile_id: Optional[str] = None
        try:
            state = EnrichmentState.LOOKUP_SENT
            profile = self._lookup(record)
            profile_id = profile.id
            state = EnrichmentState.POLLING
            profile = self._poll(record, profile)
        except RetryExhausted as e:
            return self._degrade(record, state, DegradeReason.RETRY_EXHAUSTED, e, profile_id)
        except NoProfileIdError as e:
            return self._degrade(record, state, DegradeReason.NO_PROFILE_ID, e, profile_id)
        except TerminalStatusError as e:
            return self._degrade(record, EnrichmentState.FAILED, DegradeReason.TERMINAL_FAILED, e, profile_id)
        except PollExhaustedError as e:
            return self._degrade(record, state, DegradeReason.POLL_EXHAUSTED, e, profile_id)
        except (MalformedResponseError, ValueError) as e:
            # ValueError covers JSON decoding and pydantic validation failures
            return self._degrade(record, state, DegradeReason.MALFORMED_RESPONSE, e, profile_id)
        except requests.RequestException as e:
            return self._degrade(record, state, DegradeReason.TRANSPORT_ERROR, e, profile_id)
        except Exception as e:
            logger.exception("Unexpected enrichment error for %s", record.name)
            return self._degrade(record, state, DegradeReason.UNEXPECTED_ERROR, e, profile_id)

        fields = profile_to_enrichment_fields(profile)
        fields["last_enriched_at"] = self._now()
        enriched = record.model_copy(update=fields)
        self._log_enriched(record, profile)
        return EnrichmentOutcome(record=enriched, state=EnrichmentState.COMPLETE, profile_id=profile_id)

    def _lookup(self, record: EmployeeRecord) -> LookupProfile:
        data = self.client.lookup(lookup_query(record))
        if not isinstance(data, dict):
            raise MalformedResponseError(f"Unexpected lookup payload type: {type(data).__name__}")
        profile = LookupProfile.model_validate(data)
        if not profile.id:
            raise NoProfileIdError(f"No profile ID returned for {record.name}.")
        return profile

    def _poll(self, record: EmployeeRecord, profile: LookupProfile) -> LookupProfile:
        profile_id = str(profile.id)
        status = (profile.status or "unknown").lower()
        polls = 0
        while status not in TERMINAL_STATUSES:
            if polls >= self.max_polls:
                raise PollExhaustedError(
                    f"Lookup {profile_id} for {record.name} still {status!r} after {polls} status checks"
                )
            self._sleep(self.poll_interval)
            polls += 1
            entry = find_status_entry(self.client.check_status(profile_id), profile_id)
            if entry is None:
                status = "unknown"
                continue
            profile = LookupProfile.model_validate(entry)
            status = (profile.status or "unknown").lower()
            logger.debug("Lookup %s status=%s", profile_id, status, extra={"step": "poll", "status": status, "attempt": polls})
        if status != "complete":
            raise TerminalStatusError(record.name, status)
        return profile

    def _degrade(
        self,
        record: EmployeeRecord,
        state: EnrichmentState,
        reason: DegradeReason,
        error: Exception,
        profile_id: Optional[str],
    ) -> EnrichmentOutcome:
        logger.warning(
            "Error fetching enriched data for %s: %s",
            record.name,
            error,
            extra={"step": state.value, "status": reason.value, "error": type(error).__name__},
        )
        return EnrichmentOutcome(
            record=record.model_copy(update={"is_enriched": False}),
            state=EnrichmentState.DEGRADED,
            reason=reason,
            error=str(error),
            profile_id=profile_id,
        )

    def _log_enriched(self, record: EmployeeRecord, profile: LookupProfile) -> None:
        schools = _names(profile.education, "school")
        companies = _names(profile.job_history, "company_name")
        skills = ", ".join(str(s) for s in profile.skills if s) or "N/A"
        logger.info(
            "%s enriched profile; Education: [%s] Work History: [%s] Skills: [%s]",
            record.name,
            schools,
            companies,
            skills,
            extra={"step": "complete", "status": "enriched"},
        )


def _names(items: List[Union[Dict[str, Any], Any]], key: str) -> str:
    return ", ".join(str(i.get(key)) for i in items if isinstance(i, dict) and i.get(key)) or "N/A"

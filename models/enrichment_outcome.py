from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from .employee_record import EmployeeRecord


class EnrichmentState(str, Enum):
    PENDING = "pending"
    LOOKUP_SENT = "lookup_sent"
    POLLING = "polling"
    COMPLETE = "complete"
    FAILED = "failed"
    DEGRADED = "degraded"


class DegradeReason(str, Enum):
    NO_PROFILE_ID = "no_profile_id"
    TERMINAL_FAILED = "terminal_failed"
    TRANSPORT_ERROR = "transport_error"
    RETRY_EXHAUSTED = "retry_exhausted"
    POLL_EXHAUSTED = "poll_exhausted"
    MALFORMED_RESPONSE = "malformed_response"
    UNEXPECTED_ERROR = "unexpected_error"


# The service looked and gave a definitive "no"; retrying will not help.
PERMANENT_REASONS = frozenset({DegradeReason.NO_PROFILE_ID, DegradeReason.TERMINAL_FAILED})


class EnrichmentOutcome(BaseModel):
    """Tagged result of one enrichment attempt; always carries a record."""

    record: EmployeeRecord
    state: EnrichmentState
    reason: DegradeReason | None = None
    error: str | None = None
    profile_id: str | None = None

    model_config = ConfigDict(extra="forbid")

    @property
    def enriched(self) -> bool:
        return self.state is EnrichmentState.COMPLETE

    @property
    def retryable(self) -> bool:
        """True when the record is degraded for a reason a later sweep may fix."""
        return self.reason is not None and self.reason not in PERMANENT_REASONS

    @property
    def outcome_tag(self) -> str:
        return "enriched" if self.enriched else (self.reason.value if self.reason else "unknown")

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from db.connection import Store
from models import EmployeeRecord, SweepProgress, SweepReport
from pipelines.runner import RunContext
from services.enrichment_service import EnrichmentOrchestrator
from services.identity_resolver import IdentityResolver
from utils.rate_limit import NoopLimiter, RateLimiter


logger = logging.getLogger(__name__)


class LoadUnenrichedEmployees:
    def __init__(self, store: Store, limit: Optional[int] = None, skip_rejected: bool = False) -> None:
        self.store = store
        self.limit = limit
        self.skip_rejected = skip_rejected

    def run(self, ctx: RunContext) -> RunContext:
        employees = self.store.employees.select_unenriched(limit=self.limit, skip_rejected=self.skip_rejected)
        ctx.employees = employees
        ctx.meta["unenriched_selected"] = len(employees)
        return ctx


class SweepEnrichEmployees:
    """Enrich the selected employees one at a time, committing after each.

    Only enrichment columns are written, so identity and contact fields stay
    as ingested. A degraded record gets its outcome tag and nothing else.
    Interrupting the sweep leaves every finished record committed.
    """

    def __init__(
        self,
        store: Store,
        orchestrator: EnrichmentOrchestrator,
        limiter: Optional[RateLimiter] = None,
        clock: Callable[[], float] = time.monotonic,
        on_progress: Optional[Callable[[SweepProgress], None]] = None,
    ) -> None:
        self.store = store
        self.orchestrator = orchestrator
        self.limiter = limiter or NoopLimiter()
        self.clock = clock
        self.on_progress = on_progress
        self.resolver = IdentityResolver(store)

    def run(self, ctx: RunContext) -> RunContext:
        records: List[EmployeeRecord] = list(ctx.employees or [])
        repo = self.store.employees
        total_in_db = repo.count_all()
        enriched_before = repo.count_enriched()
        selected = len(records)
        enriched = degraded = retryable = errors = 0
        started = self.clock()

        for processed, record in enumerate(records, start=1):
            # Courtesy pacing between records
            self.limiter.acquire()
            try:
                outcome = self.orchestrator.enrich(record)
                self._persist(record, outcome.record, outcome.enriched, outcome.outcome_tag)
                if outcome.enriched:
                    enriched += 1
                else:
                    degraded += 1
                    retryable += 1 if outcome.retryable else 0
            except Exception as e:
                # Store failure for this record; it stays unenriched for the next sweep
                errors += 1
                logger.error(
                    "Error saving enrichment for %s (id=%s): %s",
                    record.name,
                    record.id,
                    e,
                    extra={"step": "sweep", "status": "error", "error": type(e).__name__},
                )

            if self.on_progress:
                self.on_progress(SweepProgress(
                    total_in_db=total_in_db,
                    enriched_before_run=enriched_before,
                    enriched_this_run=enriched,
                    degraded_this_run=degraded + errors,
                    processed=processed,
                    remaining=selected - processed,
                    elapsed_seconds=max(0.0, self.clock() - started),
                ))

        report = SweepReport(
            selected=selected,
            enriched=enriched,
            degraded=degraded,
            retryable=retryable,
            errors=errors,
            elapsed_seconds=max(0.0, self.clock() - started),
        )
        logger.info(
            "Sweep finished: %d selected, %d enriched, %d degraded, %d errors",
            selected,
            enriched,
            degraded,
            errors,
            extra={"step": "sweep", "status": "done"},
        )
        ctx.meta["sweep_report"] = report
        return ctx

    def _persist(self, original: EmployeeRecord, result: EmployeeRecord, is_enriched: bool, outcome_tag: str) -> None:
        fields: Dict[str, Any] = {"enrichment_outcome": outcome_tag, "is_enriched": is_enriched}
        if is_enriched:
            fields.update({
                "education": result.education,
                "job_history": result.job_history,
                "skills": result.skills,
                "last_enriched_at": result.last_enriched_at,
            })
        employee_id = int(original.id)
        with self.store.transaction():
            self.store.employees.update_enrichment(employee_id, fields)
            if is_enriched:
                self.resolver.record_job_history(employee_id, result.job_history)

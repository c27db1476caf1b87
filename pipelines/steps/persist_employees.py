from __future__ import annotations

import logging
from typing import Callable, Optional

from db.connection import Store
from models import IngestIssue
from pipelines.runner import RunContext
from services.enrichment_service import EnrichmentOrchestrator
from services.identity_resolver import IdentityResolver


logger = logging.getLogger(__name__)


class PersistEmployees:
    """Resolve the employer, try enrichment, then upsert each employee.

    Enrichment failures degrade the record but never stop it from being
    saved. Any other per-record failure is recorded as an error and the
    batch moves on.
    """

    def __init__(
        self,
        store: Store,
        resolver: IdentityResolver,
        orchestrator: Optional[EnrichmentOrchestrator] = None,
        on_processed: Optional[Callable[[int], None]] = None,
    ) -> None:
        self.store = store
        self.resolver = resolver
        self.orchestrator = orchestrator
        self.on_processed = on_processed

    def run(self, ctx: RunContext) -> RunContext:
        saved = errors = enriched = 0
        processed = 0
        for source, record in ctx.employees:
            processed += 1
            try:
                company = self.resolver.resolve_company(
                    record.current_company,
                    website=record.current_employer_website,
                    domain=record.current_employer_domain,
                    linkedin_url=record.current_employer_linkedin_url,
                )
                if company is None:
                    ctx.issues.append(IngestIssue(kind="skip", name=record.name, source=source, reason="could not resolve company"))
                    continue
                record = record.model_copy(update={"company_id": company.id})

                is_enriched = False
                if self.orchestrator is not None:
                    outcome = self.orchestrator.enrich(record)
                    record = outcome.record.model_copy(update={"enrichment_outcome": outcome.outcome_tag})
                    is_enriched = outcome.enriched

                with self.store.transaction():
                    stored = self.resolver.upsert_employee(record)
                    if is_enriched and stored.id is not None:
                        self.resolver.record_job_history(stored.id, stored.job_history)
                saved += 1
                enriched += 1 if is_enriched else 0
                logger.debug(
                    "Saved employee %s (id=%s)",
                    stored.name,
                    stored.id,
                    extra={"step": "persist", "status": "enriched" if is_enriched else "saved"},
                )
            except Exception as e:
                errors += 1
                ctx.issues.append(IngestIssue(kind="error", name=record.name, source=source, reason=str(e)))
                logger.error(
                    "Error processing %s: %s",
                    record.name,
                    e,
                    extra={"step": "persist", "status": "error", "error": type(e).__name__},
                )
            finally:
                if self.on_processed:
                    self.on_processed(processed)

        # Includes rows dropped by validation upstream
        skipped = sum(1 for i in ctx.issues if i.kind == "skip")
        ctx.meta.update({
            "saved": saved,
            "skipped": skipped,
            "errors": errors,
            "enriched": enriched,
            "processed": processed,
        })
        return ctx

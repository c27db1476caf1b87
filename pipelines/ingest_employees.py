from __future__ import annotations

import logging
from typing import Callable, Optional

from db.connection import Store
from models import IngestReport
from pipelines.runner import Pipeline, RunContext
from pipelines.steps.load_rows import LoadSourceRows
from pipelines.steps.persist_employees import PersistEmployees
from pipelines.steps.validate_employees import ValidateEmployees
from ports.source import SourcePort
from services.enrichment_service import EnrichmentOrchestrator
from services.identity_resolver import IdentityResolver
from services.merge import MergePolicy
from services.reporting import write_issue_log


logger = logging.getLogger(__name__)


def ingest_source(
    store: Store,
    source: SourcePort,
    orchestrator: Optional[EnrichmentOrchestrator] = None,
    policy: MergePolicy = MergePolicy.FILL,
    issue_log_path: Optional[str] = None,
    on_processed: Optional[Callable[[int], None]] = None,
) -> IngestReport:
    """Stream a source into the store: validate, resolve, enrich, upsert.

    Pass ``orchestrator=None`` to import without calling the people-search
    service; those employees are left for a later sweep.
    """
    resolver = IdentityResolver(store, policy=policy)
    pipeline = Pipeline([
        LoadSourceRows(source),
        ValidateEmployees(),
        PersistEmployees(store, resolver, orchestrator, on_processed=on_processed),
    ])
    ctx = pipeline.run(RunContext())
    # Files the source could not read (known only once its rows are drained)
    source_issues = list(getattr(source, "issues", None) or [])
    report = IngestReport(
        saved=int(ctx.meta.get("saved") or 0),
        skipped=int(ctx.meta.get("skipped") or 0),
        errors=int(ctx.meta.get("errors") or 0) + sum(1 for i in source_issues if i.kind == "error"),
        enriched=int(ctx.meta.get("enriched") or 0),
        issues=list(ctx.issues) + source_issues,
    )
    write_issue_log(issue_log_path, report.issues)
    logger.info(
        "Import from %s: saved=%d skipped=%d errors=%d enriched=%d",
        ctx.source,
        report.saved,
        report.skipped,
        report.errors,
        report.enriched,
        extra={"step": "ingest", "status": "done"},
    )
    return report

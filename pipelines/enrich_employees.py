from __future__ import annotations

import time
from typing import Callable, Optional

from db.connection import Store
from models import SweepProgress, SweepReport
from pipelines.runner import Pipeline, RunContext
from pipelines.steps.enrich_employees import LoadUnenrichedEmployees, SweepEnrichEmployees
from services.enrichment_service import EnrichmentOrchestrator
from utils.rate_limit import RateLimiter


def run_sweep(
    store: Store,
    orchestrator: EnrichmentOrchestrator,
    limiter: Optional[RateLimiter] = None,
    clock: Callable[[], float] = time.monotonic,
    limit: Optional[int] = None,
    skip_rejected: bool = False,
    on_progress: Optional[Callable[[SweepProgress], None]] = None,
) -> SweepReport:
    """Enrich every employee not yet marked enriched, oldest first.

    Safe to rerun: finished records are committed one by one and drop out
    of the next selection.
    """
    pipeline = Pipeline([
        LoadUnenrichedEmployees(store, limit=limit, skip_rejected=skip_rejected),
        SweepEnrichEmployees(store, orchestrator, limiter=limiter, clock=clock, on_progress=on_progress),
    ])
    ctx = pipeline.run(RunContext())
    return ctx.meta["sweep_report"]

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from models import IngestIssue, IngestReport, SweepProgress, SweepReport


logger = logging.getLogger(__name__)


def format_eta(seconds: float) -> str:
    """Render seconds as ``Xh Ym Zs``."""
    total = max(0, int(round(seconds)))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}h {minutes}m {secs}s"


def format_progress(progress: SweepProgress) -> str:
    return (
        f"Total enriched in DB: {progress.total_enriched}, "
        f"Profiles left: {progress.left_in_db}, "
        f"Enriched this run: {progress.enriched_this_run}, "
        f"Estimated time left: {format_eta(progress.eta_seconds)}"
    )


def write_issue_log(path: Optional[str], issues: Iterable[IngestIssue]) -> int:
    """Append skips/errors as JSON lines; returns how many were written."""
    if not path:
        return 0
    items = list(issues)
    if not items:
        return 0
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    ts = datetime.now(timezone.utc).isoformat(timespec="seconds")
    run_id = os.getenv("RUN_ID")
    with log_path.open("a", encoding="utf-8") as f:
        for issue in items:
            rec = {"ts": ts, "run_id": run_id, **issue.model_dump()}
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")
    logger.debug("Wrote %d issues to %s", len(items), log_path)
    return len(items)


def print_ingest_summary(report: IngestReport, source: Optional[str] = None) -> None:
    print("\n" + "=" * 60)
    print("EMPLOYEE IMPORT - SUMMARY")
    print("=" * 60)
    if source:
        print(f"Source: {source}")
    print(f"Saved: {report.saved}")
    print(f"Enriched: {report.enriched}")
    print(f"Skipped: {report.skipped}")
    print(f"Errors: {report.errors}")
    if report.issues:
        print()
        print("Issues:")
        for issue in report.issues[:20]:
            where = f" [{issue.source}]" if issue.source else ""
            print(f"  {issue.kind}: {issue.name or 'N/A'}{where} - {issue.reason}")
        if len(report.issues) > 20:
            print(f"  ... and {len(report.issues) - 20} more")
    print("=" * 60)


def print_sweep_summary(report: SweepReport) -> None:
    print("\n" + "=" * 60)
    print("ENRICHMENT SWEEP - SUMMARY")
    print("=" * 60)
    print(f"Selected: {report.selected}")
    print(f"Enriched: {report.enriched}")
    print(f"Degraded: {report.degraded} (retryable: {report.retryable})")
    print(f"Errors: {report.errors}")
    print(f"Elapsed: {format_eta(report.elapsed_seconds)}")
    print("=" * 60)

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from models import EmployeeRecord, IngestIssue
from pipelines.runner import RunContext
from services.mapping import row_to_employee


logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("Name", "CurrentCompany")


def missing_required(row: Dict[str, Any]) -> List[str]:
    return [col for col in REQUIRED_COLUMNS if not str(row.get(col) or "").strip()]


class ValidateEmployees:
    """Drop rows without Name or CurrentCompany; normalize the rest.

    Lazy: rows are checked as the next step pulls them, and every dropped
    row lands in ``ctx.issues`` as a skip. Accepted rows flow on as
    ``(source, EmployeeRecord)`` pairs.
    """

    def run(self, ctx: RunContext) -> RunContext:
        ctx.employees = self._validate(ctx.rows, ctx.issues)
        return ctx

    def _validate(
        self, rows: Iterable[Dict[str, Any]], issues: List[IngestIssue]
    ) -> Iterator[Tuple[Optional[str], EmployeeRecord]]:
        for row in rows:
            source = row.get("_source")
            missing = missing_required(row)
            if missing:
                reason = "missing " + ", ".join(missing)
                name = str(row.get("Name") or "").strip() or None
                issues.append(IngestIssue(kind="skip", name=name, source=source, reason=reason))
                logger.info("Skipping row %s: %s", source or "?", reason, extra={"step": "validate", "status": "skipped"})
                continue
            yield source, row_to_employee(row)

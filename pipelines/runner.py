from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Protocol

from models import IngestIssue
from utils.logging_setup import init_logging


@dataclass
class RunContext:
    source: Optional[str] = None
    # Raw import rows; may be a generator, consumed once by the next step
    rows: Iterable[dict] = field(default_factory=list)
    # Normalized EmployeeRecord items; also may be lazy
    employees: Iterable[Any] = field(default_factory=list)
    issues: List[IngestIssue] = field(default_factory=list)
    meta: dict = field(default_factory=dict)


class Step(Protocol):
    def run(self, ctx: RunContext) -> RunContext:
        ...


class Pipeline:
    def __init__(self, steps: List[Step]):
        self.steps = steps

    def run(self, ctx: RunContext) -> RunContext:
        # Make logging idempotent for any direct runner use
        init_logging()
        for step in self.steps:
            ctx = step.run(ctx)
        return ctx

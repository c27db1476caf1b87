from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class IngestIssue(BaseModel):
    """A dropped (skip) or failed (error) import row."""

    kind: Literal["skip", "error"]
    name: str | None = None
    source: str | None = None
    reason: str

    model_config = ConfigDict(extra="forbid")


class IngestReport(BaseModel):
    saved: int = 0
    skipped: int = 0
    errors: int = 0
    enriched: int = 0
    issues: list[IngestIssue] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class SweepProgress(BaseModel):
    """Running counters of a sweep, emitted after every record."""

    total_in_db: int
    enriched_before_run: int
    enriched_this_run: int
    degraded_this_run: int
    processed: int
    remaining: int
    elapsed_seconds: float

    model_config = ConfigDict(extra="forbid")

    @property
    def total_enriched(self) -> int:
        return self.enriched_before_run + self.enriched_this_run

    @property
    def left_in_db(self) -> int:
        return self.total_in_db - self.total_enriched

    @property
    def eta_seconds(self) -> float:
        if self.processed <= 0:
            return 0.0
        return self.remaining * (self.elapsed_seconds / self.processed)


class SweepReport(BaseModel):
    selected: int = 0
    enriched: int = 0
    degraded: int = 0
    retryable: int = 0
    errors: int = 0
    elapsed_seconds: float = 0.0

    model_config = ConfigDict(extra="forbid")

from __future__ import annotations

from pipelines.runner import RunContext
from ports.source import SourcePort


class LoadSourceRows:
    """Attach a source's row stream to the context without reading it."""

    def __init__(self, source: SourcePort) -> None:
        self.source = source

    def run(self, ctx: RunContext) -> RunContext:
        ctx.source = getattr(self.source, "source_name", None)
        ctx.rows = self.source.rows()
        return ctx

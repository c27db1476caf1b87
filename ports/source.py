from __future__ import annotations

from typing import Any, Dict, Iterator, Literal, Protocol


EntityType = Literal["employee"]


class SourcePort(Protocol):
    source_name: str
    entity_type: EntityType

    def rows(self) -> Iterator[Dict[str, Any]]:
        """Yield raw rows in the import-file column shape (Name, LinkedInURL, ...)."""
        ...

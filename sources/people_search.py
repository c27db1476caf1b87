from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, Optional

from ports.people_search import PeopleSearchPort
from services.mapping import search_profile_to_row
from sources.registry import register


logger = logging.getLogger(__name__)


class PeopleSearchSource:
    """Current employees of one company, found through the people-search service.

    Profiles whose current employer does not match the company name
    (case-insensitively) are dropped; the rest come out in the import-row shape.
    """

    source_name = "people_search"
    entity_type = "employee"

    def __init__(
        self,
        client: PeopleSearchPort,
        company: str,
        location: Optional[str] = "United States",
        start: int = 1,
        page_size: int = 10,
    ) -> None:
        self.client = client
        self.company = (company or "").strip()
        self.location = location
        self.start = start
        self.page_size = page_size

    def rows(self) -> Iterator[Dict[str, Any]]:
        if not self.company:
            return
        profiles = self.client.search_employees(
            self.company,
            location=self.location,
            start=self.start,
            page_size=self.page_size,
        )
        wanted = self.company.lower()
        kept = 0
        for profile in profiles or []:
            if not isinstance(profile, dict):
                continue
            employer = str(profile.get("current_employer") or "").strip().lower()
            if employer != wanted:
                continue
            kept += 1
            row = search_profile_to_row(profile, self.company)
            row["_source"] = f"search:{self.company}:{profile.get('id')}"
            yield row
        logger.info(
            "Search for %r returned %d profiles, %d current employees",
            self.company,
            len(profiles or []),
            kept,
            extra={"step": "people_search"},
        )


register(PeopleSearchSource.source_name, PeopleSearchSource)

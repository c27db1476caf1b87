from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from db.connection import Store
from models import CompanyRecord, EmployeeRecord
from services.domain_utils import extract_apex_domain
from services.mapping import job_history_entries
from services.merge import MergePolicy, company_changes, merge_employee


logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    text = (value or "").strip()
    return text or None


class IdentityResolver:
    """Maps incoming identities onto canonical company and employee rows."""

    def __init__(self, store: Store, policy: MergePolicy = MergePolicy.FILL) -> None:
        self.store = store
        self.policy = policy

    def resolve_company(
        self,
        name: Optional[str],
        website: Optional[str] = None,
        domain: Optional[str] = None,
        linkedin_url: Optional[str] = None,
    ) -> Optional[CompanyRecord]:
        """Get-or-create a company by case-insensitive trimmed name.

        Returns None (and writes nothing) for an empty name. Differing,
        non-empty attributes of an existing company are updated in place.
        """
        normalized = _clean(name)
        if not normalized:
            logger.warning("Empty company name provided", extra={"step": "resolve_company", "status": "skipped"})
            return None
        website = _clean(website)
        domain = _clean(domain) or extract_apex_domain(website)
        linkedin_url = _clean(linkedin_url)

        repo = self.store.companies
        company = repo.find_by_name(normalized)
        if company is None:
            try:
                company_id = repo.insert(normalized, website, domain, linkedin_url)
            except sqlite3.IntegrityError:
                # Another writer created the same name between our read and insert
                logger.info(
                    "Conflict detected for company %r; fetching existing record",
                    normalized,
                    extra={"step": "resolve_company", "status": "conflict"},
                )
                existing = repo.find_by_name(normalized)
                if existing is None:
                    raise
                return existing
            created = CompanyRecord(id=company_id, name=normalized, website=website, domain=domain, linkedin_url=linkedin_url)
            logger.debug("New company created: %s", created.name, extra={"step": "resolve_company", "status": "created"})
            return created

        changes = company_changes(company, website, domain, linkedin_url)
        if not changes:
            return company
        repo.update_attributes(int(company.id), changes)
        logger.debug("Company information updated: %s %s", company.name, changes, extra={"step": "resolve_company", "status": "updated"})
        return company.model_copy(update=changes)

    def upsert_employee(self, record: EmployeeRecord) -> EmployeeRecord:
        """Insert or merge an employee keyed on profile URL, atomically.

        Returns the stored record (with its id).
        """
        with self.store.transaction():
            repo = self.store.employees
            existing = repo.get_by_linkedin_url(record.linkedin_url)
            merged = merge_employee(existing, record, self.policy)
            employee_id = repo.save(merged)
        return merged.model_copy(update={"id": employee_id})

    def record_job_history(self, employee_id: int, job_history: Any) -> int:
        """Rewrite an employee's job-history rows from enrichment data.

        Entries link to a company only when one already exists under that
        name; no companies are created here.
        """
        entries: List[Dict[str, Any]] = []
        companies = self.store.companies
        for entry in job_history_entries(job_history):
            company = companies.find_by_name(entry["company_name"])
            entries.append({**entry, "company_id": company.id if company else None})
        with self.store.transaction():
            return self.store.job_history.replace_for_employee(employee_id, entries)

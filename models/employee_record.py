from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class EmployeeRecord(BaseModel):
    """App/DB record shape: used for persistence and internal flows.

    ``education``, ``job_history`` and ``skills`` hold JSON-serialized lists.
    """

    id: int | None = None
    name: str | None = None
    linkedin_url: str | None = None
    title: str | None = None
    company_id: int | None = None
    current_company: str | None = None
    current_employer: str | None = None

    location: str | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = None
    country_code: str | None = None
    region_latitude: float | None = None
    region_longitude: float | None = None

    phone_numbers: str | None = None
    emails: str | None = None
    personal_emails: str | None = None
    professional_emails: str | None = None
    birth_year: int | None = None

    current_employer_website: str | None = None
    current_employer_domain: str | None = None
    current_employer_id: int | None = None
    current_employer_linkedin_url: str | None = None
    profile_picture_url: str | None = None

    status: str | None = None
    suppressed: bool = False
    category: str | None = None

    education: str | None = None
    job_history: str | None = None
    skills: str | None = None
    is_enriched: bool = False
    enrichment_outcome: str | None = None
    last_enriched_at: str | None = None

    model_config = ConfigDict(extra="ignore")

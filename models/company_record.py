from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class CompanyRecord(BaseModel):
    """App/DB record shape: used for persistence and internal flows."""

    id: int | None = None
    name: str
    website: str | None = None
    domain: str | None = None
    linkedin_url: str | None = None

    model_config = ConfigDict(extra="ignore")

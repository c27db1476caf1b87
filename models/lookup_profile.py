from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.number_parsing import parse_float, parse_int


class LookupProfile(BaseModel):
    """People-search service profile, as returned by lookup/checkStatus.

    Only ``id`` and ``status`` are present while a lookup is in progress; the
    remaining keys arrive once the status is ``complete``.
    """

    id: str | None = None
    status: str | None = None
    name: str | None = None
    linkedin_url: str | None = None
    location: str | None = None
    current_title: str | None = None
    current_employer: str | None = None
    current_employer_website: str | None = None
    current_employer_domain: str | None = None
    current_employer_id: int | None = None
    current_employer_linkedin_url: str | None = None
    profile_pic: str | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = None
    country_code: str | None = None
    region_latitude: float | None = None
    region_longitude: float | None = None
    birth_year: int | None = None
    suppressed: bool | None = None

    education: list[Any] = Field(default_factory=list)
    job_history: list[Any] = Field(default_factory=list)
    skills: list[Any] = Field(default_factory=list)
    emails: list[Any] = Field(default_factory=list)
    phones: list[Any] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        # Service ids are numeric; compare them as text everywhere
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("current_employer_id", "birth_year", mode="before")
    @classmethod
    def _lenient_int(cls, value: Any) -> Any:
        return parse_int(value)

    @field_validator("region_latitude", "region_longitude", mode="before")
    @classmethod
    def _lenient_float(cls, value: Any) -> Any:
        return parse_float(value)

    @field_validator("education", "job_history", "skills", "emails", "phones", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

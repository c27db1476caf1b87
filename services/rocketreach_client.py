"""
RocketReach people-search API client: person lookup, status polling and
company employee search. All calls go through the RateLimitedExecutor.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from services.request_executor import RateLimitedExecutor


StatusPayload = Union[Dict[str, Any], List[Dict[str, Any]]]


class RocketReachClient:
    DEFAULT_BASE_URL = "https://api.rocketreach.co/v2/api"

    def __init__(self, executor: RateLimitedExecutor, api_key: Optional[str], base_url: Optional[str] = None):
        self.executor = executor
        self.api_key = api_key
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")

    def _headers(self) -> Dict[str, str]:
        return {
            "Api-Key": self.api_key or "",
            "Content-Type": "application/json",
        }

    def lookup(self, params: Dict[str, str]) -> Dict[str, Any]:
        """Start a person lookup; the response carries an ``id`` and initial ``status``."""
        response = self.executor.execute(
            "GET",
            f"{self.base_url}/person/lookup",
            params=params,
            headers=self._headers(),
        )
        return response.json()

    def check_status(self, ids: Union[str, List[str]]) -> StatusPayload:
        """Status of one or more lookups; a single object or a list of objects."""
        joined = ids if isinstance(ids, str) else ",".join(str(i) for i in ids)
        response = self.executor.execute(
            "GET",
            f"{self.base_url}/person/checkStatus",
            params={"ids": joined},
            headers=self._headers(),
        )
        return response.json()

    def search_employees(self, company_name: str, location: Optional[str] = None, start: int = 1, page_size: int = 10) -> List[Dict[str, Any]]:
        """Profiles the service lists under ``company_name`` as current employer."""
        query: Dict[str, Any] = {"current_employer": [f'"{company_name}"']}
        if location:
            query["location"] = [location]
        response = self.executor.execute(
            "POST",
            f"{self.base_url}/search",
            json={"query": query, "start": start, "page_size": page_size},
            headers=self._headers(),
        )
        data = response.json()
        profiles = data.get("profiles") if isinstance(data, dict) else None
        return list(profiles or [])

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


def _as_bool(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    # Core/runtime
    db_path: str
    run_env: str
    log_level: str

    # People-search service
    rocketreach_api_key: str | None
    rocketreach_base_url: str
    http_timeout_seconds: int

    # Rate limiting / retry
    max_retries: int
    default_retry_after_seconds: float

    # Enrichment polling
    poll_interval_seconds: float
    poll_max_attempts: int

    # Sweep pacing between records
    courtesy_delay_seconds: float

    # Ingestion
    merge_policy: str  # fill | replace
    search_location: str
    search_page_size: int

    # Logging/tracing
    api_trace: bool = False
    api_log_path: str = "logs/api_calls.jsonl"
    issue_log_path: str | None = None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    merge_policy = os.getenv("MERGE_POLICY", "fill").strip().lower()
    if merge_policy not in ("fill", "replace"):
        raise RuntimeError(f"MERGE_POLICY must be 'fill' or 'replace', got {merge_policy!r}")
    return Settings(
        db_path=os.getenv("DB_PATH", "employees.db"),
        run_env=os.getenv("RUN_ENV", "local"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        rocketreach_api_key=os.getenv("ROCKETREACH_API_KEY"),
        rocketreach_base_url=os.getenv("ROCKETREACH_BASE_URL", "https://api.rocketreach.co/v2/api"),
        http_timeout_seconds=int(os.getenv("HTTP_TIMEOUT_SECONDS", "30")),
        max_retries=int(os.getenv("MAX_RETRIES", "5")),
        default_retry_after_seconds=float(os.getenv("DEFAULT_RETRY_AFTER_SECONDS", "60")),
        poll_interval_seconds=float(os.getenv("POLL_INTERVAL_SECONDS", "5")),
        poll_max_attempts=int(os.getenv("POLL_MAX_ATTEMPTS", "60")),
        courtesy_delay_seconds=float(os.getenv("COURTESY_DELAY_SECONDS", "2")),
        merge_policy=merge_policy,
        search_location=os.getenv("SEARCH_LOCATION", "United States"),
        search_page_size=int(os.getenv("SEARCH_PAGE_SIZE", "10")),
        api_trace=_as_bool(os.getenv("API_TRACE")),
        api_log_path=os.getenv("API_LOG_PATH", "logs/api_calls.jsonl"),
        issue_log_path=os.getenv("ISSUE_LOG_PATH") or None,
    )

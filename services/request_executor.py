from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests
from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt

from utils.api_logger import log_call
from utils.rate_limit import NoopLimiter, RateLimiter


logger = logging.getLogger(__name__)


class RetryExhausted(Exception):
    """Raised when a request is still rate-limited after the last allowed attempt."""

    def __init__(self, url: str, attempts: int):
        super().__init__(f"Exceeded maximum retries ({attempts}) for {url}")
        self.url = url
        self.attempts = attempts


class _RateLimited(Exception):
    def __init__(self, response: requests.Response, attempt: int):
        super().__init__(f"HTTP 429 on attempt {attempt}")
        self.response = response
        self.attempt = attempt


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 5
    default_wait_seconds: float = 60.0
    sleep: Callable[[float], None] = time.sleep

    def wait_for(self, response: requests.Response) -> float:
        """Seconds to wait before retrying a 429 response."""
        raw = response.headers.get("Retry-After")
        if raw is None:
            return self.default_wait_seconds
        try:
            seconds = float(str(raw).strip())
        except ValueError:
            return self.default_wait_seconds
        if not math.isfinite(seconds) or seconds < 0:
            return self.default_wait_seconds
        return seconds


class RateLimitedExecutor:
    """Single choke point for outbound calls to the people-search service.

    HTTP 429 responses are retried after the server-supplied ``Retry-After``
    delay, up to ``policy.max_attempts`` attempts in total. Every other failure
    (connection errors, non-429 error statuses) propagates on the first attempt.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        policy: Optional[RetryPolicy] = None,
        limiter: Optional[RateLimiter] = None,
        timeout: Optional[float] = 30.0,
        trace_path: Optional[str] = None,
    ) -> None:
        self.session = session or requests.Session()
        self.policy = policy or RetryPolicy()
        self.limiter = limiter or NoopLimiter()
        self.timeout = timeout
        self.trace_path = trace_path

    def execute(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", self.timeout)
        retrying = Retrying(
            stop=stop_after_attempt(self.policy.max_attempts),
            wait=self._wait,
            retry=retry_if_exception_type(_RateLimited),
            sleep=self.policy.sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    response = self._send(method, url, attempt.retry_state.attempt_number, kwargs)
        except _RateLimited as e:
            logger.error(
                "Rate limit persisted after %d attempts for %s",
                e.attempt,
                url,
                extra={"step": "execute", "status": "retry_exhausted", "attempt": e.attempt},
            )
            raise RetryExhausted(url, e.attempt) from None
        return response

    def _send(self, method: str, url: str, attempt: int, kwargs: Dict[str, Any]) -> requests.Response:
        self.limiter.acquire()
        t0 = time.monotonic()
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            self._trace(method, url, attempt, None, t0, "error", str(e), kwargs)
            raise
        self._trace(method, url, attempt, response.status_code, t0, "ok" if response.status_code < 400 else "error", None, kwargs)
        if response.status_code == 429:
            raise _RateLimited(response, attempt)
        response.raise_for_status()
        return response

    def _wait(self, retry_state: RetryCallState) -> float:
        return self.policy.wait_for(retry_state.outcome.exception().response)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        logger.warning(
            "Rate limit reached. Waiting for %s seconds before retrying...",
            retry_state.next_action.sleep,
            extra={"step": "execute", "status": "rate_limited", "attempt": retry_state.attempt_number},
        )

    def _trace(
        self,
        method: str,
        url: str,
        attempt: int,
        status_code: Optional[int],
        t0: float,
        status: str,
        error: Optional[str],
        kwargs: Dict[str, Any],
    ) -> None:
        # Credentials travel in headers, which are never traced
        request = {k: kwargs[k] for k in ("params", "json") if kwargs.get(k)}
        log_call(
            self.trace_path,
            caller="request_executor.execute",
            method=method,
            url=url,
            attempt=attempt,
            status_code=status_code,
            duration_ms=int((time.monotonic() - t0) * 1000),
            status=status,
            error=error,
            extras=request or None,
        )

from __future__ import annotations

import logging
import os
import random
import threading
import time
from dataclasses import dataclass

import httpx

from bettertodo.core.config import env_float, env_int

from .errors import BetterTodoHTTPNetworkError, BetterTodoHTTPStatusError

logger = logging.getLogger("bettertodo.http")

# 529 is Anthropic's "overloaded".
RETRY_STATUSES = frozenset({408, 429, 500, 502, 503, 504, 529})
TRANSIENT_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout, httpx.ReadTimeout, httpx.RemoteProtocolError)

_ERROR_BODY_LIMIT = 2000

_shared: httpx.Client | None = None
_shared_guard = threading.Lock()


@dataclass(frozen=True)
class RetryPolicy:
    retries: int = 2
    backoff_base_s: float = 0.5
    backoff_max_s: float = 8.0

    @classmethod
    def from_env(cls, retries: int | None = None) -> RetryPolicy:
        return cls(
            retries=max(0, env_int("BETTERTODO_HTTP_RETRIES", cls.retries) if retries is None else retries),
            backoff_base_s=max(0.01, env_float("BETTERTODO_HTTP_BACKOFF_BASE_S", cls.backoff_base_s)),
            backoff_max_s=max(0.01, env_float("BETTERTODO_HTTP_BACKOFF_MAX_S", cls.backoff_max_s)),
        )

    def delay_s(self, attempt: int, retry_after_s: float | None = None) -> float:
        if retry_after_s is not None:
            return min(self.backoff_max_s, retry_after_s)
        return min(self.backoff_max_s, self.backoff_base_s * (2**attempt)) * (0.5 + random.random())


def http_timeout(total_s: float | None = None) -> httpx.Timeout:
    total = total_s if total_s is not None else env_float("BETTERTODO_HTTP_TIMEOUT_S", 30.0)
    total = max(0.1, total)
    connect = max(0.1, env_float("BETTERTODO_HTTP_CONNECT_TIMEOUT_S", 5.0))
    return httpx.Timeout(total, connect=min(connect, total))


def get_http_client() -> httpx.Client:
    """Process-wide client so provider calls share one connection pool."""
    global _shared
    with _shared_guard:
        if _shared is None:
            _shared = httpx.Client(
                timeout=http_timeout(),
                headers={"User-Agent": os.getenv("BETTERTODO_HTTP_USER_AGENT", "bettertodo-agent/0.1")},
            )
        return _shared


def _retry_after_s(response: httpx.Response) -> float | None:
    raw = response.headers.get("retry-after")
    if raw is None:
        return None
    try:
        return max(0.0, float(raw))
    except ValueError:
        return None


def request_with_retry(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    json: object | None = None,
    timeout_override: float | None = None,
    retries: int | None = None,
) -> httpx.Response:
    """Send one request, retrying transport failures and retryable statuses.

    Non-2xx responses that are not retried (or that exhaust the retries) raise
    ``BetterTodoHTTPStatusError`` carrying the truncated response body.
    """
    policy = RetryPolicy.from_env(retries)
    client = get_http_client()
    timeout = http_timeout(timeout_override) if timeout_override is not None else None

    attempt = 0
    while True:
        attempt += 1
        try:
            response = client.request(method, url, headers=headers, json=json, timeout=timeout)
        except TRANSIENT_ERRORS as exc:
            if attempt > policy.retries:
                raise BetterTodoHTTPNetworkError(
                    f"{method} {url} failed after {attempt} attempts: {exc.__class__.__name__}",
                    attempts=attempt,
                ) from exc
            logger.info("http_retry", extra={"extra_fields": {"attempt": attempt, "error": exc.__class__.__name__}})
            time.sleep(policy.delay_s(attempt - 1))
            continue
        except httpx.HTTPError as exc:
            raise BetterTodoHTTPNetworkError(f"{method} {url} failed: {exc.__class__.__name__}", attempts=attempt) from exc

        if response.is_success:
            return response

        status = response.status_code
        if status in RETRY_STATUSES and attempt <= policy.retries:
            logger.info("http_retry", extra={"extra_fields": {"attempt": attempt, "status": status}})
            time.sleep(policy.delay_s(attempt - 1, _retry_after_s(response)))
            continue

        raise BetterTodoHTTPStatusError(
            f"{method} {url} returned {status}",
            status_code=status,
            body=response.text[:_ERROR_BODY_LIMIT],
            attempts=attempt,
        )

"""HTTP-layer helpers for the Zendesk client: request ids and opt-in retries.

The sync engine never retries. ZendeskClient calls retry_with_backoff only
when ZENDESK_RETRIES is above zero.
"""

from __future__ import annotations

import time
import uuid
from typing import Optional

# Zendesk answers 429 when the account's per-minute API quota is spent and
# 502/503/504 during maintenance or load shedding.
RETRYABLE_STATUSES = frozenset({429, 502, 503, 504})


def generate_request_id() -> str:
    """Short hex id sent as X-Request-ID, so connector logs can be matched to Zendesk support requests."""
    return uuid.uuid4().hex[:12]


def retry_with_backoff(
    fn,
    *,
    retries: int = 2,
    backoff_base: float = 0.5,
    retryable_statuses: frozenset = RETRYABLE_STATUSES,
):
    """Call fn() up to ``retries + 1`` times while Zendesk is throttling or unavailable.

    fn returns an httpx.Response. A 429 waits for the Retry-After seconds
    Zendesk advertises; other retryable statuses and transport exceptions
    back off exponentially from backoff_base. When attempts run out, the last
    response is returned (so the caller maps it to an error) or the last
    exception is re-raised.
    """
    last_exc: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            resp = fn()
            if resp.status_code not in retryable_statuses:
                return resp
            if attempt < retries:
                time.sleep(_retry_delay(resp, backoff_base, attempt))
                continue
            return resp
        except Exception as e:
            last_exc = e
            if attempt < retries:
                time.sleep(backoff_base * (2 ** attempt))
                continue
            raise
    raise last_exc  # type: ignore[misc]


def _retry_delay(resp, backoff_base: float, attempt: int) -> float:
    """Seconds to wait: Retry-After when present and numeric, else exponential."""
    retry_after = resp.headers.get("retry-after")
    if retry_after:
        try:
            return max(float(retry_after), 0.0)
        except ValueError:
            pass
    return backoff_base * (2 ** attempt)

from __future__ import annotations

import logging
import random
import time
from typing import Any

import httpx
from supabase import Client, create_client

from meetmatch.config import require_supabase_credentials

logger = logging.getLogger(__name__)

TRANSIENT_HTTP_ERRORS = (
    httpx.RemoteProtocolError,
    httpx.ReadTimeout,
    httpx.ConnectError,
    httpx.WriteError,
)


def get_supabase_client() -> Client:
    url, key = require_supabase_credentials()
    return create_client(url, key)


def execute_with_retry(rb: Any, *, tries: int = 6, base_sleep: float = 0.5) -> Any:
    """
    Supabase/PostgREST reads can occasionally drop HTTP/2 connections under load.
    Wrap .execute() with retry + exponential backoff. Reads only: mutations
    are not replayed.
    """
    last: Exception | None = None
    for attempt in range(tries):
        try:
            return rb.execute()
        except TRANSIENT_HTTP_ERRORS as e:
            last = e
            sleep = base_sleep * (2 ** attempt) + random.random() * 0.25
            logger.warning(
                "[supabase] transient http error: %s attempt=%d/%d sleep=%.2fs",
                type(e).__name__, attempt + 1, tries, sleep,
            )
            time.sleep(sleep)
    raise last  # type: ignore[misc]

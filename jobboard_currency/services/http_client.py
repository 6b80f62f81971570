from __future__ import annotations

"""Lightweight HTTP client util with retry and deadline.

Uses stdlib urllib; the currency service only ever needs GET + JSON. Focus:
GET JSON with limited retries, plus a helper that races any call against a
timer so a slow provider cannot hold up the caller past a fixed deadline.
"""
import http.client
import json
import logging
import time
import urllib.request
import urllib.error
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Any, Callable, Dict, Optional, TypeVar

logger = logging.getLogger("jobboard_currency.http")

T = TypeVar("T")

# Signature the services accept for dependency injection (tests pass fakes).
JsonFetcher = Callable[..., Dict[str, Any]]


class HttpError(Exception):
    pass


class DeadlineExceeded(HttpError):
    pass


def get_json(
    url: str, *, timeout: float = 5.0, retries: int = 2, backoff: float = 0.5
) -> Dict[str, Any]:
    last_err: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            req = urllib.request.Request(url, headers={"Accept": "application/json"})
            with urllib.request.urlopen(req, timeout=timeout) as resp:  # nosec B310
                if resp.status >= 400:
                    raise HttpError(f"HTTP {resp.status} for {url}")
                data = resp.read()
                payload = json.loads(data.decode("utf-8"))
                if not isinstance(payload, dict):
                    raise HttpError(f"Expected JSON object from {url}")
                return payload
        except (
            urllib.error.URLError,
            http.client.HTTPException,
            OSError,
            HttpError,
            ValueError,
        ) as e:  # OSError covers resets and TimeoutError; ValueError for JSON decode
            last_err = e
            if attempt == retries:
                break
            logger.debug("retrying %s after error: %s", url, e)
            time.sleep(backoff * (2**attempt))
    raise HttpError(f"Failed to fetch JSON from {url}: {last_err}")


def call_with_deadline(fn: Callable[[], T], deadline: float) -> T:
    """Run ``fn`` in a worker thread and give up after ``deadline`` seconds.

    The worker is not interrupted when the timer wins; its eventual result is
    discarded. Exceptions raised by ``fn`` propagate unchanged.
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="deadline")
    try:
        future = executor.submit(fn)
        try:
            return future.result(timeout=deadline)
        except FutureTimeout as e:
            raise DeadlineExceeded(f"call exceeded {deadline:.1f}s deadline") from e
    finally:
        executor.shutdown(wait=False)

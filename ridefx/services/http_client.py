from __future__ import annotations

"""Lightweight HTTP client util with retry.

Uses stdlib urllib; the only remote call is the rate refresh job, which wants a
GET returning JSON with a couple of retries and exponential backoff. Client
errors (4xx other than 429) are not retried: an unsupported currency pair will
not start working a second later.
"""
import json
import logging
import time
import urllib.error
import urllib.request
from typing import Any, Dict, Optional

logger = logging.getLogger("ridefx.http")

USER_AGENT = "ridefx-rate-refresh/1.0"
RETRYABLE_STATUS = (429, 500, 502, 503, 504)


class HttpError(Exception):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


def _is_retryable(err: Exception) -> bool:
    status = getattr(err, "status", None)
    if isinstance(err, urllib.error.HTTPError):
        status = err.code
    return status is None or status in RETRYABLE_STATUS


def get_json(
    url: str, *, timeout: float = 5.0, retries: int = 2, backoff: float = 0.5
) -> Dict[str, Any]:
    request = urllib.request.Request(
        url, headers={"Accept": "application/json", "User-Agent": USER_AGENT}
    )
    last_err: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            with urllib.request.urlopen(request, timeout=timeout) as resp:  # nosec B310
                if resp.status >= 400:
                    raise HttpError(f"HTTP {resp.status} for {url}", status=resp.status)
                return json.loads(resp.read().decode("utf-8"))
        except (urllib.error.URLError, TimeoutError, HttpError, ValueError) as e:
            # ValueError covers undecodable JSON bodies
            last_err = e
            logger.debug("GET %s failed (attempt %d): %s", url, attempt + 1, e)
            if attempt == retries or not _is_retryable(e):
                break
            time.sleep(backoff * (2**attempt))
    raise HttpError(
        f"Failed to fetch JSON from {url}: {last_err}", status=getattr(last_err, "status", None)
    )

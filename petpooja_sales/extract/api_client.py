"""
API data extraction module.

Calls the PetPooja sales endpoint with bounded retries and exponential
backoff, returning the raw response body.
"""

import time
from typing import Callable, Optional
from urllib.parse import urlsplit

import requests

from petpooja_sales.utils.logging_utils import log_progress, log_error, log_warning

SECTION = "API Extraction"

# Malformed request URLs; retrying cannot fix them
INVALID_URL_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
)


def _safe_target(url: str) -> str:
    """Host and path of ``url``; the query string carries credentials."""
    parts = urlsplit(url)
    if not parts.scheme and not parts.netloc:
        return parts.path
    return f"{parts.scheme}://{parts.netloc}{parts.path}"


def is_retriable_status(status_code: int) -> bool:
    """
    Decide whether a non-2xx status is worth another attempt.

    Client errors (4xx) are final, except 429 Too Many Requests.
    Everything else (5xx, 429, unexpected 1xx/3xx) is retried.
    """
    if 400 <= status_code < 500:
        return status_code == 429
    return True


def fetch_with_retry(
    url: str,
    max_retries: int = 3,
    initial_delay_ms: int = 1000,
    *,
    timeout: float = 60,
    session: Optional[requests.Session] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[str]:
    """
    GET ``url`` and return the response body, retrying transient failures.

    Args:
        url: Fully built request URL.
        max_retries: Additional attempts after the first one.
        initial_delay_ms: Wait before the second attempt; doubles after
            every retriable failure.
        timeout: Per-attempt timeout in seconds.
        session: Optional requests session, one is created (and closed)
            when omitted.
        sleep: Function used to wait between attempts, in seconds.

    Returns:
        The body text on a 2xx response, or None if the status was a
        non-retriable client error or every attempt failed.

    Raises:
        ValueError: If the URL itself is malformed (missing or unsupported
            scheme, invalid host).
    """
    own_session = session is None
    if own_session:
        session = requests.Session()

    target = _safe_target(url)
    delay_ms = initial_delay_ms
    attempt = 0

    try:
        while attempt <= max_retries:
            attempt += 1
            try:
                log_progress(SECTION, f"Fetching {target} (attempt {attempt})...")
                response = session.get(url, timeout=timeout)

                if 200 <= response.status_code < 300:
                    log_progress(
                        SECTION,
                        f"HTTP {response.status_code} received "
                        f"({len(response.content)} bytes)",
                    )
                    return response.text

                log_warning(
                    SECTION, f"HTTP {response.status_code} - {response.reason}"
                )
                if not is_retriable_status(response.status_code):
                    log_error(SECTION, "Client error, will not retry")
                    return None

            except INVALID_URL_ERRORS as e:
                # the driver message embeds the full URL, credentials included
                message = f"Invalid request URL {target}: {type(e).__name__}"
                log_error(SECTION, message)
                raise ValueError(message) from None
            except requests.exceptions.Timeout as e:
                log_warning(SECTION, f"Request timed out: {e}")
            except requests.exceptions.RequestException as e:
                log_warning(SECTION, f"Request failed: {type(e).__name__}: {e}")

            if attempt > max_retries:
                break

            log_progress(SECTION, f"Waiting {delay_ms}ms before next attempt...")
            sleep(delay_ms / 1000)
            delay_ms *= 2
    finally:
        if own_session:
            session.close()

    log_error(SECTION, f"Max retries reached after {attempt} attempt(s), giving up")
    return None

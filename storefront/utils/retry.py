import time
import logging
from typing import Any, Callable, Dict, Optional

import requests

from storefront.exceptions import (
    MalformedResponse,
    NetworkError,
    RequestCancelled,
    ServerRejected,
    ServerUnavailable,
    StorefrontError,
)

logger = logging.getLogger(__name__)

# Backend cold starts answer 503, rate limiting answers 429
TRANSIENT_STATUSES = {429, 503}


def backoff_delay(attempt: int, base: float = 1.0, cap: float = 8.0) -> float:
    """Delay before retry number ``attempt`` (1-based): 1s, 2s, 4s, 8s, 8s..."""
    return min(base * (2 ** (attempt - 1)), cap)


def error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        message = body.get("error") or body.get("message")
        if message:
            return str(message)

    return f"Error {response.status_code}"


def send_once(
    http: requests.Session,
    method: str,
    url: str,
    *,
    timeout: float,
    **kwargs: Any,
) -> Any:
    """One request, no retry. Maps every failure onto the error taxonomy."""
    try:
        response = http.request(method, url, timeout=timeout, **kwargs)
    except requests.Timeout as e:
        raise NetworkError(
            "The request took too long. Please try again.",
            details={"url": url},
        ) from e
    except requests.ConnectionError as e:
        raise NetworkError(
            "Could not reach the server. Please try again.",
            details={"url": url},
        ) from e
    except requests.RequestException as e:
        # Broken chunked bodies, redirect loops, bad URLs...
        raise NetworkError(
            "The connection failed. Please try again.",
            details={"url": url, "reason": type(e).__name__},
        ) from e

    if response.status_code in TRANSIENT_STATUSES:
        raise ServerUnavailable(
            f"Server unavailable ({response.status_code})",
            upstream_status=response.status_code,
        )

    if response.status_code >= 400:
        raise ServerRejected(error_message(response), upstream_status=response.status_code)

    try:
        return response.json()
    except ValueError as e:
        raise MalformedResponse(f"Non-JSON response from {url}") from e


def fetch_with_retry(
    http: requests.Session,
    url: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    timeout: float = 10,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 8.0,
    is_cancelled: Callable[[], bool] = lambda: False,
    sleep: Callable[[float], None] = time.sleep,
) -> Any:
    """
    GET with exponential backoff, for read paths only.

    Retries transient failures (timeouts, connection errors, 503/429) up to
    ``max_retries`` times; any other 4xx/5xx is returned to the caller
    immediately.
    """
    attempt = 1

    while True:
        if is_cancelled():
            raise RequestCancelled(f"Superseded request to {url}")

        try:
            data = send_once(http, "GET", url, params=params, timeout=timeout)
            if attempt > 1:
                logger.info(f"Loaded {url} after {attempt} attempts")
            return data

        except StorefrontError as e:
            if not e.retryable or attempt > max_retries:
                if e.retryable:
                    logger.error(f"Giving up on {url} after {attempt} attempts: {e.message}")
                raise

            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.warning(
                f"Attempt {attempt}/{max_retries + 1} for {url} failed ({e.message}), "
                f"retrying in {delay}s"
            )
            sleep(delay)
            attempt += 1

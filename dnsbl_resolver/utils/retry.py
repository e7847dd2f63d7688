"""Retry utilities with exponential backoff."""

import logging
import time
from functools import wraps
from typing import Any, Callable, TypeVar

import requests


logger = logging.getLogger(__name__)

# Type variable for generic function signatures
F = TypeVar("F", bound=Callable[..., Any])

RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)


def exponential_backoff_retry(
    max_retries: int = 3,
    delays: list[int] | None = None,
) -> Callable[[F], F]:
    """Decorator for exponential backoff retry (2s, 4s, 8s).

    Retries on HTTP rate limits (429), transient server errors (5xx) and
    connection failures while fetching blocklist feeds.

    Args:
        max_retries: Maximum number of retry attempts (default: 3).
        delays: List of delay seconds between retries (default: [2, 4, 8]).

    Returns:
        Callable: Decorated function with retry logic.

    Examples:
        >>> @exponential_backoff_retry()
        ... def fetch_feed():
        ...     # HTTP call here
        ...     pass
    """
    if delays is None:
        delays = [2, 4, 8]

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except (requests.HTTPError, requests.ConnectionError) as e:
                    status_code = (
                        e.response.status_code if e.response is not None else None
                    )
                    retryable = isinstance(e, requests.ConnectionError) or (
                        status_code in RETRYABLE_STATUS_CODES
                    )
                    if retryable and attempt < max_retries:
                        delay = delays[min(attempt, len(delays) - 1)]
                        logger.warning(
                            f"HTTP error {status_code or type(e).__name__}, retrying in {delay}s..."
                        )
                        time.sleep(delay)
                        continue
                    # Non-retryable error or retries exhausted
                    raise
            raise Exception(
                f"Max retries ({max_retries}) exhausted for {func.__name__}"
            )

        return wrapper  # type: ignore

    return decorator

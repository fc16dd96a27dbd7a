"""
Retry policy for broker REST calls.

OANDA answers bursts with HTTP 429 and practice hosts drop connections now
and then. Both are retried with exponentially growing, jittered delays;
every other error surfaces immediately.
"""

import random
import time
from functools import wraps
from typing import Any, Callable, Tuple, Type, TypeVar

import requests
from loguru import logger


F = TypeVar('F', bound=Callable[..., Any])


class RateLimitError(Exception):
    """Raised by adapters when the broker answers HTTP 429."""


RETRYABLE_ERRORS: Tuple[Type[BaseException], ...] = (
    RateLimitError,
    requests.ConnectionError,
    requests.Timeout,
)


def backoff_delay(attempt: int, backoff: float, jitter_pct: float) -> float:
    """Delay before retry ``attempt`` (1-based): backoff * 2^(attempt-1) plus jitter."""
    base = backoff * (2 ** (attempt - 1))
    return base + base * jitter_pct * random.random()


def retry_on_rate_limit(
    max_retries: int = 3,
    backoff: float = 1.0,
    jitter_pct: float = 0.25,
) -> Callable[[F], F]:
    """
    Retry a broker call on rate limits and transient network failures.

    Args:
        max_retries: Total attempts before the last error is re-raised
        backoff: First delay in seconds
        jitter_pct: Extra random delay as a fraction of the base delay

    Usage:
        @retry_on_rate_limit(max_retries=5, backoff=0.5)
        def fetch_candles(self, pair, granularity, count):
            ...
    """
    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempt = 0
            while True:
                attempt += 1
                try:
                    return func(*args, **kwargs)
                except RETRYABLE_ERRORS as e:
                    kind = "Rate limit" if isinstance(e, RateLimitError) else "Network error"
                    if attempt >= max_retries:
                        logger.error(f"{kind} on {func.__name__}, giving up after {attempt} attempts: {e}")
                        raise

                    delay = backoff_delay(attempt, backoff, jitter_pct)
                    logger.warning(
                        f"⏳ {kind} on {func.__name__} ({e}), "
                        f"retry {attempt}/{max_retries - 1} in {delay:.2f}s"
                    )
                    time.sleep(delay)

        return wrapper  # type: ignore
    return decorator

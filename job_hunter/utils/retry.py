"""
Retry decorator with exponential backoff for outbound requests.
"""

from typing import Any, Callable, Optional
import functools
import logging
import random
import time

logger = logging.getLogger(__name__)


def retry(
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    retryable: tuple[type[BaseException], ...] = (Exception,),
    sleep: Optional[Callable[[float], None]] = None,
) -> Callable:
    """Decorator: retries the wrapped function with exponential backoff."""
    pause = sleep or time.sleep
    attempts = max(1, max_attempts)

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(1, attempts + 1):
                try:
                    return fn(*args, **kwargs)
                except retryable as exc:
                    if attempt >= attempts:
                        logger.warning(
                            "%s failed after %d attempts: %s",
                            fn.__qualname__,
                            attempts,
                            exc,
                        )
                        raise
                    delay = min(base_delay * (backoff_factor ** (attempt - 1)), max_delay)
                    if jitter:
                        delay *= 0.5 + random.random()
                    logger.debug(
                        "%s attempt %d/%d failed (%s), retrying in %.1fs",
                        fn.__qualname__,
                        attempt,
                        attempts,
                        exc,
                        delay,
                    )
                    pause(delay)

        return wrapper

    return decorator

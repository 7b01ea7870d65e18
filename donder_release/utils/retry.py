"""Retry decorator for transient release host failures.

This module provides a decorator that retries async calls failing with a
TransientNetworkError, with exponential backoff and a bounded attempt count.
Any other error is propagated immediately.
"""

import asyncio
import functools
from typing import Any, Callable, TypeVar

import structlog

from donder_release.exceptions import TransientNetworkError

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def retry_on_transient_error(
    max_attempts: int = 5,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
) -> Callable[[F], F]:
    """Decorator for retrying async functions when they encounter transient failures.

    Args:
        max_attempts: Maximum number of attempts, including the first one (default: 5)
        initial_delay: Delay in seconds before the first retry (default: 1.0)
        max_delay: Maximum delay in seconds between retries (default: 30.0)
        exponential_base: Base for exponential backoff calculation (default: 2.0)

    Returns:
        Decorated function with retry logic

    Example:
        @retry_on_transient_error(max_attempts=3)
        async def get_release(tag_name: str):
            return await host.get_release_by_tag(tag_name)
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = initial_delay

            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except TransientNetworkError as e:
                    if attempt == max_attempts:
                        logger.error(
                            "Max attempts reached for transient error",
                            function=func.__name__,
                            attempt=attempt,
                            status_code=e.status_code,
                            error=str(e),
                        )
                        raise

                    wait_time = min(delay, max_delay)
                    logger.warning(
                        f"Transient error, retrying in {wait_time} seconds",
                        function=func.__name__,
                        attempt=attempt,
                        max_attempts=max_attempts,
                        wait_time=wait_time,
                        status_code=e.status_code,
                    )

                    await asyncio.sleep(wait_time)

                    # Exponential backoff for next attempt
                    delay = min(delay * exponential_base, max_delay)

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            """Sync version of the retry wrapper - raises error since we only support async."""
            raise RuntimeError(
                f"Function {func.__name__} decorated with @retry_on_transient_error must be async. This decorator only supports async functions."
            )

        # Return the appropriate wrapper based on whether the function is async
        if asyncio.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        else:
            return sync_wrapper  # type: ignore

    return decorator

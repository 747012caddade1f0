"""Retry utility with exponential backoff for translator backend calls."""

import asyncio
import functools
import logging
import random
from typing import Any, Callable, TypeVar

import httpx
import openai

logger = logging.getLogger(__name__)

T = TypeVar("T")

# HTTP status codes worth retrying
TRANSIENT_STATUS_CODES = {408, 409, 429, 500, 502, 503, 504}


def calculate_exponential_backoff_delay(
    initial_delay: float,
    attempt: int,
    exponential_base: int,
    max_delay: float,
) -> float:
    """
    Calculate delay with exponential backoff and jitter.

    Args:
        initial_delay: Initial delay in seconds
        attempt: Current attempt number (0-indexed)
        exponential_base: Base for exponential calculation (e.g., 2)
        max_delay: Maximum delay in seconds

    Returns:
        Delay in seconds with jitter applied
    """
    delay = min(initial_delay * (exponential_base**attempt), max_delay)

    # Add jitter (0-50% of delay) to prevent thundering herd
    return delay + random.uniform(0, delay * 0.5)


def is_transient_error(error: BaseException) -> bool:
    """
    Determine if a backend error is transient (should retry) or permanent.

    Checks both the error itself and its __cause__ chain.

    Args:
        error: Exception to check

    Returns:
        True if error is transient and should be retried, False otherwise
    """
    # OpenAI SDK errors (also used for DeepSeek's compatible endpoint)
    if isinstance(
        error,
        (openai.APIConnectionError, openai.RateLimitError, openai.InternalServerError),
    ):
        return True
    if isinstance(error, openai.APIStatusError):
        return error.status_code in TRANSIENT_STATUS_CODES

    # httpx errors raised by the Gemini backend
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in TRANSIENT_STATUS_CODES
    if isinstance(error, httpx.TransportError):
        return True

    if isinstance(error, (ConnectionError, TimeoutError, asyncio.TimeoutError)):
        return True

    if error.__cause__ is not None:
        return is_transient_error(error.__cause__)

    # Default: treat unknown errors as permanent to avoid pointless retries
    return False


def retry_with_exponential_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    exponential_base: int = 2,
    max_delay: float = 60.0,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator that adds retry logic with exponential backoff to async functions.

    Only retries on transient errors (connection issues, rate limits, 5xx).
    Permanent errors fail immediately.

    Args:
        max_retries: Maximum number of retry attempts (after initial try)
        initial_delay: Initial delay in seconds before first retry
        exponential_base: Base for exponential backoff calculation
        max_delay: Maximum delay in seconds between retries

    Returns:
        Decorated function with retry logic

    Example:
        @retry_with_exponential_backoff(max_retries=3, initial_delay=1)
        async def call_backend():
            return await client.post(...)
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if not is_transient_error(e):
                        raise

                    if attempt >= max_retries:
                        if max_retries:
                            logger.error(
                                f"❌ Max retries ({max_retries}) exceeded for {func.__name__}. Last error: {e}"
                            )
                        raise

                    delay = calculate_exponential_backoff_delay(
                        initial_delay=initial_delay,
                        attempt=attempt,
                        exponential_base=exponential_base,
                        max_delay=max_delay,
                    )
                    logger.warning(
                        f"⚠️  Transient error in {func.__name__}: {e}. "
                        f"Retry {attempt + 1}/{max_retries} in {delay:.2f}s..."
                    )
                    await asyncio.sleep(delay)

        return wrapper

    return decorator

"""
Retry Policy

One retry-with-exponential-backoff policy shared by every external call
(Claude and the search API):
- Bounded attempts (max_retries + 1)
- Delays 1s, 2s, 4s... capped at max_delay
- Retries rate limits (429), server errors (5xx) and network failures
- Everything else (401, 403, 400, other 4xx, programming errors) fails on
  the first attempt
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

import httpx

logger = logging.getLogger(__name__)

# Transport-level failures that never reached a response
NETWORK_ERRORS = (httpx.TransportError, ConnectionError, asyncio.TimeoutError)


def default_is_retryable_status(status_code: Optional[int]) -> bool:
    """429 and 5xx are transient."""
    if status_code is None:
        return False
    return status_code == 429 or 500 <= status_code < 600


def is_network_error(error: BaseException) -> bool:
    """
    True for connection failures and timeouts.

    API wrappers mark the errors they raise for a failed connection with
    `network = True`.
    """
    return isinstance(error, NETWORK_ERRORS) or getattr(error, "network", False) is True


def get_status_code(error: BaseException) -> Optional[int]:
    """Status code carried by an exception, if any."""
    status = getattr(error, "status_code", None)
    if status is None:
        response = getattr(error, "response", None)
        status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


@dataclass
class RetryPolicy:
    """Configuration and execution of retry behavior."""
    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    exponential_base: float = 2.0
    is_retryable_status: Callable[[Optional[int]], bool] = default_is_retryable_status
    retry_on: tuple = (Exception,)
    sleep: Callable[[float], Awaitable[Any]] = field(default=asyncio.sleep, repr=False)

    def delay_for(self, attempt: int) -> float:
        """Backoff delay after the given (0-based) failed attempt."""
        return min(self.initial_delay * (self.exponential_base ** attempt), self.max_delay)

    def should_retry(self, error: BaseException) -> bool:
        if not isinstance(error, self.retry_on):
            return False
        if is_network_error(error):
            return True
        return self.is_retryable_status(get_status_code(error))

    async def run(self, fn: Callable[[], Awaitable[Any]], label: str = "request") -> Any:
        """
        Call fn until it succeeds or the policy gives up.

        Args:
            fn: Zero-argument coroutine factory, called once per attempt
            label: Name used in log messages

        Returns:
            The first successful result

        Raises:
            The last error once retries are exhausted, or immediately for
            non-retryable errors.
        """
        total_attempts = self.max_retries + 1

        for attempt in range(total_attempts):
            try:
                return await fn()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                if not self.should_retry(e):
                    logger.error(f"{label} failed with non-retryable error: {e}")
                    raise

                if attempt >= self.max_retries:
                    logger.error(f"{label} failed after {total_attempts} attempts: {e}")
                    raise

                delay = self.delay_for(attempt)
                logger.warning(
                    f"{label} failed (attempt {attempt + 1}/{total_attempts}): {e}. "
                    f"Retrying in {delay}s..."
                )
                await self.sleep(delay)

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

import httpx
import openai

from core.exceptions import PipelineError
from core.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES = {429, 502, 503}
NETWORK_ERRORS = (httpx.TransportError, openai.APIConnectionError, ConnectionError)


def _status_code(error: BaseException) -> Optional[int]:
    status = getattr(error, "status_code", None)
    if status is None:
        response = getattr(error, "response", None)
        status = getattr(response, "status_code", None)
    return status


def should_retry(error: BaseException) -> bool:
    """Network failures, rate-limit messages and 429/502/503 answers are transient"""
    if isinstance(error, NETWORK_ERRORS):
        return True
    if "rate limit" in str(error).lower():
        return True
    return _status_code(error) in RETRYABLE_STATUS_CODES


class RetryExecutor:
    def __init__(self, rate_limiter: RateLimiter, max_retries: int = 3,
                 base_delay: float = 1.0, max_delay: float = 5.0,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self.rate_limiter = rate_limiter
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.sleep = sleep

    def _backoff(self, attempt: int) -> float:
        return min(self.max_delay, self.base_delay * (2 ** attempt))

    async def with_retry(self, operation: Callable[[], Awaitable[T]], key: str) -> T:
        """Run `operation` under the rate limit for `key` with capped exponential backoff

        A rate-limit rejection waits and retries the same attempt. Transient
        errors consume an attempt; anything else is raised immediately.
        """
        last_error: Optional[BaseException] = None
        attempt = 0

        while attempt < self.max_retries:
            if not self.rate_limiter.check_rate_limit(key):
                wait_time = self._backoff(attempt)
                logger.info(f"Rate limited on {key}, waiting {wait_time:.1f}s")
                await self.sleep(wait_time)
                continue

            try:
                return await operation()
            except Exception as e:
                last_error = e
                logger.warning(f"Operation on {key} failed, attempt {attempt + 1}/{self.max_retries}: {str(e)}")

                if not should_retry(e):
                    raise

                await self.sleep(self._backoff(attempt))
                attempt += 1

        if last_error is None:
            raise PipelineError(f"Operation on {key} failed after {self.max_retries} retries")
        raise last_error

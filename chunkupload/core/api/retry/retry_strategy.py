"""Retry strategies using Strategy Pattern."""
import asyncio
from abc import ABC, abstractmethod
from typing import Optional

from ..config import RetryConfig
from ...exceptions import ErrorKind


class RetryStrategy(ABC):
    """Abstract retry strategy."""
    
    @abstractmethod
    def should_retry(self, kind: ErrorKind, retry_count: int) -> bool:
        """Determines if request should be retried."""
        pass
    
    @abstractmethod
    def delay(self, retry_count: int) -> float:
        """Seconds to wait before the given retry."""
        pass
    
    async def wait_async(self, retry_count: int):
        """Waits before retry (async)."""
        await asyncio.sleep(self.delay(retry_count))


class NoRetryStrategy(RetryStrategy):
    """Every failure is final."""
    
    def should_retry(self, kind: ErrorKind, retry_count: int) -> bool:
        return False
    
    def delay(self, retry_count: int) -> float:
        return 0.0


class ExponentialBackoffStrategy(RetryStrategy):
    """Exponential backoff on transient errors (rate limit, 5xx, network)."""
    
    def __init__(self, config: Optional[RetryConfig] = None):
        self._config = config or RetryConfig()
    
    def should_retry(self, kind: ErrorKind, retry_count: int) -> bool:
        """Retries kinds listed in RetryConfig.retry_on, up to max_retries."""
        return kind in self._config.retry_on and retry_count < self._config.max_retries
    
    def delay(self, retry_count: int) -> float:
        """Waits with exponential backoff."""
        return self._config.calculate_delay(retry_count)

"""Retry strategies using Strategy Pattern."""
from .retry_strategy import RetryStrategy, ExponentialBackoffStrategy, NoRetryStrategy

__all__ = [
    'RetryStrategy',
    'ExponentialBackoffStrategy',
    'NoRetryStrategy',
]

"""Upload API module: transport, configuration, retries and error classification."""
from .config import APIConfig, ProxyConfig, SSLConfig, TimeoutConfig, RetryConfig
from .errors import ErrorClassifier, classify
from .retry import RetryStrategy, ExponentialBackoffStrategy, NoRetryStrategy
from .async_client import UploadApiClient

__all__ = [
    # Client
    'UploadApiClient',
    
    # Configuration
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'RetryConfig',
    
    # Retry
    'RetryStrategy',
    'ExponentialBackoffStrategy',
    'NoRetryStrategy',
    
    # Errors
    'ErrorClassifier',
    'classify',
]

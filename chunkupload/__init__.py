"""
chunkupload - Async Python client for chunked file uploads.

Usage:
    >>> from chunkupload import UploadClient
    >>>
    >>> async with UploadClient("https://files.example.com/") as client:
    ...     result = await client.upload("video.mp4")
    ...     print(result.upload_id)
"""
from .client import UploadClient

# Configuration
from .core.api import (
    APIConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    RetryConfig,
    UploadApiClient,
    ErrorClassifier
)

# Upload pipeline
from .core.upload import (
    UploadCoordinator,
    UploadState,
    UploadSession,
    ProgressSnapshot,
    UploadResult,
    QuotaInfo,
    LocalFileHandle,
    BytesFileHandle
)
from .core.hashing import ChecksumEngine
from .core.cancellation import CancellationToken
from .core.logging import setup_logging
from .core.exceptions import (
    ErrorKind,
    UploadException,
    ReadError,
    ApiRequestError,
    NegotiationError,
    TransmitError,
    CompletionError,
    UploadCancelledError
)

__version__ = '1.0.0'

__all__ = [
    'UploadClient',
    'UploadApiClient',
    'UploadCoordinator',
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'RetryConfig',
    'ErrorClassifier',
    'UploadState',
    'UploadSession',
    'ProgressSnapshot',
    'UploadResult',
    'QuotaInfo',
    'LocalFileHandle',
    'BytesFileHandle',
    'ChecksumEngine',
    'CancellationToken',
    'ErrorKind',
    'UploadException',
    'ReadError',
    'ApiRequestError',
    'NegotiationError',
    'TransmitError',
    'CompletionError',
    'UploadCancelledError',
    'setup_logging',
]

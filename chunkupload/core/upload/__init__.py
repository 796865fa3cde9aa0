"""
Upload module for chunked, resumable-session file uploads.

The coordinator drives the state machine; services, strategies and models
are injected so each piece can be replaced or tested on its own.
"""
from .coordinator import UploadCoordinator
from .models import (
    UploadState,
    UploadSession,
    ChunkInfo,
    ChunkAck,
    ProgressSnapshot,
    UploadResult,
    QuotaInfo
)
from .protocols import FileHandleProtocol, ProgressSink, ErrorSink
from .services import (
    FileValidator,
    LocalFileHandle,
    BytesFileHandle,
    SessionNegotiator,
    ChunkTransmitter
)
from .strategies import FixedSizeChunkingStrategy

__all__ = [
    # Main classes
    'UploadCoordinator',
    'SessionNegotiator',
    'ChunkTransmitter',

    # Models
    'UploadState',
    'UploadSession',
    'ChunkInfo',
    'ChunkAck',
    'ProgressSnapshot',
    'UploadResult',
    'QuotaInfo',

    # Files
    'FileValidator',
    'LocalFileHandle',
    'BytesFileHandle',

    # Protocols
    'FileHandleProtocol',
    'ProgressSink',
    'ErrorSink',

    # Strategies
    'FixedSizeChunkingStrategy',
]

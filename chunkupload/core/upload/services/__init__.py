"""Upload services module."""
from .file_service import FileValidator, LocalFileHandle, BytesFileHandle
from .session_service import SessionNegotiator
from .chunk_service import ChunkTransmitter

__all__ = [
    'FileValidator',
    'LocalFileHandle',
    'BytesFileHandle',
    'SessionNegotiator',
    'ChunkTransmitter',
]

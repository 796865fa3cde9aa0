"""Upload models."""
from .upload_models import (
    UploadState,
    ChunkInfo,
    ChunkAck,
    UploadSession,
    ProgressSnapshot,
    UploadResult,
    QuotaInfo
)

__all__ = [
    'UploadState',
    'ChunkInfo',
    'ChunkAck',
    'UploadSession',
    'ProgressSnapshot',
    'UploadResult',
    'QuotaInfo'
]

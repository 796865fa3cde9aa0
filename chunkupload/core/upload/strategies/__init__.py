"""Upload strategies module."""
from .chunking import FixedSizeChunkingStrategy

__all__ = [
    'FixedSizeChunkingStrategy',
]

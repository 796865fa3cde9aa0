"""
Hashing utilities.
"""
from .crc32 import Crc32, ChecksumEngine, checksum_bytes, crc32_table

__all__ = [
    'Crc32',
    'ChecksumEngine',
    'checksum_bytes',
    'crc32_table',
]

"""
Streaming CRC-32 checksum.

Reflected CRC-32 (polynomial 0xEDB88320), table driven, folded into a
32-bit register block by block so files of any size can be checksummed
without holding them in memory.
"""
import asyncio
import functools
import logging
import time
from typing import AsyncIterable, Iterable, Optional, Tuple, Union

from ..cancellation import CancellationToken
from ..exceptions import ReadError

logger = logging.getLogger('chunkupload.hashing')

POLYNOMIAL = 0xEDB88320
INITIAL_REGISTER = 0xFFFFFFFF
FINAL_XOR = 0xFFFFFFFF


@functools.lru_cache(maxsize=None)
def crc32_table() -> Tuple[int, ...]:
    """
    Build the 256-entry lookup table.
    
    Computed on first use and shared by every checksum in the process.
    """
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            c = (c >> 1) ^ POLYNOMIAL if c & 1 else c >> 1
        table.append(c)
    return tuple(table)


class Crc32:
    """
    Incremental CRC-32 accumulator.
    
    Example:
        >>> crc = Crc32()
        >>> crc.update(b"1234").update(b"56789").hexdigest()
        'cbf43926'
    """
    
    def __init__(self):
        self._table = crc32_table()
        self._register = INITIAL_REGISTER
        self.bytes_processed = 0
    
    def update(self, data: bytes) -> 'Crc32':
        """Fold a block of bytes into the register."""
        register = self._register
        table = self._table
        for byte in data:
            register = (register >> 8) ^ table[(register ^ byte) & 0xFF]
        self._register = register
        self.bytes_processed += len(data)
        return self
    
    @property
    def value(self) -> int:
        """Returns the checksum of everything folded in so far."""
        return self._register ^ FINAL_XOR
    
    def hexdigest(self) -> str:
        """Returns the checksum as 8 lowercase hex digits."""
        return f"{self.value:08x}"


def checksum_bytes(data: bytes) -> str:
    """CRC-32 of an in-memory byte string, as 8 hex digits."""
    return Crc32().update(data).hexdigest()


class ChecksumEngine:
    """
    Computes the CRC-32 of a sequential byte stream.
    
    Blocks are consumed in whatever size the reader delivers and discarded
    immediately after being folded into the register.
    """
    
    ALGORITHM = 'crc32'
    
    async def compute(
        self,
        stream: Union[AsyncIterable[bytes], Iterable[bytes]],
        cancel_token: Optional[CancellationToken] = None
    ) -> str:
        """
        Consume the stream once and return its checksum.
        
        Args:
            stream: Async (or plain) iterable yielding byte blocks
            cancel_token: Optional token checked before every block
            
        Returns:
            8-digit lowercase hex checksum
            
        Raises:
            ReadError: If the stream fails mid-read
            UploadCancelledError: If the token is set
        """
        crc = Crc32()
        start = time.time()
        
        try:
            if hasattr(stream, '__aiter__'):
                async for block in stream:
                    if cancel_token:
                        cancel_token.raise_if_cancelled()
                    crc.update(block)
                    # Let other tasks run between blocks
                    await asyncio.sleep(0)
            else:
                for block in stream:
                    if cancel_token:
                        cancel_token.raise_if_cancelled()
                    crc.update(block)
                    await asyncio.sleep(0)
        except OSError as e:
            logger.error(f"Checksum aborted after {crc.bytes_processed} bytes: {e}")
            raise ReadError(detail=str(e)) from e
        finally:
            # Release the source (e.g. an open file) when iteration stops early
            if hasattr(stream, 'aclose'):
                await stream.aclose()
            elif hasattr(stream, 'close'):
                stream.close()
        
        if cancel_token:
            cancel_token.raise_if_cancelled()
        
        elapsed = time.time() - start
        size_mb = crc.bytes_processed / (1024 * 1024)
        logger.debug(f"CRC-32 of {size_mb:.2f} MB computed in {elapsed:.2f}s: {crc.hexdigest()}")
        return crc.hexdigest()

"""
Upload sources: local files and in-memory buffers.

Both expose the same handle surface (name, size, stream, read_range) so the
coordinator can checksum the whole source once and then read it back chunk
by chunk.
"""
from pathlib import Path
from typing import AsyncIterator, Optional, Tuple, Union

import aiofiles

from ...exceptions import ReadError
from ...logging import get_logger


class FileValidator:
    """Pre-flight checks on an upload source."""

    def validate(self, file_path: Union[str, Path]) -> Tuple[Path, int]:
        """
        Resolve a local path to a regular file and its size.

        Raises:
            FileNotFoundError: If nothing exists at the path
            ValueError: If the path names a directory or other non-file
        """
        path = Path(file_path)
        try:
            info = path.stat()
        except FileNotFoundError:
            raise FileNotFoundError(f"No such file: {path}") from None
        if not path.is_file():
            raise ValueError(f"Not a regular file: {path}")
        return path, info.st_size

    def validate_size(self, file_size: int, max_size: Optional[int] = None) -> None:
        """
        Reject sizes the server cannot accept.

        A zero-byte source has no chunks to send, so it is refused before any
        request is made. `max_size` is an optional client-side ceiling.

        Raises:
            ValueError: If the size is zero or above max_size
        """
        if file_size <= 0:
            raise ValueError("Cannot upload empty file")
        if max_size is not None and file_size > max_size:
            raise ValueError(f"{file_size} bytes is over the {max_size} byte limit")


class LocalFileHandle:
    """
    On-disk file exposed as an upload file handle.

    Uses aiofiles for non-blocking I/O. open_file() keeps one handle open
    for range reads during chunk transmission to avoid repeated open/close.
    """

    DEFAULT_BLOCK_SIZE = 64 * 1024

    def __init__(
        self,
        file_path: Union[str, Path],
        name: Optional[str] = None,
        block_size: int = DEFAULT_BLOCK_SIZE
    ):
        """
        Initialize file handle.

        Args:
            file_path: Path to the file
            name: Name declared to the server (defaults to the file name)
            block_size: Block size used by stream()

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If path is not a regular file
        """
        self._path, self._size = FileValidator().validate(file_path)
        self._name = name or self._path.name
        self._block_size = block_size
        self._file_handle = None
        self._logger = get_logger('upload.file')

    @property
    def path(self) -> Path:
        return self._path

    @property
    def name(self) -> str:
        return self._name

    @property
    def size(self) -> int:
        return self._size

    async def open_file(self) -> None:
        """Open the file for range reads. Call close_file() when done."""
        if self._file_handle is not None:
            return
        try:
            self._file_handle = await aiofiles.open(self._path, 'rb')
        except OSError as e:
            self._logger.error(f"Failed to open {self._path}: {e}")
            raise ReadError(detail=str(e)) from e

    async def close_file(self) -> None:
        """Close the currently open file."""
        if self._file_handle is not None:
            await self._file_handle.close()
            self._file_handle = None

    async def stream(self) -> AsyncIterator[bytes]:
        """
        Read the whole file sequentially in blocks.

        Raises:
            ReadError: If the file cannot be read
        """
        try:
            async with aiofiles.open(self._path, 'rb') as f:
                while True:
                    block = await f.read(self._block_size)
                    if not block:
                        break
                    yield block
        except OSError as e:
            self._logger.error(f"Failed to stream {self._path}: {e}")
            raise ReadError(detail=str(e)) from e

    async def read_range(self, start: int, end: int) -> bytes:
        """
        Read bytes [start, end).

        Reuses the handle from open_file() when there is one, otherwise
        opens and closes the file for this read.

        Raises:
            ReadError: If the range cannot be read in full
        """
        length = end - start
        try:
            if self._file_handle is not None:
                await self._file_handle.seek(start)
                data = await self._file_handle.read(length)
            else:
                async with aiofiles.open(self._path, 'rb') as f:
                    await f.seek(start)
                    data = await f.read(length)
        except OSError as e:
            self._logger.error(f"Failed to read range {start}-{end}: {e}")
            raise ReadError(detail=str(e)) from e

        if len(data) != length:
            self._logger.error(
                f"Short read at {start}-{end}: got {len(data)} of {length} bytes"
            )
            raise ReadError(detail=f"expected {length} bytes at offset {start}, got {len(data)}")

        self._logger.debug(f"Read range: {start}-{end} ({length} bytes)")
        return data


class BytesFileHandle:
    """In-memory byte string exposed as an upload file handle."""

    DEFAULT_BLOCK_SIZE = 64 * 1024

    def __init__(self, data: bytes, name: str, block_size: int = DEFAULT_BLOCK_SIZE):
        self._data = bytes(data)
        self._name = name
        self._block_size = block_size

    @property
    def name(self) -> str:
        return self._name

    @property
    def size(self) -> int:
        return len(self._data)

    async def stream(self) -> AsyncIterator[bytes]:
        for offset in range(0, len(self._data), self._block_size):
            yield self._data[offset:offset + self._block_size]

    async def read_range(self, start: int, end: int) -> bytes:
        if start < 0 or end > len(self._data) or start > end:
            raise ReadError(detail=f"range {start}-{end} outside 0-{len(self._data)}")
        return self._data[start:end]

"""
Protocol definitions for upload module.

Defines the interfaces of the external collaborators the upload pipeline
borrows: the file being uploaded and the progress/error sinks.
"""
from typing import Protocol, AsyncIterator, runtime_checkable

from .models import ProgressSnapshot
from ..exceptions import ErrorKind


@runtime_checkable
class FileHandleProtocol(Protocol):
    """
    Readable byte source with a known size and name.

    Offers two capabilities: a one-pass sequential stream (used for the
    checksum) and random-access range reads (used for chunk bodies).
    """

    @property
    def name(self) -> str:
        """File name declared to the server."""
        ...

    @property
    def size(self) -> int:
        """Total size in bytes."""
        ...

    def stream(self) -> AsyncIterator[bytes]:
        """
        Sequential reader over the whole file.

        Returns:
            Async iterator of byte blocks

        Raises:
            ReadError: If the file cannot be read
        """
        ...

    async def read_range(self, start: int, end: int) -> bytes:
        """
        Read bytes [start, end).

        Raises:
            ReadError: If the range cannot be read in full
        """
        ...


class ProgressSink(Protocol):
    """Receives a snapshot on every upload state transition."""

    def __call__(self, snapshot: ProgressSnapshot) -> None: ...


class ErrorSink(Protocol):
    """Receives the classified kind and user-facing message of a failure."""

    def __call__(self, kind: ErrorKind, message: str) -> None: ...

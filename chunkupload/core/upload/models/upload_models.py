"""
Data models for upload module.

Uses dataclasses for the session, chunk and progress structures.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Optional

from ...exceptions import ErrorKind
from ..strategies import FixedSizeChunkingStrategy


class UploadState(str, Enum):
    """Lifecycle states of an upload (and of its server session)."""

    IDLE = 'idle'
    COMPUTING_CHECKSUM = 'computing_checksum'
    NEGOTIATING = 'negotiating'
    TRANSMITTING = 'transmitting'
    COMPLETING = 'completing'
    COMPLETED = 'completed'
    FAILED = 'failed'
    CANCELLED = 'cancelled'

    @property
    def is_terminal(self) -> bool:
        return self in (UploadState.COMPLETED, UploadState.FAILED, UploadState.CANCELLED)


@dataclass(frozen=True)
class ChunkInfo:
    """
    Information about a file chunk.

    Attributes:
        index: 1-based chunk index (as sent on the wire)
        start: Start position in bytes (inclusive)
        end: End position in bytes (exclusive)
    """
    index: int
    start: int
    end: int

    @property
    def size(self) -> int:
        """Returns chunk size."""
        return self.end - self.start


@dataclass(frozen=True)
class ChunkAck:
    """Server acknowledgment of one chunk."""
    index: int
    size: int
    status: int


# Session states reachable from each state
_SESSION_TRANSITIONS = {
    UploadState.NEGOTIATING: {UploadState.TRANSMITTING, UploadState.FAILED, UploadState.CANCELLED},
    UploadState.TRANSMITTING: {UploadState.COMPLETING, UploadState.FAILED, UploadState.CANCELLED},
    UploadState.COMPLETING: {UploadState.COMPLETED, UploadState.FAILED, UploadState.CANCELLED},
}


@dataclass
class UploadSession:
    """
    Server-negotiated upload session.

    Owns the upload identity, the server-assigned chunk size and the
    sequencing state of one file transfer. Created only from a successful
    negotiation response.

    Attributes:
        session_id: Opaque upload id issued by the server
        chunk_size: Server-assigned chunk size in bytes
        file_size: Total file size in bytes
        file_name: Declared file name
        checksum: CRC-32 declared at negotiation
        next_chunk_index: 1-based index of the next chunk to send
        state: Current session state
    """
    session_id: str
    chunk_size: int
    file_size: int
    file_name: str = ''
    checksum: str = ''
    next_chunk_index: int = 1
    state: UploadState = UploadState.NEGOTIATING

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        if self.file_size < 0:
            raise ValueError("File size cannot be negative")

    @property
    def chunking(self) -> FixedSizeChunkingStrategy:
        return FixedSizeChunkingStrategy(self.chunk_size)

    @property
    def total_chunks(self) -> int:
        """ceil(file_size / chunk_size)."""
        return self.chunking.count(self.file_size)

    @property
    def chunks_sent(self) -> int:
        return self.next_chunk_index - 1

    @property
    def is_finished(self) -> bool:
        """True once every chunk has been acknowledged."""
        return self.next_chunk_index > self.total_chunks

    def chunk(self, index: int) -> ChunkInfo:
        """
        Get the byte range of a chunk.

        Args:
            index: 1-based chunk index

        Raises:
            IndexError: If index is outside 1..total_chunks
        """
        start, end = self.chunking.chunk_range(index, self.file_size)
        return ChunkInfo(index=index, start=start, end=end)

    def chunks(self) -> Iterator[ChunkInfo]:
        """Iterate over all chunks in index order."""
        for index in range(1, self.total_chunks + 1):
            yield self.chunk(index)

    def advance(self) -> None:
        """Record that the next chunk was acknowledged."""
        if self.state is not UploadState.TRANSMITTING:
            raise RuntimeError(f"Cannot advance a session in state {self.state.value}")
        if self.is_finished:
            raise RuntimeError("All chunks already acknowledged")
        self.next_chunk_index += 1

    def transition(self, state: UploadState) -> None:
        """
        Move the session to a new state.

        Raises:
            RuntimeError: If the transition is not allowed
        """
        allowed = _SESSION_TRANSITIONS.get(self.state, set())
        if state not in allowed:
            raise RuntimeError(
                f"Invalid session transition {self.state.value} -> {state.value}"
            )
        self.state = state


@dataclass(frozen=True)
class ProgressSnapshot:
    """
    Upload progress information, emitted on every state transition.

    Attributes:
        chunks_sent: Number of acknowledged chunks
        total_chunks: Total number of chunks (0 until negotiated)
        state: Orchestrator state at emission time
        status_message: Optional human-readable status
        error_kind: Set only on the terminal error snapshot
    """
    chunks_sent: int
    total_chunks: int
    state: UploadState
    status_message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @property
    def percent(self) -> float:
        """Returns upload progress as percentage."""
        if self.total_chunks == 0:
            return 0.0
        return (self.chunks_sent / self.total_chunks) * 100

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'chunks_sent': self.chunks_sent,
            'total_chunks': self.total_chunks,
            'percent': self.percent,
            'state': self.state.value,
        }
        if self.status_message is not None:
            result['status_message'] = self.status_message
        if self.error_kind is not None:
            result['error_kind'] = self.error_kind.value
        return result


@dataclass(frozen=True)
class UploadResult:
    """
    Result of a successful upload.

    Attributes:
        upload_id: Server-issued upload id
        file_name: Uploaded file name
        file_size: Size of uploaded file
        checksum: CRC-32 sent to the server
        chunks_sent: Number of chunks transmitted
    """
    upload_id: str
    file_name: str
    file_size: int
    checksum: str
    chunks_sent: int


@dataclass
class QuotaInfo:
    """
    Storage quota of the authenticated user.

    Attributes:
        used_quota: Bytes in use
        total_quota: Bytes allowed
    """
    used_quota: int
    total_quota: int

    @property
    def free_quota(self) -> int:
        """Free storage space in bytes."""
        return max(0, self.total_quota - self.used_quota)

    @property
    def usage_percent(self) -> float:
        """Storage usage percentage."""
        if self.total_quota == 0:
            return 0.0
        return (self.used_quota / self.total_quota) * 100

    def has_space_for(self, file_size: int) -> bool:
        """Check if there is enough quota left for a file."""
        return self.free_quota >= file_size

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QuotaInfo':
        """Create from the quota endpoint's JSON body."""
        return cls(
            used_quota=int(data['used_quota']),
            total_quota=int(data['total_quota'])
        )

    def __str__(self) -> str:
        gb = 1024 ** 3
        return (
            f"Storage: {self.used_quota / gb:.2f} GB / {self.total_quota / gb:.2f} GB "
            f"({self.usage_percent:.1f}% used, {self.free_quota / gb:.2f} GB free)"
        )

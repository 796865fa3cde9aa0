"""
Chunk upload service.

Handles transmitting individual chunks to the upload server.
"""
import logging
import time
from typing import Optional

from ...api import UploadApiClient
from ...cancellation import CancellationToken
from ...exceptions import ApiRequestError, ReadError, TransmitError
from ..models import ChunkAck, UploadSession


class ChunkTransmitter:
    """
    Sends one chunk of a session to the server.

    Stateless between calls: sequencing lives in UploadSession. The chunk
    is tagged with the upload id and its 1-based index so the server can
    position it even when the same index is sent again.
    """

    FIELD_NAME = 'file'

    def __init__(self, api_client: UploadApiClient):
        """
        Initialize chunk transmitter.

        Args:
            api_client: Upload API client
        """
        self._api = api_client
        self._logger = logging.getLogger('chunkupload.upload.chunk')

    async def send(
        self,
        session: UploadSession,
        index: int,
        data: bytes,
        cancel_token: Optional[CancellationToken] = None
    ) -> ChunkAck:
        """
        Transmit a single chunk.

        Args:
            session: Live upload session
            index: 1-based chunk index
            data: Chunk bytes, exactly the chunk's range
            cancel_token: Checked between retry attempts

        Returns:
            ChunkAck once the server has accepted the chunk

        Raises:
            IndexError: If index is outside the session's chunks
            ReadError: If data does not match the chunk's range length
            TransmitError: If the server rejects the chunk or is unreachable
            UploadCancelledError: If the token is set during a retry backoff
        """
        chunk = session.chunk(index)
        if len(data) != chunk.size:
            raise ReadError(
                detail=f"chunk {index} has {len(data)} bytes, expected {chunk.size}"
            )

        chunk_size_kb = len(data) / 1024
        self._logger.debug(
            f"Uploading chunk {index}/{session.total_chunks} "
            f"at position {chunk.start} ({chunk_size_kb:.1f} KB)"
        )

        upload_start = time.time()
        try:
            status = await self._api.post_file(
                UploadApiClient.CHUNK_PATH,
                {'upload_id': session.session_id, 'chunk_index': index},
                self.FIELD_NAME,
                data,
                session.file_name or 'blob',
                f"Chunk {index} upload",
                cancel_token=cancel_token
            )
        except ApiRequestError as e:
            upload_time = time.time() - upload_start
            self._logger.error(f"Chunk {index} failed after {upload_time:.2f}s: {e.kind.value}")
            raise TransmitError.from_error(e, chunk_index=index) from e

        upload_time = time.time() - upload_start
        speed_kbps = (chunk_size_kb / upload_time) if upload_time > 0 else 0
        self._logger.debug(f"Chunk {index} uploaded in {upload_time:.2f}s ({speed_kbps:.1f} KB/s)")
        return ChunkAck(index=index, size=len(data), status=status)

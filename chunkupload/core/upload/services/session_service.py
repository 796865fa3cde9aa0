"""
Upload session service.

Negotiates upload sessions with the server and confirms their completion.
"""
import logging
from typing import Any, Optional

from ...api import UploadApiClient
from ...cancellation import CancellationToken
from ...exceptions import (
    ApiRequestError,
    CompletionError,
    ErrorKind,
    NegotiationError
)
from ...hashing import ChecksumEngine
from ..models import UploadSession


class SessionNegotiator:
    """
    Creates and finalizes upload sessions.

    Responsibilities:
    - Declare file name, size and checksum to the server
    - Build an UploadSession from the server-assigned id and chunk size
    - Confirm completion once every chunk is acknowledged
    """

    def __init__(self, api_client: UploadApiClient):
        """
        Initialize negotiator.

        Args:
            api_client: Upload API client
        """
        self._api = api_client
        self._logger = logging.getLogger('chunkupload.upload.session')

    async def negotiate(
        self,
        file_name: str,
        file_size: int,
        checksum: str,
        cancel_token: Optional[CancellationToken] = None
    ) -> UploadSession:
        """
        Negotiate a new upload session.

        The server chooses the chunk size; the client never proposes one.

        Args:
            file_name: Declared file name
            file_size: File size in bytes
            checksum: 8-digit CRC-32 of the whole file
            cancel_token: Checked between retry attempts

        Returns:
            New UploadSession in the negotiating state

        Raises:
            NegotiationError: If the server rejects the request or returns
                a malformed response
            UploadCancelledError: If the token is set during a retry backoff
        """
        payload = {
            'file_name': file_name,
            'file_size': file_size,
            'integrity_check_type': ChecksumEngine.ALGORITHM,
            'integrity_check_value': checksum,
        }
        self._logger.debug(f"Negotiating upload for {file_name} ({file_size} bytes, crc32={checksum})")

        try:
            body = await self._api.post_json(
                UploadApiClient.INIT_PATH, payload, 'Upload initialization',
                cancel_token=cancel_token
            )
        except ApiRequestError as e:
            raise NegotiationError.from_error(e) from e

        session = self._build_session(body, file_name, file_size, checksum)
        self._logger.info(
            f"Upload session {session.session_id} created: chunk size "
            f"{session.chunk_size / 1024:.0f} KB, {session.total_chunks} chunks"
        )
        return session

    async def complete(
        self,
        session: UploadSession,
        cancel_token: Optional[CancellationToken] = None
    ) -> None:
        """
        Confirm that every chunk of the session was delivered.

        Raises:
            CompletionError: If the server does not confirm completion
        """
        try:
            await self._api.post_json(
                UploadApiClient.COMPLETE_PATH,
                {'upload_id': session.session_id},
                'Upload completion',
                cancel_token=cancel_token
            )
        except ApiRequestError as e:
            raise CompletionError.from_error(e) from e
        self._logger.debug(f"Upload session {session.session_id} completed")

    def _build_session(
        self,
        body: Any,
        file_name: str,
        file_size: int,
        checksum: str
    ) -> UploadSession:
        """Validate the negotiation response and build the session."""
        if not isinstance(body, dict):
            raise self._malformed(f"expected JSON object, got {type(body).__name__}")

        upload_id = body.get('upload_id')
        chunk_size = body.get('chunk_size')

        if not isinstance(upload_id, str) or not upload_id:
            raise self._malformed("missing upload_id")
        # bool is an int subclass; reject it explicitly
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
            raise self._malformed(f"invalid chunk_size {chunk_size!r}")

        return UploadSession(
            session_id=upload_id,
            chunk_size=chunk_size,
            file_size=file_size,
            file_name=file_name,
            checksum=checksum
        )

    def _malformed(self, detail: str) -> NegotiationError:
        self._logger.error(f"Malformed negotiation response: {detail}")
        return NegotiationError(
            'Upload initialization failed',
            kind=ErrorKind.UNKNOWN,
            detail=detail
        )

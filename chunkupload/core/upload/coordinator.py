"""
Upload coordinator.

Drives one upload end to end: checksum, session negotiation, sequential
chunk transmission and completion. Every state transition is reported to
the progress sink; failures are also reported to the error sink.
"""
import asyncio
import time
from typing import List, Optional

from ..api import UploadApiClient
from ..api.errors import ErrorClassifier
from ..cancellation import CancellationToken
from ..exceptions import (
    ErrorKind,
    ReadError,
    UploadCancelledError,
    UploadException
)
from ..hashing import ChecksumEngine
from ..logging import get_logger
from .models import ProgressSnapshot, UploadResult, UploadSession, UploadState
from .protocols import ErrorSink, FileHandleProtocol, ProgressSink
from .services import ChunkTransmitter, FileValidator, SessionNegotiator

logger = get_logger('upload.coordinator')

# TRANSMITTING -> TRANSMITTING advances the chunk index; no other state
# is entered twice.
TRANSITIONS = {
    UploadState.IDLE: {UploadState.COMPUTING_CHECKSUM},
    UploadState.COMPUTING_CHECKSUM: {UploadState.NEGOTIATING, UploadState.FAILED, UploadState.CANCELLED},
    UploadState.NEGOTIATING: {UploadState.TRANSMITTING, UploadState.FAILED, UploadState.CANCELLED},
    UploadState.TRANSMITTING: {
        UploadState.TRANSMITTING,
        UploadState.COMPLETING,
        UploadState.FAILED,
        UploadState.CANCELLED,
    },
    UploadState.COMPLETING: {UploadState.COMPLETED, UploadState.FAILED, UploadState.CANCELLED},
}


class UploadCoordinator:
    """
    Coordinates a single file upload.

    Uses dependency injection for all components, making it:
    - Testable (mock dependencies)
    - Extensible (swap transport or checksum engine)

    An instance runs exactly one upload. Restarting after a failure needs a
    new coordinator and therefore a fresh server session.
    """

    def __init__(
        self,
        api_client: UploadApiClient,
        progress_sink: Optional[ProgressSink] = None,
        error_sink: Optional[ErrorSink] = None,
        cancel_token: Optional[CancellationToken] = None,
        checksum_engine: Optional[ChecksumEngine] = None,
        negotiator: Optional[SessionNegotiator] = None,
        transmitter: Optional[ChunkTransmitter] = None
    ):
        """
        Initialize upload coordinator.

        Args:
            api_client: Upload API client
            progress_sink: Called with a ProgressSnapshot on every transition
            error_sink: Called with (ErrorKind, message) on failure
            cancel_token: Checked at every suspension point
            checksum_engine: CRC-32 engine
            negotiator: Session negotiation service
            transmitter: Chunk transmission service
        """
        self._progress_sink = progress_sink
        self._error_sink = error_sink
        self._cancel_token = cancel_token or CancellationToken()
        self._checksum = checksum_engine or ChecksumEngine()
        self._negotiator = negotiator or SessionNegotiator(api_client)
        self._transmitter = transmitter or ChunkTransmitter(api_client)
        self._validator = FileValidator()

        self._state = UploadState.IDLE
        self._history: List[UploadState] = [UploadState.IDLE]
        self._session: Optional[UploadSession] = None
        self._chunks_sent = 0
        self._total_chunks = 0
        self._failure: Optional[UploadException] = None

    @property
    def state(self) -> UploadState:
        return self._state

    @property
    def history(self) -> List[UploadState]:
        """Every state entered so far, in order (repeated TRANSMITTING per chunk)."""
        return list(self._history)

    @property
    def session(self) -> Optional[UploadSession]:
        """The live session; None before negotiation and after a terminal state."""
        return self._session

    @property
    def failure(self) -> Optional[UploadException]:
        """The classified error that ended the upload, if it failed or was cancelled."""
        return self._failure

    @property
    def cancel_token(self) -> CancellationToken:
        return self._cancel_token

    async def upload(self, file: FileHandleProtocol) -> UploadResult:
        """
        Execute the complete upload process.

        Args:
            file: File handle to upload

        Returns:
            UploadResult describing the completed upload

        Raises:
            ValueError: If the file is empty
            RuntimeError: If this coordinator already ran
            ReadError: If the file cannot be read
            NegotiationError: If the server refuses the session
            TransmitError: If a chunk is rejected
            CompletionError: If completion is not confirmed
            UploadCancelledError: If the cancel token was set
        """
        if self._state is not UploadState.IDLE:
            raise RuntimeError("UploadCoordinator instances run a single upload")
        self._validator.validate_size(file.size)

        file_size_mb = file.size / (1024 * 1024)
        logger.info(f"Starting upload: {file.name} ({file_size_mb:.2f} MB)")
        upload_start = time.time()

        has_file_management = hasattr(file, 'open_file') and hasattr(file, 'close_file')
        try:
            checksum = await self._compute_checksum(file)
            session = await self._negotiate(file, checksum)

            if has_file_management:
                await file.open_file()
            await self._transmit_chunks(file, session)
            await self._complete(session)
        except UploadCancelledError as e:
            self._terminate(UploadState.CANCELLED, e)
            raise
        except UploadException as e:
            self._terminate(UploadState.FAILED, e)
            raise
        except asyncio.CancelledError:
            self._terminate(UploadState.CANCELLED, UploadCancelledError(detail='task cancelled'))
            raise
        except Exception as e:
            self._terminate(
                UploadState.FAILED,
                UploadException(ErrorClassifier.describe(ErrorKind.UNKNOWN), detail=repr(e))
            )
            raise
        finally:
            if has_file_management:
                await file.close_file()

        elapsed = time.time() - upload_start
        logger.info(
            f"Upload of {file.name} completed in {elapsed:.2f}s: "
            f"{session.total_chunks} chunks, upload id {session.session_id}"
        )
        self._session = None
        return UploadResult(
            upload_id=session.session_id,
            file_name=file.name,
            file_size=file.size,
            checksum=checksum,
            chunks_sent=self._chunks_sent
        )

    async def _compute_checksum(self, file: FileHandleProtocol) -> str:
        self._transition(UploadState.COMPUTING_CHECKSUM, 'Calculating checksum...')
        start = time.time()
        checksum = await self._checksum.compute(file.stream(), self._cancel_token)
        logger.debug(f"Checksum {checksum} computed in {time.time() - start:.2f}s")
        return checksum

    async def _negotiate(self, file: FileHandleProtocol, checksum: str) -> UploadSession:
        self._transition(UploadState.NEGOTIATING, 'Initializing upload...')
        self._cancel_token.raise_if_cancelled()
        session = await self._negotiator.negotiate(
            file.name, file.size, checksum, cancel_token=self._cancel_token
        )
        self._session = session
        self._total_chunks = session.total_chunks
        self._cancel_token.raise_if_cancelled()
        return session

    async def _transmit_chunks(self, file: FileHandleProtocol, session: UploadSession) -> None:
        """Send chunks strictly in index order, one at a time."""
        self._transition(UploadState.TRANSMITTING, 'Starting upload...')

        while not session.is_finished:
            index = session.next_chunk_index
            chunk = session.chunk(index)
            chunk_start = time.time()

            self._cancel_token.raise_if_cancelled()
            data = await self._read_chunk(file, chunk.start, chunk.end)
            self._cancel_token.raise_if_cancelled()
            await self._transmitter.send(session, index, data, cancel_token=self._cancel_token)
            del data

            session.advance()
            self._chunks_sent = index
            logger.debug(f"Chunk {index}/{session.total_chunks} acknowledged in {time.time() - chunk_start:.2f}s")

            if session.is_finished:
                self._transition(UploadState.COMPLETING, 'Finalizing upload...')
            else:
                self._transition(UploadState.TRANSMITTING)

    async def _complete(self, session: UploadSession) -> None:
        self._cancel_token.raise_if_cancelled()
        await self._negotiator.complete(session, cancel_token=self._cancel_token)
        self._transition(UploadState.COMPLETED, '100% - Complete!')

    async def _read_chunk(self, file: FileHandleProtocol, start: int, end: int) -> bytes:
        try:
            return await file.read_range(start, end)
        except OSError as e:
            raise ReadError(detail=str(e)) from e

    def _transition(
        self,
        state: UploadState,
        status_message: Optional[str] = None,
        error_kind: Optional[ErrorKind] = None
    ) -> None:
        """Enter a new state and emit the matching progress snapshot."""
        allowed = TRANSITIONS.get(self._state, set())
        if state not in allowed:
            raise RuntimeError(f"Invalid transition {self._state.value} -> {state.value}")

        # The session mirrors every state after negotiation
        if self._session is not None and state is not self._session.state:
            self._session.transition(state)

        self._state = state
        self._history.append(state)
        self._emit(ProgressSnapshot(
            chunks_sent=self._chunks_sent,
            total_chunks=self._total_chunks,
            state=state,
            status_message=status_message,
            error_kind=error_kind
        ))

    def _terminate(self, state: UploadState, error: UploadException) -> None:
        """Move to FAILED or CANCELLED, report, and discard the session."""
        self._failure = error
        if error.kind is ErrorKind.CANCELLED:
            logger.warning(f"Upload cancelled in state {self._state.value}")
        else:
            logger.error(
                f"Upload failed in state {self._state.value}: {error.kind.value} "
                f"({error.detail or error.message})"
            )

        if self._state.is_terminal:
            return
        if state is UploadState.FAILED:
            status_message = f"Error: {error.message}"
        else:
            status_message = error.message
        self._transition(state, status_message, error.kind)
        if self._error_sink:
            self._error_sink(error.kind, error.message)
        self._session = None

    def _emit(self, snapshot: ProgressSnapshot) -> None:
        if self._progress_sink:
            self._progress_sink(snapshot)

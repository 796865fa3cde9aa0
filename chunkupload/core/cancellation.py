"""Cooperative cancellation for in-flight uploads."""
import threading
from typing import Optional

from .exceptions import UploadCancelledError


class CancellationToken:
    """
    Flag checked by the upload pipeline at every suspension point.
    
    The token may be set from any thread (e.g. a UI thread). Requests
    already on the wire are not aborted; the pipeline observes the
    cancellation at its next checkpoint.
    
    Example:
        >>> token = CancellationToken()
        >>> task = asyncio.create_task(client.upload("video.mp4", cancel_token=token))
        >>> token.cancel("user pressed stop")
    """
    
    def __init__(self):
        self._event = threading.Event()
        self._reason: Optional[str] = None
    
    @property
    def cancelled(self) -> bool:
        """Returns True once cancel() has been called."""
        return self._event.is_set()
    
    @property
    def reason(self) -> Optional[str]:
        return self._reason
    
    def cancel(self, reason: Optional[str] = None) -> None:
        """Request cancellation. Calling it again keeps the first reason."""
        if not self._event.is_set():
            self._reason = reason
            self._event.set()
    
    def raise_if_cancelled(self) -> None:
        """
        Raise UploadCancelledError if cancellation was requested.
        
        Raises:
            UploadCancelledError: If the token is set
        """
        if self._event.is_set():
            raise UploadCancelledError(detail=self._reason)

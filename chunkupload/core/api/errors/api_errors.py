"""Maps upload API responses to error kinds and user-facing messages."""
from typing import Any, Dict, Optional

from ...exceptions import ErrorKind


class ErrorClassifier:
    """
    Classifies failed responses of the upload API.
    
    Priority: a recognized error code in the JSON body, then the HTTP
    status, then ErrorKind.UNKNOWN. Pure: no I/O, no state.
    """
    
    BODY_CODES: Dict[str, ErrorKind] = {
        'quota_exceeded': ErrorKind.QUOTA_EXCEEDED,
        'storage_quota_exceeded': ErrorKind.QUOTA_EXCEEDED,
        'file_too_large': ErrorKind.PAYLOAD_TOO_LARGE,
        'payload_too_large': ErrorKind.PAYLOAD_TOO_LARGE,
        'rate_limited': ErrorKind.RATE_LIMITED,
        'too_many_requests': ErrorKind.RATE_LIMITED,
    }
    
    STATUS_CODES: Dict[int, ErrorKind] = {
        402: ErrorKind.QUOTA_EXCEEDED,
        413: ErrorKind.PAYLOAD_TOO_LARGE,
        429: ErrorKind.RATE_LIMITED,
        507: ErrorKind.QUOTA_EXCEEDED,
    }
    
    MESSAGES: Dict[ErrorKind, str] = {
        ErrorKind.READ_ERROR: 'Failed to read file. Please try again',
        ErrorKind.QUOTA_EXCEEDED: 'Storage quota exceeded',
        ErrorKind.PAYLOAD_TOO_LARGE: 'File too large',
        ErrorKind.RATE_LIMITED: 'Rate limit exceeded. Please try again later',
        ErrorKind.CLIENT_ERROR: 'Invalid request. Please check your file and try again',
        ErrorKind.SERVER_ERROR: 'Server error. Please try again later',
        ErrorKind.NETWORK_ERROR: 'Network error. Please check your connection',
        ErrorKind.CANCELLED: 'Upload cancelled',
        ErrorKind.UNKNOWN: 'Upload failed',
    }
    
    @classmethod
    def classify(cls, http_status: Optional[int], body: Any = None) -> ErrorKind:
        """
        Classify a failed response.
        
        Args:
            http_status: HTTP status code, or None if no response was received
            body: Parsed JSON body (dict), raw text, or None
            
        Returns:
            The matching ErrorKind
        """
        kind = cls._body_code(body)
        if kind is not None:
            return kind
        
        if http_status is None:
            return ErrorKind.UNKNOWN
        if http_status in cls.STATUS_CODES:
            return cls.STATUS_CODES[http_status]
        if 400 <= http_status < 500:
            return ErrorKind.CLIENT_ERROR
        if 500 <= http_status < 600:
            return ErrorKind.SERVER_ERROR
        return ErrorKind.UNKNOWN
    
    @classmethod
    def describe(
        cls,
        kind: ErrorKind,
        http_status: Optional[int] = None,
        body: Any = None
    ) -> str:
        """
        Get the user-facing message for a classified error.
        
        Messages derive from the kind so protocol detail never reaches the
        UI. Unknown errors are the exception: the server's own text is shown
        verbatim when there is one.
        """
        # A recognized body code outranks the status for the message too
        if kind is ErrorKind.QUOTA_EXCEEDED and http_status == 402 and cls._body_code(body) is None:
            return 'Storage quota exhausted'
        if kind is ErrorKind.UNKNOWN:
            text = cls._body_field(body, 'message') or cls._body_field(body, 'error')
            if text:
                return text
        return cls.MESSAGES[kind]
    
    @classmethod
    def _body_code(cls, body: Any) -> Optional[ErrorKind]:
        """Kind named by a recognized `error` code in the body, if any."""
        code = cls._body_field(body, 'error')
        if code is None:
            return None
        return cls.BODY_CODES.get(code.strip().lower())
    
    @staticmethod
    def _body_field(body: Any, key: str) -> Optional[str]:
        if isinstance(body, dict):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
        return None


def classify(http_status: Optional[int], body: Any = None) -> ErrorKind:
    """Shortcut for ErrorClassifier.classify."""
    return ErrorClassifier.classify(http_status, body)

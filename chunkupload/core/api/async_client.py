"""
Async upload API client.

Thin aiohttp transport for the upload service endpoints. Every failed
response or transport error leaves this module as a classified
ApiRequestError.
"""
import json
import time
import asyncio
from typing import Any, Dict, Optional, Tuple
import aiohttp

from .config import APIConfig
from .errors import ErrorClassifier
from .retry import RetryStrategy, ExponentialBackoffStrategy
from ..cancellation import CancellationToken
from ..exceptions import ApiRequestError, ErrorKind
from ..logging import get_logger


class UploadApiClient:
    """
    Asynchronous client for the chunked upload API.

    Features:
    - Cookie/header based ambient authentication
    - Configurable proxy, SSL, timeouts
    - Optional retry with exponential backoff on transient errors
    - Connection pooling through a shared session

    Example:
        >>> config = APIConfig(base_url="https://files.example.com/")
        >>> async with UploadApiClient(config) as api:
        ...     quota = await api.get_json(UploadApiClient.QUOTA_PATH, "Quota query")
    """

    INIT_PATH = '/upload/init_chunk_upload'
    CHUNK_PATH = '/upload/chunk'
    COMPLETE_PATH = '/upload/complete_chunk_upload'
    QUOTA_PATH = '/upload/quota'

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
        retry_strategy: Optional[RetryStrategy] = None
    ):
        """
        Initialize the API client.

        Args:
            config: API configuration (uses defaults if not provided)
            session: Optional externally owned aiohttp session
            retry_strategy: Overrides the strategy derived from config.retry
        """
        self._config = config or APIConfig.default()
        self._session = session
        self._owns_session = session is None
        self._retry = retry_strategy or ExponentialBackoffStrategy(self._config.retry)

        self._logger = get_logger('api', self._config.log_level)

    @property
    def config(self) -> APIConfig:
        """Get current configuration."""
        return self._config

    async def __aenter__(self) -> 'UploadApiClient':
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session is created and open."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(**self._config.connector_kwargs())
            self._session = aiohttp.ClientSession(
                connector=connector,
                **self._config.session_kwargs()
            )
            self._owns_session = True
        return self._session

    async def close(self):
        """Close the session if we own it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def post_json(
        self,
        path: str,
        payload: Dict[str, Any],
        operation: str,
        cancel_token: Optional[CancellationToken] = None
    ) -> Any:
        """
        POST a JSON document and return the parsed response body.

        Raises:
            ApiRequestError: On non-2xx responses or transport failure
        """
        _, body = await self._request(
            'POST', path, operation, json_body=payload, cancel_token=cancel_token
        )
        return body

    async def post_file(
        self,
        path: str,
        params: Dict[str, Any],
        field_name: str,
        data: bytes,
        filename: str,
        operation: str,
        cancel_token: Optional[CancellationToken] = None
    ) -> int:
        """
        POST a binary payload as a multipart form field.

        Returns:
            HTTP status of the (successful) response

        Raises:
            ApiRequestError: On non-2xx responses or transport failure
        """
        status, _ = await self._request(
            'POST', path, operation,
            params=params,
            form=(field_name, filename, data),
            cancel_token=cancel_token
        )
        return status

    async def get_json(self, path: str, operation: str) -> Any:
        """
        GET a JSON document.

        Raises:
            ApiRequestError: On non-2xx responses or transport failure
        """
        _, body = await self._request('GET', path, operation)
        return body

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        form: Optional[Tuple[str, str, bytes]] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> Tuple[int, Any]:
        """
        Send a request, retrying transient failures per the retry strategy.

        The cancel token is checked after every backoff wait, so a cancelled
        upload never issues another attempt.
        """
        retry_count = 0
        while True:
            try:
                return await self._send(method, path, operation, params, json_body, form)
            except ApiRequestError as e:
                if not self._retry.should_retry(e.kind, retry_count):
                    raise
                delay = self._retry.delay(retry_count)
                self._logger.warning(
                    f"{operation} failed ({e.kind.value}), "
                    f"retrying in {delay:.2f}s (attempt {retry_count + 1})"
                )
                await self._retry.wait_async(retry_count)
                retry_count += 1
                if cancel_token:
                    cancel_token.raise_if_cancelled()

    async def _send(
        self,
        method: str,
        path: str,
        operation: str,
        params: Optional[Dict[str, Any]],
        json_body: Optional[Dict[str, Any]],
        form: Optional[Tuple[str, str, bytes]]
    ) -> Tuple[int, Any]:
        session = await self._ensure_session()
        url = self._config.endpoint(path)

        kwargs: Dict[str, Any] = {}
        if params:
            kwargs['params'] = {key: str(value) for key, value in params.items()}
        if json_body is not None:
            kwargs['json'] = json_body
        if form is not None:
            # FormData is consumed on send, so build a fresh one per attempt
            field_name, filename, data = form
            form_data = aiohttp.FormData()
            form_data.add_field(
                field_name,
                data,
                filename=filename,
                content_type='application/octet-stream'
            )
            kwargs['data'] = form_data
        kwargs.update(self._config.request_kwargs())

        start = time.time()
        self._logger.debug(f"{operation}: {method} {url}")

        try:
            async with session.request(method, url, **kwargs) as response:
                raw = await response.read()
                text = raw.decode('utf-8', errors='replace')
                body = self._parse_body(text)
                elapsed = time.time() - start

                if 200 <= response.status < 300:
                    self._logger.debug(f"{operation}: HTTP {response.status} in {elapsed:.2f}s")
                    return response.status, body

                kind = ErrorClassifier.classify(response.status, body)
                message = ErrorClassifier.describe(kind, response.status, body)
                self._logger.error(
                    f"{operation} failed: HTTP {response.status} ({kind.value}) after {elapsed:.2f}s"
                )
                raise ApiRequestError(
                    message,
                    kind=kind,
                    status=response.status,
                    detail=text[:500] if text else None
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            elapsed = time.time() - start
            self._logger.error(f"{operation} network error after {elapsed:.2f}s: {e!r}")
            raise ApiRequestError(
                ErrorClassifier.describe(ErrorKind.NETWORK_ERROR),
                kind=ErrorKind.NETWORK_ERROR,
                detail=repr(e)
            ) from e

    @staticmethod
    def _parse_body(text: str) -> Any:
        """Parse a JSON body; non-JSON bodies are returned as raw text."""
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text

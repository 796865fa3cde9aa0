"""
UploadClient - High-level async client for the chunked upload service.

Example:
    >>> async with UploadClient("https://files.example.com/", cookies={"sid": "..."}) as client:
    ...     result = await client.upload("video.mp4")
    ...     print(result.upload_id)
"""
import dataclasses
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from .core.api import APIConfig, UploadApiClient
from .core.cancellation import CancellationToken
from .core.exceptions import ApiRequestError, ErrorKind
from .core.upload import (
    FileHandleProtocol,
    LocalFileHandle,
    QuotaInfo,
    UploadCoordinator,
    UploadResult
)
from .core.upload.protocols import ErrorSink, ProgressSink

logger = logging.getLogger('chunkupload.client')


class UploadClient:
    """
    High-level async client for the upload service.

    Authentication is ambient: whatever cookies or headers the config
    carries are sent with every request.

    Supports two modes:

    1. Base URL shortcut:
        >>> async with UploadClient("https://files.example.com/") as client:
        ...     await client.upload("report.pdf")

    2. Full configuration:
        >>> config = APIConfig(base_url="https://files.example.com/", retry=RetryConfig(max_retries=3))
        >>> async with UploadClient(config=config) as client:
        ...     await client.upload("report.pdf")
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        config: Optional[APIConfig] = None,
        cookies: Optional[Dict[str, str]] = None
    ):
        """
        Initialize the client.

        Args:
            base_url: Service root URL (overrides config.base_url)
            config: Full API configuration
            cookies: Authentication cookies (merged into config.cookies)
        """
        config = config or APIConfig.default()
        # The caller's config may be shared; overrides go on a copy
        self._config = dataclasses.replace(
            config,
            base_url=base_url or config.base_url,
            cookies={**config.cookies, **(cookies or {})}
        )
        self._api: Optional[UploadApiClient] = None

    @property
    def config(self) -> APIConfig:
        return self._config

    async def __aenter__(self) -> 'UploadClient':
        await self._ensure_api()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the client and release resources."""
        if self._api:
            await self._api.close()
            self._api = None

    async def _ensure_api(self) -> UploadApiClient:
        if self._api is None:
            self._api = UploadApiClient(self._config)
            await self._api.__aenter__()
        return self._api

    async def upload(
        self,
        file: Union[str, Path, FileHandleProtocol],
        name: Optional[str] = None,
        progress_callback: Optional[ProgressSink] = None,
        error_callback: Optional[ErrorSink] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> UploadResult:
        """
        Upload a file.

        Args:
            file: Local file path, or any object implementing FileHandleProtocol
            name: Name declared to the server (paths only; defaults to the file name)
            progress_callback: Called with a ProgressSnapshot on every state change
            error_callback: Called with (ErrorKind, message) if the upload fails
            cancel_token: Token to cancel the upload from another task or thread

        Returns:
            UploadResult with the server-issued upload id

        Raises:
            FileNotFoundError: If a path does not exist
            ValueError: If the file is empty
            UploadException: If the upload fails or is cancelled

        Example:
            >>> token = CancellationToken()
            >>> await client.upload("backup.tar", progress_callback=lambda s: print(s.percent))
        """
        if isinstance(file, (str, Path)):
            handle = LocalFileHandle(file, name=name)
        else:
            handle = file

        api = await self._ensure_api()
        coordinator = UploadCoordinator(
            api_client=api,
            progress_sink=progress_callback,
            error_sink=error_callback,
            cancel_token=cancel_token
        )
        return await coordinator.upload(handle)

    async def get_quota(self) -> QuotaInfo:
        """
        Get storage quota of the authenticated user.

        Returns:
            QuotaInfo with used and total bytes

        Raises:
            ApiRequestError: If the quota cannot be fetched or is malformed

        Example:
            >>> quota = await client.get_quota()
            >>> if quota.has_space_for(file_size):
            ...     await client.upload(path)
        """
        api = await self._ensure_api()
        body = await api.get_json(UploadApiClient.QUOTA_PATH, 'Quota query')
        try:
            quota = QuotaInfo.from_dict(body)
        except (KeyError, TypeError, ValueError) as e:
            raise ApiRequestError(
                'Could not read storage quota',
                kind=ErrorKind.UNKNOWN,
                detail=repr(body)[:500]
            ) from e
        logger.debug(f"Quota: {quota.used_quota}/{quota.total_quota} bytes")
        return quota

    def __repr__(self) -> str:
        return f"<UploadClient {self._config.base_url}>"

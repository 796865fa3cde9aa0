"""
Upload client configuration.

Everything the transport needs to reach the upload service: where it
lives, which ambient credentials to present, how to talk TLS, how long to
wait, and whether to retry transient failures.
"""
import logging
import ssl
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

import aiohttp

from ..exceptions import ErrorKind


@dataclass
class ProxyConfig:
    """
    Outbound HTTP(S) proxy.

    Credentials travel as proxy basic auth, never inside the URL.
    """
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    def request_kwargs(self) -> Dict[str, Any]:
        """Per-request aiohttp arguments for this proxy."""
        if not self.url:
            return {}
        kwargs: Dict[str, Any] = {'proxy': self.url}
        if self.username:
            kwargs['proxy_auth'] = aiohttp.BasicAuth(self.username, self.password or '')
        return kwargs


@dataclass
class SSLConfig:
    """
    TLS settings for the upload service connection.

    Attributes:
        verify: Verify the server certificate
        ca_file: Extra CA bundle (e.g. a corporate root)
        client_cert: Client certificate for mutual TLS
        client_key: Key for client_cert, if stored separately
    """
    verify: bool = True
    ca_file: Optional[str] = None
    client_cert: Optional[str] = None
    client_key: Optional[str] = None

    def ssl_param(self) -> Union[bool, ssl.SSLContext, None]:
        """
        Value for aiohttp's ``ssl`` argument.

        Returns False when verification is off, None for aiohttp's default
        context, or a context carrying the extra CA or client certificate.
        """
        if not self.verify:
            return False
        if not (self.ca_file or self.client_cert):
            return None

        context = ssl.create_default_context(cafile=self.ca_file)
        if self.client_cert:
            context.load_cert_chain(self.client_cert, keyfile=self.client_key)
        return context


@dataclass
class TimeoutConfig:
    """
    Network timeouts in seconds.

    There is no overall deadline by default: a whole upload can take far
    longer than any single request, and each request is bounded by the
    connect and read limits instead.
    """
    connect: float = 30.0
    read: float = 120.0
    total: Optional[float] = None

    def client_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(
            total=self.total,
            sock_connect=self.connect,
            sock_read=self.read
        )


@dataclass
class RetryConfig:
    """
    Backoff retry policy for transient failures.

    Off by default: with max_retries=0 every failure is final. When enabled,
    only the kinds in retry_on are retried; quota, size and client errors
    are never retried.
    """
    max_retries: int = 0
    base_delay: float = 0.5
    max_delay: float = 16.0
    exponential_base: float = 2.0
    retry_on: Tuple[ErrorKind, ...] = (
        ErrorKind.RATE_LIMITED,
        ErrorKind.SERVER_ERROR,
        ErrorKind.NETWORK_ERROR,
    )

    def calculate_delay(self, attempt: int) -> float:
        """Delay before retry number `attempt` (0-based), capped at max_delay."""
        return min(self.base_delay * (self.exponential_base ** attempt), self.max_delay)


@dataclass
class APIConfig:
    """
    Upload API client configuration.

    Example:
        >>> config = APIConfig(
        ...     base_url="https://files.example.com/",
        ...     cookies={"sessionid": "..."},
        ...     retry=RetryConfig(max_retries=3)
        ... )
    """
    base_url: str = 'http://localhost:8080/'
    user_agent: str = 'chunkupload/1.0.0'

    # Ambient credentials issued by the login service
    cookies: Dict[str, str] = field(default_factory=dict)
    extra_headers: Dict[str, str] = field(default_factory=dict)

    proxy: Optional[ProxyConfig] = None
    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)

    # Applied to the transport logger when the application has not configured logging
    log_level: int = logging.INFO

    # Maximum simultaneous connections in the pool
    limit: int = 10

    @classmethod
    def default(cls) -> 'APIConfig':
        return cls()

    @classmethod
    def with_proxy(cls, proxy_url: str, **kwargs) -> 'APIConfig':
        """Configuration routed through an HTTP(S) proxy."""
        return cls(proxy=ProxyConfig(url=proxy_url), **kwargs)

    @classmethod
    def insecure(cls, **kwargs) -> 'APIConfig':
        """Configuration that skips certificate verification (self-signed dev servers)."""
        return cls(ssl=SSLConfig(verify=False), **kwargs)

    def endpoint(self, path: str) -> str:
        """Absolute URL of an API path."""
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def headers(self) -> Dict[str, str]:
        """Default headers for every request, including the Cookie header."""
        headers = {'User-Agent': self.user_agent, **self.extra_headers}
        # aiohttp's default cookie jar drops cookies for IP hosts
        if self.cookies:
            headers['Cookie'] = '; '.join(f"{name}={value}" for name, value in self.cookies.items())
        return headers

    def connector_kwargs(self) -> Dict[str, Any]:
        """Arguments for aiohttp.TCPConnector."""
        kwargs: Dict[str, Any] = {'limit': self.limit}
        ssl_param = self.ssl.ssl_param()
        if ssl_param is not None:
            kwargs['ssl'] = ssl_param
        return kwargs

    def session_kwargs(self) -> Dict[str, Any]:
        """Arguments for aiohttp.ClientSession."""
        return {
            'headers': self.headers(),
            'timeout': self.timeout.client_timeout(),
        }

    def request_kwargs(self) -> Dict[str, Any]:
        """Per-request arguments (proxy settings)."""
        return self.proxy.request_kwargs() if self.proxy else {}

"""
HTTP transport.

Thin aiohttp wrapper shared by API requests and the upload strategies.
Every call returns an HttpResponse or raises: HttpStatusError for
responses with a status >= 400, TransportError when no status was received.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any, AsyncIterable, Dict, Mapping, Optional, Protocol, Union
import aiohttp

from .config import APIConfig
from ..exceptions import HttpStatusError, TransportError
from ..logging import get_logger

RequestBody = Union[bytes, str, AsyncIterable[bytes], None]


@dataclass(frozen=True)
class HttpResponse:
    """
    Raw HTTP response.

    Attributes:
        status: HTTP status code
        headers: Response headers
        body: Response body decoded as text
    """
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str = ''

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default


class HttpTransport(Protocol):
    """Protocol for the HTTP transport collaborator."""

    async def perform_request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: RequestBody = None,
        allow_redirects: bool = True
    ) -> HttpResponse:
        ...


class AiohttpTransport:
    """
    aiohttp based transport.

    Reuses one ClientSession for all requests. The session is created
    lazily and closed by close() only when this transport created it.

    Example:
        >>> async with AiohttpTransport(APIConfig.default()) as transport:
        ...     response = await transport.perform_request('GET', url)
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize transport.

        Args:
            config: API configuration (uses defaults if not provided)
            session: Optional shared session
        """
        self._config = config or APIConfig.default()
        self._session = session
        self._owns_session = session is None
        self._logger = get_logger('vimeopy.api')

    async def __aenter__(self) -> 'AiohttpTransport':
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session is created and open."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(**self._config.get_connector_kwargs())
            self._session = aiohttp.ClientSession(
                connector=connector,
                **self._config.get_session_kwargs()
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close session if we own it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def perform_request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: RequestBody = None,
        allow_redirects: bool = True
    ) -> HttpResponse:
        """
        Perform an HTTP request.

        Args:
            method: HTTP method
            url: Absolute URL
            headers: Request headers
            body: bytes, str or an async iterable of bytes (streamed)
            allow_redirects: Follow redirects (disable for resumable
                uploads, where 308 means "resume incomplete")

        Returns:
            HttpResponse for statuses below 400

        Raises:
            HttpStatusError: If the server answered with a status >= 400
            TransportError: If the request failed without a response
        """
        session = await self._ensure_session()
        proxy = self._config.proxy.to_aiohttp_proxy() if self._config.proxy else None

        self._logger.debug(f"{method} {url}")

        try:
            async with session.request(
                method,
                url,
                data=body,
                headers=headers,
                proxy=proxy,
                allow_redirects=allow_redirects
            ) as response:
                text = await response.text()
                status = response.status
                response_headers = dict(response.headers)
        except aiohttp.ClientError as e:
            self._logger.error(f"Network error on {method} {url}: {e}")
            raise TransportError(f"Network error: {e}") from e
        except asyncio.TimeoutError as e:
            self._logger.error(f"Timeout on {method} {url}")
            raise TransportError("Request timed out") from e
        except OSError as e:
            self._logger.error(f"Socket error on {method} {url}: {e}")
            raise TransportError(f"Network error: {e}") from e

        self._logger.debug(f"{method} {url} -> {status}")

        if status >= 400:
            raise HttpStatusError(status, response_headers, text)

        return HttpResponse(status=status, headers=response_headers, body=text)

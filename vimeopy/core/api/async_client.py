"""
Async Vimeo API client.

Builds requests from options, sends them through the HTTP transport
and parses the JSON response.
"""
from typing import Any, Mapping, Optional, Union

from .config import APIConfig, Credentials
from .request import RequestBuilder, RequestOptions, ResponseHandler, ApiResponse
from .transport import AiohttpTransport, HttpTransport
from ..logging import get_logger


class AsyncAPIClient:
    """
    Asynchronous Vimeo API client.

    Example:
        >>> async with AsyncAPIClient(credentials=Credentials(access_token='...')) as api:
        ...     response = await api.request('/me')
        ...     print(response.body['name'])
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        credentials: Optional[Credentials] = None,
        transport: Optional[HttpTransport] = None
    ):
        """
        Initialize async API client.

        Args:
            config: API configuration (uses defaults if not provided)
            credentials: OAuth credentials
            transport: HTTP transport (an AiohttpTransport is created if omitted)
        """
        self._config = config or APIConfig.default()
        self._credentials = credentials or Credentials()
        self._transport = transport or AiohttpTransport(self._config)
        self._builder = RequestBuilder(self._config)
        self._logger = get_logger('vimeopy.api')

    @property
    def config(self) -> APIConfig:
        """Get current configuration."""
        return self._config

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    @property
    def access_token(self) -> Optional[str]:
        return self._credentials.access_token

    @access_token.setter
    def access_token(self, value: Optional[str]):
        self._credentials.access_token = value

    async def __aenter__(self) -> 'AsyncAPIClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close client and release resources."""
        close = getattr(self._transport, 'close', None)
        if close is not None:
            await close()

    async def request(
        self,
        options: Union[str, Mapping[str, Any], RequestOptions]
    ) -> ApiResponse:
        """
        Perform an API call.

        Args:
            options: Path or URL (GET), or request options with `path`,
                `method`, `query`, `headers`, `hostname`, `port`, `protocol`

        Returns:
            ApiResponse with status code, parsed body and headers

        Raises:
            VimeoRequestError: If no path was given or the body is not JSON
            HttpStatusError: If the API answered with a status >= 400
            TransportError: If the request failed without a response
        """
        prepared = self._builder.build(
            RequestOptions.coerce(options),
            access_token=self._credentials.access_token,
            client_id=self._credentials.client_id,
            client_secret=self._credentials.client_secret
        )

        self._logger.debug(f"API request: {prepared.method} {prepared.url}")

        response = await self._transport.perform_request(
            prepared.method,
            prepared.url,
            headers=prepared.headers,
            body=prepared.body
        )
        return ResponseHandler.parse_response(response)

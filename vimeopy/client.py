"""
VimeoClient - High-level async client for the Vimeo API.

Example:
    >>> async with VimeoClient(access_token='...') as vimeo:
    ...     me = await vimeo.request('/me')
    ...     uri = await vimeo.upload('clip.mp4', {'name': 'Clip'})
"""
from typing import Any, Mapping, Optional, Union

from .core.api import (
    APIConfig,
    ApiResponse,
    AsyncAPIClient,
    AsyncAuthService,
    Credentials,
    HttpTransport,
    RequestOptions,
)
from .core.api.async_auth import Scope
from .core.logging import get_logger
from .core.upload import UploadFacade, UploadHandle
from .core.upload.models import (
    CancelCallback,
    CompleteCallback,
    ErrorCallback,
    FileArgument,
    ProgressCallback,
)

logger = get_logger('vimeopy.client')


class VimeoClient:
    """
    Async Vimeo API client.

    Wraps the API client, OAuth helpers and uploads behind one object
    that owns the HTTP session.

    Example:
        >>> vimeo = VimeoClient('client_id', 'client_secret', 'access_token')
        >>> try:
        ...     response = await vimeo.request({'path': '/me/videos', 'query': {'per_page': 5}})
        ... finally:
        ...     await vimeo.close()
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        access_token: Optional[str] = None,
        *,
        config: Optional[APIConfig] = None,
        transport: Optional[HttpTransport] = None
    ):
        """
        Initialize client.

        Args:
            client_id: OAuth client identifier
            client_secret: OAuth client secret
            access_token: Access token; takes precedence over Basic auth
            config: API configuration (uses defaults if not provided)
            transport: HTTP transport (an AiohttpTransport is created if omitted)
        """
        self._config = config or APIConfig.default()
        self._api = AsyncAPIClient(
            config=self._config,
            credentials=Credentials(
                client_id=client_id,
                client_secret=client_secret,
                access_token=access_token
            ),
            transport=transport
        )
        self._auth = AsyncAuthService(self._api)
        self._uploader = UploadFacade(
            self._api,
            config=self._config.upload,
            transport=self._api.transport,
            log_level=self._config.log_level
        )

    @classmethod
    def from_credentials(cls, credentials: Credentials, **kwargs) -> 'VimeoClient':
        return cls(
            credentials.client_id,
            credentials.client_secret,
            credentials.access_token,
            **kwargs
        )

    @property
    def config(self) -> APIConfig:
        return self._config

    @property
    def api(self) -> AsyncAPIClient:
        """Low-level API client."""
        return self._api

    @property
    def access_token(self) -> Optional[str]:
        return self._api.access_token

    async def __aenter__(self) -> 'VimeoClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close client and release the HTTP session."""
        await self._api.close()
        logger.debug("Client closed")

    def set_access_token(self, access_token: Optional[str]) -> None:
        """Set the token used for subsequent requests."""
        self._api.access_token = access_token

    async def request(
        self,
        options: Union[str, Mapping[str, Any], RequestOptions]
    ) -> ApiResponse:
        """
        Perform an API call.

        Args:
            options: Path or URL (GET), or options with `path`, `method`,
                `query`, `headers`, `hostname`, `port`, `protocol`

        Returns:
            ApiResponse with status code, parsed body and headers
        """
        return await self._api.request(options)

    def build_authorization_endpoint(
        self,
        redirect_uri: str,
        scope: Scope = None,
        state: Optional[str] = None
    ) -> str:
        """Build the URL the user authorizes the app at."""
        return self._auth.build_authorization_endpoint(redirect_uri, scope, state)

    async def exchange_code(self, code: str, redirect_uri: str) -> ApiResponse:
        """
        Exchange an authorization code for an access token.

        The token is not stored; call set_access_token() with
        `response.body['access_token']` to use it.
        """
        logger.info("Exchanging authorization code for an access token")
        return await self._auth.exchange_code(code, redirect_uri)

    async def generate_client_credentials(self, scope: Scope = None) -> ApiResponse:
        """Generate an unauthenticated access token."""
        logger.info("Requesting client credentials token")
        return await self._auth.generate_client_credentials(scope)

    async def upload(
        self,
        file: FileArgument,
        *args: Any,
        params: Optional[Mapping[str, Any]] = None,
        on_complete: Optional[CompleteCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        on_cancel: Optional[CancelCallback] = None,
        strategy: Optional[str] = None,
        handle: Optional[UploadHandle] = None
    ) -> Optional[str]:
        """
        Upload a new video.

        See UploadFacade.upload() for the calling conventions.

        Returns:
            The video URI when no on_complete/on_error callback is given
        """
        return await self._uploader.upload(
            file,
            *args,
            params=params,
            on_complete=on_complete,
            on_progress=on_progress,
            on_error=on_error,
            on_cancel=on_cancel,
            strategy=strategy,
            handle=handle
        )

    async def replace(
        self,
        file: FileArgument,
        video_uri: str,
        *args: Any,
        params: Optional[Mapping[str, Any]] = None,
        on_complete: Optional[CompleteCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        on_cancel: Optional[CancelCallback] = None,
        strategy: Optional[str] = None,
        handle: Optional[UploadHandle] = None
    ) -> Optional[str]:
        """Upload a new version of `video_uri`."""
        return await self._uploader.replace(
            file,
            video_uri,
            *args,
            params=params,
            on_complete=on_complete,
            on_progress=on_progress,
            on_error=on_error,
            on_cancel=on_cancel,
            strategy=strategy,
            handle=handle
        )

    def __repr__(self) -> str:
        authenticated = self._api.access_token is not None
        return f"<VimeoClient {self._config.hostname} authenticated={authenticated}>"

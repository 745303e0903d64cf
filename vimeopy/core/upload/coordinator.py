"""
Upload coordinator.

Orchestrates one upload: resolve the file, negotiate the upload session,
then hand the transfer to the selected strategy. Depends on abstractions
(API client, transport, strategy factory) so every step can be faked.
"""
from typing import Callable, Optional

from .callbacks import UploadCallbacks
from .models import UploadParams, UploadRequest, UploadSession
from .protocols import ApiClientProtocol, UploadStrategy
from .services import FileValidator
from .strategies import ResumableStreamingStrategy, TusUploadStrategy
from ..api.config import UploadConfig
from ..api.request import RequestOptions
from ..api.transport import HttpTransport
from ..exceptions import NegotiationError, UploadError
from ..logging import get_logger

logger = get_logger('vimeopy.upload')

StrategyFactory = Callable[[str], UploadStrategy]


class UploadCoordinator:
    """
    Coordinates the upload process.

    Uses dependency injection for all components, making it:
    - Testable (fake API client, transport and strategies)
    - Extensible (register another strategy through the factory)
    """

    UPLOAD_PATH = '/me/videos?fields=uri,name,upload'
    REPLACE_PATH = '{video_uri}/versions?fields=upload'

    def __init__(
        self,
        api_client: ApiClientProtocol,
        config: Optional[UploadConfig] = None,
        transport: Optional[HttpTransport] = None,
        strategy_factory: Optional[StrategyFactory] = None,
        validator: Optional[FileValidator] = None
    ):
        """
        Initialize upload coordinator.

        Args:
            api_client: Client used for session negotiation
            config: Upload configuration
            transport: Transport for streaming uploads (defaults to the
                API client's transport)
            strategy_factory: Creates a strategy from its name
            validator: File validator
        """
        self._api = api_client
        self._config = config or UploadConfig()
        self._transport = transport or getattr(api_client, 'transport', None)
        self._strategy_factory = strategy_factory or self.create_strategy
        self._validator = validator or FileValidator()

    @property
    def config(self) -> UploadConfig:
        return self._config

    def create_strategy(self, name: str) -> UploadStrategy:
        """
        Create a strategy by its approach name.

        Raises:
            ValueError: If the name is unknown or no transport is available
        """
        if name == TusUploadStrategy.APPROACH:
            return TusUploadStrategy(
                retry_delays=self._config.retry_delays,
                chunk_size=self._config.chunk_size
            )
        if name == ResumableStreamingStrategy.APPROACH:
            if self._transport is None:
                raise ValueError("Streaming uploads need an HTTP transport")
            return ResumableStreamingStrategy(
                self._transport,
                chunk_size=self._config.chunk_size,
                content_type=self._config.content_type,
                max_resume_attempts=self._config.max_resume_attempts
            )
        raise ValueError(f"Unknown upload strategy: {name}")

    async def upload(self, request: UploadRequest, callbacks: UploadCallbacks) -> None:
        """
        Execute the upload; the outcome is reported through `callbacks`.

        Raises:
            asyncio.CancelledError: If the upload task is cancelled
        """
        try:
            source = self._validator.resolve(request.file)
        except UploadError as e:
            callbacks.error(e)
            return

        size_mb = source.size / (1024 * 1024)
        logger.info(f"Starting upload: {source.name or 'file object'} ({size_mb:.2f} MB)")

        try:
            strategy = self._strategy_factory(request.strategy or self._config.strategy)
        except ValueError as e:
            callbacks.error(e)
            return

        params = UploadParams.from_caller(
            request.params,
            approach=strategy.APPROACH,
            size=source.size,
            file_name=source.name if request.is_replace else None
        )

        try:
            session = await self._negotiate(request, params)
        except NegotiationError as e:
            callbacks.error(e)
            return

        logger.info(f"Upload session created for {session.resource_uri} ({session.approach})")
        await strategy.run(source, session, callbacks)

    async def _negotiate(self, request: UploadRequest, params: UploadParams) -> UploadSession:
        """
        Create the upload session.

        Raises:
            NegotiationError: If the request fails or the response lacks
                the upload link
        """
        if request.is_replace:
            path = self.REPLACE_PATH.format(video_uri=request.replace_uri)
        else:
            path = self.UPLOAD_PATH

        options = RequestOptions(path=path, method='POST', query=params.to_query())
        logger.debug(f"Negotiating upload session: POST {path}")

        try:
            response = await self._api.request(options)
        except Exception as e:
            raise NegotiationError(e) from e

        try:
            return UploadSession.from_response(
                response.body,
                approach=params.approach,
                size=params.size,
                resource_uri=request.replace_uri
            )
        except (KeyError, TypeError) as e:
            raise NegotiationError(f"Missing {e} in upload response") from e


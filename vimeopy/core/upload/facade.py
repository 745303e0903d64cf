"""
Upload facade.

Provides the public upload()/replace() interface.
Follows Facade Pattern - hides the coordinator, strategies and callbacks.

Two calling conventions are supported:

- Callback mode: pass `on_complete` or `on_error`. The call returns None
  once the terminal callback has fired.
- Promise mode: pass neither. The call returns the video URI or raises.
"""
import asyncio
from typing import Any, Dict, Mapping, Optional, Tuple
import logging

from .callbacks import UploadCallbacks, UploadHandle
from .coordinator import StrategyFactory, UploadCoordinator
from .models import (
    CancelCallback,
    CompleteCallback,
    ErrorCallback,
    FileArgument,
    ProgressCallback,
    UploadRequest,
)
from .protocols import ApiClientProtocol
from ..api.config import UploadConfig
from ..api.transport import HttpTransport
from ..exceptions import UploadError


class UploadFacade:
    """
    Simplified interface for Vimeo uploads.

    Example:
        >>> uploader = UploadFacade(api_client)
        >>> uri = await uploader.upload('clip.mp4', {'name': 'Clip'})
        >>> await uploader.replace('clip-v2.mp4', uri, on_complete=print, on_error=print)
    """

    def __init__(
        self,
        api_client: ApiClientProtocol,
        config: Optional[UploadConfig] = None,
        transport: Optional[HttpTransport] = None,
        strategy_factory: Optional[StrategyFactory] = None,
        log_level: Optional[int] = None
    ):
        """
        Initialize upload facade.

        Args:
            api_client: Vimeo API client
            config: Upload configuration
            transport: Transport for streaming uploads
            strategy_factory: Optional custom strategy factory
            log_level: Level for the `vimeopy.upload` logger
        """
        self._logger = logging.getLogger('vimeopy.upload')
        if log_level is not None:
            self._logger.setLevel(log_level)

        self._coordinator = UploadCoordinator(
            api_client=api_client,
            config=config,
            transport=transport,
            strategy_factory=strategy_factory
        )

    @property
    def coordinator(self) -> UploadCoordinator:
        return self._coordinator

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

        Positional form: `upload(file, params, on_complete, on_progress,
        on_error)`. `params` may be left out, in which case the callbacks
        shift left, or passed by keyword. A single positional callback is
        the progress callback of a promise-mode call.

        Args:
            file: Path or binary file-like object
            params: Fields for the new video (name, description, privacy...)
            on_complete: Called with the video URI
            on_progress: Called with (bytes_uploaded, bytes_total)
            on_error: Called with the exception
            on_cancel: Called when the upload is aborted through `handle`
            strategy: 'tus' or 'streaming'; the configured default if None
            handle: UploadHandle used to abort the upload

        Returns:
            The video URI in promise mode, None in callback mode

        Example:
            >>> uri = await uploader.upload('clip.mp4', {'name': 'Clip'}, progress)
        """
        params, on_complete, on_progress, on_error = self._normalize_args(
            args, params, on_complete, on_progress, on_error
        )
        request = UploadRequest(file=file, params=params, strategy=strategy)
        return await self._dispatch(request, on_complete, on_progress, on_error, on_cancel, handle)

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
        """
        Upload a new version of an existing video.

        Same calling conventions as upload(). On success `video_uri` is
        reported.
        """
        params, on_complete, on_progress, on_error = self._normalize_args(
            args, params, on_complete, on_progress, on_error
        )
        request = UploadRequest(
            file=file,
            params=params,
            replace_uri=video_uri,
            strategy=strategy
        )
        return await self._dispatch(request, on_complete, on_progress, on_error, on_cancel, handle)

    async def start(
        self,
        request: UploadRequest,
        callbacks: UploadCallbacks,
        handle: Optional[UploadHandle] = None
    ) -> None:
        """
        Run an upload and return after its terminal callback.

        Args:
            request: Structured upload request
            callbacks: Receives progress and exactly one terminal event
            handle: Optional abort handle
        """
        task = asyncio.ensure_future(self._coordinator.upload(request, callbacks))
        if handle is not None:
            handle.attach(task)

        try:
            await task
        except asyncio.CancelledError:
            if handle is None or not handle.aborted or not task.cancelled():
                raise
            callbacks.cancel()
        except Exception as e:
            # Raised from a caller callback after the terminal event
            if callbacks.finished:
                raise
            callbacks.error(e)

    async def _dispatch(
        self,
        request: UploadRequest,
        on_complete: Optional[CompleteCallback],
        on_progress: Optional[ProgressCallback],
        on_error: Optional[ErrorCallback],
        on_cancel: Optional[CancelCallback],
        handle: Optional[UploadHandle]
    ) -> Optional[str]:
        if on_complete is None and on_error is None:
            return await self._run_promise(request, on_progress, on_cancel, handle)

        callbacks = UploadCallbacks(
            on_complete=on_complete,
            on_progress=on_progress,
            on_error=on_error,
            on_cancel=on_cancel
        )
        await self.start(request, callbacks, handle)
        return None

    async def _run_promise(
        self,
        request: UploadRequest,
        on_progress: Optional[ProgressCallback],
        on_cancel: Optional[CancelCallback],
        handle: Optional[UploadHandle]
    ) -> str:
        """Adapt the callbacks to a future resolved by the terminal event."""
        future = asyncio.get_running_loop().create_future()

        def resolve(uri: str) -> None:
            if not future.done():
                future.set_result(uri)

        def reject(error: BaseException) -> None:
            if not future.done():
                future.set_exception(error)

        def cancelled() -> None:
            if on_cancel is not None:
                on_cancel()
            if not future.done():
                future.cancel()

        callbacks = UploadCallbacks(
            on_complete=resolve,
            on_progress=on_progress,
            on_error=reject,
            on_cancel=cancelled
        )
        await self.start(request, callbacks, handle)

        if not future.done():
            future.set_exception(UploadError("Upload finished without a result"))
        return await future

    @staticmethod
    def _normalize_args(
        args: Tuple[Any, ...],
        params: Optional[Mapping[str, Any]],
        on_complete: Optional[CompleteCallback],
        on_progress: Optional[ProgressCallback],
        on_error: Optional[ErrorCallback]
    ) -> Tuple[Dict[str, Any], Optional[CompleteCallback], Optional[ProgressCallback], Optional[ErrorCallback]]:
        """Map the positional calling convention onto params and callbacks."""
        args = list(args)
        if args and not callable(args[0]):
            if params is not None:
                raise TypeError("Got multiple values for params")
            params = args.pop(0)
        params = dict(params or {})

        if len(args) > 3:
            raise TypeError(f"Expected at most 3 positional callbacks, got {len(args)}")
        if any(arg is not None and not callable(arg) for arg in args):
            raise TypeError("Positional callbacks must be callable")

        if len(args) == 1:
            positional = (None, args[0], None)
        else:
            positional = tuple(args) + (None,) * (3 - len(args))

        resolved = []
        for name, given, keyword in zip(
            ('on_complete', 'on_progress', 'on_error'),
            positional,
            (on_complete, on_progress, on_error)
        ):
            if given is not None and keyword is not None:
                raise TypeError(f"Got multiple values for {name}")
            resolved.append(given if given is not None else keyword)

        return (params, *resolved)

"""
tus upload strategy.

Delegates the byte transfer to tuspy against the upload link returned by
session negotiation. Failed chunks are retried after the delays in
`retry_delays`; before every retry the server offset is fetched again so
the upload resumes from what the server actually holds. Client errors
other than 409 and 423 fail the upload at once.
"""
import asyncio
import time
from typing import Any, Callable, Dict, Optional, Sequence

from tusclient.client import TusClient
from tusclient.exceptions import TusCommunicationError

from ..callbacks import UploadCallbacks
from ..models import FileSource, UploadSession, UploadState
from ..services import StreamWindow
from ...logging import get_logger

logger = get_logger('vimeopy.upload.tus')

UploaderFactory = Callable[[FileSource, UploadSession, int], Any]


class TusUploadStrategy:
    """
    tus 1.0 uploads through tuspy.

    Example:
        >>> strategy = TusUploadStrategy(retry_delays=(0, 1, 3, 5))
        >>> await strategy.run(source, session, callbacks)
    """

    APPROACH = 'tus'
    DEFAULT_RETRY_DELAYS = (0, 1, 3, 5)
    DEFAULT_CHUNK_SIZE = 1024 * 1024

    def __init__(
        self,
        retry_delays: Sequence[float] = DEFAULT_RETRY_DELAYS,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        headers: Optional[Dict[str, str]] = None,
        uploader_factory: Optional[UploaderFactory] = None
    ):
        """
        Initialize tus strategy.

        Args:
            retry_delays: Seconds to wait before each retry; its length is
                the number of retries allowed without progress
            chunk_size: Bytes per PATCH request
            headers: Extra headers sent with every tus request
            uploader_factory: Builds the tuspy uploader (blocking call)
        """
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        self._retry_delays = tuple(retry_delays)
        self._chunk_size = chunk_size
        self._headers = dict(headers or {})
        self._uploader_factory = uploader_factory or self._create_uploader
        self._state = UploadState.IDLE

    @property
    def state(self) -> UploadState:
        return self._state

    def _create_uploader(self, source: FileSource, session: UploadSession, chunk_size: int):
        client = TusClient(session.upload_link, headers=self._headers)
        kwargs: Dict[str, Any] = {
            'url': session.upload_link,
            'chunk_size': chunk_size,
            'retries': 0,
        }
        if source.is_path:
            kwargs['file_path'] = str(source.path)
        else:
            kwargs['file_stream'] = StreamWindow(source.stream, source.size)
        return client.async_uploader(**kwargs)

    async def run(
        self,
        source: FileSource,
        session: UploadSession,
        callbacks: UploadCallbacks
    ) -> None:
        """Upload the file and report through callbacks."""
        started = time.time()
        self._state = UploadState.OPENING
        try:
            # tuspy fetches the current offset while constructing the uploader
            uploader = await asyncio.to_thread(
                self._uploader_factory, source, session, self._chunk_size
            )
        except asyncio.CancelledError:
            self._state = UploadState.CANCELLED
            raise
        except Exception as e:
            self._state = UploadState.FAILED
            callbacks.error(e)
            return

        try:
            await self._transfer(uploader, session.size, callbacks)
        except asyncio.CancelledError:
            self._state = UploadState.CANCELLED
            raise
        except Exception as e:
            self._state = UploadState.FAILED
            callbacks.error(e)
            return

        self._state = UploadState.COMPLETE
        logger.info(f"tus upload finished in {time.time() - started:.2f}s")
        callbacks.complete(session.resource_uri)

    async def _transfer(self, uploader, size: int, callbacks: UploadCallbacks) -> None:
        attempt = 0
        resync = False

        while True:
            self._state = UploadState.STREAMING
            try:
                if resync:
                    self._state = UploadState.CONFIRMING
                    uploader.offset = await asyncio.to_thread(uploader.get_offset)
                    resync = False
                    logger.info(f"Resuming tus upload at offset {uploader.offset}")
                if uploader.offset >= size:
                    return
                await uploader.upload_chunk()
            except (TusCommunicationError, OSError) as e:
                status = getattr(e, 'status_code', None)
                if status is not None and not self._should_retry(status):
                    logger.error(f"tus request rejected with HTTP {status}")
                    raise
                if attempt >= len(self._retry_delays):
                    logger.error(f"tus upload failed after {attempt} retries")
                    raise
                delay = self._retry_delays[attempt]
                attempt += 1
                logger.warning(
                    f"tus request failed at offset {uploader.offset}: {e}; "
                    f"retry {attempt}/{len(self._retry_delays)} in {delay}s"
                )
                await asyncio.sleep(delay)
                resync = True
                continue

            attempt = 0
            callbacks.progress(min(uploader.offset, size), size)

    @staticmethod
    def _should_retry(status: int) -> bool:
        """Client errors are final, except 409 (offset mismatch) and 423 (locked)."""
        return not (400 <= status < 500) or status in (409, 423)

"""
Resumable streaming upload strategy.

Uploads the file with HTTP PUT and Content-Range headers. After every PUT
the server is asked how many bytes it holds (a zero-length PUT with
`Content-Range: bytes */*`); the upload continues from that offset until
the server confirms the whole file.

State machine:
    IDLE -> OPENING -> STREAMING -> CONFIRMING -> STREAMING | COMPLETE | FAILED
"""
import asyncio
import time
from typing import AsyncIterator, Callable, Optional

import aiofiles.os

from ..callbacks import UploadCallbacks
from ..models import FileSource, TransferState, UploadSession, UploadState
from ..services import AsyncFileReader
from ...api.transport import HttpTransport
from ...exceptions import (
    HttpStatusError,
    RangeQueryError,
    TransportError,
    UploadError,
)
from ...logging import get_logger

logger = get_logger('vimeopy.upload.streaming')


class ResumableStreamingStrategy:
    """
    Content-Range based resumable uploads.

    Responsibilities:
    - Own the local file handle for the duration of one run
    - Stream the file from the last confirmed offset
    - Query the server offset after each PUT and resume from it

    Example:
        >>> strategy = ResumableStreamingStrategy(transport)
        >>> await strategy.run(source, session, callbacks)
    """

    APPROACH = 'streaming'
    RESUME_INCOMPLETE = 308
    DEFAULT_CHUNK_SIZE = 1024 * 1024
    DEFAULT_MAX_RESUME_ATTEMPTS = 5

    def __init__(
        self,
        transport: HttpTransport,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        content_type: str = 'video/mp4',
        max_resume_attempts: int = DEFAULT_MAX_RESUME_ATTEMPTS,
        reader_factory: Callable[[], AsyncFileReader] = AsyncFileReader
    ):
        """
        Initialize streaming strategy.

        Args:
            transport: HTTP transport used for the PUT requests
            chunk_size: Bytes read from disk per chunk
            content_type: Content-Type of the data PUT
            max_resume_attempts: Consecutive interruptions tolerated
                without the server confirming new bytes
            reader_factory: Creates the file reader
        """
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        self._transport = transport
        self._chunk_size = chunk_size
        self._content_type = content_type
        self._max_resume_attempts = max_resume_attempts
        self._reader_factory = reader_factory
        self._state = UploadState.IDLE

    @property
    def state(self) -> UploadState:
        return self._state

    async def run(
        self,
        source: FileSource,
        session: UploadSession,
        callbacks: UploadCallbacks
    ) -> None:
        """Upload the file and report through callbacks."""
        transfer: Optional[TransferState] = None
        error: Optional[BaseException] = None
        started = time.time()

        try:
            self._state = UploadState.OPENING
            transfer = await self._open(source, session.size)
            await self._transfer(transfer, session, callbacks)
        except asyncio.CancelledError:
            self._state = UploadState.CANCELLED
            cleanup_error = await self._close(transfer)
            if cleanup_error is not None:
                logger.error(f"Failed to close file after cancellation: {cleanup_error}")
            raise
        except Exception as e:
            error = e

        cleanup_error = await self._close(transfer)

        if error is None and cleanup_error is not None:
            error = cleanup_error
        elif cleanup_error is not None:
            logger.error(f"Failed to close file after upload error: {cleanup_error}")
            if isinstance(error, UploadError):
                error.cleanup_error = cleanup_error

        if error is not None:
            self._state = UploadState.FAILED
            callbacks.error(error)
            return

        self._state = UploadState.COMPLETE
        logger.info(f"Streaming upload finished in {time.time() - started:.2f}s")
        callbacks.complete(session.resource_uri)

    async def _open(self, source: FileSource, size: int) -> TransferState:
        """Stat and open the file. Nothing is left open if this fails."""
        if source.is_path:
            stat = await aiofiles.os.stat(source.path)
            if stat.st_size != size:
                logger.warning(
                    f"File size changed since negotiation: {size} -> {stat.st_size} bytes"
                )

        reader = self._reader_factory()
        await reader.open_file(source)
        logger.debug(f"Opened {source.name or 'file object'} ({size} bytes)")
        return TransferState(reader=reader, total_size=size)

    async def _close(self, transfer: Optional[TransferState]) -> Optional[BaseException]:
        """Close the file handle; returns the close error instead of raising."""
        if transfer is None or transfer.reader is None:
            return None
        reader, transfer.reader = transfer.reader, None
        try:
            await reader.close_file()
        except OSError as e:
            return e
        return None

    async def _transfer(
        self,
        transfer: TransferState,
        session: UploadSession,
        callbacks: UploadCallbacks
    ) -> None:
        """Stream and confirm until the server holds the whole file."""
        start = 0
        stalled = 0

        while True:
            self._state = UploadState.STREAMING
            interruption: Optional[TransportError] = None
            try:
                await self._stream_from(transfer, session.upload_link, start, callbacks)
            except HttpStatusError:
                # Error response with a status code: known server bug, stop here
                raise
            except TransportError as e:
                if transfer.read_error is not None:
                    raise transfer.read_error from e
                interruption = e
                logger.warning(f"Upload interrupted at offset {start}: {e}")

            self._state = UploadState.CONFIRMING
            offset = await self.query_offset(session.upload_link)

            if offset >= transfer.total_size:
                transfer.confirm(offset)
                return

            if offset > transfer.bytes_confirmed:
                stalled = 0
            else:
                stalled += 1
                if stalled > self._max_resume_attempts:
                    if interruption is not None:
                        raise interruption
                    raise UploadError(f"Upload stalled at offset {offset}")
            transfer.confirm(offset)

            start = transfer.bytes_confirmed
            logger.info(f"Server has {start}/{transfer.total_size} bytes, resuming")

    async def _stream_from(
        self,
        transfer: TransferState,
        upload_link: str,
        start: int,
        callbacks: UploadCallbacks
    ) -> None:
        """PUT the file from `start` to the end."""
        total = transfer.total_size
        headers = {
            'Content-Length': str(total),
            'Content-Type': self._content_type,
            'Content-Range': f"bytes {start}-{total}/{total}",
        }
        logger.debug(f"Streaming bytes {start}-{total}/{total}")

        await self._transport.perform_request(
            'PUT',
            upload_link,
            headers=headers,
            body=self._iter_file(transfer, start, callbacks),
            allow_redirects=False
        )

    async def _iter_file(
        self,
        transfer: TransferState,
        start: int,
        callbacks: UploadCallbacks
    ) -> AsyncIterator[bytes]:
        """Yield file chunks from `start`, reporting progress after each one is sent."""
        written = 0
        try:
            await transfer.reader.seek(start)
        except OSError as e:
            transfer.read_error = e
            raise

        while True:
            try:
                chunk = await transfer.reader.read(self._chunk_size)
            except OSError as e:
                transfer.read_error = e
                raise
            if not chunk:
                break
            yield chunk
            written += len(chunk)
            callbacks.progress(start + written, transfer.total_size)

    async def query_offset(self, upload_link: str) -> int:
        """
        Ask the server how many bytes it has received.

        Returns:
            The upper bound of the server's Range header

        Raises:
            RangeQueryError: If the status is not 308 Resume Incomplete
            TransportError: If the request failed without a response
        """
        headers = {
            'Content-Range': 'bytes */*',
            'Content-Type': 'application/octet-stream',
        }
        try:
            response = await self._transport.perform_request(
                'PUT',
                upload_link,
                headers=headers,
                body=b'',
                allow_redirects=False
            )
        except HttpStatusError as e:
            raise RangeQueryError(e.status) from e

        if response.status != self.RESUME_INCOMPLETE:
            raise RangeQueryError(response.status)

        return self.parse_range(response.header('Range'))

    @staticmethod
    def parse_range(value: Optional[str]) -> int:
        """
        Parse `bytes 0-<last>` or `bytes=0-<last>` into `<last>`.

        A missing header means the server has nothing yet.
        """
        if not value:
            return 0
        try:
            return int(value.rsplit('-', 1)[1].strip())
        except (IndexError, ValueError) as e:
            raise UploadError(f"Invalid Range header returned from range query: [{value}]") from e

"""
Upload callbacks and abort handle.

UploadCallbacks is the only channel strategies report through. It lets
exactly one terminal event (complete, error or cancel) through and drops
anything reported after it.
"""
import asyncio
from typing import Optional

from .models import (
    CancelCallback,
    CompleteCallback,
    ErrorCallback,
    ProgressCallback,
    UploadProgress,
)
from ..logging import get_logger

logger = get_logger('vimeopy.upload')


class UploadCallbacks:
    """
    Caller callbacks for one upload.

    Example:
        >>> callbacks = UploadCallbacks(
        ...     on_complete=lambda uri: print('done', uri),
        ...     on_progress=lambda sent, total: print(sent, total),
        ...     on_error=lambda exc: print('failed', exc)
        ... )
    """

    def __init__(
        self,
        on_complete: Optional[CompleteCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        on_cancel: Optional[CancelCallback] = None
    ):
        self._on_complete = on_complete
        self._on_progress = on_progress
        self._on_error = on_error
        self._on_cancel = on_cancel
        self._finished = False
        self._last_progress: Optional[UploadProgress] = None

    @property
    def last_progress(self) -> Optional[UploadProgress]:
        """Most recent progress report, if any."""
        return self._last_progress

    @property
    def finished(self) -> bool:
        """True once a terminal callback has fired."""
        return self._finished

    def progress(self, bytes_uploaded: int, bytes_total: int) -> None:
        """Report progress; ignored after the terminal callback."""
        if self._finished:
            return
        self._last_progress = UploadProgress(bytes_uploaded, bytes_total)
        logger.debug(f"Progress: {self._last_progress.percentage:.1f}%")
        if self._on_progress is None:
            return
        try:
            self._on_progress(bytes_uploaded, bytes_total)
        except Exception as e:
            logger.warning(f"Progress callback raised: {e}")

    def complete(self, resource_uri: str) -> None:
        if self._finish():
            logger.info(f"Upload complete: {resource_uri}")
            if self._on_complete is not None:
                self._on_complete(resource_uri)

    def error(self, error: BaseException) -> None:
        if self._finish():
            logger.error(f"Upload failed: {error}")
            if self._on_error is not None:
                self._on_error(error)

    def cancel(self) -> None:
        if self._finish():
            logger.info("Upload cancelled")
            if self._on_cancel is not None:
                self._on_cancel()

    def _finish(self) -> bool:
        if self._finished:
            logger.debug("Ignoring terminal event after upload finished")
            return False
        self._finished = True
        return True


class UploadHandle:
    """
    Abort handle for a running upload.

    Pass it as `handle=` to upload()/replace() and call abort() to stop
    the transfer. The active HTTP exchange is aborted, the local file is
    closed and the upload ends cancelled instead of failed.
    """

    def __init__(self):
        self._task: Optional[asyncio.Future] = None
        self._aborted = False

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    def abort(self) -> None:
        """Cancel the upload. Safe to call before start or after completion."""
        self._aborted = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    def attach(self, task: asyncio.Future) -> None:
        """Bind the handle to the task running the upload."""
        self._task = task
        if self._aborted:
            task.cancel()

"""
File validation and reading services.

Single Responsibility: Each class handles one specific task.
"""
from pathlib import Path
from typing import Any, Optional
import asyncio
import os
import logging

import aiofiles

from ..models import FileSource
from ...exceptions import InvalidFileArgumentError, UploadFileNotFoundError


class FileValidator:
    """
    Validates the file argument before upload.

    Responsibilities:
    - Tell paths from file-like objects
    - Check the path exists and is a readable regular file
    - Resolve the size once
    """

    def resolve(self, file: Any) -> FileSource:
        """
        Resolve a path or file-like object to a FileSource.

        Args:
            file: Filesystem path or binary file-like object

        Returns:
            FileSource with the resolved size

        Raises:
            UploadFileNotFoundError: If the path is missing or unreadable
            InvalidFileArgumentError: If file is neither a path nor file-like
        """
        if isinstance(file, (str, os.PathLike)):
            return self._resolve_path(Path(file))

        if file is None or isinstance(file, (bytes, bytearray, int, float)) or not hasattr(file, 'read'):
            raise InvalidFileArgumentError("Please pass in a valid file path or file object.")

        name = getattr(file, 'name', None)
        return FileSource(
            size=self._declared_size(file),
            stream=file,
            name=Path(name).name if isinstance(name, str) else None
        )

    def _resolve_path(self, path: Path) -> FileSource:
        try:
            stat = path.stat()
        except OSError as e:
            raise UploadFileNotFoundError() from e

        if not path.is_file() or not os.access(path, os.R_OK):
            raise UploadFileNotFoundError()

        return FileSource(size=stat.st_size, path=path, name=path.name)

    @staticmethod
    def _declared_size(file: Any) -> int:
        """Size of a file-like object: its `size` attribute, len(), else remaining bytes."""
        size = getattr(file, 'size', None)
        if isinstance(size, int) and not isinstance(size, bool):
            return size
        if hasattr(file, '__len__'):
            return len(file)

        try:
            position = file.tell()
            end = file.seek(0, os.SEEK_END)
            file.seek(position)
        except (AttributeError, OSError, ValueError) as e:
            raise InvalidFileArgumentError(
                "Unable to determine the size of the file object."
            ) from e
        return end - position


class AsyncFileReader:
    """
    Asynchronous file reader for chunk-based reading.

    Uses aiofiles for paths. Caller-supplied file objects are read in a
    worker thread and are never closed here: only handles opened by the
    reader are owned by it.
    """

    def __init__(self):
        """Initialize file reader."""
        self._logger = logging.getLogger('vimeopy.upload.file')
        self._file_handle = None
        self._stream = None
        self._stream_origin = 0

    @property
    def is_open(self) -> bool:
        return self._file_handle is not None or self._stream is not None

    async def open_file(self, source: FileSource) -> None:
        """
        Open the source for reading.

        Raises:
            OSError: If the file cannot be opened
        """
        if self.is_open:
            await self.close_file()

        if source.is_path:
            self._file_handle = await aiofiles.open(source.path, 'rb')
        else:
            self._stream = source.stream
            self._stream_origin = await asyncio.to_thread(source.stream.tell)

    async def seek(self, position: int) -> None:
        """Seek to a position relative to the start of the upload."""
        if self._file_handle is not None:
            await self._file_handle.seek(position)
        elif self._stream is not None:
            await asyncio.to_thread(self._stream.seek, self._stream_origin + position)
        else:
            raise ValueError("File is not open")

    async def read(self, size: int) -> bytes:
        """Read up to `size` bytes from the current position."""
        if self._file_handle is not None:
            return await self._file_handle.read(size)
        if self._stream is not None:
            return await asyncio.to_thread(self._stream.read, size)
        raise ValueError("File is not open")

    async def close_file(self) -> None:
        """Close the currently open file."""
        handle, self._file_handle = self._file_handle, None
        self._stream = None
        if handle is not None:
            await handle.close()
            self._logger.debug("File handle closed")


class StreamWindow:
    """
    Seekable view of a caller stream for synchronous readers.

    Offsets count from the stream position when the window was created
    and reads stop at `size`, so a reader that seeks to absolute offsets
    sees exactly the bytes the upload was sized for. The underlying
    stream is never closed.

    Example:
        >>> stream.seek(6)
        >>> window = StreamWindow(stream, size=13)
        >>> window.seek(0)
        >>> window.read(4)  # bytes 6-9 of the stream
    """

    def __init__(self, stream: Any, size: int, origin: Optional[int] = None):
        self._stream = stream
        self._size = size
        self._origin = stream.tell() if origin is None else origin
        self._position = 0

    @property
    def name(self) -> Optional[str]:
        return getattr(self._stream, 'name', None)

    def tell(self) -> int:
        return self._position

    def seekable(self) -> bool:
        return True

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        if whence == os.SEEK_SET:
            position = offset
        elif whence == os.SEEK_CUR:
            position = self._position + offset
        elif whence == os.SEEK_END:
            position = self._size + offset
        else:
            raise ValueError(f"Invalid whence: {whence}")

        if position < 0:
            raise ValueError(f"Negative seek position {position}")
        self._position = position
        return position

    def read(self, size: Optional[int] = -1) -> bytes:
        remaining = max(self._size - self._position, 0)
        if size is None or size < 0 or size > remaining:
            size = remaining
        if size == 0:
            return b''

        self._stream.seek(self._origin + self._position)
        data = self._stream.read(size)
        self._position += len(data)
        return data

"""
Protocol definitions for upload module.

Defines interfaces (protocols) for dependency injection and strategy pattern.
"""
from typing import Any, Mapping, Protocol, Union

from .callbacks import UploadCallbacks
from .models import FileSource, UploadSession
from ..api.request import ApiResponse, RequestOptions


class UploadStrategy(Protocol):
    """
    Protocol for byte transfer strategies.

    A strategy reports only through the callbacks: zero or more progress
    events followed by exactly one terminal event. run() returns once that
    terminal event has fired and does not raise, except for
    asyncio.CancelledError when the upload is aborted.
    """

    APPROACH: str

    async def run(
        self,
        source: FileSource,
        session: UploadSession,
        callbacks: UploadCallbacks
    ) -> None:
        """
        Transfer the file described by `source` to `session.upload_link`.

        Args:
            source: Resolved local file
            session: Negotiated upload session
            callbacks: Caller callbacks
        """
        ...


class ApiClientProtocol(Protocol):
    """Protocol for the API client used for session negotiation."""

    async def request(
        self,
        options: Union[str, Mapping[str, Any], RequestOptions]
    ) -> ApiResponse:
        ...

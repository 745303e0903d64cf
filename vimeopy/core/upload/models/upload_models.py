"""
Data models for upload module.

Uses dataclasses for type-safe data structures.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, Mapping, Optional, Union
import os

FileArgument = Union[str, os.PathLike, BinaryIO]


class UploadState(str, Enum):
    """States of an upload strategy run."""
    IDLE = 'idle'
    OPENING = 'opening'
    STREAMING = 'streaming'
    CONFIRMING = 'confirming'
    COMPLETE = 'complete'
    FAILED = 'failed'
    CANCELLED = 'cancelled'

    @property
    def is_terminal(self) -> bool:
        return self in (UploadState.COMPLETE, UploadState.FAILED, UploadState.CANCELLED)


@dataclass(frozen=True)
class UploadParams:
    """
    Session negotiation parameters.

    `approach` and `size` are always set by the SDK. Everything the caller
    passed is kept in `extra` (top level) and `upload_extra` (other fields
    of the caller's `upload` object).

    Example:
        >>> params = UploadParams.from_caller(
        ...     {'name': 'Clip', 'upload': {'approach': 'post', 'redirect_url': 'x'}},
        ...     approach='tus', size=1024
        ... )
        >>> params.to_query()
        {'name': 'Clip', 'upload': {'redirect_url': 'x', 'approach': 'tus', 'size': 1024}}
    """
    approach: str
    size: int
    file_name: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)
    upload_extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_caller(
        cls,
        params: Optional[Mapping[str, Any]],
        approach: str,
        size: int,
        file_name: Optional[str] = None
    ) -> 'UploadParams':
        """Split caller params into pass-through fields; the caller's dict is not modified."""
        extra = dict(params or {})
        upload = extra.pop('upload', None)
        upload_extra = {
            key: value for key, value in dict(upload or {}).items()
            if key not in ('approach', 'size')
        }
        return cls(
            approach=approach,
            size=size,
            file_name=file_name,
            extra=extra,
            upload_extra=upload_extra
        )

    def to_query(self) -> Dict[str, Any]:
        """Query sent to the session-creation endpoint."""
        query = dict(self.extra)
        query['upload'] = {
            **self.upload_extra,
            'approach': self.approach,
            'size': self.size,
        }
        if self.file_name is not None:
            query['file_name'] = self.file_name
        return query


@dataclass(frozen=True)
class UploadSession:
    """
    One negotiated upload attempt.

    Attributes:
        resource_uri: URI of the video being created or replaced
        upload_link: URL the file bytes are sent to
        approach: Upload protocol chosen by the SDK
        size: Declared file size in bytes
        response: Raw negotiation response body
    """
    resource_uri: str
    upload_link: str
    approach: str
    size: int
    response: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_response(
        cls,
        body: Mapping[str, Any],
        approach: str,
        size: int,
        resource_uri: Optional[str] = None
    ) -> 'UploadSession':
        """
        Create a session from the negotiation response.

        Args:
            body: Response body with `uri` and `upload.upload_link`
            approach: Upload protocol chosen by the SDK
            size: Declared file size
            resource_uri: Overrides `uri` (replace uploads)

        Raises:
            KeyError: If the upload link or the resource URI is missing
        """
        upload_link = body['upload']['upload_link']
        uri = resource_uri if resource_uri is not None else body['uri']
        return cls(
            resource_uri=uri,
            upload_link=upload_link,
            approach=approach,
            size=size,
            response=dict(body)
        )


@dataclass
class UploadRequest:
    """
    Structured upload request.

    Attributes:
        file: Path or binary file-like object
        params: Caller params for the session-creation call
        replace_uri: URI of the video to replace (creates a new version)
        strategy: Upload strategy name, None for the configured default
    """
    file: FileArgument
    params: Dict[str, Any] = field(default_factory=dict)
    replace_uri: Optional[str] = None
    strategy: Optional[str] = None

    @property
    def is_replace(self) -> bool:
        return self.replace_uri is not None


@dataclass(frozen=True)
class UploadProgress:
    """
    Upload progress information.

    Attributes:
        bytes_uploaded: Bytes sent so far
        bytes_total: Total file size
    """
    bytes_uploaded: int
    bytes_total: int

    @property
    def percentage(self) -> float:
        """Returns upload progress as percentage."""
        if self.bytes_total == 0:
            return 100.0
        return (self.bytes_uploaded / self.bytes_total) * 100


@dataclass(frozen=True)
class FileSource:
    """
    Resolved local file.

    Exactly one of `path` and `stream` is set. `size` is resolved once and
    never recomputed.
    """
    size: int
    path: Optional[Path] = None
    stream: Optional[BinaryIO] = None
    name: Optional[str] = None

    @property
    def is_path(self) -> bool:
        return self.path is not None


@dataclass
class TransferState:
    """
    Progress of one streaming upload.

    Attributes:
        reader: Open file reader, owned by a single strategy run
        total_size: Declared size, immutable
        bytes_confirmed: Highest offset acknowledged by the server
        read_error: Local read failure captured while streaming
    """
    reader: Any
    total_size: int
    bytes_confirmed: int = 0
    read_error: Optional[BaseException] = None

    def confirm(self, offset: int) -> None:
        """Record a server-confirmed offset, clamped to [0, total_size]."""
        self.bytes_confirmed = min(max(offset, 0), self.total_size)

    @property
    def is_complete(self) -> bool:
        return self.bytes_confirmed >= self.total_size


CompleteCallback = Callable[[str], Any]
ProgressCallback = Callable[[int, int], Any]
ErrorCallback = Callable[[BaseException], Any]
CancelCallback = Callable[[], Any]

"""
Upload module for Vimeo video uploads.

Negotiates an upload session with the API and transfers the file with a
pluggable strategy: tus (default) or Content-Range resumable streaming.
"""
from .facade import UploadFacade
from .coordinator import UploadCoordinator
from .callbacks import UploadCallbacks, UploadHandle
from .models import (
    UploadState,
    UploadParams,
    UploadSession,
    UploadRequest,
    UploadProgress,
    FileSource,
)
from .protocols import UploadStrategy, ApiClientProtocol
from .strategies import ResumableStreamingStrategy, TusUploadStrategy

__all__ = [
    # Main classes
    'UploadFacade',
    'UploadCoordinator',
    'UploadCallbacks',
    'UploadHandle',

    # Models
    'UploadState',
    'UploadParams',
    'UploadSession',
    'UploadRequest',
    'UploadProgress',
    'FileSource',

    # Strategies
    'UploadStrategy',
    'ResumableStreamingStrategy',
    'TusUploadStrategy',

    # Protocols
    'ApiClientProtocol',
]

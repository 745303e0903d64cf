"""Upload models."""
from .upload_models import (
    UploadState,
    UploadParams,
    UploadSession,
    UploadRequest,
    UploadProgress,
    FileSource,
    TransferState,
    FileArgument,
    CompleteCallback,
    ProgressCallback,
    ErrorCallback,
    CancelCallback,
)

__all__ = [
    'UploadState',
    'UploadParams',
    'UploadSession',
    'UploadRequest',
    'UploadProgress',
    'FileSource',
    'TransferState',
    'FileArgument',
    'CompleteCallback',
    'ProgressCallback',
    'ErrorCallback',
    'CancelCallback',
]

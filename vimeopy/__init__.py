"""
vimeopy - Async Python library for the Vimeo API.

Usage:
    >>> from vimeopy import VimeoClient
    >>>
    >>> async with VimeoClient(access_token='...') as vimeo:
    ...     uri = await vimeo.upload('clip.mp4', {'name': 'Clip'})
    ...     video = await vimeo.request(f'{uri}?fields=link')
"""
from .client import VimeoClient

# Configuration
from .core.api import (
    APIConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    UploadConfig,
    Credentials,
    AsyncAPIClient,
    AsyncAuthService,
    AiohttpTransport,
    ApiResponse,
    RequestOptions,
)

# Uploads
from .core.upload import UploadFacade, UploadCallbacks, UploadHandle, UploadState

from .core.exceptions import (
    VimeoException,
    VimeoRequestError,
    TransportError,
    HttpStatusError,
    UploadError,
    InvalidFileArgumentError,
    UploadFileNotFoundError,
    NegotiationError,
    RangeQueryError,
)
from .core.logging import setup_logging

__version__ = '1.0.0'

__all__ = [
    'VimeoClient',
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'UploadConfig',
    'Credentials',
    'AsyncAPIClient',
    'AsyncAuthService',
    'AiohttpTransport',
    'ApiResponse',
    'RequestOptions',
    'UploadFacade',
    'UploadCallbacks',
    'UploadHandle',
    'UploadState',
    'VimeoException',
    'VimeoRequestError',
    'TransportError',
    'HttpStatusError',
    'UploadError',
    'InvalidFileArgumentError',
    'UploadFileNotFoundError',
    'NegotiationError',
    'RangeQueryError',
    'setup_logging',
    '__version__',
]

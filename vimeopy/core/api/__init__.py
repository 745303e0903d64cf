"""Vimeo API module: configuration, transport, requests and auth."""
from .config import APIConfig, ProxyConfig, SSLConfig, TimeoutConfig, UploadConfig, Credentials
from .transport import AiohttpTransport, HttpTransport, HttpResponse
from .request import RequestBuilder, RequestOptions, ResponseHandler, ApiResponse
from .async_client import AsyncAPIClient
from .async_auth import AsyncAuthService, AuthEndpoints

__all__ = [
    # Client
    'AsyncAPIClient',
    'AsyncAuthService',
    'AuthEndpoints',

    # Transport
    'AiohttpTransport',
    'HttpTransport',
    'HttpResponse',

    # Requests
    'RequestBuilder',
    'RequestOptions',
    'ResponseHandler',
    'ApiResponse',

    # Configuration
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'UploadConfig',
    'Credentials',
]

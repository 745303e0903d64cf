"""Request building and response parsing."""
from .request_builder import RequestBuilder, RequestOptions, PreparedRequest
from .response_handler import ResponseHandler, ApiResponse

__all__ = [
    'RequestBuilder',
    'RequestOptions',
    'PreparedRequest',
    'ResponseHandler',
    'ApiResponse',
]

"""Pytest fixtures for vimeopy tests."""
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from vimeopy.core.api.request import ApiResponse
from vimeopy.core.api.transport import HttpResponse
from vimeopy.core.exceptions import TransportError
from vimeopy.core.upload.callbacks import UploadCallbacks

VIDEO_CONTENT = b"0123456789ABCDEFGHIJ"  # 20 bytes
UPLOAD_LINK = 'https://upload.example.com/u/abc'


class RecordedRequest:
    """One request seen by FakeTransport."""

    def __init__(self, method: str, url: str, headers: Dict[str, str], body: bytes):
        self.method = method
        self.url = url
        self.headers = headers
        self.body = body

    @property
    def is_range_query(self) -> bool:
        return self.headers.get('Content-Range') == 'bytes */*'


class FakeTransport:
    """
    Scripted HttpTransport.

    Data PUTs consume the streamed body. `put_actions` scripts each data
    PUT: None succeeds, an int interrupts the connection after that many
    bytes, an exception is raised after the body was read.
    `range_responses` scripts each range query (HttpResponse or exception).
    """

    def __init__(self, put_actions=None, range_responses=None):
        self.put_actions: List[Any] = list(put_actions or [])
        self.range_responses: List[Any] = list(range_responses or [])
        self.requests: List[RecordedRequest] = []

    @staticmethod
    def resume_incomplete(last_byte: Optional[int]) -> HttpResponse:
        """308 answer to a range query."""
        headers = {} if last_byte is None else {'Range': f"bytes=0-{last_byte}"}
        return HttpResponse(status=308, headers=headers)

    @property
    def data_puts(self) -> List[RecordedRequest]:
        return [r for r in self.requests if not r.is_range_query]

    @property
    def range_queries(self) -> List[RecordedRequest]:
        return [r for r in self.requests if r.is_range_query]

    async def perform_request(self, method, url, headers=None, body=None, allow_redirects=True):
        headers = dict(headers or {})
        assert allow_redirects is False

        if headers.get('Content-Range') == 'bytes */*':
            self.requests.append(RecordedRequest(method, url, headers, body or b''))
            result = self.range_responses.pop(0)
            if isinstance(result, BaseException):
                raise result
            return result

        action = self.put_actions.pop(0) if self.put_actions else None
        received = b''
        async for chunk in body:
            received += chunk
            if isinstance(action, int) and len(received) >= action:
                received = received[:action]
                break
        await body.aclose()
        self.requests.append(RecordedRequest(method, url, headers, received))

        if isinstance(action, int):
            raise TransportError("Connection reset by peer")
        if isinstance(action, BaseException):
            raise action
        return HttpResponse(status=200)


class FakeApiClient:
    """API client that records requests and returns a scripted response."""

    def __init__(self, body: Optional[Dict[str, Any]] = None, error: Optional[BaseException] = None):
        self.body = body if body is not None else {
            'uri': '/videos/123',
            'name': 'Untitled',
            'upload': {'upload_link': UPLOAD_LINK},
        }
        self.error = error
        self.requests = []
        self.transport = None

    async def request(self, options):
        self.requests.append(options)
        if self.error is not None:
            raise self.error
        return ApiResponse(status_code=200, body=self.body)


class CallbackRecorder:
    """Records everything reported through UploadCallbacks."""

    def __init__(self):
        self.events: List[Any] = []

    @property
    def progress(self):
        return [e[1:] for e in self.events if e[0] == 'progress']

    @property
    def terminal(self):
        return [e for e in self.events if e[0] != 'progress']

    def callbacks(self) -> UploadCallbacks:
        return UploadCallbacks(
            on_complete=lambda uri: self.events.append(('complete', uri)),
            on_progress=lambda sent, total: self.events.append(('progress', sent, total)),
            on_error=lambda error: self.events.append(('error', error)),
            on_cancel=lambda: self.events.append(('cancel',))
        )


@pytest.fixture
def video_file():
    """Temporary 20 byte file."""
    fd, path = tempfile.mkstemp(suffix='.mp4')
    os.write(fd, VIDEO_CONTENT)
    os.close(fd)
    yield Path(path)
    os.unlink(path)


@pytest.fixture
def recorder():
    return CallbackRecorder()


@pytest.fixture
def api_client():
    return FakeApiClient()


@pytest.fixture
def make_transport():
    """Factory for scripted transports."""
    return FakeTransport


@pytest.fixture
def make_api_client():
    """Factory for fake API clients."""
    return FakeApiClient

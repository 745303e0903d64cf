"""Tests for the tus upload strategy."""
import asyncio
import io

import pytest
from aiohttp import web
from unittest.mock import AsyncMock, Mock, patch
from tusclient.exceptions import TusCommunicationError

from vimeopy.core.upload.models import FileSource, UploadSession, UploadState
from vimeopy.core.upload.services import StreamWindow
from vimeopy.core.upload.strategies import TusUploadStrategy

UPLOAD_LINK = 'https://files.tus.example.com/upload/abc'


class FakeUploader:
    """
    Stand-in for tuspy's AsyncUploader.

    `outcomes` scripts each upload_chunk() call: None sends a chunk, an
    exception is raised. `server_offsets` scripts get_offset() answers;
    when empty the current offset is returned.
    """

    def __init__(self, size, chunk_size, outcomes=None, server_offsets=None):
        self.size = size
        self.chunk_size = chunk_size
        self.offset = 0
        self.outcomes = list(outcomes or [])
        self.server_offsets = list(server_offsets or [])
        self.chunk_calls = 0
        self.offset_queries = 0

    async def upload_chunk(self):
        self.chunk_calls += 1
        outcome = self.outcomes.pop(0) if self.outcomes else None
        if outcome is not None:
            raise outcome
        self.offset = min(self.offset + self.chunk_size, self.size)

    def get_offset(self):
        self.offset_queries += 1
        if self.server_offsets:
            return self.server_offsets.pop(0)
        return self.offset


def tus_error(status=None):
    return TusCommunicationError("tus request failed", status_code=status)


@pytest.fixture
def session():
    return UploadSession(
        resource_uri='/videos/123',
        upload_link=UPLOAD_LINK,
        approach='tus',
        size=20
    )


@pytest.fixture
def source(video_file):
    return FileSource(size=20, path=video_file, name=video_file.name)


@pytest.fixture
def sleep():
    with patch('vimeopy.core.upload.strategies.tus.asyncio.sleep', new_callable=AsyncMock) as mock:
        yield mock


def strategy_for(uploader, **kwargs):
    return TusUploadStrategy(
        chunk_size=uploader.chunk_size,
        uploader_factory=lambda source, session, chunk_size: uploader,
        **kwargs
    )


class TestTusUpload:
    """Test suite for successful tus uploads."""

    @pytest.mark.asyncio
    async def test_progress_and_completion(self, source, session, recorder, sleep):
        """Test progress follows the server offset and completion reports the resource URI."""
        uploader = FakeUploader(20, 8)
        strategy = strategy_for(uploader)

        await strategy.run(source, session, recorder.callbacks())

        assert recorder.progress == [(8, 20), (16, 20), (20, 20)]
        assert recorder.terminal == [('complete', '/videos/123')]
        assert strategy.state == UploadState.COMPLETE
        sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_file(self, session, recorder):
        """Test a zero byte upload completes without sending chunks."""
        uploader = FakeUploader(0, 8)
        session = UploadSession('/videos/1', UPLOAD_LINK, 'tus', 0)

        await strategy_for(uploader).run(
            FileSource(size=0, stream=io.BytesIO()), session, recorder.callbacks()
        )

        assert uploader.chunk_calls == 0
        assert recorder.terminal == [('complete', '/videos/1')]


class TestTusRetries:
    """Test suite for the retry schedule."""

    @pytest.mark.asyncio
    async def test_retries_with_delays(self, source, session, recorder, sleep):
        """Test failed chunks are retried after 0 and 1 seconds."""
        uploader = FakeUploader(20, 8, outcomes=[tus_error(), tus_error()])

        await strategy_for(uploader).run(source, session, recorder.callbacks())

        assert [c.args[0] for c in sleep.call_args_list] == [0, 1]
        assert uploader.offset_queries == 2
        assert recorder.terminal == [('complete', '/videos/123')]

    @pytest.mark.asyncio
    async def test_exhausted_retries_report_error_unwrapped(self, source, session, recorder, sleep):
        """Test the last tus error is reported as is after 0, 1, 3, 5 second waits."""
        errors = [tus_error(500) for _ in range(5)]
        uploader = FakeUploader(20, 8, outcomes=errors)
        strategy = strategy_for(uploader)

        await strategy.run(source, session, recorder.callbacks())

        assert [c.args[0] for c in sleep.call_args_list] == [0, 1, 3, 5]
        assert recorder.terminal == [('error', errors[4])]
        assert strategy.state == UploadState.FAILED

    @pytest.mark.asyncio
    async def test_attempts_reset_after_progress(self, source, session, recorder, sleep):
        """Test a successful chunk resets the retry counter."""
        outcomes = [tus_error(), None, tus_error(), tus_error(), tus_error(), tus_error()]
        uploader = FakeUploader(20, 8, outcomes=outcomes)

        await strategy_for(uploader).run(source, session, recorder.callbacks())

        assert [c.args[0] for c in sleep.call_args_list] == [0, 0, 1, 3, 5]
        assert recorder.terminal == [('complete', '/videos/123')]

    @pytest.mark.asyncio
    async def test_resumes_from_server_offset(self, source, session, recorder, sleep):
        """Test the offset is re-read from the server before retrying."""
        uploader = FakeUploader(20, 8, outcomes=[tus_error()], server_offsets=[4])

        await strategy_for(uploader).run(source, session, recorder.callbacks())

        assert recorder.progress[0] == (12, 20)
        assert recorder.terminal == [('complete', '/videos/123')]

    @pytest.mark.asyncio
    async def test_custom_retry_delays(self, source, session, recorder, sleep):
        uploader = FakeUploader(20, 8, outcomes=[tus_error(), tus_error()])

        await strategy_for(uploader, retry_delays=(2,)).run(source, session, recorder.callbacks())

        assert [c.args[0] for c in sleep.call_args_list] == [2]
        assert recorder.terminal[0][0] == 'error'

    @pytest.mark.asyncio
    @pytest.mark.parametrize('status', [400, 403, 404, 410])
    async def test_client_errors_are_not_retried(self, source, session, recorder, sleep, status):
        """Test an expired or rejected upload link fails without retrying."""
        error = tus_error(status)
        uploader = FakeUploader(20, 8, outcomes=[error])

        await strategy_for(uploader).run(source, session, recorder.callbacks())

        sleep.assert_not_called()
        assert uploader.chunk_calls == 1
        assert uploader.offset_queries == 0
        assert recorder.terminal == [('error', error)]

    @pytest.mark.asyncio
    @pytest.mark.parametrize('status', [409, 423, 500, 503])
    async def test_conflict_and_server_errors_are_retried(self, source, session, recorder, sleep, status):
        uploader = FakeUploader(20, 8, outcomes=[tus_error(status)])

        await strategy_for(uploader).run(source, session, recorder.callbacks())

        assert [c.args[0] for c in sleep.call_args_list] == [0]
        assert uploader.offset_queries == 1
        assert recorder.terminal == [('complete', '/videos/123')]

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(self, source, session, recorder, sleep):
        error = ValueError("bad offset header")
        uploader = FakeUploader(20, 8, outcomes=[error])

        await strategy_for(uploader).run(source, session, recorder.callbacks())

        sleep.assert_not_called()
        assert recorder.terminal == [('error', error)]


class TestTusSetup:
    """Test suite for creating the tuspy uploader."""

    @pytest.mark.asyncio
    async def test_factory_failure_is_reported(self, source, session, recorder):
        error = tus_error(404)

        def factory(source, session, chunk_size):
            raise error

        strategy = TusUploadStrategy(uploader_factory=factory)
        await strategy.run(source, session, recorder.callbacks())

        assert recorder.terminal == [('error', error)]
        assert strategy.state == UploadState.FAILED

    def test_default_factory_path(self, source, session):
        """Test the tuspy uploader is bound to the upload link without creating a new upload."""
        with patch('vimeopy.core.upload.strategies.tus.TusClient') as client_cls:
            strategy = TusUploadStrategy(chunk_size=4096, headers={'X-Test': '1'})
            strategy._create_uploader(source, session, 4096)

        client_cls.assert_called_once_with(UPLOAD_LINK, headers={'X-Test': '1'})
        client_cls.return_value.async_uploader.assert_called_once_with(
            url=UPLOAD_LINK,
            chunk_size=4096,
            retries=0,
            file_path=str(source.path)
        )

    def test_default_factory_stream(self, session):
        stream = io.BytesIO(b"data")
        with patch('vimeopy.core.upload.strategies.tus.TusClient') as client_cls:
            TusUploadStrategy()._create_uploader(FileSource(size=4, stream=stream), session, 1024)

        kwargs = client_cls.return_value.async_uploader.call_args.kwargs
        assert isinstance(kwargs['file_stream'], StreamWindow)
        assert kwargs['file_stream'].read() == b"data"
        assert 'file_path' not in kwargs

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError):
            TusUploadStrategy(chunk_size=0)


class TestTusCancellation:
    """Test suite for cancelling a tus upload."""

    @pytest.mark.asyncio
    async def test_cancel_during_chunk(self, source, session, recorder):
        """Test cancellation propagates without a terminal callback."""
        uploader = FakeUploader(20, 8)
        started = asyncio.Event()

        async def hang():
            started.set()
            await asyncio.Event().wait()

        uploader.upload_chunk = Mock(side_effect=hang)
        strategy = strategy_for(uploader)

        task = asyncio.ensure_future(strategy.run(source, session, recorder.callbacks()))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert recorder.terminal == []
        assert strategy.state == UploadState.CANCELLED


class LocalTusServer:
    """Minimal tus endpoint (HEAD and PATCH) on a local port."""

    def __init__(self, patch_status=204):
        self.patch_status = patch_status
        self.received = bytearray()
        self.patch_calls = 0
        self.url = None
        self._runner = None

    async def head(self, request):
        return web.Response(headers={
            'Upload-Offset': str(len(self.received)),
            'Tus-Resumable': '1.0.0',
        })

    async def patch(self, request):
        self.patch_calls += 1
        body = await request.read()
        if self.patch_status != 204:
            return web.Response(status=self.patch_status)
        self.received.extend(body)
        return web.Response(status=204, headers={
            'Upload-Offset': str(len(self.received)),
            'Tus-Resumable': '1.0.0',
        })

    async def __aenter__(self):
        app = web.Application()
        app.router.add_route('HEAD', '/upload/1', self.head)
        app.router.add_route('PATCH', '/upload/1', self.patch)
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, '127.0.0.1', 0)
        await site.start()
        port = self._runner.addresses[0][1]
        self.url = f"http://127.0.0.1:{port}/upload/1"
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self._runner.cleanup()


class TestTusWithServer:
    """Test suite running tuspy's uploader against a local tus endpoint."""

    @pytest.mark.asyncio
    async def test_stream_uploads_from_current_position(self, recorder):
        """Test only the bytes after the stream position are sent."""
        stream = io.BytesIO(b"HEADERpayload-bytes")
        stream.seek(6)

        async with LocalTusServer() as server:
            session = UploadSession('/videos/1', server.url, 'tus', 13)
            strategy = TusUploadStrategy(chunk_size=4)
            await strategy.run(FileSource(size=13, stream=stream), session, recorder.callbacks())

        assert bytes(server.received) == b"payload-bytes"
        assert recorder.progress[-1] == (13, 13)
        assert recorder.terminal == [('complete', '/videos/1')]
        assert not stream.closed

    @pytest.mark.asyncio
    async def test_expired_link_fails_after_one_request(self, source, recorder):
        async with LocalTusServer(patch_status=404) as server:
            session = UploadSession('/videos/1', server.url, 'tus', 20)
            strategy = TusUploadStrategy(chunk_size=8)
            await strategy.run(source, session, recorder.callbacks())

        assert server.patch_calls == 1
        kind, error = recorder.terminal[0]
        assert kind == 'error'
        assert isinstance(error, TusCommunicationError)
        assert strategy.state == UploadState.FAILED

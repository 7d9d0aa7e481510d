import asyncio
from datetime import datetime

import httpx
import pytest

from voiceplayer.core.errors import DownloadError
from voiceplayer.modules.recordings.schemas import RecordingDescriptor
from voiceplayer.modules.sharing.download import (
    OPENED_NOTICE,
    DownloadOutcome,
    DownloadProgress,
    Downloader,
    download_filename,
)
from voiceplayer.modules.sharing.share import COPIED_NOTICE, DEFAULT_SHARE_TEXT, ShareOutcome, share

PAGE_URL = "https://player.example/s/abc123"


def _descriptor(**overrides) -> RecordingDescriptor:
    fields = dict(
        id="42", short_id="abc123", title="Voice Message for Ola",
        file_url="https://cdn.example/v.mp4", mime_type="video/mp4", is_video=True,
    )
    fields.update(overrides)
    return RecordingDescriptor(**fields)


class FakeShareHost:
    def __init__(self, *, native=False, native_error=None, clipboard_error=None):
        self.supports_native_share = native
        self.native_error = native_error
        self.clipboard_error = clipboard_error
        self.shared = []
        self.clipboard = []
        self.notices = []

    async def native_share(self, payload):
        self.shared.append(payload)
        if self.native_error:
            raise self.native_error

    async def write_clipboard(self, text):
        if self.clipboard_error:
            raise self.clipboard_error
        self.clipboard.append(text)

    def notify(self, message):
        self.notices.append(message)


class FakeDownloadHost:
    def __init__(self, *, save_error=None, direct_error=None, open_error=None):
        self.save_error = save_error
        self.direct_error = direct_error
        self.open_error = open_error
        self.saved = []
        self.direct = []
        self.opened = []
        self.notices = []

    def save_bytes(self, data, filename, mime_type):
        if self.save_error:
            raise self.save_error
        self.saved.append((data, filename, mime_type))

    def direct_link(self, url, filename):
        if self.direct_error:
            raise self.direct_error
        self.direct.append((url, filename))

    def open_in_new_context(self, url):
        if self.open_error:
            raise self.open_error
        self.opened.append(url)

    def notify(self, message):
        self.notices.append(message)


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ---- share ----

@pytest.mark.asyncio
async def test_native_share_sends_title_text_and_url():
    host = FakeShareHost(native=True)
    assert await share(_descriptor(), host, page_url=PAGE_URL) is ShareOutcome.NATIVE
    payload = host.shared[0]
    assert payload.title == "Voice Message for Ola"
    assert payload.text == DEFAULT_SHARE_TEXT
    assert payload.url == PAGE_URL
    assert host.clipboard == []


@pytest.mark.asyncio
async def test_dismissed_share_sheet_is_not_an_error():
    host = FakeShareHost(native=True, native_error=RuntimeError("AbortError"))
    assert await share(_descriptor(), host, page_url=PAGE_URL) is ShareOutcome.DISMISSED
    assert host.notices == []


@pytest.mark.asyncio
async def test_clipboard_fallback_notifies():
    host = FakeShareHost()
    assert await share(_descriptor(), host, page_url=PAGE_URL) is ShareOutcome.COPIED
    assert host.clipboard == [PAGE_URL]
    assert host.notices == [COPIED_NOTICE]


@pytest.mark.asyncio
async def test_clipboard_failure_reports_failed():
    host = FakeShareHost(clipboard_error=PermissionError("denied"))
    assert await share(_descriptor(), host, page_url=PAGE_URL) is ShareOutcome.FAILED
    assert host.notices == []


# ---- download ----

def test_download_filename_uses_timestamp_and_mime():
    now = datetime(2025, 3, 2, 10, 15, 7)
    assert download_filename(_descriptor(), now) == "voice-message-2025-03-02T10-15-07.mp4"
    assert download_filename(_descriptor(mime_type="audio/webm", is_video=False), now).endswith(".webm")
    assert download_filename(_descriptor(mime_type="application/octet-stream", is_video=False), now).endswith(".mp3")


def test_progress_percent():
    assert DownloadProgress(50, 200).percent == 25.0
    assert DownloadProgress(50, 0).percent is None
    assert DownloadProgress(300, 200).percent == 100.0


def test_progress_label_uses_human_sizes():
    assert DownloadProgress(512 * 1024, 1024 * 1024).label == "512 KB of 1 MB"
    assert DownloadProgress(2048, 0).label == "2 KB"


@pytest.mark.asyncio
async def test_streamed_download_reports_progress():
    body = b"x" * 10
    progress = []
    host = FakeDownloadHost()
    async with _client(lambda request: httpx.Response(200, content=body)) as client:
        downloader = Downloader(client, host, on_progress=progress.append, chunk_size=4)
        assert await downloader.download(_descriptor()) is DownloadOutcome.STREAMED
    data, filename, mime = host.saved[0]
    assert data == body
    assert filename.startswith("voice-message-") and filename.endswith(".mp4")
    assert mime == "video/mp4"
    assert [p.received for p in progress] == [4, 8, 10]
    assert progress[-1].total == 10
    assert progress[-1].percent == 100.0


@pytest.mark.asyncio
async def test_missing_content_length_uses_descriptor_size():
    async def chunks():
        yield b"abcd"
        yield b"ef"

    progress = []
    async with _client(lambda request: httpx.Response(200, content=chunks())) as client:
        downloader = Downloader(client, FakeDownloadHost(), on_progress=progress.append)
        await downloader.download(_descriptor(file_size_bytes=12))
    assert progress[-1].received == 6
    assert progress[-1].total == 12
    assert progress[-1].percent == 50.0


@pytest.mark.asyncio
async def test_http_error_falls_back_to_direct_link():
    host = FakeDownloadHost()
    async with _client(lambda request: httpx.Response(403)) as client:
        outcome = await Downloader(client, host).download(_descriptor())
    assert outcome is DownloadOutcome.DIRECT_LINK
    assert host.saved == []
    assert host.direct[0][0] == "https://cdn.example/v.mp4"


@pytest.mark.asyncio
async def test_network_error_and_direct_link_failure_open_new_context():
    def handler(request):
        raise httpx.ConnectError("cors", request=request)

    host = FakeDownloadHost(direct_error=RuntimeError("no anchor support"))
    async with _client(handler) as client:
        outcome = await Downloader(client, host).download(_descriptor())
    assert outcome is DownloadOutcome.OPENED
    assert host.opened == ["https://cdn.example/v.mp4"]
    assert host.notices == [OPENED_NOTICE]


@pytest.mark.asyncio
async def test_all_tiers_failing_raises():
    host = FakeDownloadHost(direct_error=RuntimeError("x"), open_error=RuntimeError("popup blocked"))
    async with _client(lambda request: httpx.Response(500)) as client:
        with pytest.raises(DownloadError):
            await Downloader(client, host).download(_descriptor())


@pytest.mark.asyncio
async def test_cancellation_aborts_without_fallback():
    first_chunk = asyncio.Event()

    async def endless():
        yield b"abcd"
        await asyncio.Event().wait()

    host = FakeDownloadHost()
    async with _client(lambda request: httpx.Response(200, content=endless())) as client:
        downloader = Downloader(client, host, on_progress=lambda p: first_chunk.set())
        task = asyncio.create_task(downloader.download(_descriptor()))
        await asyncio.wait_for(first_chunk.wait(), timeout=1)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
    assert host.saved == host.direct == host.opened == []


@pytest.mark.asyncio
async def test_host_refusing_bytes_falls_back_to_direct_link():
    host = FakeDownloadHost(save_error=RuntimeError("blob URL creation refused"))
    async with _client(lambda request: httpx.Response(200, content=b"abc")) as client:
        outcome = await Downloader(client, host).download(_descriptor())
    assert outcome is DownloadOutcome.DIRECT_LINK
    assert host.direct[0][0] == "https://cdn.example/v.mp4"


@pytest.mark.asyncio
async def test_malformed_url_falls_back_to_direct_link():
    host = FakeDownloadHost()
    async with _client(lambda request: httpx.Response(200)) as client:
        outcome = await Downloader(client, host).download(_descriptor(file_url="https://[bad"))
    assert outcome is DownloadOutcome.DIRECT_LINK


@pytest.mark.asyncio
async def test_progress_fires_for_each_received_chunk():
    async def chunks():
        yield b"ab"
        yield b"cde"

    progress = []
    async with _client(lambda request: httpx.Response(200, content=chunks())) as client:
        await Downloader(client, FakeDownloadHost(), on_progress=progress.append).download(_descriptor())
    assert [p.received for p in progress] == [2, 5]

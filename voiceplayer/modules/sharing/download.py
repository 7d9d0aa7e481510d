"""Saving a recording to the device, degrading gracefully.

Tier 1 streams the file with byte progress and hands the assembled bytes to
the host; any failure there, including the host refusing the bytes, moves
on. Tier 2 asks the host for a plain anchor download of the URL.
Tier 3 opens the URL in a new browsing context and tells the user. A
DownloadError only escapes once all three have failed.

Cancelling the task that runs ``download()`` aborts the streamed read; no
fallback tier runs after a cancellation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Protocol

import httpx

from voiceplayer.core.errors import DownloadError
from voiceplayer.core.formatting import format_file_size
from voiceplayer.modules.recordings.schemas import RecordingDescriptor

log = logging.getLogger("sharing.download")

OPENED_NOTICE = "Could not download file directly. Opening in new tab instead."

_EXTENSIONS = {
    "video/webm": ".webm",
    "audio/webm": ".webm",
    "video/mp4": ".mp4",
    "audio/mp4": ".m4a",
    "audio/mpeg": ".mp3",
    "audio/mp3": ".mp3",
    "audio/ogg": ".ogg",
    "audio/wav": ".wav",
}


@dataclass(frozen=True, slots=True)
class DownloadProgress:
    received: int
    total: int

    @property
    def percent(self) -> float | None:
        if self.total <= 0:
            return None
        return min(self.received / self.total * 100, 100.0)

    @property
    def label(self) -> str:
        if self.total <= 0:
            return format_file_size(self.received)
        return f"{format_file_size(self.received)} of {format_file_size(self.total)}"


class DownloadHost(Protocol):
    def save_bytes(self, data: bytes, filename: str, mime_type: str) -> None: ...

    def direct_link(self, url: str, filename: str) -> None: ...

    def open_in_new_context(self, url: str) -> None: ...

    def notify(self, message: str) -> None: ...


class DownloadOutcome(str, Enum):
    STREAMED = "streamed"
    DIRECT_LINK = "direct_link"
    OPENED = "opened"


def download_filename(descriptor: RecordingDescriptor, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    mime = descriptor.mime_type.split(";", 1)[0].strip().lower()
    extension = _EXTENSIONS.get(mime) or (".mp4" if descriptor.is_video else ".mp3")
    return f"voice-message-{now.strftime('%Y-%m-%dT%H-%M-%S')}{extension}"


class Downloader:
    def __init__(
        self,
        client: httpx.AsyncClient,
        host: DownloadHost,
        *,
        on_progress: Callable[[DownloadProgress], None] | None = None,
        chunk_size: int | None = None,
    ) -> None:
        self.client = client
        self.host = host
        self.on_progress = on_progress
        # None: hand on chunks as the transport delivers them
        self.chunk_size = chunk_size

    async def download(self, descriptor: RecordingDescriptor) -> DownloadOutcome:
        filename = download_filename(descriptor)
        try:
            data = await self._stream(descriptor)
            self.host.save_bytes(data, filename, descriptor.mime_type)
            log.info("saved %s as %s (%s)", descriptor.short_id, filename, format_file_size(len(data)))
            return DownloadOutcome.STREAMED
        except Exception as e:
            log.warning("streamed download of %s failed, falling back to direct link: %s", descriptor.short_id, e)

        try:
            self.host.direct_link(descriptor.file_url, filename)
            return DownloadOutcome.DIRECT_LINK
        except Exception as e:
            log.warning("direct link download of %s failed, opening instead: %s", descriptor.short_id, e)

        try:
            self.host.open_in_new_context(descriptor.file_url)
        except Exception as e:
            log.error("could not open %s: %s", descriptor.file_url, e)
            raise DownloadError(f"all download methods failed for {descriptor.short_id}") from e
        self.host.notify(OPENED_NOTICE)
        return DownloadOutcome.OPENED

    async def _stream(self, descriptor: RecordingDescriptor) -> bytes:
        chunks: list[bytes] = []
        received = 0
        async with self.client.stream("GET", descriptor.file_url) as resp:
            if resp.status_code >= 400:
                raise DownloadError(f"HTTP error! status: {resp.status_code}")
            total = _content_length(resp) or descriptor.file_size_bytes
            async for chunk in resp.aiter_bytes(self.chunk_size):
                chunks.append(chunk)
                received += len(chunk)
                if self.on_progress is not None:
                    self.on_progress(DownloadProgress(received, total))
        return b"".join(chunks)


def _content_length(resp: httpx.Response) -> int:
    raw = resp.headers.get("content-length")
    try:
        return int(raw) if raw else 0
    except ValueError:
        return 0

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from voiceplayer.modules.recordings.schemas import RecordingDescriptor

log = logging.getLogger("sharing.share")

DEFAULT_SHARE_TEXT = "Listen to my voice message"
COPIED_NOTICE = "Link copied to clipboard"


@dataclass(frozen=True, slots=True)
class SharePayload:
    title: str
    text: str
    url: str


class ShareHost(Protocol):
    """Platform hooks the share helper needs (native share sheet, clipboard, toast)."""

    supports_native_share: bool

    async def native_share(self, payload: SharePayload) -> None: ...

    async def write_clipboard(self, text: str) -> None: ...

    def notify(self, message: str) -> None: ...


class ShareOutcome(str, Enum):
    NATIVE = "native"
    DISMISSED = "dismissed"
    COPIED = "copied"
    FAILED = "failed"


async def share(
    descriptor: RecordingDescriptor,
    host: ShareHost,
    *,
    page_url: str,
    description: str | None = None,
) -> ShareOutcome:
    payload = SharePayload(title=descriptor.title, text=description or DEFAULT_SHARE_TEXT, url=page_url)
    if host.supports_native_share:
        try:
            await host.native_share(payload)
        except Exception as e:
            # closing the share sheet surfaces as an error on most platforms
            log.info("native share dismissed for %s: %s", descriptor.short_id, e)
            return ShareOutcome.DISMISSED
        return ShareOutcome.NATIVE

    try:
        await host.write_clipboard(page_url)
    except Exception as e:
        log.error("clipboard copy failed for %s: %s", descriptor.short_id, e)
        return ShareOutcome.FAILED
    host.notify(COPIED_NOTICE)
    return ShareOutcome.COPIED

"""Row -> RecordingDescriptor mapping, one function per backing schema.

These functions never touch the network; they take whatever mapping a source
adapter returned and apply the defaulting rules (no nulls leave this module).
"""
import math
from datetime import datetime
from typing import Any, Mapping

from voiceplayer.core.errors import InvalidRecordingError
from voiceplayer.modules.recordings.schemas import RecordingDescriptor

DEFAULT_TITLE = "Voice Message"


def _text(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _number(value: Any) -> int | float:
    if value is None or isinstance(value, bool):
        return 0
    try:
        num = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(num) or num < 0:
        return 0
    return int(num) if num.is_integer() else num


def _size(value: Any) -> int:
    return int(_number(value))


def _timestamp(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _is_absolute(url: str) -> bool:
    return url.startswith(("http://", "https://"))


def compose_title(product_name: str | None, customer_name: str | None) -> str:
    product = _text(product_name)
    customer = _text(customer_name)
    if product:
        return product
    if customer:
        return f"{DEFAULT_TITLE} for {customer}"
    return DEFAULT_TITLE


def _personalization(row: Mapping[str, Any]) -> dict[str, str | None]:
    return {
        "sender_name": _text(row.get("sender_name")),
        "occasion": _text(row.get("occasion")),
        "custom_message": _text(row.get("custom_message")),
    }


def normalize_primary_row(
    row: Mapping[str, Any], *, storage_base_url: str, slug_column: str = "play_slug"
) -> RecordingDescriptor:
    slug = _text(row.get(slug_column)) or ""
    path = _text(row.get("file_path"))
    if not path:
        raise InvalidRecordingError("primary", slug, "missing file_path")
    file_url = path if _is_absolute(path) else f"{storage_base_url.rstrip('/')}/{path.lstrip('/')}"

    is_video = row.get("type") == "video"
    mime_type = _text(row.get("mime_type")) or ("video/webm" if is_video else "audio/webm")
    record_id = str(row.get("id"))

    return RecordingDescriptor(
        id=record_id,
        recording_id=_text(row.get("recording_id")) or record_id,
        short_id=slug,
        title=compose_title(row.get("product_name"), row.get("customer_name")),
        file_url=file_url,
        duration_seconds=_number(row.get("duration_seconds")),
        file_size_bytes=_size(row.get("size_bytes")),
        mime_type=mime_type,
        is_video=is_video,
        created_at=_timestamp(row.get("created_at")),
        customer_name=_text(row.get("customer_name")),
        product_name=_text(row.get("product_name")),
        source="primary",
        **_personalization(row),
    )


def legacy_is_video(media_type: Any) -> bool:
    kind = _text(media_type)
    if kind is None:
        return False
    return kind == "video" or "video" in kind.lower()


def normalize_legacy_row(row: Mapping[str, Any], *, slug_column: str = "short_url_slug") -> RecordingDescriptor:
    slug = _text(row.get(slug_column)) or ""
    file_url = _text(row.get("file_url"))
    if not file_url or not _is_absolute(file_url):
        raise InvalidRecordingError("legacy", slug, "file_url is not an absolute URL")

    media_type = _text(row.get("media_type"))
    is_video = legacy_is_video(media_type)
    # media_type holds either a bare kind ("video") or a full mime type
    stored_mime = _text(row.get("mime_type")) or (media_type if media_type and "/" in media_type else None)
    mime_type = stored_mime or ("video/mp4" if is_video else "audio/mp3")

    background = row.get("has_virtual_background")

    return RecordingDescriptor(
        id=str(row.get("id")),
        recording_id=_text(row.get("recording_id")),
        short_id=slug,
        title=compose_title(row.get("product_name"), row.get("customer_name")),
        file_url=file_url,
        duration_seconds=_number(row.get("duration_seconds")),
        file_size_bytes=_size(row.get("file_size")),
        mime_type=mime_type,
        is_video=is_video,
        created_at=_timestamp(row.get("created_at")),
        customer_name=_text(row.get("customer_name")),
        product_name=_text(row.get("product_name")),
        has_virtual_background=bool(background) if background is not None else None,
        background_name=_text(row.get("background_name")),
        source="legacy",
        **_personalization(row),
    )

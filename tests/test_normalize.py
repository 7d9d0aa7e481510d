from datetime import datetime, timezone

import pytest

from voiceplayer.core.errors import InvalidRecordingError
from voiceplayer.modules.recordings.normalize import (
    compose_title,
    legacy_is_video,
    normalize_legacy_row,
    normalize_primary_row,
)
from fakes import STORAGE_BASE


def test_primary_row_joins_storage_path(primary_row):
    d = normalize_primary_row(primary_row, storage_base_url=STORAGE_BASE + "/")
    assert d.file_url == "https://storage.example/voice-recordings/user-1/new123.webm"
    assert d.short_id == "new123"
    assert d.is_video is True
    assert d.mime_type == "video/webm"
    assert d.duration_seconds == 31
    assert d.file_size_bytes == 524288
    assert d.source == "primary"


@pytest.mark.parametrize("kind,expected", [("video", True), ("audio", False), ("Video", False), (None, False), ("", False)])
def test_primary_is_video_only_for_literal_video(primary_row, kind, expected):
    primary_row["type"] = kind
    primary_row["mime_type"] = None
    d = normalize_primary_row(primary_row, storage_base_url=STORAGE_BASE)
    assert d.is_video is expected
    assert d.mime_type == ("video/webm" if expected else "audio/webm")


def test_primary_numeric_nulls_default_to_zero(primary_row):
    primary_row["duration_seconds"] = None
    primary_row["size_bytes"] = None
    d = normalize_primary_row(primary_row, storage_base_url=STORAGE_BASE)
    assert d.duration_seconds == 0
    assert d.file_size_bytes == 0
    body = d.public_dict()
    assert body["duration"] == 0 and body["fileSize"] == 0


def test_primary_without_path_is_rejected(primary_row):
    primary_row["file_path"] = None
    with pytest.raises(InvalidRecordingError):
        normalize_primary_row(primary_row, storage_base_url=STORAGE_BASE)


def test_primary_datetime_is_rendered_iso(primary_row):
    primary_row["created_at"] = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    d = normalize_primary_row(primary_row, storage_base_url=STORAGE_BASE)
    assert d.created_at == "2025-01-02T03:04:05+00:00"


def test_legacy_row_uses_absolute_url_verbatim(legacy_row):
    d = normalize_legacy_row(legacy_row)
    assert d.file_url == "https://cdn.example/v.mp4"
    assert d.id == "42"
    assert d.recording_id == "rec-42"
    assert d.is_video is True
    assert d.mime_type == "video/mp4"
    assert d.file_size_bytes == 0
    assert d.title == "Voice Message"
    assert d.has_virtual_background is True
    assert d.background_name == "Beach"


def test_legacy_relative_url_is_rejected(legacy_row):
    legacy_row["file_url"] = "/v.mp4"
    with pytest.raises(InvalidRecordingError):
        normalize_legacy_row(legacy_row)


@pytest.mark.parametrize("media_type,expected", [
    ("video", True),
    ("VIDEO", True),
    ("video/mp4", True),
    ("audio", False),
    ("audio/mpeg", False),
    (None, False),
])
def test_legacy_media_type_detection(media_type, expected):
    assert legacy_is_video(media_type) is expected


def test_legacy_mime_type_kept_when_media_type_is_a_mime(legacy_row):
    legacy_row["media_type"] = "audio/mpeg"
    d = normalize_legacy_row(legacy_row)
    assert d.is_video is False
    assert d.mime_type == "audio/mpeg"


def test_legacy_audio_default_mime(legacy_row):
    legacy_row["media_type"] = "audio"
    assert normalize_legacy_row(legacy_row).mime_type == "audio/mp3"


@pytest.mark.parametrize("product,customer,title", [
    ("Gift Card", "Anna", "Gift Card"),
    (None, "Anna", "Voice Message for Anna"),
    ("Gift Card", None, "Gift Card"),
    (None, None, "Voice Message"),
    ("  ", "", "Voice Message"),
])
def test_compose_title(product, customer, title):
    assert compose_title(product, customer) == title


def test_product_name_wins_over_customer(primary_row, legacy_row):
    primary_row["customer_name"] = "Alice"
    assert normalize_primary_row(primary_row, storage_base_url=STORAGE_BASE).title == "Birthday Song"
    legacy_row.update(product_name="Anniversary Song", customer_name="Ola")
    assert normalize_legacy_row(legacy_row).title == "Anniversary Song"


def test_short_id_read_from_configured_slug_column(primary_row, legacy_row):
    primary_row["slug"] = primary_row.pop("play_slug")
    d = normalize_primary_row(primary_row, storage_base_url=STORAGE_BASE, slug_column="slug")
    assert d.short_id == "new123"
    legacy_row["code"] = legacy_row.pop("short_url_slug")
    assert normalize_legacy_row(legacy_row, slug_column="code").short_id == "abc123"


def test_public_dict_uses_camel_case_and_hides_source(legacy_row):
    body = normalize_legacy_row(legacy_row).public_dict()
    assert body["shortId"] == "abc123"
    assert body["fileUrl"] == "https://cdn.example/v.mp4"
    assert body["isVideo"] is True
    assert body["hasVirtualBackground"] is True
    assert "source" not in body
    assert "customerName" not in body


def test_descriptor_is_immutable(legacy_row):
    d = normalize_legacy_row(legacy_row)
    with pytest.raises(Exception):
        d.is_video = False

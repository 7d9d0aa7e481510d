from __future__ import annotations

from typing import Any

import pytest

from voiceplayer.core.errors import AutoplayBlockedError


@pytest.fixture
def primary_row() -> dict[str, Any]:
    return {
        "id": "6f1c1d5e-3c1e-4c55-9b1b-0d2f0e7a1a11",
        "play_slug": "new123",
        "product_name": "Birthday Song",
        "file_path": "user-1/new123.webm",
        "duration_seconds": 31,
        "size_bytes": 524288,
        "mime_type": "video/webm",
        "type": "video",
        "created_at": "2025-03-02T10:15:00+00:00",
    }


@pytest.fixture
def legacy_row() -> dict[str, Any]:
    return {
        "id": 42,
        "recording_id": "rec-42",
        "short_url_slug": "abc123",
        "product_name": None,
        "customer_name": None,
        "file_url": "https://cdn.example/v.mp4",
        "duration_seconds": 42,
        "file_size": None,
        "media_type": "video",
        "created_at": "2024-11-20T08:00:00+00:00",
        "has_virtual_background": True,
        "background_name": "Beach",
    }


@pytest.fixture
def autoplay_blocked() -> AutoplayBlockedError:
    return AutoplayBlockedError("NotAllowedError: play() failed because the user didn't interact")

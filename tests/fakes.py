"""In-memory stand-ins for backing sources, media elements and platform hosts."""

from __future__ import annotations

from typing import Any, Callable

from voiceplayer.core.errors import AmbiguousRecordingError, PlaybackError, SourceUnavailable

STORAGE_BASE = "https://storage.example/voice-recordings"


class FakeSource:
    def __init__(self, name: str, slug_column: str, rows: list[dict[str, Any]] | None = None, *, fail: bool = False):
        self.name = name
        self.slug_column = slug_column
        self.rows = rows or []
        self.fail = fail
        self.calls: list[str] = []

    async def fetch_by_slug(self, slug: str):
        self.calls.append(slug)
        if self.fail:
            raise SourceUnavailable(self.name, "connection refused")
        matches = [r for r in self.rows if r.get(self.slug_column) == slug]
        if len(matches) > 1:
            raise AmbiguousRecordingError(self.name, slug, len(matches))
        return dict(matches[0]) if matches else None


class FakeMediaElement:
    """Records what the controller did and lets tests emit native events."""

    def __init__(self, *, duration: float = 0.0, play_error: PlaybackError | None = None):
        self.src = ""
        self.current_time = 0.0
        self.duration = duration
        self.volume = 1.0
        self.muted = False
        self.play_error = play_error
        self.listeners: dict[str, list[Callable[[], None]]] = {}
        self.play_calls = 0
        self.pause_calls = 0
        self.load_calls = 0
        self.muted_at_play: list[bool] = []

    def load(self) -> None:
        self.load_calls += 1

    async def play(self) -> None:
        self.play_calls += 1
        self.muted_at_play.append(self.muted)
        if self.play_error is not None:
            raise self.play_error

    def pause(self) -> None:
        self.pause_calls += 1

    def add_listener(self, event: str, callback: Callable[[], None]) -> None:
        self.listeners.setdefault(event, []).append(callback)

    def remove_listener(self, event: str, callback: Callable[[], None]) -> None:
        self.listeners.get(event, []).remove(callback)

    def emit(self, event: str) -> None:
        for callback in list(self.listeners.get(event, [])):
            callback()

    @property
    def listener_count(self) -> int:
        return sum(len(v) for v in self.listeners.values())



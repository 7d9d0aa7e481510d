"""Media element contract and the bridge from native events to PlayerEvents."""

from __future__ import annotations

import logging
from typing import Callable, Protocol, runtime_checkable

from voiceplayer.core.errors import MediaLoadError
from voiceplayer.modules.player.state import EventKind, PlayerEvent

log = logging.getLogger("player.element")


@runtime_checkable
class MediaElement(Protocol):
    """The subset of an HTML media element the controllers drive.

    ``play()`` raises PlaybackError (AutoplayBlockedError when the platform
    wants a user gesture first).
    """

    src: str
    current_time: float
    duration: float
    volume: float
    muted: bool

    def load(self) -> None: ...

    async def play(self) -> None: ...

    def pause(self) -> None: ...

    def add_listener(self, event: str, callback: Callable[[], None]) -> None: ...

    def remove_listener(self, event: str, callback: Callable[[], None]) -> None: ...


class ElementEventBridge:
    """Translate native media events into PlayerEvents for one element."""

    def __init__(
        self,
        element: MediaElement,
        dispatch: Callable[[PlayerEvent], object],
        *,
        load_error_message: str = "Failed to load media file",
    ) -> None:
        self._element = element
        self._dispatch = dispatch
        self._load_error_message = load_error_message
        self._bound: dict[str, Callable[[], None]] = {}

    @property
    def bound(self) -> bool:
        return bool(self._bound)

    def _native_map(self) -> dict[str, Callable[[], PlayerEvent]]:
        el = self._element
        return {
            "loadedmetadata": lambda: PlayerEvent(EventKind.METADATA, el.duration),
            "loadeddata": lambda: PlayerEvent(EventKind.CAN_PLAY),
            "canplay": lambda: PlayerEvent(EventKind.CAN_PLAY),
            "canplaythrough": lambda: PlayerEvent(EventKind.CAN_PLAY),
            "play": lambda: PlayerEvent(EventKind.PLAYING),
            "playing": lambda: PlayerEvent(EventKind.PLAYING),
            "pause": lambda: PlayerEvent(EventKind.PAUSE),
            "waiting": lambda: PlayerEvent(EventKind.WAITING),
            "stalled": lambda: PlayerEvent(EventKind.WAITING),
            "ended": lambda: PlayerEvent(EventKind.ENDED),
            "timeupdate": lambda: PlayerEvent(EventKind.TIME_UPDATE, el.current_time),
            "error": lambda: PlayerEvent(EventKind.ERROR, MediaLoadError(self._load_error_message)),
        }

    def bind(self) -> None:
        if self._bound:
            return
        for name, build in self._native_map().items():
            callback = self._make_callback(name, build)
            self._element.add_listener(name, callback)
            self._bound[name] = callback

    def unbind(self) -> None:
        for name, callback in self._bound.items():
            self._element.remove_listener(name, callback)
        self._bound.clear()

    def _make_callback(self, name: str, build: Callable[[], PlayerEvent]) -> Callable[[], None]:
        def callback() -> None:
            event = build()
            log.debug("element event %s -> %s", name, event.kind.value)
            self._dispatch(event)
        return callback

"""Playback state machine shared by the audio and video controllers.

``transition(snapshot, event)`` is pure: it never touches a media element, so
controllers can replay element events in any order and the result only
depends on the snapshot and the event. Events that make no sense in the
current status return the snapshot unchanged.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable


class PlayerStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    BUFFERING = "buffering"
    ENDED = "ended"
    ERROR = "error"


class EventKind(str, Enum):
    LOAD = "load"                    # bind to a (new) source
    METADATA = "metadata"            # duration known
    CAN_PLAY = "can_play"            # enough data buffered
    READY_TIMEOUT = "ready_timeout"  # fallback when the element never confirms
    PLAYING = "playing"
    PAUSE = "pause"
    WAITING = "waiting"              # starved for data
    ENDED = "ended"
    TIME_UPDATE = "time_update"
    SEEK = "seek"
    VOLUME = "volume"
    MUTE = "mute"                    # explicit muted flag (autoplay)
    TOGGLE_MUTE = "toggle_mute"
    RESTART = "restart"
    STOP = "stop"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class PlayerEvent:
    kind: EventKind
    # ERROR carries the MediaLoadError or PlaybackError that caused it
    value: float | bool | str | Exception | None = None


@dataclass(frozen=True, slots=True)
class PlayerSnapshot:
    status: PlayerStatus = PlayerStatus.IDLE
    position: float = 0.0
    duration: float = 0.0
    volume: float = 1.0
    muted: bool = False
    last_volume: float = 1.0
    error: str | None = None
    source: str | None = None

    @property
    def is_playing(self) -> bool:
        return self.status in (PlayerStatus.PLAYING, PlayerStatus.BUFFERING)

    @property
    def effective_volume(self) -> float:
        return 0.0 if self.muted else self.volume

    @property
    def progress(self) -> float:
        if self.duration <= 0:
            return 0.0
        return min(self.position / self.duration, 1.0)


_PLAYABLE = frozenset({
    PlayerStatus.LOADING,
    PlayerStatus.READY,
    PlayerStatus.PAUSED,
    PlayerStatus.BUFFERING,
    PlayerStatus.ENDED,
    PlayerStatus.PLAYING,
})
_BOUND = _PLAYABLE
_SEEKABLE = _PLAYABLE - {PlayerStatus.LOADING}


def _finite(value, default: float = 0.0) -> float:
    try:
        num = float(value)
    except (TypeError, ValueError):
        return default
    return num if math.isfinite(num) else default


def clamp_position(value, duration: float) -> float:
    """Clamp to [0, duration]; an unknown (zero) duration only bounds below."""
    position = max(_finite(value), 0.0)
    if duration > 0:
        position = min(position, duration)
    return position


def clamp_volume(value) -> float:
    return min(max(_finite(value, 1.0), 0.0), 1.0)


def _load(s: PlayerSnapshot, e: PlayerEvent) -> PlayerSnapshot:
    return replace(s, status=PlayerStatus.LOADING, position=0.0, error=None, source=e.value)


def _metadata(s: PlayerSnapshot, e: PlayerEvent) -> PlayerSnapshot:
    if s.status not in _BOUND:
        return s
    duration = _finite(e.value)
    s = replace(s, duration=duration) if duration > 0 else s
    return _ready(s, e)


def _ready(s: PlayerSnapshot, e: PlayerEvent) -> PlayerSnapshot:
    if s.status is PlayerStatus.LOADING:
        return replace(s, status=PlayerStatus.READY)
    return s


def _can_play(s: PlayerSnapshot, e: PlayerEvent) -> PlayerSnapshot:
    if s.status is PlayerStatus.BUFFERING:
        return replace(s, status=PlayerStatus.PLAYING)
    return _ready(s, e)


def _playing(s: PlayerSnapshot, e: PlayerEvent) -> PlayerSnapshot:
    if s.status not in _PLAYABLE:
        return s
    if s.status is PlayerStatus.ENDED:
        return replace(s, status=PlayerStatus.PLAYING, position=0.0)
    return replace(s, status=PlayerStatus.PLAYING)


def _pause(s: PlayerSnapshot, e: PlayerEvent) -> PlayerSnapshot:
    if s.status in (PlayerStatus.PLAYING, PlayerStatus.BUFFERING):
        return replace(s, status=PlayerStatus.PAUSED)
    return s


def _waiting(s: PlayerSnapshot, e: PlayerEvent) -> PlayerSnapshot:
    if s.status is PlayerStatus.PLAYING:
        return replace(s, status=PlayerStatus.BUFFERING)
    return s


def _ended(s: PlayerSnapshot, e: PlayerEvent) -> PlayerSnapshot:
    if s.status in (PlayerStatus.PLAYING, PlayerStatus.BUFFERING):
        end = s.duration if s.duration > 0 else s.position
        return replace(s, status=PlayerStatus.ENDED, position=end)
    return s


def _time_update(s: PlayerSnapshot, e: PlayerEvent) -> PlayerSnapshot:
    if s.status not in _BOUND:
        return s
    return replace(s, position=clamp_position(e.value, s.duration))


def _seek(s: PlayerSnapshot, e: PlayerEvent) -> PlayerSnapshot:
    if s.status not in _SEEKABLE:
        return s
    status = PlayerStatus.PAUSED if s.status is PlayerStatus.ENDED else s.status
    return replace(s, status=status, position=clamp_position(e.value, s.duration))


def _volume(s: PlayerSnapshot, e: PlayerEvent) -> PlayerSnapshot:
    volume = clamp_volume(e.value)
    if volume > 0:
        return replace(s, volume=volume, last_volume=volume, muted=False)
    return replace(s, volume=volume)


def _mute(s: PlayerSnapshot, e: PlayerEvent) -> PlayerSnapshot:
    return _set_muted(s, bool(e.value))


def _toggle_mute(s: PlayerSnapshot, e: PlayerEvent) -> PlayerSnapshot:
    return _set_muted(s, not s.muted)


def _set_muted(s: PlayerSnapshot, muted: bool) -> PlayerSnapshot:
    if muted:
        return replace(s, muted=True)
    volume = s.volume if s.volume > 0 else s.last_volume
    return replace(s, muted=False, volume=volume)


def _restart(s: PlayerSnapshot, e: PlayerEvent) -> PlayerSnapshot:
    if s.status not in _SEEKABLE:
        return s
    status = PlayerStatus.PAUSED if s.status is PlayerStatus.ENDED else s.status
    return replace(s, status=status, position=0.0)


def _stop(s: PlayerSnapshot, e: PlayerEvent) -> PlayerSnapshot:
    if s.status not in _SEEKABLE:
        return s
    return replace(s, status=PlayerStatus.PAUSED, position=0.0)


def _error(s: PlayerSnapshot, e: PlayerEvent) -> PlayerSnapshot:
    message = str(e.value) if e.value else "Unable to load media"
    return replace(s, status=PlayerStatus.ERROR, error=message)


_HANDLERS: dict[EventKind, Callable[[PlayerSnapshot, PlayerEvent], PlayerSnapshot]] = {
    EventKind.LOAD: _load,
    EventKind.METADATA: _metadata,
    EventKind.CAN_PLAY: _can_play,
    EventKind.READY_TIMEOUT: _ready,
    EventKind.PLAYING: _playing,
    EventKind.PAUSE: _pause,
    EventKind.WAITING: _waiting,
    EventKind.ENDED: _ended,
    EventKind.TIME_UPDATE: _time_update,
    EventKind.SEEK: _seek,
    EventKind.VOLUME: _volume,
    EventKind.MUTE: _mute,
    EventKind.TOGGLE_MUTE: _toggle_mute,
    EventKind.RESTART: _restart,
    EventKind.STOP: _stop,
    EventKind.ERROR: _error,
}


def transition(snapshot: PlayerSnapshot, event: PlayerEvent) -> PlayerSnapshot:
    # ERROR is sticky until the caller rebinds a fresh source
    if snapshot.status is PlayerStatus.ERROR and event.kind not in (
        EventKind.LOAD, EventKind.VOLUME, EventKind.MUTE, EventKind.TOGGLE_MUTE,
    ):
        return snapshot
    return _HANDLERS[event.kind](snapshot, event)

"""Audio and video player controllers.

A controller owns exactly one media element for its lifetime. Every state
change goes through ``state.transition`` so element events and user actions
can interleave freely; the controller only adds the side effects (driving the
element, timers, overlays).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

from voiceplayer.core.errors import PlaybackError, PlayerAppError
from voiceplayer.core.formatting import format_time
from voiceplayer.modules.player.element import ElementEventBridge, MediaElement
from voiceplayer.modules.player.environment import PresentationConfig, is_mobile_agent, presentation_for
from voiceplayer.modules.player.greeting import Greeting, personalize
from voiceplayer.modules.player.state import (
    EventKind,
    PlayerEvent,
    PlayerSnapshot,
    PlayerStatus,
    transition,
)
from voiceplayer.modules.recordings.schemas import RecordingDescriptor

log = logging.getLogger("player")

# toggle is ignored while the element has not settled
_TRANSPORT_LOCKED = frozenset({
    PlayerStatus.IDLE,
    PlayerStatus.LOADING,
    PlayerStatus.BUFFERING,
    PlayerStatus.ERROR,
})
_UNBOUND = frozenset({PlayerStatus.IDLE, PlayerStatus.LOADING, PlayerStatus.ERROR})


@dataclass(frozen=True, slots=True)
class PlayerOptions:
    autoplay: bool = False
    ready_fallback_seconds: float = 5.0


@dataclass(frozen=True, slots=True)
class VideoOptions(PlayerOptions):
    greeting_seconds: float = 4.0
    # None disables auto-unmute; never applied on mobile agents
    auto_unmute_delay: float | None = 1.0


class MediaController:
    kind = "audio"

    def __init__(
        self,
        element: MediaElement,
        *,
        descriptor: RecordingDescriptor | None = None,
        duration_hint: float = 0.0,
        options: PlayerOptions | None = None,
        on_change: Callable[["MediaController"], None] | None = None,
    ) -> None:
        self.element = element
        self.descriptor = descriptor
        self.options = options or PlayerOptions()
        if not duration_hint and descriptor is not None:
            duration_hint = descriptor.duration_seconds
        self.state = PlayerSnapshot(duration=max(float(duration_hint or 0), 0.0))
        self.last_error: PlayerAppError | None = None
        self._on_change = on_change
        self._bridge = ElementEventBridge(
            element, self.dispatch, load_error_message=f"Failed to load {self.kind} file"
        )
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._play_in_flight = False
        self._autoplay_attempted = False
        self._autoplay_task: asyncio.Task | None = None

    # ---- lifecycle ----

    def mount(self, src: str | None = None) -> PlayerSnapshot:
        """Bind to ``src`` (default: the descriptor's file URL) and start loading.

        Also used to retry after an error.
        """
        src = src or (self.descriptor.file_url if self.descriptor is not None else None)
        if not src:
            raise ValueError("mount() needs a source URL or a descriptor")
        self._cancel_timers()
        self._bridge.unbind()
        self._autoplay_attempted = False
        self.last_error = None
        self.element.src = src
        self._bridge.bind()
        snapshot = self.dispatch(PlayerEvent(EventKind.LOAD, src))
        self._schedule(
            "ready_fallback",
            self.options.ready_fallback_seconds,
            self._ready_fallback,
        )
        self.element.load()
        return snapshot

    def unmount(self) -> None:
        self._cancel_timers()
        self._bridge.unbind()
        if self._autoplay_task is not None and not self._autoplay_task.done():
            self._autoplay_task.cancel()
        self._autoplay_task = None

    # ---- state plumbing ----

    def dispatch(self, event: PlayerEvent) -> PlayerSnapshot:
        previous = self.state
        self.state = transition(previous, event)
        if self.state.status is PlayerStatus.ERROR and isinstance(event.value, PlayerAppError):
            self.last_error = event.value
        if self.state != previous:
            if previous.status is not self.state.status:
                log.debug("%s player %s -> %s (%s)", self.kind, previous.status.value, self.state.status.value, event.kind.value)
            self._after_transition(previous)
            self._notify()
        return self.state

    def _after_transition(self, previous: PlayerSnapshot) -> None:
        status = self.state.status
        if previous.status is PlayerStatus.LOADING and status is not PlayerStatus.LOADING:
            self._cancel_timer("ready_fallback")
        if status is PlayerStatus.ERROR and previous.status is not PlayerStatus.ERROR:
            log.warning("%s player error: %s", self.kind, self.state.error)
        if status is PlayerStatus.READY and self.options.autoplay and not self._autoplay_attempted:
            self._autoplay_attempted = True
            self._autoplay_task = asyncio.get_running_loop().create_task(self._autoplay())

    @property
    def time_labels(self) -> tuple[str, str]:
        """(elapsed, total) as m:ss for the progress bar."""
        return format_time(self.state.position), format_time(self.state.duration)

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self)

    def _ready_fallback(self) -> None:
        if self.state.status is PlayerStatus.LOADING:
            log.info("%s element never confirmed readiness; assuming ready", self.kind)
        self.dispatch(PlayerEvent(EventKind.READY_TIMEOUT))

    # ---- timers ----

    def _schedule(self, name: str, delay: float, callback: Callable[[], None]) -> None:
        self._cancel_timer(name)
        loop = asyncio.get_running_loop()
        self._timers[name] = loop.call_later(delay, self._fire, name, callback)

    def _fire(self, name: str, callback: Callable[[], None]) -> None:
        self._timers.pop(name, None)
        callback()

    def _cancel_timer(self, name: str) -> None:
        handle = self._timers.pop(name, None)
        if handle is not None:
            handle.cancel()

    def _cancel_timers(self) -> None:
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()

    # ---- transport ----

    async def toggle_play_pause(self) -> PlayerSnapshot:
        if self._play_in_flight or self.state.status in _TRANSPORT_LOCKED:
            return self.state
        if self.state.status is PlayerStatus.PLAYING:
            self.element.pause()
            return self.dispatch(PlayerEvent(EventKind.PAUSE))
        return await self._start_playback()

    async def _start_playback(self) -> PlayerSnapshot:
        self._play_in_flight = True
        try:
            await self.element.play()
        except PlaybackError as e:
            log.warning("%s play() rejected: %s", self.kind, e)
            return self.dispatch(PlayerEvent(EventKind.ERROR, PlaybackError(f"Failed to play {self.kind}")))
        finally:
            self._play_in_flight = False
        return self.dispatch(PlayerEvent(EventKind.PLAYING))

    async def _autoplay(self) -> None:
        self._play_in_flight = True
        try:
            await self.element.play()
        except PlaybackError:
            log.info("Auto-play prevented by browser")
            return
        finally:
            self._play_in_flight = False
        self.dispatch(PlayerEvent(EventKind.PLAYING))

    def seek(self, seconds: float) -> PlayerSnapshot:
        """Clamp to [0, duration]; the displayed position moves before the element catches up."""
        snapshot = self.dispatch(PlayerEvent(EventKind.SEEK, seconds))
        if snapshot.status not in _UNBOUND:
            self.element.current_time = snapshot.position
        return snapshot

    def restart(self) -> PlayerSnapshot:
        snapshot = self.dispatch(PlayerEvent(EventKind.RESTART))
        if snapshot.status not in _UNBOUND:
            self.element.current_time = 0.0
        return snapshot

    # ---- volume ----

    def set_volume(self, volume: float) -> PlayerSnapshot:
        snapshot = self.dispatch(PlayerEvent(EventKind.VOLUME, volume))
        self._apply_volume()
        return snapshot

    def toggle_mute(self) -> PlayerSnapshot:
        snapshot = self.dispatch(PlayerEvent(EventKind.TOGGLE_MUTE))
        self._apply_volume()
        return snapshot

    def set_muted(self, muted: bool) -> PlayerSnapshot:
        snapshot = self.dispatch(PlayerEvent(EventKind.MUTE, muted))
        self._apply_volume()
        return snapshot

    def _apply_volume(self) -> None:
        self.element.volume = self.state.volume
        self.element.muted = self.state.muted


class AudioController(MediaController):
    kind = "audio"


class VideoController(MediaController):
    """Video player with greeting overlay and mobile-safe autoplay.

    Autoplay always starts muted (mobile browsers refuse autoplay with sound).
    On desktop agents the sound comes back after ``auto_unmute_delay``. When
    the platform rejects autoplay the controller raises the tap-to-play
    overlay instead of entering ERROR.
    """

    kind = "video"

    def __init__(
        self,
        element: MediaElement,
        *,
        user_agent: str | None = None,
        descriptor: RecordingDescriptor | None = None,
        duration_hint: float = 0.0,
        options: VideoOptions | None = None,
        on_change: Callable[[MediaController], None] | None = None,
    ) -> None:
        super().__init__(
            element,
            descriptor=descriptor,
            duration_hint=duration_hint,
            options=options or VideoOptions(),
            on_change=on_change,
        )
        self.greeting: Greeting | None = personalize(descriptor) if descriptor is not None else None
        # computed once per mount of the controller
        self.is_mobile = is_mobile_agent(user_agent)
        self.presentation: PresentationConfig = presentation_for(user_agent)
        self.show_greeting = False
        self.show_tap_to_play = False

    def mount(self, src: str | None = None) -> PlayerSnapshot:
        self.show_tap_to_play = False
        snapshot = super().mount(src)
        self.show_greeting = True
        self._schedule("greeting", self.options.greeting_seconds, self._hide_greeting)
        self._notify()
        return snapshot

    def _hide_greeting(self) -> None:
        if self.show_greeting:
            self.show_greeting = False
            self._cancel_timer("greeting")
            self._notify()

    def _after_transition(self, previous: PlayerSnapshot) -> None:
        super()._after_transition(previous)
        if self.state.status is PlayerStatus.PLAYING:
            self.show_tap_to_play = False
            self._hide_greeting()

    async def _autoplay(self) -> None:
        self.set_muted(True)
        self._play_in_flight = True
        try:
            await self.element.play()
        except PlaybackError as e:
            log.info("video autoplay blocked (%s); waiting for a tap", e)
            self.show_tap_to_play = True
            self._notify()
            return
        finally:
            self._play_in_flight = False
        self.dispatch(PlayerEvent(EventKind.PLAYING))
        delay = self.options.auto_unmute_delay
        if not self.is_mobile and delay is not None:
            self._schedule("auto_unmute", delay, self._auto_unmute)

    def _auto_unmute(self) -> None:
        if self.state.muted and self.state.is_playing:
            self.set_muted(False)

    async def tap_to_play(self) -> PlayerSnapshot:
        """User gesture on the overlay: sound on, then play."""
        if self.state.status in _UNBOUND:
            return self.state
        self.show_tap_to_play = False
        self._cancel_timer("auto_unmute")
        self.set_muted(False)
        if self.state.status is PlayerStatus.PLAYING:
            self._notify()
            return self.state
        return await self._start_playback()

    def stop(self) -> PlayerSnapshot:
        self.element.pause()
        snapshot = self.dispatch(PlayerEvent(EventKind.STOP))
        if snapshot.status is PlayerStatus.PAUSED:
            self.element.current_time = 0.0
        return snapshot

"""Hosting-environment detection used for presentation routing only."""

from __future__ import annotations

import re
from dataclasses import dataclass

_MOBILE_AGENT = re.compile(
    r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini|Mobile",
    re.IGNORECASE,
)


def is_mobile_agent(user_agent: str | None) -> bool:
    return bool(user_agent) and _MOBILE_AGENT.search(user_agent) is not None


@dataclass(frozen=True, slots=True)
class PresentationConfig:
    """Breakpoint-driven sizing for the player chrome."""

    breakpoint: str
    play_button_px: int
    greeting_font_px: int
    overlay_padding_px: int
    controls_always_visible: bool


MOBILE_PRESENTATION = PresentationConfig(
    breakpoint="mobile",
    play_button_px=64,
    greeting_font_px=18,
    overlay_padding_px=16,
    controls_always_visible=True,
)

DESKTOP_PRESENTATION = PresentationConfig(
    breakpoint="desktop",
    play_button_px=96,
    greeting_font_px=28,
    overlay_padding_px=32,
    controls_always_visible=False,
)


def presentation_for(user_agent: str | None) -> PresentationConfig:
    return MOBILE_PRESENTATION if is_mobile_agent(user_agent) else DESKTOP_PRESENTATION

from __future__ import annotations

import re
from dataclasses import dataclass

from voiceplayer.modules.recordings.schemas import RecordingDescriptor

DEFAULT_SENDER = "Someone special"

_FROM = re.compile(r"\bfrom\b", re.IGNORECASE)
_OCCASIONS = (
    ("birthday", "birthday message"),
    ("christmas", "Christmas message"),
    ("anniversary", "anniversary message"),
)


@dataclass(frozen=True, slots=True)
class Greeting:
    sender_name: str
    occasion: str
    message: str


def _sender_from_title(title: str) -> str | None:
    parts = _FROM.split(title, maxsplit=2)
    if len(parts) < 2:
        return None
    return parts[1].strip() or None


def _occasion_from_title(title: str) -> str:
    lowered = title.lower()
    for keyword, occasion in _OCCASIONS:
        if keyword in lowered:
            return occasion
    return "message"


def personalize(descriptor: RecordingDescriptor) -> Greeting:
    """Sender/occasion text for the video greeting overlay.

    Stored personalization wins; anything missing is guessed from the title.
    """
    sender = descriptor.sender_name or _sender_from_title(descriptor.title) or DEFAULT_SENDER
    occasion = descriptor.occasion or _occasion_from_title(descriptor.title)
    message = descriptor.custom_message or f"sent you a {occasion}"
    return Greeting(sender_name=sender, occasion=occasion, message=message)

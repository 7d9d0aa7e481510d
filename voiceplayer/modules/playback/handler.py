import logging
from typing import Any, NamedTuple

from voiceplayer.core.errors import LookupFailed, NotFoundError, ValidationError
from voiceplayer.modules.recordings.resolver import RecordingResolver
from voiceplayer.modules.recordings.schemas import PlaybackErrorOut, PlaybackOut

log = logging.getLogger("playback")

MISSING_SHORT_ID = "Missing shortId parameter"
NOT_FOUND = "Recording not found"
INTERNAL_ERROR = "Internal server error"


class PlaybackResponse(NamedTuple):
    status: int
    body: dict[str, Any]


def require_short_id(short_id: str | None) -> str:
    short_id = (short_id or "").strip()
    if not short_id:
        raise ValidationError(MISSING_SHORT_ID)
    return short_id


def _error(status: int, message: str) -> PlaybackResponse:
    return PlaybackResponse(status, PlaybackErrorOut(error=message).model_dump())


class PlaybackHandler:
    """Maps a short id to the status/body pair served by GET /api/play/{shortId}.

    Read-only and idempotent; safe to retry.
    """

    def __init__(self, resolver: RecordingResolver):
        self.resolver = resolver

    async def handle(self, short_id: str | None) -> PlaybackResponse:
        try:
            short_id = require_short_id(short_id)
        except ValidationError:
            return _error(400, MISSING_SHORT_ID)

        try:
            descriptor = await self.resolver.resolve(short_id)
        except NotFoundError:
            return _error(404, NOT_FOUND)
        except LookupFailed:
            log.error("lookup failed for %s", short_id, exc_info=True)
            return _error(500, INTERNAL_ERROR)
        except Exception:
            log.critical("unexpected error resolving %s", short_id, exc_info=True)
            return _error(500, INTERNAL_ERROR)

        return PlaybackResponse(200, PlaybackOut(data=descriptor.public_dict()).model_dump())

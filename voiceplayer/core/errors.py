class PlayerAppError(Exception):
    """Base for every error this service raises on purpose."""


# ---- lookup ----

class ValidationError(PlayerAppError):
    """The caller supplied no usable short identifier."""


class NotFoundError(PlayerAppError):
    def __init__(self, short_id: str):
        super().__init__(f"recording not found: {short_id}")
        self.short_id = short_id


class LookupFailed(PlayerAppError):
    """Backing sources could not answer."""


class AmbiguousRecordingError(LookupFailed):
    def __init__(self, source: str, short_id: str, count: int):
        super().__init__(f"{source}: {count} rows share slug {short_id!r}")
        self.source = source
        self.short_id = short_id
        self.count = count


class InvalidRecordingError(LookupFailed):
    def __init__(self, source: str, short_id: str, reason: str):
        super().__init__(f"{source}: row for {short_id!r} is unusable ({reason})")
        self.source = source
        self.short_id = short_id
        self.reason = reason


class SourceUnavailable(PlayerAppError):
    def __init__(self, source: str, detail: str):
        super().__init__(f"{source} unavailable: {detail}")
        self.source = source
        self.detail = detail


# ---- media element ----

class MediaLoadError(PlayerAppError):
    pass


class PlaybackError(PlayerAppError):
    pass


class AutoplayBlockedError(PlaybackError):
    """Platform refused to start playback without a user gesture."""


# ---- sharing ----

class DownloadError(PlayerAppError):
    pass

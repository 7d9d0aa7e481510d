import logging
from typing import Any, Callable, Mapping

from voiceplayer.core.errors import LookupFailed, NotFoundError, SourceUnavailable
from voiceplayer.modules.recordings.normalize import normalize_legacy_row, normalize_primary_row
from voiceplayer.modules.recordings.schemas import RecordingDescriptor
from voiceplayer.platform.ports.recording_source import RecordingSourcePort

log = logging.getLogger("recordings.resolver")

# (row, slug column the row was looked up by)
Normalizer = Callable[[Mapping[str, Any], str], RecordingDescriptor]

class RecordingResolver:
    """Resolves a short id against the current schema first, then the legacy one.

    First match wins: once the primary source yields a row the legacy source
    is not queried. A source that fails is treated as a miss; only when every
    source failed does the lookup raise LookupFailed. Duplicate slugs inside a
    single source raise AmbiguousRecordingError rather than picking a row.
    """

    def __init__(self, primary: RecordingSourcePort, legacy: RecordingSourcePort, *, storage_base_url: str):
        self.primary = primary
        self.legacy = legacy
        self.storage_base_url = storage_base_url
        self._chain: list[tuple[RecordingSourcePort, Normalizer]] = [
            (primary, lambda row, col: normalize_primary_row(row, storage_base_url=self.storage_base_url, slug_column=col)),
            (legacy, lambda row, col: normalize_legacy_row(row, slug_column=col)),
        ]

    async def resolve(self, short_id: str) -> RecordingDescriptor:
        failures: list[SourceUnavailable] = []
        for source, normalize in self._chain:
            try:
                row = await source.fetch_by_slug(short_id)
            except SourceUnavailable as e:
                log.warning("source %s failed for %s, treating as miss: %s", source.name, short_id, e.detail)
                failures.append(e)
                continue
            if row is None:
                log.debug("no row in %s for %s", source.name, short_id)
                continue
            descriptor = normalize(row, source.slug_column)
            log.info("resolved %s from %s source (video=%s)", short_id, source.name, descriptor.is_video)
            return descriptor

        if len(failures) == len(self._chain):
            raise LookupFailed("; ".join(str(f) for f in failures))
        log.info("recording %s not found in any source", short_id)
        raise NotFoundError(short_id)

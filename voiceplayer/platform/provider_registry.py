import logging
import httpx
from sqlalchemy.ext.asyncio import AsyncEngine
from voiceplayer.core.config import Settings
from voiceplayer.core.db import build_engine, build_sessionmaker, init_models
from voiceplayer.platform.ports.recording_source import RecordingSourcePort
from voiceplayer.platform.adapters.source_sql import SqlRecordingSource
from voiceplayer.platform.adapters.source_postgrest import PostgrestRecordingSource, build_postgrest_client

log = logging.getLogger("registry")

class ProviderRegistry:
    """Owns the backing-store connection for the life of the process.

    Built by the app bootstrap; ``open()`` on startup, ``close()`` on shutdown.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._engine: AsyncEngine | None = None
        self._http: httpx.AsyncClient | None = None
        self._sources: tuple[RecordingSourcePort, RecordingSourcePort] | None = None

    @property
    def provider(self) -> str:
        return (self.settings.RECORDING_SOURCE_PROVIDER or "sql").lower()

    async def open(self) -> None:
        if self.provider == "postgrest":
            if not self.settings.POSTGREST_URL:
                raise RuntimeError("POSTGREST_URL is required when RECORDING_SOURCE_PROVIDER=postgrest")
            self._http = build_postgrest_client(
                self.settings.POSTGREST_URL,
                self.settings.POSTGREST_API_KEY,
                self.settings.SOURCE_TIMEOUT_SECONDS,
            )
        else:
            self._engine = build_engine(self.settings.DATABASE_DSN)
            await init_models(self._engine, self.settings.DB_MANAGE)
        log.info("Recording sources ready with provider=%s", self.provider)

    async def close(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
        self._sources = None

    def recording_sources(self) -> tuple[RecordingSourcePort, RecordingSourcePort]:
        """(primary, legacy) in lookup order."""
        if self._sources is None:
            s = self.settings
            if self._http is not None:
                self._sources = (
                    PostgrestRecordingSource(self._http, s.PRIMARY_TABLE, s.PRIMARY_SLUG_COLUMN, name="primary"),
                    PostgrestRecordingSource(self._http, s.LEGACY_TABLE, s.LEGACY_SLUG_COLUMN, name="legacy"),
                )
            elif self._engine is not None:
                from voiceplayer.modules.recordings.models import Recording, VoiceRecording
                sessionmaker = build_sessionmaker(self._engine)
                self._sources = (
                    SqlRecordingSource(sessionmaker, Recording, s.PRIMARY_SLUG_COLUMN, name="primary"),
                    SqlRecordingSource(sessionmaker, VoiceRecording, s.LEGACY_SLUG_COLUMN, name="legacy"),
                )
            else:
                raise RuntimeError("ProviderRegistry.open() must be awaited before building sources")
        return self._sources

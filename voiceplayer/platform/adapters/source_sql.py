import logging
from typing import Any, Mapping
from sqlalchemy import select, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from voiceplayer.core.base import Base
from voiceplayer.core.errors import AmbiguousRecordingError, SourceUnavailable
from voiceplayer.platform.ports.recording_source import RecordingSourcePort

log = logging.getLogger("source.sql")

class SqlRecordingSource(RecordingSourcePort):
    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession], model: type[Base], slug_column: str, *, name: str):
        self.sessionmaker = sessionmaker
        self.model = model
        self.slug_column = slug_column
        self.name = name
        # an unknown column is a configuration error
        self._column = model.__table__.c.get(slug_column)
        if self._column is None:
            raise ValueError(f"{model.__tablename__} has no column {slug_column!r}")

    async def fetch_by_slug(self, slug: str) -> Mapping[str, Any] | None:
        column = self._column
        # limit 2: enough to detect a duplicate slug without scanning further
        q = select(self.model).where(column == slug).limit(2)
        try:
            async with self.sessionmaker() as session:
                res = await session.execute(q)
                rows = res.scalars().all()
        except (SQLAlchemyError, OSError) as e:
            log.warning("query on %s failed: %s", self.model.__tablename__, e)
            raise SourceUnavailable(self.name, str(e)) from e

        if len(rows) > 1:
            raise AmbiguousRecordingError(self.name, slug, len(rows))
        if not rows:
            return None
        obj = rows[0]
        return {attr.key: getattr(obj, attr.key) for attr in inspect(obj).mapper.column_attrs}

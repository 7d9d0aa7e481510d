from typing import Any, Mapping, Protocol, runtime_checkable

@runtime_checkable
class RecordingSourcePort(Protocol):
    """One backing table, looked up by its own slug column.

    ``fetch_by_slug`` returns the matching row as a plain mapping, or None.
    Implementations raise SourceUnavailable on transport/query failure and
    AmbiguousRecordingError when more than one row carries the slug.
    """
    name: str
    slug_column: str

    async def fetch_by_slug(self, slug: str) -> Mapping[str, Any] | None: ...

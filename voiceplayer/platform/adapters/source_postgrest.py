import logging
from typing import Any, Mapping
import httpx
from voiceplayer.core.errors import AmbiguousRecordingError, SourceUnavailable
from voiceplayer.platform.ports.recording_source import RecordingSourcePort

log = logging.getLogger("source.postgrest")

def build_postgrest_client(base_url: str, api_key: str | None, timeout: float) -> httpx.AsyncClient:
    headers = {"Accept": "application/json"}
    if api_key:
        headers["apikey"] = api_key
        headers["Authorization"] = f"Bearer {api_key}"
    return httpx.AsyncClient(base_url=base_url.rstrip("/"), headers=headers, timeout=timeout)

class PostgrestRecordingSource(RecordingSourcePort):
    """Reads a table through a PostgREST gateway (``/rest/v1/<table>``)."""

    def __init__(self, client: httpx.AsyncClient, table: str, slug_column: str, *, name: str):
        self.client = client
        self.table = table
        self.slug_column = slug_column
        self.name = name

    async def fetch_by_slug(self, slug: str) -> Mapping[str, Any] | None:
        params = {self.slug_column: f"eq.{slug}", "select": "*", "limit": "2"}
        try:
            resp = await self.client.get(f"/rest/v1/{self.table}", params=params)
            resp.raise_for_status()
            rows = resp.json()
        except httpx.HTTPStatusError as e:
            log.warning("%s returned %s: %s", self.table, e.response.status_code, e.response.text[:500])
            raise SourceUnavailable(self.name, f"HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            log.warning("request to %s failed: %s", self.table, e)
            raise SourceUnavailable(self.name, str(e)) from e

        if not isinstance(rows, list):
            raise SourceUnavailable(self.name, "unexpected response shape")
        if len(rows) > 1:
            raise AmbiguousRecordingError(self.name, slug, len(rows))
        return rows[0] if rows else None

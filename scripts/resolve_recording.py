import argparse
import asyncio
import json
import os
import sys

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from dotenv import load_dotenv
load_dotenv()

from voiceplayer.core.config import settings
from voiceplayer.core.logging import setup_logging
from voiceplayer.core.errors import ValidationError
from voiceplayer.modules.playback.handler import PlaybackHandler, require_short_id
from voiceplayer.modules.recordings.resolver import RecordingResolver
from voiceplayer.platform.provider_registry import ProviderRegistry

async def main(short_id: str) -> int:
    """
    Resolve one short id through the configured sources and print what
    GET /api/play/{shortId} would answer.
    """
    try:
        short_id = require_short_id(short_id)
    except ValidationError as e:
        print(e, file=sys.stderr)
        return 2

    registry = ProviderRegistry(settings)
    await registry.open()
    try:
        primary, legacy = registry.recording_sources()
        handler = PlaybackHandler(RecordingResolver(primary, legacy, storage_base_url=settings.STORAGE_PUBLIC_BASE_URL))
        result = await handler.handle(short_id)
    finally:
        await registry.close()

    print(f"HTTP {result.status}")
    print(json.dumps(result.body, indent=2, default=str))
    if result.status == 200:
        print(f"Player page: {settings.player_url(short_id)}")
    return 0 if result.status == 200 else 1

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Look up a recording by its short id.")
    parser.add_argument("short_id")
    args = parser.parse_args()
    setup_logging()
    sys.exit(asyncio.run(main(args.short_id)))

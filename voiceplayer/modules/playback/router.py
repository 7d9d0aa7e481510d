from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from voiceplayer.modules.playback.handler import PlaybackHandler
from voiceplayer.modules.recordings.resolver import RecordingResolver

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

def get_resolver(request: Request) -> RecordingResolver:
    return request.app.state.resolver

def svc(resolver: RecordingResolver = Depends(get_resolver)) -> PlaybackHandler:
    return PlaybackHandler(resolver)

async def _respond(short_id: str | None, handler: PlaybackHandler) -> JSONResponse:
    result = await handler.handle(short_id)
    return JSONResponse(status_code=result.status, content=result.body, headers={"Access-Control-Allow-Origin": "*"})

@router.get("/{short_id}")
async def get_playback(short_id: str, handler: PlaybackHandler = Depends(svc)):
    return await _respond(short_id, handler)

@router.get("")
@router.get("/")
async def get_playback_without_id(handler: PlaybackHandler = Depends(svc)):
    return await _respond(None, handler)

@router.options("/{short_id}")
@router.options("")
@router.options("/")
async def preflight(short_id: str | None = None):
    return Response(status_code=200, headers=CORS_HEADERS)

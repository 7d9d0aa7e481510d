from fastapi import APIRouter
from voiceplayer.modules.playback.router import router as playback_router

api_router = APIRouter()
api_router.include_router(playback_router, prefix="/play", tags=["playback"])

@api_router.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}

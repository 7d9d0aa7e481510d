import time
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

# Load environment variables from .env file before anything else
load_dotenv()

from voiceplayer.core.config import settings
from voiceplayer.core.logging import setup_logging, request_id_ctx
from voiceplayer.api.router import api_router
from voiceplayer.modules.playback.handler import INTERNAL_ERROR
from voiceplayer.modules.recordings.resolver import RecordingResolver
from voiceplayer.platform.provider_registry import ProviderRegistry

setup_logging()
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title=settings.APP_NAME)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        process_time = (time.time() - start_time) * 1000
        logger.info(
            f"Request: {request.method} {request.url.path} - Response: {response.status_code} - Time: {process_time:.2f}ms"
        )
        return response

    # registered last so it runs first and the request id is set for the log line above
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        rid = request.headers.get("x-request-id", "-")
        token = request_id_ctx.set(rid)
        try:
            return await call_next(request)
        finally:
            request_id_ctx.reset(token)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.critical(f"Unhandled exception for request {request.method} {request.url.path}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": INTERNAL_ERROR},
        )

    @app.on_event("startup")
    async def on_startup():
        registry = ProviderRegistry(settings)
        await registry.open()
        primary, legacy = registry.recording_sources()
        app.state.registry = registry
        app.state.resolver = RecordingResolver(primary, legacy, storage_base_url=settings.STORAGE_PUBLIC_BASE_URL)

    @app.on_event("shutdown")
    async def on_shutdown():
        registry = getattr(app.state, "registry", None)
        if registry:
            await registry.close()

    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app


app = create_app()

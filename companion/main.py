# companion/main.py
# -*- coding: utf-8 -*-
"""
Companion Server — FastAPI application entrypoint
-------------------------------------------------
This file wires everything together:

- Sets up central logging.
- Creates the FastAPI app.
- Adds middleware (CORS for dev).
- Maps domain errors (CompanionError) to JSON responses.
- Mounts routers:
    * /api/chat, /api/mood        → chat turns and mood check-ins
    * /api/profile, /api/leaderboard, /api/admin/points
    * /api/shop/*                 → catalog and purchases
    * /api/daily/*                → oracle and daily question
- Exposes an ASGI `app` object for uvicorn.

Typical run command (dev):

    uvicorn companion.main:app --host 0.0.0.0 --port 3000 --reload

"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from companion.core.config import settings
from companion.core.errors import CompanionError
from companion.routers.chat import router as chat_router
from companion.routers.daily import router as daily_router
from companion.routers.profile import router as profile_router
from companion.routers.shop import router as shop_router
from companion.utils import setup_logging, get_logger


setup_logging(debug=settings.debug)
logger = get_logger(__name__)


async def companion_error_handler(request: Request, exc: CompanionError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.message},
    )


def create_app() -> FastAPI:
    """
    Application factory.

    Returns a configured FastAPI instance ready for uvicorn.
    """
    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Browser UI is served from another origin during development.
    if settings.environment != "production":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(CompanionError, companion_error_handler)

    app.include_router(chat_router)
    app.include_router(profile_router)
    app.include_router(shop_router)
    app.include_router(daily_router)

    # ------------------------------------------------------------------
    # Meta / health endpoints
    # ------------------------------------------------------------------

    @app.get("/ping", response_class=PlainTextResponse, tags=["meta"])
    async def ping() -> str:
        return "pong"

    @app.get("/health", tags=["meta"])
    async def health_check():
        """
        Lightweight health check for monitoring scripts.
        """
        return {
            "status": "ok",
            "environment": settings.environment,
            "debug": settings.debug,
            "completion_configured": bool(settings.completion_api_key),
            "search_enabled": settings.search_enabled,
        }

    logger.info("FastAPI app created (env=%s)", settings.environment)
    return app


# ASGI app for uvicorn / gunicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "companion.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=(settings.environment != "production"),
    )

"""
main.py
-------
FastAPI application factory and entry point.

Application lifecycle:
  1. App is created by create_application(settings).
  2. lifespan builds the DB engine + session factory and stores them on
     app.state; shutdown disposes the engine.
  3. SessionGatewayMiddleware rejects unauthenticated /api/ requests before
     any route runs.
  4. Routers are registered with their URL prefixes.
  5. Exception handlers turn TaskHubError into {"detail": ...} and hide
     unexpected errors behind a generic 500.

Run with:
    uvicorn main:app --reload              # development
    uvicorn main:app --workers 4           # production (no --reload)
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskhub.api.routes import (
    auth,
    business_processes,
    checklist,
    comments,
    companies,
    feedback,
    notifications,
    tasks,
    telegram_groups,
    users,
)
from taskhub.core.config import Settings, get_settings
from taskhub.core.errors import TaskHubError
from taskhub.core.gateway import SessionGatewayMiddleware
from taskhub.core.logging import configure_logging, get_logger
from taskhub.db.session import create_engine, create_session_factory

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Startup / shutdown lifecycle hook.

    Startup:
      - Configure structured logging
      - Create the async engine and session factory

    Shutdown:
      - Dispose the async engine (graceful connection pool drain)
    """
    settings: Settings = app.state.settings
    configure_logging(settings)
    engine = create_engine(settings)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    logger.info(
        "Starting up",
        app=settings.APP_NAME,
        env=settings.APP_ENV,
        debug=settings.DEBUG,
    )
    yield
    logger.info("Shutting down, disposing DB engine")
    await engine.dispose()


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Multi-tenant task management backend for a Telegram Mini App, "
            "with Telegram login, session tokens and company data isolation."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # ── Middleware ───────────────────────────────────────────────────────────
    # Added last runs first: CORS wraps the gateway so preflights and 401s
    # still carry CORS headers.
    app.add_middleware(SessionGatewayMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(companies.router)
    app.include_router(users.router)
    app.include_router(tasks.router)
    app.include_router(tasks.tags_router)
    app.include_router(comments.router)
    app.include_router(checklist.router)
    app.include_router(notifications.router)
    app.include_router(notifications.user_router)
    app.include_router(feedback.router)
    app.include_router(business_processes.router)
    app.include_router(telegram_groups.router)

    # ── Global Exception Handlers ─────────────────────────────────────────────

    @app.exception_handler(TaskHubError)
    async def taskhub_error_handler(request: Request, exc: TaskHubError) -> JSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("Operation failed", path=request.url.path, error=exc.detail)
        headers = (
            {"WWW-Authenticate": "Bearer"}
            if exc.status_code == status.HTTP_401_UNAUTHORIZED
            else None
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        content = {"detail": "Internal server error"}
        if settings.DEBUG:
            content["error"] = str(exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=content,
        )

    # ── Health Check ──────────────────────────────────────────────────────────

    @app.get("/health", tags=["Health"], summary="Service health check")
    async def health() -> dict:
        return {"status": "ok", "app": settings.APP_NAME, "env": settings.APP_ENV}

    return app


app = create_application()

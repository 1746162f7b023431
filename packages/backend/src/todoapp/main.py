"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (database engine).
Middleware, CORS, exception handlers, and routers all registered here.

Error translation lives here too: services raise TodoAppError
subclasses, and one handler maps them to their status codes. Request
bodies that fail schema validation are 400s as well. A database
failure is a 500 with a generic message; it is never reported as a 401
or 404, and its details never reach the client.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from todoapp import __version__
from todoapp.api import api_router
from todoapp.config import settings
from todoapp.errors import TodoAppError

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: FastAPI lifespan replaces on_event("startup") / on_event("shutdown").
    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    logger.info(
        "todoapp.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("todoapp.shutdown")

    from todoapp.db.engine import engine
    await engine.dispose()


async def todoapp_error_handler(request: Request, exc: TodoAppError) -> JSONResponse:
    """Translate a domain error into its HTTP status."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies are client errors like any other: 400."""
    detail = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'][1:]) or 'body'}: {err['msg']}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"detail": detail or "Invalid input"})


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Unexpected persistence failure. Logged here, opaque to the client."""
    logger.error(
        "todoapp.database_error",
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="todoapp",
        description="Multi-user todo backend with token sessions",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → CORS → handler

    from todoapp.middleware.request_id import RequestIdMiddleware
    from todoapp.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[settings.auth_header],
    )

    # ── Error translation ────────────────────────────────────
    app.add_exception_handler(TodoAppError, todoapp_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)

    # Mount API routes
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: todoapp.main:app)
app = create_app()

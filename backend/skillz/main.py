"""
Skillz - FastAPI Application Entry Point

This module initializes the FastAPI application with all middleware,
routes, exception handlers and lifecycle event handlers.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from skillz.api.v1 import auth, domains, health, skills, users
from skillz.core.config import VERSION, settings
from skillz.core.database import close_db, init_db
from skillz.core.exceptions import SkillzError
from skillz.core.logging_config import get_logger, setup_logging
from skillz.middleware.logging import LoggingMiddleware
from skillz.middleware.rate_limit import RateLimitMiddleware
from skillz.middleware.request_id import RequestIDMiddleware
from skillz.middleware.security_headers import SecurityHeadersMiddleware


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Startup:
        - Set up logging
        - Initialize database (create tables)

    Shutdown:
        - Close database connections
    """
    setup_logging(level=settings.log_level, json_format=settings.log_json)
    await init_db()

    yield

    await close_db()


app = FastAPI(
    title=settings.project_name,
    version=VERSION,
    description="Skills directory: users, managers, domains and skills",
    openapi_url=f"{settings.api_v1_prefix}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


@app.exception_handler(SkillzError)
async def skillz_error_handler(request: Request, exc: SkillzError) -> JSONResponse:
    """
    Translate domain errors into ``{"detail": message}`` responses.
    """
    logger.info(
        f"{type(exc).__name__}: {exc.message}",
        extra={
            "path": request.url.path,
            "status_code": exc.status_code,
            "request_id": getattr(request.state, "request_id", None),
        },
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Middleware is executed in reverse order of registration
# (last registered = first executed)

app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    RateLimitMiddleware,
    auth_limit=settings.auth_rate_limit,
    default_limit=settings.default_rate_limit,
    enabled=settings.rate_limit_enabled,
)

# Runs after RequestID to access request_id
app.add_middleware(LoggingMiddleware)

app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(health.router, prefix=settings.api_v1_prefix, tags=["health"])
app.include_router(auth.router, prefix=f"{settings.api_v1_prefix}/auth", tags=["auth"])
app.include_router(users.router, prefix=settings.api_v1_prefix)
app.include_router(domains.router, prefix=settings.api_v1_prefix)
app.include_router(skills.router, prefix=settings.api_v1_prefix)


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns basic API information.
    """
    return {
        "message": "Skillz API",
        "version": VERSION,
        "docs": "/docs",
    }

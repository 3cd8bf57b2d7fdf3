"""
FastAPI application for the quizz practice service.

Provides REST API for:
- Recording answers and reading answer statistics
- Serving practice batches (never answered, then missed, then stalest)
- Question authoring, moderation and bulk import

Caller identity arrives in the X-User-Id / X-User-Role headers.
"""

from __future__ import annotations

import sys
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from config import get_settings
from quizz import __version__
from quizz.db.database import check_database_health, init_db
from quizz.practice.errors import (
    ImportValidationError,
    InvalidQuestionError,
    PermissionDeniedError,
    QuestionNotFoundError,
    QuizzError,
)

settings = get_settings()


def configure_logging(level: str | None = None) -> None:
    """Route loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level or settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {extra[component]} | {message}",
    )
    logger.configure(extra={"component": "api"})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    configure_logging()
    logger.info("Starting quizz practice service...")
    init_db()
    logger.info(f"Service started on {settings.api_host}:{settings.api_port}")

    yield

    # Shutdown
    logger.info("Shutting down quizz practice service...")


app = FastAPI(
    title="Quizz Practice",
    description="""
    Practice backend for a quiz learning application.

    ## Features

    - **Answer checking**: normalized comparison, set semantics for multiple select
    - **Next questions**: never answered first, then last answered wrong, then stalest
    - **Stats**: accuracy, current streak and per-category breakdown
    - **Moderation**: pending / approved / rejected lifecycle by role
    - **Import**: validated bulk import with duplicate detection
    """,
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ========================================
# Error Mapping
# ========================================

ERROR_STATUS: dict[type[QuizzError], int] = {
    QuestionNotFoundError: 404,
    InvalidQuestionError: 400,
    ImportValidationError: 400,
    PermissionDeniedError: 403,
}


@app.exception_handler(QuizzError)
async def quizz_error_handler(request: Request, exc: QuizzError) -> JSONResponse:
    status_code = next((code for kind, code in ERROR_STATUS.items() if isinstance(exc, kind)), 500)
    if status_code == 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} -> 400: invalid request body")
    return JSONResponse(status_code=400, content={"detail": "Invalid request", "errors": jsonable_encoder(exc.errors())})


# ========================================
# Health & Status Endpoints
# ========================================


@app.get("/", tags=["Health"])
def root() -> dict[str, str]:
    """Root endpoint returning service info."""
    return {
        "service": "quizz-practice",
        "version": __version__,
        "status": "ok",
    }


@app.get("/health", tags=["Health"])
def health_check() -> dict[str, Any]:
    """Health check with an actual database round trip."""
    db_status, db_error = check_database_health()

    result: dict[str, Any] = {
        "status": "healthy" if db_status == "ok" else "unhealthy",
        "timestamp": datetime.utcnow().isoformat(),
        "components": {"database": db_status},
        "config": {"practice": settings.get_practice_config()},
    }
    if db_error:
        result["errors"] = {"database": db_error}
    return result


# ========================================
# Import and mount routers
# ========================================

from quizz.api.routers import progress_router, questions_router  # noqa: E402

app.include_router(progress_router.router, prefix="/api/progress", tags=["Progress"])
app.include_router(questions_router.router, prefix="/api/questions", tags=["Questions"])


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)

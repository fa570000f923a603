"""FastAPI application initialization."""

from contextlib import asynccontextmanager
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables before anything else
load_dotenv()

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from groov.api.auth import router as auth_router
from groov.api.middleware import CorrelationIdMiddleware, RequestLoggingMiddleware
from groov.api.routes import router
from groov.config import get_settings
from groov.exceptions import AuthError
from groov.services.logging_service import configure_logging, get_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger = get_logger("main")

    from groov.container import build_container
    from groov.database import close_database, init_database, run_migrations

    # Authentication cannot work without the credential store
    pool = await init_database(settings)
    try:
        await run_migrations(pool)
        app.state.container = build_container(settings, pool)
        logger.info("database_initialized")

        logger.info(
            "application_started",
            environment=settings.environment,
            log_level=settings.log_level,
            cookie_secure=settings.cookie_secure,
        )

        yield
    finally:
        await close_database(pool)
        logger.info("application_shutdown")


app = FastAPI(
    title="groov - Auth API",
    description="Authentication and session endpoints for the groov dance catalogue",
    version="0.1.0",
    lifespan=lifespan,
)


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", None) or str(uuid4())


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Map typed auth errors to their status code and a non-leaking body."""
    logger = structlog.get_logger()
    logger.info(
        "auth_error",
        error=exc.code,
        status_code=exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with user-friendly messages.

    Returns 400 Bad Request with the first failing field.
    """
    correlation_id = _correlation_id(request)
    logger = structlog.get_logger()

    errors = exc.errors()
    if errors:
        first_error = errors[0]
        field = ".".join(str(loc) for loc in first_error.get("loc", ["unknown"]))
        message = first_error.get("msg", "Validation failed")
        detail = f"Field '{field}': {message}"
    else:
        detail = "Request validation failed"

    # Submitted values may include passwords; log only the location and message
    logger.warning(
        "validation_error",
        correlation_id=correlation_id,
        detail=detail,
    )

    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation error",
            "detail": detail,
            "correlation_id": correlation_id,
        },
        headers={"X-Correlation-Id": correlation_id},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and return a generic 500."""
    correlation_id = _correlation_id(request)
    logger = structlog.get_logger()
    logger.exception(
        "unhandled_exception",
        correlation_id=correlation_id,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "correlation_id": correlation_id,
        },
        headers={"X-Correlation-Id": correlation_id},
    )


# CORS middleware for the browser frontend (cookies need credentials)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

# Correlation ID middleware wraps everything so all request logs carry the id
app.add_middleware(CorrelationIdMiddleware)

app.include_router(auth_router)
app.include_router(router)

"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from evolve_support.api.common.auth_router import router as auth_router
from evolve_support.api.v1.admin_router import router as admin_router
from evolve_support.api.v1.chatbot_router import router as chatbot_router
from evolve_support.api.v1.feedback_router import router as feedback_router
from evolve_support.api.v1.file_router import router as file_router
from evolve_support.api.v1.order_router import router as order_router
from evolve_support.api.v1.question_router import router as question_router
from evolve_support.api.v1.session_router import router as session_router
from evolve_support.core.config import settings
from evolve_support.core.database import create_tables, engine
from evolve_support.core.exceptions import (
    AppException,
    app_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from evolve_support.core.middleware import AuthMiddleware
from evolve_support.core.rate_limit import limiter, rate_limit_exceeded_handler
from evolve_support.core.redis import close_redis, init_redis
from evolve_support.schemas.response_schema import ApiResponse, success_response

logger = structlog.get_logger()

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.app.env,
        llm_provider=settings.llm.provider,
        llm_model=settings.llm.model,
    )
    settings.file_upload.storage_path.mkdir(parents=True, exist_ok=True)
    await init_redis()
    if settings.app.is_development:
        await create_tables()
    yield
    await close_redis()
    await engine.dispose()
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.app.name,
    description="Evolve electric scooter customer support API",
    version=VERSION,
    lifespan=lifespan,
    debug=settings.app.debug,
)

app.state.limiter = limiter

# Exception handlers
app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(Exception, unhandled_exception_handler)

# Middleware (registration order: inner→outer, execution order: outer→inner)
app.add_middleware(AuthMiddleware)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.server.cors_allow_origins_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=ApiResponse[dict])
async def health_check() -> dict:
    """Health check endpoint."""
    return success_response({"status": "healthy"})


@app.get("/", response_model=ApiResponse[dict])
async def root() -> dict:
    """Root endpoint."""
    return success_response(
        {
            "app": settings.app.name,
            "version": VERSION,
            "docs": "/docs",
        }
    )


# Register routers
app.include_router(auth_router)
app.include_router(session_router)
app.include_router(chatbot_router)
app.include_router(file_router)
app.include_router(question_router)
app.include_router(admin_router)
app.include_router(order_router)
app.include_router(feedback_router)

# Uploaded attachments are public, like a public storage bucket.
app.mount(
    "/files",
    StaticFiles(directory=settings.file_upload.storage_path, check_dir=False),
    name="files",
)


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    uvicorn.run(
        "evolve_support.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.app.is_development,
    )

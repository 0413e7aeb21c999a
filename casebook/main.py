"""
FastAPI application for the Casebook engine
"""

import json
import os
import time
import uuid
from contextlib import asynccontextmanager
from typing import Callable, Dict

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from casebook.api import dependencies
from casebook.api.case import router as case_router
from casebook.api.sessions import router as sessions_router
from casebook.config import settings
from casebook.data.loader import CaseDataLoadError
from casebook.engine.validator import CaseValidator
from casebook.utils.logger import get_logger, set_module_level, setup_logging

# Environment overrides the settings file, matching uvicorn deployments
log_level = os.getenv("LOG_LEVEL", settings.log_level).upper()
if log_level not in ["DEBUG", "VERBOSE", "INFO", "WARNING", "ERROR", "CRITICAL"]:
    log_level = "INFO"
log_file = os.getenv("LOG_FILE", settings.log_file)

enable_console_logging = os.getenv("ENABLE_CONSOLE_LOGS", "true").lower() == "true"

setup_logging(
    level=log_level,  # type: ignore[arg-type]
    log_file=log_file,
    enable_colors=enable_console_logging,
    include_timestamp=True,
    enable_console_logging=enable_console_logging,
)


def apply_module_log_levels(levels: Dict[str, str]) -> None:
    """Apply per-module level overrides on top of the root level"""
    for module_name, module_level in levels.items():
        set_module_level(module_name, module_level)  # type: ignore[arg-type]


apply_module_log_levels(settings.module_log_levels)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load case data before serving any session"""
    logger.info("=" * 60)
    logger.info("APPLICATION STARTUP")
    logger.info("=" * 60)

    repository = dependencies.repository
    try:
        bundle = await repository.load()
    except CaseDataLoadError as e:
        # Sessions answer 503 until the data is fixed and the app restarted
        logger.error(f"✗ Case data unavailable: {e}")
    else:
        logger.info(f"✓ Case data loaded: {len(bundle.locations)} locations")
        CaseValidator(settings).log_issues(bundle)

    logger.info("Configuration:")
    logger.info(f"  - Data directory: {settings.data_dir}")
    logger.info(f"  - Letters: {', '.join(settings.letters)}")
    logger.info(f"  - Free leads: {', '.join(settings.free_leads)}")
    logger.info(f"  - Debug: {settings.debug}")
    logger.info("=" * 60)

    yield

    logger.info("APPLICATION SHUTDOWN")


# Create FastAPI app
app = FastAPI(
    title="Casebook Engine",
    description="Rule evaluation and state transitions for casebook mysteries",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

logger.info("FastAPI application initialized")
logger.info(f"Log level: {log_level}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next: Callable) -> Response:
    """Log all HTTP requests and responses with a correlation id"""
    request_id = str(uuid.uuid4())[:8]
    start_time = time.time()

    request_body = None
    if request.method in ["POST", "PUT", "PATCH"]:
        body = await request.body()
        if body:
            try:
                request_body = json.loads(body.decode())
            except (json.JSONDecodeError, UnicodeDecodeError):
                request_body = {"body_size": len(body)}

    logger.info(
        f"[API] Request started: {request.method} {request.url.path}",
        extra={
            "component": "API",
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "request_body": request_body,
        },
    )

    request.state.request_id = request_id

    try:
        response = await call_next(request)
    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        logger.error(
            f"[API] Request failed: {request.method} {request.url.path} -> ERROR ({duration_ms:.2f}ms): {str(e)}",
            extra={
                "component": "API",
                "request_id": request_id,
                "error_type": type(e).__name__,
            },
            exc_info=True,
        )
        raise

    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        f"[API] Request completed: {request.method} {request.url.path} -> {response.status_code} ({duration_ms:.2f}ms)",
        extra={
            "component": "API",
            "request_id": request_id,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response


# Include routers
app.include_router(case_router, prefix="/case", tags=["case"])
app.include_router(sessions_router, prefix="/sessions", tags=["sessions"])


@app.get("/")
async def root():
    """Root endpoint"""
    logger.debug("Root endpoint called")
    return {
        "message": "Casebook Engine",
        "version": "0.1.0",
        "status": "running",
        "log_level": log_level,
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    logger.debug("Health check endpoint called")
    return {
        "status": "healthy",
        "case_loaded": dependencies.repository.loaded,
    }


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on {settings.host}:{settings.port}")
    logger.info(f"Debug mode: {settings.debug}")
    uvicorn.run(
        "casebook.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if log_level == "VERBOSE" else log_level.lower(),
    )

"""Branch Office API application.

Startup order: configure logging, build the engine, verify the database,
apply Alembic migrations (unless RUN_MIGRATIONS_ON_STARTUP=false), then
serve. ``/ready`` reports 503 until that sequence has finished.
"""

import asyncio
import logging
import subprocess
import sys
from contextlib import asynccontextmanager

import fastapi
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import Settings, get_settings
from core.database import create_engine, create_session_maker, dispose_engine, init_db
from core.errors import (
    FieldValidationError,
    NotFoundError,
    field_validation_exception_handler,
    global_exception_handler,
    http_exception_handler,
    not_found_exception_handler,
    validation_exception_handler,
)
from core.logger import configure_logging
from core.ratelimit import limiter, rate_limit_exceeded_handler
from core.telemetry import SERVICE_VERSION, RequestTimingMiddleware
from routes import branch_office_router, health_router
from scripts.migrate import API_DIR

configure_logging()
logger = logging.getLogger(__name__)

DB_CHECK_TIMEOUT_SECONDS = 60
MIGRATION_TIMEOUT_SECONDS = 120


def _upgrade_to_head() -> subprocess.CompletedProcess[str]:
    # A child process keeps Alembic's synchronous psycopg2 engine off the loop.
    return subprocess.run(
        [sys.executable, "-m", "scripts.migrate", "upgrade", "head"],
        cwd=API_DIR,
        capture_output=True,
        text=True,
        timeout=MIGRATION_TIMEOUT_SECONDS,
    )


async def _apply_migrations() -> None:
    result = await asyncio.to_thread(_upgrade_to_head)
    if result.returncode != 0:
        stderr = result.stderr.strip()
        logger.error("migrations.failed", extra={"stderr": stderr})
        raise RuntimeError(f"Alembic migration failed:\n{stderr}")
    logger.info("migrations.complete")


async def _initialize(app: fastapi.FastAPI, settings: Settings) -> None:
    async with asyncio.timeout(DB_CHECK_TIMEOUT_SECONDS):
        await init_db(app.state.engine)

    if settings.run_migrations_on_startup:
        async with asyncio.timeout(MIGRATION_TIMEOUT_SECONDS):
            await _apply_migrations()
    else:
        logger.info("migrations.skipped")


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Own the engine for the life of the process."""
    app.state.engine = create_engine()
    app.state.session_maker = create_session_maker(app.state.engine)
    app.state.init_done = False
    app.state.init_error = None

    try:
        await _initialize(app, get_settings())
    except TimeoutError as e:
        app.state.init_error = "timeout"
        logger.error("init.timeout", extra={"stage": "database or migrations"})
        await dispose_engine(app.state.engine)
        raise RuntimeError("Application startup timed out") from e
    except Exception as e:
        app.state.init_error = str(e)
        logger.error("init.failed", extra={"error": str(e)}, exc_info=True)
        await dispose_engine(app.state.engine)
        raise

    app.state.init_done = True
    logger.info("init.complete")

    try:
        yield
    finally:
        await dispose_engine(app.state.engine)


def _register_exception_handlers(app: fastapi.FastAPI) -> None:
    handlers = {
        RateLimitExceeded: rate_limit_exceeded_handler,
        RequestValidationError: validation_exception_handler,
        FieldValidationError: field_validation_exception_handler,
        NotFoundError: not_found_exception_handler,
        StarletteHTTPException: http_exception_handler,
        Exception: global_exception_handler,
    }
    for exc_class, handler in handlers.items():
        app.add_exception_handler(exc_class, handler)


def _add_cors(app: fastapi.FastAPI, origins: list[str]) -> None:
    if not origins:
        return
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
        expose_headers=["X-Request-Duration-Ms", "X-Request-Id"],
        max_age=600,
    )


def create_app(settings: Settings | None = None) -> fastapi.FastAPI:
    settings = settings or get_settings()
    show_docs = settings.enable_docs or settings.debug

    application = fastapi.FastAPI(
        title="Branch Office API",
        version=SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if show_docs else None,
        redoc_url="/redoc" if show_docs else None,
        openapi_url="/openapi.json" if show_docs else None,
    )
    application.state.limiter = limiter

    _register_exception_handlers(application)
    application.add_middleware(RequestTimingMiddleware)
    # Added last so CORS wraps the timing middleware
    _add_cors(application, settings.allowed_origins)

    application.include_router(health_router)
    application.include_router(branch_office_router)
    return application


app = create_app()

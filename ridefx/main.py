import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .db.dal import Database
from .db.migrate import apply_migrations
from .db.seed import seed_currencies
from .core import errors
from .routers import health, currency, rates, currency_settings
from .services.cache import TTLCache
from .services.currency.rates import RateStore


def create_app(settings_override: Settings | None = None) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    """
    settings = settings_override or get_settings()
    # Initialize logging early
    init_logging(debug=settings.debug)

    # Ensure schema and currency rows exist (idempotent) so fresh DBs are usable
    try:
        apply_migrations(settings.db_path)  # type: ignore[arg-type]
        added = seed_currencies(settings.db_path)  # type: ignore[arg-type]
    except Exception:
        # Failing to init DB is fatal; re-raise after logging
        logging.getLogger("ridefx").exception("failed to prepare database on startup")
        raise
    if added:
        logging.getLogger("ridefx").info("seeded %d currency rows", added)

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    app.state.settings = settings
    app.state.rate_store = RateStore(
        Database(settings.db_path), TTLCache(), settings  # type: ignore[arg-type]
    )

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(currency.router)
    app.include_router(rates.router)
    app.include_router(currency_settings.router)

    @app.get("/")
    async def root():
        return {"message": settings.app_name, "version": settings.version}

    return app


app = create_app()


def run() -> None:  # pragma: no cover - console entry point
    import os

    import uvicorn

    uvicorn.run(
        "ridefx.main:app",
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "8000")),
        log_config=None,  # keep the JSON handlers installed by init_logging
    )

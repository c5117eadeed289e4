import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .db.kv import KeyValueStore
from .routers import budgets, expenses, savings, insights, settings as settings_router, rates
from .services.store_context import build_store


def create_app(
    settings_override: Settings | None = None,
    adapter: KeyValueStore | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., in-memory storage). Falls back to cached
    get_settings(). adapter: optional key/value store to load from and write to.
    """
    settings = settings_override or get_settings()
    if settings_override is not None:
        settings.init_post_load()
    # Initialize logging early
    init_logging(debug=settings.debug)

    try:
        store = build_store(settings, adapter)
    except Exception:
        # Failing to open storage is fatal; re-raise after logging
        logging.getLogger("budgetbox").exception("failed to load budget store on startup")
        raise

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    app.state.store = store
    app.state.settings = settings

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(budgets.router)
    app.include_router(expenses.router)
    app.include_router(savings.router)
    app.include_router(insights.router)
    app.include_router(settings_router.router)
    app.include_router(rates.router)

    @app.get("/")
    async def root():
        return {"message": "BudgetBox API", "version": settings.version}

    @app.get("/health")
    async def health():
        return {"status": "ok", "budgets": len(store.budgets)}

    return app

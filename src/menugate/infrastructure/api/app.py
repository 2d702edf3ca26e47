"""FastAPI application for the menu engine.

Wires the menus, permissions and roles routers under the API prefix, maps
domain errors onto HTTP responses and owns the process-wide resolved-menu
cache.
"""

import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from menugate.core.config import get_settings
from menugate.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)
from menugate.domain.exceptions import (
    CycleDetectedError,
    DelegationDeniedError,
    MenuEngineError,
    NotFoundError,
    ScopeViolationError,
    ValidationError,
)
from menugate.domain.services import MenuAccessCache
from menugate.infrastructure.persistence.database import (
    close_database,
    get_db_manager,
    init_database,
)

logger = get_logger(__name__)

SERVICE_NAME = "MenuGate"

ERROR_STATUS_CODES: dict[type[MenuEngineError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    CycleDetectedError: status.HTTP_409_CONFLICT,
    DelegationDeniedError: status.HTTP_403_FORBIDDEN,
    ScopeViolationError: status.HTTP_403_FORBIDDEN,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def status_code_for(exc: MenuEngineError) -> int:
    """HTTP status for a domain error, following its class hierarchy."""
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[error_type]
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Set up logging, the database and the menu cache for the process."""
    settings = get_settings()
    configure_logging(settings)
    logger.info(
        "MenuGate starting",
        version=settings.app_version,
        environment=settings.environment,
        api_prefix=settings.api_prefix,
    )

    try:
        await init_database()
    except Exception as e:
        logger.error("Database initialization failed", error=str(e))
        raise

    app.state.menu_cache = MenuAccessCache(ttl_seconds=settings.menu_cache_ttl_seconds)
    logger.info("Menu cache ready", ttl_seconds=settings.menu_cache_ttl_seconds)

    yield

    app.state.menu_cache.invalidate_all()
    await close_database()
    logger.info("MenuGate stopped")


def create_app() -> FastAPI:
    """Build the FastAPI application.

    Docs endpoints are only served in development.
    """
    settings = get_settings()
    docs_enabled = settings.is_development

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Hierarchical menu and permission resolution service",
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_health_check(app)
    register_routes(app)
    register_exception_handlers(app)
    register_middleware(app)
    return app


def _service_status(state: str, **extra: Any) -> dict[str, Any]:
    return {
        "status": state,
        "service": SERVICE_NAME,
        "version": get_settings().app_version,
        **extra,
    }


def register_health_check(app: FastAPI) -> None:
    """Expose /health, /live and /ready.

    Only /ready touches the database.
    """

    @app.get("/health", tags=["health"])
    async def health_check():
        return _service_status("healthy")

    @app.get("/live", tags=["health"])
    async def liveness_check():
        return _service_status("alive")

    @app.get("/ready", tags=["health"])
    async def readiness_check(request: Request):
        cache = getattr(request.app.state, "menu_cache", None)
        cached_entries = cache.size() if cache is not None else 0

        if await get_db_manager().check_connection():
            return _service_status("ready", database="connected", cached_entries=cached_entries)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=_service_status("not_ready", database="disconnected"),
        )


def register_routes(app: FastAPI) -> None:
    """Mount the routers under the configured API prefix."""
    from menugate.infrastructure.api.routes import (
        menus_router,
        permissions_router,
        roles_router,
    )

    prefix = get_settings().api_prefix
    for router, name in (
        (menus_router, "menus"),
        (permissions_router, "permissions"),
        (roles_router, "roles"),
    ):
        app.include_router(router, prefix=f"{prefix}/{name}", tags=[name])

    @app.get(prefix, tags=["root"])
    async def api_root():
        return {
            "name": get_settings().app_name,
            "version": get_settings().app_version,
            "resources": ["menus", "permissions", "roles"],
        }


def register_exception_handlers(app: FastAPI) -> None:
    """Render domain errors with their code and reason; hide everything else behind a 500."""

    @app.exception_handler(MenuEngineError)
    async def menu_engine_exception_handler(request: Request, exc: MenuEngineError):
        status_code = status_code_for(exc)
        logger.info(
            "Request rejected",
            path=request.url.path,
            method=request.method,
            error=exc.code,
            reason=exc.message,
            status_code=status_code,
        )
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.code, "message": exc.message},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            exc_type=type(exc).__name__,
            error=str(exc),
        )
        message = str(exc) if get_settings().debug else "An unexpected error occurred"
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "internal_error", "message": message},
        )


def register_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next):
        """Bind a correlation ID for the request and echo it back."""
        correlation_id = request.headers.get("X-Correlation-ID") or f"cid_{uuid.uuid4().hex[:12]}"
        bind_correlation_id(correlation_id)
        try:
            response = await call_next(request)
            logger.info(
                "Request handled",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()


app = create_app()

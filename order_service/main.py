"""
FastAPI Application Entry Point - Order Service
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.orm import sessionmaker

from order_service import __version__
from order_service.config import Settings, settings as default_settings
from order_service.database import create_db_engine, create_session_factory, init_db
from order_service.errors import (
    OrderServiceError,
    CODE_INVALID_INPUT,
    CODE_NOT_FOUND,
    CODE_CONFLICT,
    CODE_UNAVAILABLE,
)
from order_service.api import orders, health

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    CODE_INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    CODE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    CODE_CONFLICT: status.HTTP_409_CONFLICT,
    CODE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class ServiceNameFilter(logging.Filter):
    """Stamp every record with the service name"""

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        return True


def configure_logging(app_settings: Settings) -> None:
    """Configure root logging from LOG_LEVEL and LOG_FORMAT; safe to call again"""
    logging.basicConfig(
        level=app_settings.LOG_LEVEL.upper(),
        format=app_settings.LOG_FORMAT,
    )
    for handler in logging.getLogger().handlers:
        existing = [f for f in handler.filters if isinstance(f, ServiceNameFilter)]
        if existing:
            for service_filter in existing:
                service_filter.service_name = app_settings.SERVICE_NAME
        else:
            handler.addFilter(ServiceNameFilter(app_settings.SERVICE_NAME))


async def order_service_error_handler(request: Request, exc: OrderServiceError) -> JSONResponse:
    """Translate service error codes into HTTP status codes"""
    status_code = ERROR_STATUS_CODES.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"code": exc.code, "detail": str(exc)},
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed requests as INVALID_INPUT like workflow validation failures"""
    errors = exc.errors()
    detail = "invalid request"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        detail = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"code": CODE_INVALID_INPUT, "detail": detail},
    )


def create_app(
    app_settings: Optional[Settings] = None,
    session_factory: Optional[sessionmaker] = None,
) -> FastAPI:
    """
    Build the Order Service application

    Args:
        app_settings: Settings to use instead of the environment defaults
        session_factory: Ready session factory; when omitted the engine is
            created from DATABASE_URL on startup
    """
    app_settings = app_settings or default_settings
    configure_logging(app_settings)

    app = FastAPI(
        title="Order Service",
        description="Microservice for managing orders and order items",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.settings = app_settings
    app.state.engine = None
    app.state.session_factory = session_factory

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(OrderServiceError, order_service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(orders.router)

    # Prometheus metrics
    if app_settings.METRICS_ENABLED:
        Instrumentator().instrument(app).expose(app)

    @app.on_event("startup")
    def startup_event():
        """Initialize database on startup"""
        logger.info("Starting %s...", app_settings.SERVICE_NAME)
        if app.state.session_factory is None:
            app.state.engine = create_db_engine(app_settings)
            init_db(app.state.engine)
            app.state.session_factory = create_session_factory(app.state.engine)
            logger.info("Database initialized")
        logger.info("%s is running on port %s", app_settings.SERVICE_NAME, app_settings.SERVICE_PORT)

    @app.on_event("shutdown")
    def shutdown_event():
        """Cleanup on shutdown"""
        logger.info("Shutting down %s...", app_settings.SERVICE_NAME)
        if app.state.engine is not None:
            app.state.engine.dispose()

    return app


app = create_app()

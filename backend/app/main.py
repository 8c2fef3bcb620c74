"""
CampusEats API application.

``create_app()`` assembles middleware, exception handlers, routers and the
static mounts for uploaded images. The module-level ``app`` is what uvicorn
serves:

    uvicorn backend.app.main:app --reload
"""

from pathlib import Path
from typing import Callable

from fastapi import APIRouter, FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware

from core.constants import MENU_IMAGES_DIR, PROFILE_IMAGES_DIR
from core.db import db
from core.logging import RequestLoggingMiddleware, configure_logging, get_logger
from core.security import SecurityConfigError, validate_security_config

from .config import get_settings
from .error_handlers import register_exception_handlers
from .middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware
from .middleware.security import SecurityHeadersMiddleware
from .routers import auth, coupons, inventory, kitchen, loyalty, menu, orders, payments, reviews
from .services import payment_service

settings = get_settings()
configure_logging(level=settings.log_level, env=settings.env)
logger = get_logger("campuseats.api")

ROUTERS: tuple[APIRouter, ...] = (
    auth.router,
    menu.router,
    reviews.router,
    orders.router,
    payments.router,
    loyalty.router,
    coupons.router,
    kitchen.router,
    inventory.router,
)


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared Content-Length exceeds the limit with 413."""

    def __init__(self, app, max_size_mb: int = 10):
        super().__init__(app)
        self.max_size_mb = max_size_mb
        self.max_bytes = max_size_mb * 1024 * 1024

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_bytes:
            code = status.HTTP_413_CONTENT_TOO_LARGE
            return JSONResponse(
                status_code=code,
                content={"detail": f"Maximum request size is {self.max_size_mb}MB", "status_code": code},
            )
        return await call_next(request)


def check_security_config() -> None:
    """
    Refuse to start on an unsafe configuration.

    Local development may bypass the check with DEBUG=true, never in production.
    """
    try:
        validate_security_config(settings)
    except SecurityConfigError:
        if settings.debug and not settings.is_production:
            logger.warning("security_validation_bypassed", env=settings.env)
            return
        raise
    logger.info("security_validation_passed")


def _install_middleware(app: FastAPI) -> None:
    # Starlette runs the last added middleware first; the request ID wraps everything
    # inside it so each request log line carries the ID.
    app.add_middleware(RequestSizeLimitMiddleware, max_size_mb=settings.max_request_size_mb)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "Origin", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)


def _mount_uploads(app: FastAPI) -> None:
    root = Path(settings.upload_root)
    for subdir in (PROFILE_IMAGES_DIR, MENU_IMAGES_DIR):
        directory = root / subdir
        directory.mkdir(parents=True, exist_ok=True)
        app.mount(f"/{subdir}", StaticFiles(directory=str(directory)), name=subdir)


def _add_health_routes(app: FastAPI) -> None:
    @app.get("/", tags=["health"])
    def root():
        return {"name": settings.app_name, "status": "ok"}

    @app.get("/health", tags=["health"])
    def liveness():
        return {"status": "ok"}

    @app.get("/health/ready", tags=["health"])
    def readiness():
        """200 when the database answers a trivial query, 503 otherwise."""
        probe = db.health_check()
        checks = {"database": probe["healthy"]}
        if not probe["healthy"]:
            logger.warning("readiness_failed", error=probe["error"])
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "checks": checks},
            )
        return {"status": "ready", "checks": checks}


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, debug=settings.debug)

    _install_middleware(app)
    register_exception_handlers(app)

    @app.on_event("startup")
    async def on_startup():
        logger.info("app_startup", app_name=settings.app_name, env=settings.env)
        check_security_config()

        db.initialize(settings.database_url)
        if settings.auto_create_tables:
            db.create_all_tables()
        logger.info("database_initialized", auto_create_tables=settings.auto_create_tables)

        payment_service.configure_stripe()

    @app.on_event("shutdown")
    async def on_shutdown():
        logger.info("app_shutdown")

    _add_health_routes(app)
    for router in ROUTERS:
        app.include_router(router)
    _mount_uploads(app)

    return app


app = create_app()

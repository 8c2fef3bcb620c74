"""
Structured logging for CampusEats.

Every module logs through structlog with snake_case event names:

    logger = get_logger(__name__)
    logger.info("order_placed", order_id=order.id, total=str(order.total))

Development and test environments get a colored console renderer, every
other environment emits one JSON object per line. Credentials that end up in
an event dict (passwords, tokens, Stripe signatures) are masked before
rendering.
"""

import logging
import sys
import time
from collections.abc import Callable, Iterable
from contextlib import AbstractContextManager
from functools import wraps
from typing import Any, TypeVar

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

F = TypeVar("F", bound=Callable[..., Any])

SENSITIVE_KEYS = frozenset(
    {
        "password",
        "current_password",
        "new_password",
        "password_hash",
        "token",
        "access_token",
        "refresh_token",
        "authorization",
        "stripe_signature",
        "jwt_secret_key",
    }
)
MASK = "***"

_configured = False


def _mask_secrets(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = MASK
    return event_dict


def _service_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", "campuseats")
    return event_dict


def _uses_console(env: str) -> bool:
    return env.lower() in ("development", "dev", "test", "local")


def build_processors(env: str) -> list[Processor]:
    """Processor chain for the given ENV; the renderer is always last."""
    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _service_name,
        _mask_secrets,
    ]
    if _uses_console(env):
        chain.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    else:
        chain += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return chain


def configure_logging(level: str = "INFO", env: str | None = None) -> None:
    """Configure stdlib logging and structlog once per process."""
    global _configured

    if env is None:
        from .config import get_settings

        env = get_settings().env

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root = logging.getLogger()
    if not _configured:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.setLevel(numeric_level)
    # uvicorn's access log duplicates request_complete
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    structlog.configure(
        processors=build_processors(env),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)  # type: ignore[no-any-return]


# Context


def bind_context(**values: Any) -> None:
    """Attach values to every log entry emitted by the current request or task."""
    structlog.contextvars.bind_contextvars(**values)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """
    Bind values for the duration of a ``with`` block.

    Values that were already bound before the block are restored on exit:

        with LogContext(order_id=order.id, operation="cancel_order"):
            logger.info("order_cancelled")
    """

    def __init__(self, **values: Any):
        self.values = values
        self._bound: AbstractContextManager | None = None

    def __enter__(self) -> "LogContext":
        self._bound = structlog.contextvars.bound_contextvars(**self.values)
        self._bound.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        assert self._bound is not None
        self._bound.__exit__(exc_type, exc_val, exc_tb)
        self._bound = None
        return False


# Decorators


def log_function_call(logger: structlog.stdlib.BoundLogger | None = None) -> Callable[[F], F]:
    """
    Log calls to a service function at debug level and its failures as warnings.

    Domain errors are expected outcomes, so failures are not logged as errors;
    the exception handlers decide how loud a failure is.
    """

    def decorator(func: F) -> F:
        log = logger or get_logger(func.__module__)

        @wraps(func)
        def wrapper(*args, **kwargs):
            log.debug("call", function=func.__qualname__, kwargs=sorted(kwargs))
            try:
                return func(*args, **kwargs)
            except Exception as exc:
                log.warning("call_failed", function=func.__qualname__, error_type=type(exc).__name__)
                raise

        return wrapper  # type: ignore[return-value]

    return decorator


def log_timing(
    operation: str, logger: structlog.stdlib.BoundLogger | None = None
) -> Callable[[F], F]:
    """Record how long ``operation`` took, in milliseconds, whether it succeeded or not."""

    def decorator(func: F) -> F:
        log = logger or get_logger(func.__module__)

        @wraps(func)
        def wrapper(*args, **kwargs):
            started = time.perf_counter()
            succeeded = False
            try:
                result = func(*args, **kwargs)
                succeeded = True
                return result
            finally:
                log.info(
                    "timed_operation",
                    operation=operation,
                    succeeded=succeeded,
                    elapsed_ms=int((time.perf_counter() - started) * 1000),
                )

        return wrapper  # type: ignore[return-value]

    return decorator


# HTTP


class RequestLoggingMiddleware:
    """
    ASGI middleware that logs the start and completion of every HTTP request.

    Health probes are logged at debug level only. The request ID bound by
    RequestIDMiddleware is picked up from the log context.
    """

    def __init__(self, app, quiet_paths: Iterable[str] = ("/health", "/health/ready")):
        self.app = app
        self.quiet_paths = frozenset(quiet_paths)
        self.logger = structlog.get_logger("campuseats.http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "")
        path = scope.get("path", "")
        client = scope.get("client")
        quiet = path in self.quiet_paths
        started = time.perf_counter()
        response_status = 500

        (self.logger.debug if quiet else self.logger.info)(
            "request_started",
            method=method,
            path=path,
            client_ip=client[0] if client else None,
        )

        async def send_wrapper(message):
            nonlocal response_status
            if message["type"] == "http.response.start":
                response_status = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            if response_status >= 500:
                emit = self.logger.error
            elif response_status >= 400:
                emit = self.logger.warning
            else:
                emit = self.logger.debug if quiet else self.logger.info
            emit(
                "request_complete",
                method=method,
                path=path,
                status_code=response_status,
                duration_ms=int((time.perf_counter() - started) * 1000),
            )


__all__ = [
    "LogContext",
    "RequestLoggingMiddleware",
    "bind_context",
    "build_processors",
    "clear_context",
    "configure_logging",
    "get_logger",
    "log_function_call",
    "log_timing",
    "unbind_context",
]

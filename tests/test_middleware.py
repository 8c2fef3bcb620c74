"""
Tests for API Middleware.

Tests:
- Security headers middleware
- Request ID middleware
- Request size limit middleware
- Error response shapes
"""

import structlog
from fastapi import FastAPI
from starlette.applications import Starlette
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient


def _starlette_app(*middleware_classes, **middleware_kwargs):
    async def test_route(request):
        state = request.scope.get("state") or {}
        return JSONResponse({"status": "ok", "request_id": state.get("request_id")})

    app = Starlette(
        routes=[
            Route("/test", test_route, methods=["GET", "POST"]),
            Route("/docs", test_route),
        ]
    )
    for middleware_class in middleware_classes:
        app.add_middleware(middleware_class, **middleware_kwargs)
    return app


class TestSecurityHeadersMiddleware:
    """Tests for SecurityHeadersMiddleware."""

    def test_adds_security_headers(self):
        """Test that security headers are added to response."""
        from backend.app.middleware.security import SecurityHeadersMiddleware

        client = TestClient(_starlette_app(SecurityHeadersMiddleware))
        response = client.get("/test")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
        assert "default-src 'none'" in response.headers["Content-Security-Policy"]
        # Test environment is not production
        assert "Strict-Transport-Security" not in response.headers

    def test_docs_get_relaxed_csp(self):
        from backend.app.middleware.security import SecurityHeadersMiddleware

        client = TestClient(_starlette_app(SecurityHeadersMiddleware))
        response = client.get("/docs")

        assert "cdn.jsdelivr.net" in response.headers["Content-Security-Policy"]

    def test_hsts_in_production(self, monkeypatch):
        from backend.app.config import get_settings
        from backend.app.middleware.security import SecurityHeadersMiddleware

        monkeypatch.setattr(get_settings(), "env", "production")
        client = TestClient(_starlette_app(SecurityHeadersMiddleware))
        response = client.get("/test")

        assert "max-age=31536000" in response.headers["Strict-Transport-Security"]


class TestRequestIDMiddleware:
    """Tests for RequestIDMiddleware."""

    def test_generates_request_id(self):
        from backend.app.middleware.request_id import RequestIDMiddleware

        client = TestClient(_starlette_app(RequestIDMiddleware))
        response = client.get("/test")

        request_id = response.headers["x-request-id"]
        assert len(request_id) == 36
        assert response.json()["request_id"] == request_id

    def test_accepts_safe_inbound_id(self):
        from backend.app.middleware.request_id import RequestIDMiddleware

        client = TestClient(_starlette_app(RequestIDMiddleware))
        response = client.get("/test", headers={"X-Request-ID": "lb-1234.abc"})

        assert response.headers["x-request-id"] == "lb-1234.abc"

    def test_replaces_unsafe_inbound_id(self):
        from backend.app.middleware.request_id import RequestIDMiddleware

        client = TestClient(_starlette_app(RequestIDMiddleware))
        response = client.get("/test", headers={"X-Request-ID": "bad id;drop"})

        assert response.headers["x-request-id"] != "bad id;drop"
        assert len(response.headers["x-request-id"]) == 36


class TestRequestSizeLimitMiddleware:
    """Tests for RequestSizeLimitMiddleware."""

    def test_rejects_large_bodies(self, recwarn):
        from backend.app.main import RequestSizeLimitMiddleware

        client = TestClient(_starlette_app(RequestSizeLimitMiddleware, max_size_mb=1))
        response = client.post("/test", content=b"x" * (1024 * 1024 + 1))

        assert response.status_code == 413
        assert response.json() == {"detail": "Maximum request size is 1MB", "status_code": 413}
        assert not [w for w in recwarn if issubclass(w.category, DeprecationWarning) and "413" in str(w.message)]

    def test_allows_small_bodies(self):
        from backend.app.main import RequestSizeLimitMiddleware

        client = TestClient(_starlette_app(RequestSizeLimitMiddleware, max_size_mb=1))
        response = client.post("/test", content=b"x" * 10)

        assert response.status_code == 200


class TestErrorHandlers:
    """Tests for the JSON error shapes."""

    def _app(self):
        from backend.app.error_handlers import register_exception_handlers
        from backend.app.exceptions import DomainError, OperationFailedError

        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/domain")
        def domain():
            raise DomainError("Nope.", status_code=409)

        @app.get("/operation")
        def operation():
            raise OperationFailedError("Insufficient points")

        @app.get("/boom")
        def boom():
            raise RuntimeError("secret internals")

        return app

    def test_domain_error(self):
        client = TestClient(self._app())

        response = client.get("/domain")

        assert response.status_code == 409
        assert response.json() == {"detail": "Nope.", "status_code": 409}

    def test_operation_failure_shape(self):
        client = TestClient(self._app())

        response = client.get("/operation")

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Insufficient points"}

    def test_unhandled_errors_are_generic(self):
        client = TestClient(self._app(), raise_server_exceptions=False)

        response = client.get("/boom")

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error", "status_code": 500}
        assert "secret" not in response.text

    def test_not_found_route(self):
        client = TestClient(self._app())

        response = client.get("/missing")

        assert response.status_code == 404
        assert response.json() == {"detail": "Not Found", "status_code": 404}

    def test_validation_messages_strip_prefix_and_deduplicate(self):
        from backend.app.error_handlers import validation_messages

        messages = validation_messages(
            [
                {"msg": "Value error, Name is required."},
                {"msg": "Value error, Name is required."},
                {"msg": "Field required"},
            ]
        )

        assert messages == ["Name is required.", "Field required"]


class TestLogContext:
    def test_log_context_binds_and_unbinds(self):
        from core.logging import LogContext, clear_context

        clear_context()
        with LogContext(order_id="o-1"):
            assert structlog.contextvars.get_contextvars()["order_id"] == "o-1"
        assert "order_id" not in structlog.contextvars.get_contextvars()

    def test_unbind_context(self):
        from core.logging import bind_context, clear_context, unbind_context

        clear_context()
        bind_context(user_id="u-1", role="STUDENT")
        unbind_context("user_id")

        assert structlog.contextvars.get_contextvars() == {"role": "STUDENT"}
        clear_context()


class TestLoggingProcessors:
    def test_secrets_are_masked(self):
        from core.logging import MASK, _mask_secrets

        event = _mask_secrets(None, "info", {"event": "login", "password": "Str0ng!Pass", "email": "a@b.c"})

        assert event == {"event": "login", "password": MASK, "email": "a@b.c"}

    def test_renderer_follows_environment(self):
        from core.logging import build_processors

        assert isinstance(build_processors("development")[-1], structlog.dev.ConsoleRenderer)
        assert isinstance(build_processors("production")[-1], structlog.processors.JSONRenderer)

    def test_log_context_restores_outer_values(self):
        from core.logging import LogContext, bind_context, clear_context

        clear_context()
        bind_context(request_id="outer")
        with LogContext(request_id="inner"):
            assert structlog.contextvars.get_contextvars()["request_id"] == "inner"
        assert structlog.contextvars.get_contextvars()["request_id"] == "outer"
        clear_context()

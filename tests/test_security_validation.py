import pytest

from backend.app.config import get_settings
from core.security import SecurityConfigError, validate_security_config

STRONG_SECRET = "k" * 24 + "0123456789"


def _settings(**overrides):
    values = {
        "jwt_secret_key": STRONG_SECRET,
        "cors_allowed_origins": "http://localhost:5173",
        "stripe_secret_key": None,
        "stripe_webhook_secret": None,
        "env": "test",
        "debug": False,
    }
    values.update(overrides)
    return get_settings().model_copy(update=values)


def test_development_defaults_only_warn():
    result = validate_security_config(_settings())

    assert result.valid
    assert result.errors == []
    assert "STRIPE_SECRET_KEY is not set; checkout is disabled" in result.warnings


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"jwt_secret_key": "changeme"}, "JWT_SECRET_KEY is a placeholder value"),
        ({"jwt_secret_key": "short"}, "JWT_SECRET_KEY must be at least 32 characters (got 5)"),
        ({"cors_allowed_origins": "*"}, "CORS_ALLOWED_ORIGINS cannot contain '*' while credentials are allowed"),
        ({"stripe_secret_key": "pk_live_abc"}, "STRIPE_SECRET_KEY does not look like a Stripe secret key"),
    ],
)
def test_fatal_misconfiguration(overrides, message):
    with pytest.raises(SecurityConfigError) as exc_info:
        validate_security_config(_settings(**overrides))

    assert exc_info.value.errors == [message]


def test_strict_mode_promotes_warnings():
    with pytest.raises(SecurityConfigError) as exc_info:
        validate_security_config(_settings(), strict=True)

    assert "STRIPE_SECRET_KEY is not set; checkout is disabled" in exc_info.value.errors


def test_production_checks():
    settings = _settings(
        env="production",
        refresh_cookie_secure=False,
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret="whsec_123",
        public_base_url="http://api.campuseats.example",
        cors_allowed_origins="https://campuseats.example",
        stripe_success_url="https://campuseats.example/orders?status=success",
        stripe_cancel_url="https://campuseats.example/orders?status=cancel",
        database_url="postgresql://db/campuseats",
        auto_create_tables=False,
    )

    with pytest.raises(SecurityConfigError) as exc_info:
        validate_security_config(settings)

    assert exc_info.value.errors == ["REFRESH_COOKIE_SECURE must be true in production"]


def test_production_advisories():
    settings = _settings(
        env="production",
        refresh_cookie_secure=True,
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret="whsec_123",
        public_base_url="http://api.campuseats.example",
        cors_allowed_origins="https://campuseats.example,http://localhost:5173",
        stripe_success_url="https://campuseats.example/orders?status=success",
        stripe_cancel_url="https://campuseats.example/orders?status=cancel",
        database_url="sqlite:///campuseats.db",
        auto_create_tables=True,
    )

    result = validate_security_config(settings)

    assert set(result.warnings) == {
        "CORS_ALLOWED_ORIGINS includes a local origin in production",
        "A Stripe test key is configured in production",
        "PUBLIC_BASE_URL is not served over https",
        "DATABASE_URL points at SQLite; use PostgreSQL in production",
        "AUTO_CREATE_TABLES is on; run Alembic migrations instead",
    }

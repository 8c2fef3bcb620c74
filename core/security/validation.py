"""
Startup checks for security-relevant settings.

Each check inspects the loaded ``Settings`` and records errors (the API must
not start) or warnings (logged, startup continues) on a shared result.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from urllib.parse import urlparse

from core.config import PLACEHOLDER_JWT_SECRETS, Settings
from core.logging import get_logger

logger = get_logger("campuseats.security")

MIN_SECRET_LENGTH = 32
LOCAL_HOSTS = ("localhost", "127.0.0.1", "0.0.0.0")


class SecurityConfigError(Exception):
    """Raised when the configuration is unsafe to serve with."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("Security configuration errors: " + "; ".join(errors))


@dataclass
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def check_jwt_secret(settings: Settings, result: ValidationResult) -> None:
    secret = settings.jwt_secret_key or ""
    if not secret:
        result.errors.append("JWT_SECRET_KEY is not set")
    elif secret.lower() in PLACEHOLDER_JWT_SECRETS:
        result.errors.append("JWT_SECRET_KEY is a placeholder value")
    elif len(secret) < MIN_SECRET_LENGTH:
        result.errors.append(
            f"JWT_SECRET_KEY must be at least {MIN_SECRET_LENGTH} characters (got {len(secret)})"
        )


def check_cors(settings: Settings, result: ValidationResult) -> None:
    origins = settings.cors_origins_list
    if not origins:
        result.errors.append("CORS_ALLOWED_ORIGINS is empty")
        return
    # The refresh cookie is sent with credentials, which browsers refuse for "*"
    if "*" in origins:
        result.errors.append("CORS_ALLOWED_ORIGINS cannot contain '*' while credentials are allowed")
    if settings.is_production and any(urlparse(o).hostname in LOCAL_HOSTS for o in origins):
        result.warnings.append("CORS_ALLOWED_ORIGINS includes a local origin in production")


def check_stripe(settings: Settings, result: ValidationResult) -> None:
    key = settings.stripe_secret_key
    if not key:
        result.warnings.append("STRIPE_SECRET_KEY is not set; checkout is disabled")
        return
    if not key.startswith(("sk_", "rk_")):
        result.errors.append("STRIPE_SECRET_KEY does not look like a Stripe secret key")
    elif key.startswith("sk_test_") and settings.is_production:
        result.warnings.append("A Stripe test key is configured in production")
    if not settings.stripe_webhook_secret:
        result.warnings.append("STRIPE_WEBHOOK_SECRET is not set; webhook signatures are not verified")


def check_public_urls(settings: Settings, result: ValidationResult) -> None:
    if not settings.is_production:
        return
    for name, url in (
        ("PUBLIC_BASE_URL", settings.public_base_url),
        ("STRIPE_SUCCESS_URL", settings.stripe_success_url),
        ("STRIPE_CANCEL_URL", settings.stripe_cancel_url),
    ):
        if urlparse(url).scheme != "https":
            result.warnings.append(f"{name} is not served over https")


CHECKS: tuple[Callable[[Settings, ValidationResult], None], ...] = (
    check_jwt_secret,
    check_cors,
    check_stripe,
    check_public_urls,
)


def validate_security_config(settings: Settings, strict: bool = False) -> ValidationResult:
    """
    Run every check against ``settings``.

    Raises:
        SecurityConfigError: when any check reports an error, or any warning
            when ``strict`` is set.
    """
    result = ValidationResult()
    for check in CHECKS:
        check(settings, result)

    if settings.is_production:
        production_errors, production_advisories = settings.validate_production_config()
        result.errors.extend(production_errors)
        result.warnings.extend(production_advisories)

    for warning in result.warnings:
        logger.warning("security_config_warning", message=warning)

    fatal = result.errors + (result.warnings if strict else [])
    if fatal:
        for error in fatal:
            logger.error("security_config_error", message=error)
        raise SecurityConfigError(fatal)
    return result

"""
Security module for CampusEats.

Provides:
- Password hashing (werkzeug)
- Refresh token generation and hashing
- Configuration validation
"""

from .passwords import generate_refresh_token, hash_password, hash_token, verify_password
from .validation import SecurityConfigError, ValidationResult, validate_security_config

__all__ = [
    "SecurityConfigError",
    "ValidationResult",
    "generate_refresh_token",
    "hash_password",
    "hash_token",
    "validate_security_config",
    "verify_password",
]

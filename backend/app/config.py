"""
Application configuration for the API layer.

Settings live in core.config so the Alembic environment and tests load the
same values:
    from core.config import get_settings, Settings
"""

from core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]

"""
CampusEats Core Library.

This package provides the shared building blocks of the CampusEats backend:
configuration, database management, models, repositories and logging.

Usage:
    # Database
    from core.db import db, get_db
    from core.models import User, MenuItem, Order
    from core.repositories import OrderRepository, LoyaltyAccountRepository

    # Config
    from core.config import get_settings, Settings

    # Logging
    from core.logging import get_logger, configure_logging
"""

__version__ = "1.0.0"

# Lazy imports to avoid circular dependencies
# Users should import directly from submodules:
#   from core.db import db
#   from core.config import get_settings
#   from core.logging import get_logger

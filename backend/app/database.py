"""
Database session access for the API layer.

Routers depend on ``get_db``; tests override it on the app. The engine is
initialized explicitly in main.py startup, NOT at import time.
"""

from core.db import Base, db, get_db

__all__ = ["Base", "db", "get_db"]

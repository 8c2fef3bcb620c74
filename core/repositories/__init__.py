"""
Repository pattern implementations for data access.

Repositories provide a thin abstraction over database operations.
They flush but never commit; the request session commits once.

Usage:
    from core.repositories import OrderRepository
    from core.db import db

    with db.session() as session:
        repo = OrderRepository(session)
        orders = repo.list_for_user(user_id)
"""

from .base import BaseRepository
from .inventory_repository import IngredientRepository
from .loyalty_repository import CouponRepository, LoyaltyAccountRepository, UserCouponRepository
from .menu_repository import MenuItemRepository, ReviewRepository
from .order_repository import KitchenTaskRepository, OrderRepository, PaymentRepository
from .user_repository import RefreshTokenRepository, UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "RefreshTokenRepository",
    "MenuItemRepository",
    "ReviewRepository",
    "OrderRepository",
    "KitchenTaskRepository",
    "PaymentRepository",
    "LoyaltyAccountRepository",
    "CouponRepository",
    "UserCouponRepository",
    "IngredientRepository",
]

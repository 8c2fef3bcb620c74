"""
SQLAlchemy models for CampusEats.

Single source of truth for all database models.

Usage:
    from core.models import User, MenuItem, Order
"""

from .base import Base
from .inventory import Ingredient, StockTransaction
from .loyalty import Coupon, LoyaltyAccount, LoyaltyTransaction, UserCoupon
from .menu import MenuItem, MenuItemReview
from .order import KitchenTask, Order, OrderItem, Payment
from .user import RefreshToken, User

__all__ = [
    # Base
    "Base",
    # User
    "User",
    "RefreshToken",
    # Menu
    "MenuItem",
    "MenuItemReview",
    # Orders
    "Order",
    "OrderItem",
    "KitchenTask",
    "Payment",
    # Loyalty
    "LoyaltyAccount",
    "LoyaltyTransaction",
    "Coupon",
    "UserCoupon",
    # Inventory
    "Ingredient",
    "StockTransaction",
]

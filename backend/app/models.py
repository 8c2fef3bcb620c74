"""
SQLAlchemy ORM models used by the API layer.

Re-exported from core.models:
    from core.models import User, Order, MenuItem
"""

from core.models import (
    Base,
    Coupon,
    Ingredient,
    KitchenTask,
    LoyaltyAccount,
    LoyaltyTransaction,
    MenuItem,
    MenuItemReview,
    Order,
    OrderItem,
    Payment,
    RefreshToken,
    StockTransaction,
    User,
    UserCoupon,
)

__all__ = [
    "Base",
    "User",
    "RefreshToken",
    "MenuItem",
    "MenuItemReview",
    "Order",
    "OrderItem",
    "KitchenTask",
    "Payment",
    "LoyaltyAccount",
    "LoyaltyTransaction",
    "Coupon",
    "UserCoupon",
    "Ingredient",
    "StockTransaction",
]

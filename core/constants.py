"""
Application constants for CampusEats.

Contains enumerations shared by models, schemas and services, plus upload
and loyalty tuning values.
"""

import enum
from decimal import Decimal

# =============================================================================
# Enumerations
# =============================================================================


class UserRole(str, enum.Enum):
    STUDENT = "STUDENT"
    WORKER = "WORKER"
    MANAGER = "MANAGER"


STAFF_ROLES = (UserRole.WORKER, UserRole.MANAGER)


class MenuCategory(str, enum.Enum):
    PIZZA = "PIZZA"
    BURGER = "BURGER"
    SALAD = "SALAD"
    SOUP = "SOUP"
    DESSERT = "DESSERT"
    DRINK = "DRINK"
    OTHER = "OTHER"


class OrderStatus(str, enum.Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    PREPARING = "Preparing"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class KitchenTaskStatus(str, enum.Enum):
    NOT_STARTED = "NotStarted"
    PREPARING = "Preparing"
    READY = "Ready"
    COMPLETED = "Completed"

    @classmethod
    def parse(cls, value: str) -> "KitchenTaskStatus":
        """Case-insensitive lookup by value or member name."""
        normalized = (value or "").strip().lower()
        for member in cls:
            if normalized in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"Invalid status: {value}")


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class LoyaltyTransactionType(str, enum.Enum):
    EARNED = "Earned"
    REDEEMED = "Redeemed"
    EXPIRED = "Expired"
    ADJUSTED = "Adjusted"


class CouponType(str, enum.Enum):
    PERCENTAGE_DISCOUNT = "PercentageDiscount"
    FIXED_AMOUNT_DISCOUNT = "FixedAmountDiscount"
    FREE_ITEM = "FreeItem"


class StockTransactionType(str, enum.Enum):
    RESTOCK = "Restock"
    USAGE = "Usage"
    WASTE = "Waste"
    ADJUSTMENT = "Adjustment"


# Stock movements that remove quantity from an ingredient
STOCK_DECREASING_TYPES = (StockTransactionType.USAGE, StockTransactionType.WASTE)


# =============================================================================
# Loyalty
# =============================================================================

# One point per this many currency units spent
POINTS_PER_CURRENCY_UNIT = Decimal("10")


# =============================================================================
# Uploads
# =============================================================================

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}

MAX_FILENAME_LENGTH = 255

MENU_IMAGES_DIR = "menu-images"
PROFILE_IMAGES_DIR = "profile-images"

# Categories with a bundled placeholder image under menu-images/defaults/
DEFAULT_IMAGE_CATEGORIES = {
    MenuCategory.PIZZA,
    MenuCategory.BURGER,
    MenuCategory.SALAD,
    MenuCategory.SOUP,
    MenuCategory.DESSERT,
    MenuCategory.DRINK,
}

MONEY_QUANTUM = Decimal("0.01")

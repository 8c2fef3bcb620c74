"""
Backend services for CampusEats.
"""

from . import (
    auth_service,
    coupon_service,
    inventory_service,
    kitchen_service,
    loyalty_service,
    menu_service,
    order_service,
    payment_service,
    review_service,
    upload_service,
)

__all__ = [
    "auth_service",
    "coupon_service",
    "inventory_service",
    "kitchen_service",
    "loyalty_service",
    "menu_service",
    "order_service",
    "payment_service",
    "review_service",
    "upload_service",
]

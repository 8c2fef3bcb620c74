"""
Pydantic schemas for request and response validation.

Request validators raise ValueError with the user-facing message; the
validation handler strips pydantic's prefix and returns the messages as-is.
"""

import enum
import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.constants import (
    CouponType,
    KitchenTaskStatus,
    LoyaltyTransactionType,
    MenuCategory,
    OrderStatus,
    PaymentStatus,
    StockTransactionType,
    UserRole,
)


def parse_enum(enum_cls: type[enum.Enum], value: Any, message: str) -> enum.Enum:
    """
    Accept an enum by member name or value (case-insensitive) or by ordinal.

    Ordinals follow declaration order, matching clients that send numbers.
    """
    if isinstance(value, enum_cls):
        return value
    members = list(enum_cls)
    if isinstance(value, int) and not isinstance(value, bool):
        if 0 <= value < len(members):
            return members[value]
        raise ValueError(message)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized.isdigit():
            return parse_enum(enum_cls, int(normalized), message)
        for member in members:
            if normalized in (member.name.lower(), str(member.value).lower()):
                return member
    raise ValueError(message)


def _require_text(value: str | None, message: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(message)
    return value


def _max_length(value: str | None, limit: int, message: str) -> str | None:
    if value is not None and len(value) > limit:
        raise ValueError(message)
    return value


# =============================================================================
# Common
# =============================================================================


class MessageResponse(BaseModel):
    message: str


class CreatedResponse(BaseModel):
    id: str


# =============================================================================
# Auth
# =============================================================================


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class RegisterRequest(BaseModel):
    name: str | None = Field(default=None, validate_default=True)
    email: str | None = Field(default=None, validate_default=True)
    password: str | None = Field(default=None, validate_default=True)
    role: UserRole | None = Field(default=UserRole.STUDENT, validate_default=True)

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, v):
        _require_text(v, "Name is required.")
        return _max_length(v.strip(), 100, "Name must not exceed 100 characters.")

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v):
        _require_text(v, "Email is required.")
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError:
            raise ValueError("Email is not valid.") from None
        return v.strip().lower()

    @field_validator("password", mode="before")
    @classmethod
    def check_password(cls, v):
        if v is None or v == "":
            raise ValueError("Password is required.")
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters long.")
        if not re.search(r"[A-Z]", v):
            raise ValueError("Password must contain an uppercase letter.")
        if not re.search(r"[a-z]", v):
            raise ValueError("Password must contain a lowercase letter.")
        if not re.search(r"\d", v):
            raise ValueError("Password must contain a digit.")
        if not re.search(r"[^A-Za-z0-9]", v):
            raise ValueError("Password must contain a non-alphanumeric character.")
        return v

    @field_validator("role", mode="before")
    @classmethod
    def check_role(cls, v):
        if v is None:
            return UserRole.STUDENT
        return parse_enum(UserRole, v, "Role is not valid.")


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: UserRole
    profile_picture_url: str | None = None
    address_city: str | None = None
    address_street: str | None = None
    address_number: str | None = None
    address_details: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UpdateProfileRequest(BaseModel):
    name: str | None = None
    profile_picture_url: str | None = None
    address_city: str | None = None
    address_street: str | None = None
    address_number: str | None = None
    address_details: str | None = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if v is None:
            return v
        _require_text(v, "Name cannot be empty.")
        return _max_length(v.strip(), 100, "Name must not exceed 100 characters.")

    @field_validator("profile_picture_url")
    @classmethod
    def check_picture(cls, v):
        return _max_length(v, 500, "Profile picture URL must not exceed 500 characters.")


class DeleteUserRequest(BaseModel):
    user_id: str = Field(min_length=1)


class ProfilePictureResponse(BaseModel):
    profile_picture_url: str


# =============================================================================
# Menu
# =============================================================================


class MenuItemCreate(BaseModel):
    name: str | None = Field(default=None, validate_default=True)
    price: Decimal | None = Field(default=None, validate_default=True)
    description: str | None = None
    category: MenuCategory | None = Field(default=None, validate_default=True)
    image_url: str | None = None
    allergens: list[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, v):
        _require_text(v, "Name is required.")
        return _max_length(v.strip(), 30, "Name must not exceed 30 characters.")

    @field_validator("price")
    @classmethod
    def check_price(cls, v):
        if v is None or v <= 0:
            raise ValueError("Price must be greater than 0.")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def check_description(cls, v):
        if v is None:
            return v
        return _max_length(v.strip(), 400, "Description must not exceed 400 characters.")

    @field_validator("category", mode="before")
    @classmethod
    def check_category(cls, v):
        if v is None:
            raise ValueError("Category is not valid.")
        return parse_enum(MenuCategory, v, "Category is not valid.")

    @field_validator("image_url")
    @classmethod
    def check_image_url(cls, v):
        if v is not None and not v.strip():
            return None
        return _max_length(v, 500, "Image URL must not exceed 500 characters.")

    @field_validator("allergens", mode="before")
    @classmethod
    def check_allergens(cls, v):
        if v is None:
            return []
        return [a.strip() for a in v if isinstance(a, str) and a.strip()]


class MenuItemUpdate(MenuItemCreate):
    id: str


class MenuItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    price: float
    description: str | None = None
    category: MenuCategory
    image_url: str | None = None
    allergens: list[str] = Field(default_factory=list)
    average_rating: float = 0.0
    review_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ImageUploadResponse(BaseModel):
    url: str


# =============================================================================
# Orders
# =============================================================================


class OrderLineRequest(BaseModel):
    menu_item_id: str
    quantity: int


class PlaceOrderRequest(BaseModel):
    items: list[OrderLineRequest] = Field(default_factory=list)
    user_coupon_id: str | None = None
    notes: str | None = None

    @field_validator("notes")
    @classmethod
    def check_notes(cls, v):
        return _max_length(v, 500, "Notes cannot exceed 500 characters.")


class OrderItemResponse(BaseModel):
    id: str
    menu_item_id: str | None = None
    menu_item_name: str | None = None
    quantity: int
    unit_price: float
    line_total: float


class OrderResponse(BaseModel):
    id: str
    user_id: str
    status: OrderStatus
    subtotal: float
    discount_amount: float
    total: float
    notes: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
    items: list[OrderItemResponse] = Field(default_factory=list)


# =============================================================================
# Payments
# =============================================================================


class CheckoutSessionRequest(BaseModel):
    items: list[OrderLineRequest] = Field(default_factory=list)
    notes: str | None = None
    user_coupon_id: str | None = None


class CheckoutSessionResponse(BaseModel):
    session_id: str
    checkout_url: str | None = None


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    order_id: str | None = None
    amount: float
    currency: str
    status: PaymentStatus
    created_at: datetime
    completed_at: datetime | None = None


class WebhookAck(BaseModel):
    received: bool = True


# =============================================================================
# Loyalty
# =============================================================================


class LoyaltyAccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    points: int
    created_at: datetime
    updated_at: datetime | None = None


class LoyaltyTransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    points_change: int
    type: LoyaltyTransactionType
    description: str
    related_order_id: str | None = None
    created_at: datetime


class RedeemPointsRequest(BaseModel):
    points: int | None = Field(default=None, validate_default=True)
    description: str | None = Field(default=None, validate_default=True)

    @field_validator("points")
    @classmethod
    def check_points(cls, v):
        if v is None or v <= 0:
            raise ValueError("Points must be greater than 0.")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def check_description(cls, v):
        _require_text(v, "Description is required.")
        return _max_length(v.strip(), 500, "Description must not exceed 500 characters.")


class OperationResponse(BaseModel):
    """Outcome of a ledger operation (redeem, purchase, coupon management)."""

    success: bool
    message: str
    remaining_points: int | None = None
    coupon_id: str | None = None


# =============================================================================
# Coupons
# =============================================================================


class CouponCreate(BaseModel):
    name: str | None = Field(default=None, validate_default=True)
    description: str | None = Field(default=None, validate_default=True)
    type: CouponType
    discount_value: Decimal = Decimal("0")
    points_cost: int | None = Field(default=None, validate_default=True)
    specific_menu_item_id: str | None = None
    minimum_order_amount: Decimal | None = None
    expires_at: datetime | None = None

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, v):
        _require_text(v, "Name is required")
        return _max_length(v.strip(), 100, "Name must not exceed 100 characters")

    @field_validator("description", mode="before")
    @classmethod
    def check_description(cls, v):
        _require_text(v, "Description is required")
        return _max_length(v.strip(), 500, "Description must not exceed 500 characters")

    @field_validator("type", mode="before")
    @classmethod
    def check_type(cls, v):
        return parse_enum(CouponType, v, "Coupon type is not valid")

    @field_validator("discount_value")
    @classmethod
    def check_discount_value(cls, v):
        if v < 0:
            raise ValueError("Discount value must be greater than or equal to 0")
        return v

    @field_validator("points_cost")
    @classmethod
    def check_points_cost(cls, v):
        if v is None or v <= 0:
            raise ValueError("Points cost must be greater than 0")
        return v

    @field_validator("minimum_order_amount")
    @classmethod
    def check_minimum(cls, v):
        if v is not None and v < 0:
            raise ValueError("Minimum order amount must be greater than or equal to 0")
        return v

    @field_validator("expires_at")
    @classmethod
    def as_utc(cls, v):
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @model_validator(mode="after")
    def check_discount_for_type(self):
        if self.type != CouponType.FREE_ITEM and self.discount_value <= 0:
            raise ValueError(
                "Discount value must be greater than 0 for percentage and fixed discounts"
            )
        return self


class CouponResponse(BaseModel):
    id: str
    name: str
    description: str
    type: CouponType
    discount_value: float
    points_cost: int
    specific_menu_item_id: str | None = None
    specific_menu_item_name: str | None = None
    minimum_order_amount: float | None = None
    is_active: bool
    expires_at: datetime | None = None
    created_at: datetime


class UserCouponResponse(BaseModel):
    id: str
    coupon_id: str
    coupon_name: str
    coupon_description: str
    coupon_type: CouponType
    discount_value: float
    specific_menu_item_id: str | None = None
    specific_menu_item_name: str | None = None
    minimum_order_amount: float | None = None
    acquired_at: datetime
    expires_at: datetime | None = None
    is_used: bool


# =============================================================================
# Kitchen
# =============================================================================


class KitchenTaskCreate(BaseModel):
    order_id: str | None = Field(default=None, validate_default=True)
    assigned_to: str | None = Field(default=None, validate_default=True)
    notes: str | None = None

    @field_validator("order_id", mode="before")
    @classmethod
    def check_order_id(cls, v):
        return _require_text(v, "OrderId is required.")

    @field_validator("assigned_to", mode="before")
    @classmethod
    def check_assigned_to(cls, v):
        _require_text(v, "AssignedTo is required.")
        return _max_length(v.strip(), 100, "AssignedTo cannot exceed 100 characters.")

    @field_validator("notes")
    @classmethod
    def check_notes(cls, v):
        return _max_length(v, 100, "Notes cannot exceed 100 characters.")


class KitchenTaskUpdate(BaseModel):
    assigned_to: str | None = None
    status: str | None = None
    notes: str | None = None

    @field_validator("assigned_to")
    @classmethod
    def check_assigned_to(cls, v):
        if v is None:
            return v
        _require_text(v, "AssignedTo cannot be empty.")
        return _max_length(v.strip(), 100, "AssignedTo cannot exceed 100 characters.")

    @field_validator("notes")
    @classmethod
    def check_notes(cls, v):
        return _max_length(v, 100, "Notes cannot exceed 100 characters.")


class KitchenTaskResponse(BaseModel):
    id: str
    order_id: str
    assigned_to: str
    status: KitchenTaskStatus
    notes: str | None = None
    order_status: OrderStatus | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# =============================================================================
# Inventory
# =============================================================================


class IngredientCreate(BaseModel):
    name: str | None = Field(default=None, validate_default=True)
    unit: str | None = Field(default=None, validate_default=True)
    low_stock_threshold: Decimal = Decimal("0")

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, v):
        _require_text(v, "Name is required.")
        return _max_length(v.strip(), 100, "Name must not exceed 100 characters.")

    @field_validator("unit", mode="before")
    @classmethod
    def check_unit(cls, v):
        _require_text(v, "Unit is required.")
        return _max_length(v.strip(), 20, "Unit must not exceed 20 characters.")

    @field_validator("low_stock_threshold")
    @classmethod
    def check_threshold(cls, v):
        if v < 0:
            raise ValueError("Low stock threshold must be 0 or greater.")
        return v


class IngredientCreatedResponse(BaseModel):
    id: str
    name: str


class IngredientResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    unit: str
    current_stock: float
    low_stock_threshold: float
    is_low_stock: bool
    updated_at: datetime | None = None


class StockAdjustRequest(BaseModel):
    ingredient_id: str
    quantity: Decimal
    type: StockTransactionType
    note: str | None = None

    @field_validator("quantity")
    @classmethod
    def check_quantity(cls, v):
        if v <= 0:
            raise ValueError("Quantity must be positive.")
        return v

    @field_validator("type", mode="before")
    @classmethod
    def check_type(cls, v):
        return parse_enum(StockTransactionType, v, "Transaction type is not valid.")

    @field_validator("note")
    @classmethod
    def check_note(cls, v):
        return _max_length(v, 200, "Note cannot exceed 200 characters.")


class StockAdjustResponse(BaseModel):
    id: str
    current_stock: float
    message: str


# =============================================================================
# Reviews
# =============================================================================


class ReviewCreate(BaseModel):
    menu_item_id: str
    rating: float
    comment: str | None = None

    @field_validator("comment")
    @classmethod
    def check_comment(cls, v):
        return _max_length(v, 1000, "Comment must not exceed 1000 characters.")


class ReviewUpdate(BaseModel):
    rating: float
    comment: str | None = None

    @field_validator("comment")
    @classmethod
    def check_comment(cls, v):
        return _max_length(v, 1000, "Comment must not exceed 1000 characters.")


class ReviewResponse(BaseModel):
    id: str
    menu_item_id: str
    user_id: str
    user_name: str
    rating: float
    comment: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class MenuItemRatingResponse(BaseModel):
    menu_item_id: str
    average_rating: float
    total_reviews: int

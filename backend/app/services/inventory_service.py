"""
Ingredient stock service functions.
"""

from decimal import Decimal

from sqlalchemy.orm import Session

from core.constants import STOCK_DECREASING_TYPES
from core.logging import get_logger, log_function_call
from core.models.base import utcnow
from core.repositories import IngredientRepository

from ..exceptions import DomainError, NotFoundError
from ..models import Ingredient, StockTransaction
from ..schemas import IngredientCreate, StockAdjustRequest, StockAdjustResponse

logger = get_logger("service.inventory")


def create_ingredient(db: Session, payload: IngredientCreate) -> Ingredient:
    ingredients = IngredientRepository(db)
    if ingredients.get_by_name(payload.name) is not None:
        raise DomainError(f"Ingredient '{payload.name}' already exists.")

    ingredient = ingredients.create(
        name=payload.name,
        unit=payload.unit,
        current_stock=Decimal("0"),
        low_stock_threshold=payload.low_stock_threshold,
    )
    logger.info("ingredient_created", ingredient_id=ingredient.id, name=ingredient.name)
    return ingredient


def list_ingredients(db: Session) -> list[Ingredient]:
    return IngredientRepository(db).list_ordered()


def get_by_name(db: Session, name: str) -> Ingredient:
    ingredient = IngredientRepository(db).get_by_name(name)
    if ingredient is None:
        raise NotFoundError(f"Ingredient '{name}' not found.")
    return ingredient


@log_function_call()
def adjust_stock(db: Session, payload: StockAdjustRequest) -> StockAdjustResponse:
    """
    Apply a stock movement and record it.

    Usage and Waste remove stock; Restock and Adjustment add it. Stock may
    not go below zero.
    """
    ingredient = IngredientRepository(db).get_by_id(payload.ingredient_id)
    if ingredient is None:
        raise NotFoundError("Ingredient not found.")

    change = -payload.quantity if payload.type in STOCK_DECREASING_TYPES else payload.quantity
    new_stock = ingredient.current_stock + change
    if new_stock < 0:
        raise DomainError("Insufficient stock for this operation.")

    ingredient.current_stock = new_stock
    ingredient.updated_at = utcnow()
    db.add(
        StockTransaction(
            ingredient_id=ingredient.id,
            quantity_changed=change,
            type=payload.type,
            note=payload.note,
        )
    )
    db.flush()

    logger.info(
        "stock_adjusted",
        ingredient_id=ingredient.id,
        type=payload.type.value,
        change=str(change),
        current_stock=str(new_stock),
    )
    if ingredient.is_low_stock:
        logger.warning(
            "low_stock",
            ingredient_id=ingredient.id,
            name=ingredient.name,
            current_stock=str(new_stock),
            threshold=str(ingredient.low_stock_threshold),
        )

    return StockAdjustResponse(
        id=ingredient.id,
        current_stock=float(new_stock),
        message="Stock updated successfully.",
    )

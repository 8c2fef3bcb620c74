"""
Ingredient stock endpoints (staff only).
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth.dependencies import require_staff
from ..database import get_db
from ..models import Ingredient
from ..schemas import (
    IngredientCreate,
    IngredientCreatedResponse,
    IngredientResponse,
    StockAdjustRequest,
    StockAdjustResponse,
)
from ..services import inventory_service

router = APIRouter(prefix="/api/inventory", tags=["inventory"], dependencies=[Depends(require_staff)])


@router.post(
    "/ingredients",
    response_model=IngredientCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_ingredient(
    payload: IngredientCreate,
    db: Session = Depends(get_db),
) -> IngredientCreatedResponse:
    ingredient = inventory_service.create_ingredient(db, payload)
    return IngredientCreatedResponse(id=ingredient.id, name=ingredient.name)


@router.get("", response_model=list[IngredientResponse])
def list_ingredients(db: Session = Depends(get_db)) -> list[Ingredient]:
    return inventory_service.list_ingredients(db)


@router.put("/adjust", response_model=StockAdjustResponse)
def adjust_stock(payload: StockAdjustRequest, db: Session = Depends(get_db)) -> StockAdjustResponse:
    return inventory_service.adjust_stock(db, payload)


@router.get("/{name}", response_model=IngredientResponse)
def get_stock_by_name(name: str, db: Session = Depends(get_db)) -> Ingredient:
    return inventory_service.get_by_name(db, name)

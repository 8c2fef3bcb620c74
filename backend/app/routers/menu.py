"""
Menu endpoints.

Reading the menu is public; changing it requires a manager.
"""

from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from sqlalchemy.orm import Session

from core.constants import MENU_IMAGES_DIR

from ..auth.dependencies import require_manager
from ..database import get_db
from ..schemas import (
    CreatedResponse,
    ImageUploadResponse,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
)
from ..services import menu_service, upload_service

router = APIRouter(prefix="/api/menu", tags=["menu"])


@router.post(
    "",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_manager)],
)
def create_menu_item(payload: MenuItemCreate, db: Session = Depends(get_db)) -> CreatedResponse:
    item = menu_service.create_menu_item(db, payload)
    return CreatedResponse(id=item.id)


@router.get("", response_model=list[MenuItemResponse])
def list_menu_items(db: Session = Depends(get_db)) -> list[MenuItemResponse]:
    return menu_service.list_menu_items(db)


@router.post(
    "/images",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_manager)],
)
async def upload_menu_image(file: UploadFile = File(...)) -> ImageUploadResponse:
    url = await upload_service.save_image(file, MENU_IMAGES_DIR)
    return ImageUploadResponse(url=url)


@router.get("/{menu_item_id}", response_model=MenuItemResponse)
def get_menu_item(menu_item_id: str, db: Session = Depends(get_db)) -> MenuItemResponse:
    return menu_service.get_menu_item(db, menu_item_id)


@router.put(
    "/{menu_item_id}",
    response_model=MenuItemResponse,
    dependencies=[Depends(require_manager)],
)
def update_menu_item(
    menu_item_id: str,
    payload: MenuItemUpdate,
    db: Session = Depends(get_db),
) -> MenuItemResponse:
    return menu_service.update_menu_item(db, menu_item_id, payload)


@router.delete(
    "/{menu_item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_manager)],
)
def delete_menu_item(menu_item_id: str, db: Session = Depends(get_db)) -> Response:
    menu_service.delete_menu_item(db, menu_item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""
Authentication and account endpoints.

Access tokens are returned in the body; refresh tokens live in an HttpOnly
SameSite=Strict cookie and are rotated on every refresh.
"""

from fastapi import APIRouter, Depends, File, Request, Response, UploadFile, status
from sqlalchemy.orm import Session

from core.constants import PROFILE_IMAGES_DIR
from core.logging import get_logger

from ..auth.dependencies import get_current_user, require_manager
from ..auth.jwt import create_access_token
from ..config import get_settings
from ..database import get_db
from ..models import User
from ..schemas import (
    DeleteUserRequest,
    LoginRequest,
    MessageResponse,
    ProfilePictureResponse,
    RegisterRequest,
    TokenResponse,
    UpdateProfileRequest,
    UserResponse,
)
from ..services import auth_service, upload_service

logger = get_logger("auth")

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_refresh_cookie(response: Response, raw_token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=raw_token,
        max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
        httponly=True,  # Cannot be accessed by JavaScript
        secure=settings.refresh_cookie_secure,
        samesite="strict",
        path="/",
    )


def _clear_refresh_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        path="/",
        secure=settings.refresh_cookie_secure,
        httponly=True,
        samesite="strict",
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> TokenResponse:
    user = auth_service.register_user(db, payload)
    _set_refresh_cookie(response, auth_service.issue_refresh_token(db, user))
    return TokenResponse(access_token=create_access_token(user))


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> TokenResponse:
    user, raw_token = auth_service.login(db, payload.email, payload.password)
    _set_refresh_cookie(response, raw_token)
    return TokenResponse(access_token=create_access_token(user))


@router.post("/refresh", response_model=TokenResponse)
def refresh(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
) -> TokenResponse:
    """Exchange the refresh cookie for a new access token and a rotated cookie."""
    raw_token = request.cookies.get(get_settings().refresh_cookie_name)
    user, new_token = auth_service.rotate_refresh_token(db, raw_token)
    _set_refresh_cookie(response, new_token)
    return TokenResponse(access_token=create_access_token(user))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(request: Request, db: Session = Depends(get_db)) -> Response:
    auth_service.revoke_refresh_token(db, request.cookies.get(get_settings().refresh_cookie_name))
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    _clear_refresh_cookie(response)
    return response


@router.get("/me", response_model=UserResponse)
def current_user(user: User = Depends(get_current_user)) -> User:
    return user


@router.get("/users", response_model=list[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    _: User = Depends(require_manager),
) -> list[User]:
    return auth_service.list_users(db)


@router.delete("/delete", response_model=MessageResponse)
def delete_user(
    payload: DeleteUserRequest,
    db: Session = Depends(get_db),
    manager: User = Depends(require_manager),
) -> MessageResponse:
    auth_service.delete_user(db, payload.user_id)
    logger.info("user_deleted_by_manager", user_id=payload.user_id, manager_id=manager.id)
    return MessageResponse(message="User deleted successfully.")


@router.put("/profile", response_model=UserResponse)
def update_profile(
    payload: UpdateProfileRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> User:
    return auth_service.update_profile(db, user, payload)


@router.post("/profile-picture", response_model=ProfilePictureResponse)
async def upload_profile_picture(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ProfilePictureResponse:
    url = await upload_service.save_image(file, PROFILE_IMAGES_DIR)
    auth_service.set_profile_picture(db, user, url)
    return ProfilePictureResponse(profile_picture_url=url)

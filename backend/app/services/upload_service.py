"""
Image upload handling for menu and profile pictures.

Files are written under ``settings.upload_root`` and served by the static
mounts registered in main.py.
"""

import uuid
from pathlib import Path

from fastapi import UploadFile

from core.constants import (
    ALLOWED_IMAGE_TYPES,
    DEFAULT_IMAGE_CATEGORIES,
    MAX_FILENAME_LENGTH,
    MENU_IMAGES_DIR,
    MenuCategory,
)
from core.logging import get_logger

from ..config import get_settings
from ..exceptions import DomainError

logger = get_logger("service.upload")


def upload_dir(subdir: str) -> Path:
    path = Path(get_settings().upload_root) / subdir
    path.mkdir(parents=True, exist_ok=True)
    return path


def public_url(subdir: str, filename: str) -> str:
    base = get_settings().public_base_url.rstrip("/")
    return f"{base}/{subdir}/{filename}"


def default_menu_image_url(category: MenuCategory) -> str | None:
    """Stock image for a category, or None when none is bundled."""
    if category not in DEFAULT_IMAGE_CATEGORIES:
        return None
    return public_url(MENU_IMAGES_DIR, f"defaults/{category.value.lower()}.png")


def validate_image(content_type: str | None, filename: str | None, data: bytes) -> str:
    """
    Check an uploaded image and return the extension to store it with.

    Raises:
        DomainError: unsupported type, empty file, oversized file, or a
            file name longer than the filesystem allows.
    """
    max_bytes = get_settings().max_image_size_bytes

    if content_type not in ALLOWED_IMAGE_TYPES:
        raise DomainError("Unsupported image type.")
    if not data:
        raise DomainError("File is empty.")
    if len(data) > max_bytes:
        raise DomainError(f"File exceeds the {get_settings().max_image_size_mb} MB limit.")
    if filename and len(filename) > MAX_FILENAME_LENGTH:
        raise DomainError("File name is too long.")

    ext = Path(filename or "").suffix.lower()
    if ext not in ALLOWED_IMAGE_TYPES.values():
        ext = ALLOWED_IMAGE_TYPES[content_type]
    return ext


async def save_image(upload: UploadFile, subdir: str) -> str:
    """
    Validate and store an uploaded image.

    Returns:
        Public URL of the stored file.
    """
    # One byte past the limit is enough to detect an oversized file
    data = await upload.read(get_settings().max_image_size_bytes + 1)
    ext = validate_image(upload.content_type, upload.filename, data)

    filename = f"{uuid.uuid4()}{ext}"
    (upload_dir(subdir) / filename).write_bytes(data)

    logger.info("image_saved", subdir=subdir, filename=filename, size_bytes=len(data))
    return public_url(subdir, filename)

# utils/storage.py
import logging
import shutil
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from config import settings
from utils.errors import InvalidError, ApiError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp"}
URL_PREFIX = "/uploads"


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def save_image(file: UploadFile, folder: str) -> str:
    """Store an uploaded image and return its public URL."""
    if file.content_type not in ALLOWED_CONTENT_TYPES:
        raise InvalidError("Invalid file type")

    ext = (file.filename or "").rsplit(".", 1)[-1].lower() or "bin"
    target_dir = upload_dir() / folder
    target_dir.mkdir(parents=True, exist_ok=True)
    unique_filename = f"{uuid.uuid4()}.{ext}"
    try:
        with open(target_dir / unique_filename, "wb") as buffer:
            shutil.copyfileobj(file.file, buffer)
    except OSError as e:
        logger.error("File save error: %s", e)
        raise ApiError(f"File save error: {e}")
    finally:
        file.file.close()
    return f"{URL_PREFIX}/{folder}/{unique_filename}"


def delete_image(url: Optional[str]) -> None:
    if not url or not url.startswith(URL_PREFIX + "/"):
        return
    path = upload_dir() / url[len(URL_PREFIX) + 1:]
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        # A stale file never blocks the catalog write that triggered the delete
        logger.warning("Could not delete %s: %s", path, e)

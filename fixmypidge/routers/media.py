"""Media router - serves photos stored on the local backend."""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from fixmypidge.core.config import settings
from fixmypidge.core.deps import get_db
from fixmypidge.core.exceptions import NotFoundError
from fixmypidge.services import photo_service, storage_service

router = APIRouter()


@router.get("/{storage_key:path}")
def download_local_photo(storage_key: str, db: Session = Depends(get_db)):
    """
    Serve a photo under the URL returned at upload.

    Only keys recorded for a photo are served, and never outside
    LOCAL_STORAGE_PATH. Photo URLs are shared with the automation pipeline,
    so no session is required.
    """
    if settings.STORAGE_BACKEND != "local":
        raise NotFoundError("Photo not found")

    photo = photo_service.get_photo_by_storage_key(db, storage_key)
    if photo is None:
        raise NotFoundError("Photo not found")

    file_path = storage_service.local_file_path(storage_key)
    if file_path is None:
        raise NotFoundError("Photo not found")

    return FileResponse(file_path, media_type=photo.content_type or "application/octet-stream")

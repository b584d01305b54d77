# backend/sitecms/media/uploader.py
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import cloudinary.uploader
from fastapi import Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from ..config import settings
from ..errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedImage:
    url: str
    public_id: Optional[str] = None


class CloudinaryUploader:
    """Pushes staged files to Cloudinary. The SDK is blocking, so calls run in the threadpool."""

    def __init__(self, cloud_name: Optional[str], api_key: Optional[str], api_secret: Optional[str], folder: str):
        self.folder = folder
        self._credentials = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
            "secure": True,
        }

    @classmethod
    def from_settings(cls) -> "CloudinaryUploader":
        return cls(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            folder=settings.CLOUDINARY_FOLDER,
        )

    async def upload(self, path: str) -> UploadedImage:
        result = await run_in_threadpool(
            cloudinary.uploader.upload,
            path,
            use_filename=True,
            folder=self.folder,
            **self._credentials,
        )
        return UploadedImage(url=result["secure_url"], public_id=result.get("public_id"))

    async def destroy(self, public_id: str) -> None:
        await run_in_threadpool(cloudinary.uploader.destroy, public_id, **self._credentials)


def get_uploader(request: Request) -> CloudinaryUploader:
    """The uploader lives on app.state for the lifetime of the process (see main.lifespan)."""
    return request.app.state.uploader


def _file_size(upload: UploadFile) -> int:
    if upload.size is not None:
        return upload.size
    upload.file.seek(0, os.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


def validate_image(upload: Optional[UploadFile], *, required: bool) -> Optional[UploadFile]:
    """
    Reject anything that is not an image or is larger than MAX_IMAGE_BYTES.
    Runs before any upload or database write.
    """
    if upload is None or not upload.filename:
        if required:
            raise ValidationError("Image file is required and must be an image")
        return None
    if not (upload.content_type or "").startswith("image/"):
        raise ValidationError("Image file is required and must be an image")
    if _file_size(upload) > settings.MAX_IMAGE_BYTES:
        limit_mb = settings.MAX_IMAGE_BYTES / (1024 * 1024)
        raise ValidationError(f"Image file must be under {limit_mb:g}MB")
    return upload


async def store_image(uploader, upload: UploadFile, tmp_dir: Optional[str] = None) -> UploadedImage:
    """Stage the upload to a temp file, push it to the media host and always remove the temp file."""
    tmp_path = Path(tmp_dir or settings.UPLOAD_TMP_DIR)
    tmp_path.mkdir(parents=True, exist_ok=True)
    suffix = Path(upload.filename or "").suffix

    fd, staged = tempfile.mkstemp(suffix=suffix, dir=tmp_path)
    try:
        with os.fdopen(fd, "wb") as fh:
            await upload.seek(0)
            fh.write(await upload.read())
        image = await uploader.upload(staged)
        logger.info(f"Uploaded {upload.filename!r} to {image.url}")
        return image
    finally:
        os.unlink(staged)


async def discard_image(uploader, public_id: Optional[str]) -> None:
    """Best-effort removal of a remote image that is no longer referenced."""
    if not public_id:
        return
    try:
        await uploader.destroy(public_id)
        logger.info(f"Destroyed replaced image {public_id}")
    except Exception as e:
        logger.warning(f"Failed to destroy replaced image {public_id}: {e}")

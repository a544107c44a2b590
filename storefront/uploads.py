from __future__ import annotations

import logging
from pathlib import Path
from uuid import uuid4

from fastapi import HTTPException, UploadFile, status
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)

IMAGE_URL_PREFIX = "/generated_images"
EXTENSION_MIMES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}
ALLOWED_EXTENSIONS = set(EXTENSION_MIMES)
# Some browsers still send the non-standard image/jpg
MIME_ALIASES = {"image/jpg": "image/jpeg", "image/pjpeg": "image/jpeg"}
ALLOWED_MIMES = set(EXTENSION_MIMES.values()) | set(MIME_ALIASES)


def _validate_upload(upload: UploadFile) -> str | None:
    filename = upload.filename or ""
    extension = Path(filename).suffix.lower()
    if extension not in ALLOWED_EXTENSIONS:
        return "Only image files are allowed (jpeg, png, gif, webp)"

    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    if content_type not in ALLOWED_MIMES:
        return "Only image files are allowed (jpeg, png, gif, webp)"
    if MIME_ALIASES.get(content_type, content_type) != EXTENSION_MIMES[extension]:
        return "File type does not match its extension"
    return None


def build_image_url(filename: str) -> str:
    return f"{IMAGE_URL_PREFIX}/{filename.lstrip('/')}"


async def save_image(upload: UploadFile, image_dir: Path, max_bytes: int) -> dict[str, str]:
    """
    Validate an uploaded product image and write it under image_dir.

    Returns the public URL and the generated filename.
    """
    validation_error = _validate_upload(upload)
    if validation_error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=validation_error)

    data = await upload.read(max_bytes + 1)
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty")
    if len(data) > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"File too large, limit is {limit_mb}MB")

    extension = Path(upload.filename or "").suffix.lower()
    target_name = f"image-{uuid4().hex}{extension}"
    image_dir.mkdir(parents=True, exist_ok=True)
    target_path = image_dir / target_name

    await run_in_threadpool(target_path.write_bytes, data)
    logger.info("Stored product image %s (%d bytes)", target_name, len(data))

    return {"image_url": build_image_url(target_name), "filename": target_name}

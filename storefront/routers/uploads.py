from pathlib import Path

from fastapi import APIRouter, Depends, File, UploadFile

from storefront.config import Settings
from storefront.dependencies import get_settings_dep, require_admin
from storefront.schemas import UploadResponse
from storefront.uploads import save_image

router = APIRouter(prefix="/api/upload", tags=["uploads"])


@router.post("/image", response_model=UploadResponse, dependencies=[Depends(require_admin)])
async def upload_image(
    image: UploadFile = File(...),
    settings: Settings = Depends(get_settings_dep),
):
    """
    Store a product image and return the URL to put in Product.image.

    The admin gate runs before anything touches the image directory; for a
    rejected caller the spooled upload is discarded with the request.
    """
    saved = await save_image(image, Path(settings.image_dir), settings.max_upload_bytes)
    return UploadResponse(**saved)

import logging
import os
from uuid import uuid4

from fastapi import APIRouter, Depends, File, Request, UploadFile

from modular_house.core.errors import DomainValidationError
from modular_house.core.permissions import Permission
from modular_house.dependencies.auth import require_permission
from modular_house.middleware.rate_limit import limit_general
from modular_house.schemas.content import UploadOut

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/uploads",
    tags=["admin-uploads"],
    dependencies=[Depends(limit_general)],
)

MAX_IMAGE_BYTES = 500 * 1024

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


@router.post("/image", response_model=UploadOut, status_code=201)
async def upload_image(
    request: Request,
    image: UploadFile = File(...),
    _user=Depends(require_permission(Permission.UPLOADS_CREATE)),
):
    extension = ALLOWED_IMAGE_TYPES.get(image.content_type or "")
    if not extension:
        raise DomainValidationError("Only JPEG, PNG and WebP images are allowed")

    # Read one byte past the cap so oversize files are detected without loading them whole
    content = await image.read(MAX_IMAGE_BYTES + 1)
    if len(content) > MAX_IMAGE_BYTES:
        raise DomainValidationError("Image must be 500KB or smaller")

    upload_dir = request.app.state.settings.app.upload_dir
    os.makedirs(upload_dir, exist_ok=True)
    filename = f"{uuid4()}{extension}"
    with open(os.path.join(upload_dir, filename), "wb") as f:
        f.write(content)

    logger.info(f"🖼️ Image uploaded: {filename} ({len(content)} bytes, {image.content_type})")
    return UploadOut(
        url=f"/uploads/{filename}",
        filename=filename,
        mimetype=image.content_type,
        size=len(content),
    )

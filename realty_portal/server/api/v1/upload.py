"""
Image Upload Endpoint.

Accepts one image per request, shrinks and re-encodes it, and stores it
on Cloudinary or on local disk.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from realty_portal.auth.deps import require_user
from realty_portal.auth.session_tokens import SessionClaims
from realty_portal.core.logging_config import get_logger
from realty_portal.core.models.io.upload import ImageSize, UploadResponse
from realty_portal.integrations.media import sanitize_folder_name, store_image
from realty_portal.server.core.config import settings

from .common import bad_request

logger = get_logger(__name__)

router = APIRouter(tags=["upload"])


@router.post(
    "/upload",
    response_model=UploadResponse,
    summary="Upload Image",
    description="Upload a listing or blog image. It is resized to fit 2000x1500 and stored as JPEG.",
    responses={
        400: {"description": "No file, not an image, or larger than 20MB"},
        401: {"description": "Not signed in"},
        502: {"description": "Storage backend failed"},
    },
)
async def upload_image(
    file: Optional[UploadFile] = File(None),
    folder: Optional[str] = Form(None, description="Target folder; sanitized"),
    title: Optional[str] = Form(None, description="Listing title used as the folder when no folder is given"),
    claims: SessionClaims = Depends(require_user),
) -> UploadResponse:
    """
    Upload an image.

    - **file**: the image (multipart field ``file``)
    - **folder** / **title**: where to store it; defaults to ``listings``
    """
    if file is None:
        raise bad_request("No file provided")
    if not (file.content_type or "").startswith("image/"):
        raise bad_request("File must be an image")

    limit = settings.upload.max_bytes
    too_large = bad_request(f"File size exceeds {limit // (1024 * 1024)}MB limit")
    if file.size is not None and file.size > limit:
        raise too_large
    # Never buffer more than one byte past the limit
    data = await file.read(limit + 1)
    if len(data) > limit:
        raise too_large

    stored = await store_image(data, sanitize_folder_name(folder or title))
    logger.info(f"User {claims.user_id} uploaded {file.filename} -> {stored.url}")
    return UploadResponse(
        url=stored.url,
        storage=stored.storage,
        original_size=ImageSize(width=stored.original_size[0], height=stored.original_size[1]),
        processed_size=ImageSize(width=stored.processed_size[0], height=stored.processed_size[1]),
    )

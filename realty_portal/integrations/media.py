"""
Image processing and storage.

Uploaded photos are normalised locally with Pillow (fit inside the
configured bounds without enlarging, re-encoded as JPEG) and then stored
on Cloudinary when credentials are configured, or under the local upload
directory otherwise. Cloudinary only stores the already optimised file;
no remote transformations are requested.
"""

from __future__ import annotations

import io
import re
import secrets
import string
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import cloudinary
import cloudinary.uploader
from PIL import Image, ImageOps, UnidentifiedImageError
from starlette.concurrency import run_in_threadpool

from realty_portal.core.logging_config import get_logger
from realty_portal.core.monitoring import log_upload
from realty_portal.server.core.config import settings

logger = get_logger(__name__)

DEFAULT_FOLDER = "listings"
MAX_FOLDER_LENGTH = 100


class InvalidImageError(ValueError):
    """The uploaded bytes are not an image Pillow can read."""


class MediaUploadError(RuntimeError):
    """Storing the processed image failed."""


@dataclass(frozen=True)
class ProcessedImage:
    data: bytes
    original_size: Tuple[int, int]
    processed_size: Tuple[int, int]


@dataclass(frozen=True)
class StoredImage:
    url: str
    storage: str
    original_size: Tuple[int, int]
    processed_size: Tuple[int, int]


def sanitize_folder_name(title: Optional[str]) -> str:
    """Turn a listing title into a storage folder name.

    Lowercases, turns whitespace runs into hyphens, drops anything outside
    ``[a-z0-9-]``, collapses and trims hyphens and caps the length at 100.
    Falls back to ``listings`` when nothing usable remains.
    """
    if not title or not isinstance(title, str):
        return DEFAULT_FOLDER
    name = re.sub(r"\s+", "-", title.lower().strip())
    name = re.sub(r"[^a-z0-9-]", "", name)
    name = re.sub(r"-+", "-", name).strip("-")
    return name[:MAX_FOLDER_LENGTH] or DEFAULT_FOLDER


def is_cloudinary_configured() -> bool:
    return settings.cloudinary.is_configured


def process_image(
    data: bytes,
    max_width: Optional[int] = None,
    max_height: Optional[int] = None,
    quality: Optional[int] = None,
) -> ProcessedImage:
    """Fit an image inside ``max_width`` x ``max_height`` and re-encode it as JPEG.

    Images already within bounds keep their dimensions; nothing is enlarged.

    Raises:
        InvalidImageError: ``data`` is not a readable image
    """
    upload = settings.upload
    bounds = (max_width or upload.max_width, max_height or upload.max_height)
    try:
        with Image.open(io.BytesIO(data)) as opened:
            opened.load()
            original_size = opened.size
            image = ImageOps.exif_transpose(opened)
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError(f"Could not read image: {e}") from e

    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    if image.width > bounds[0] or image.height > bounds[1]:
        image.thumbnail(bounds, Image.Resampling.LANCZOS)

    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality or upload.jpeg_quality, optimize=True)
    return ProcessedImage(data=buffer.getvalue(), original_size=original_size, processed_size=image.size)


def _unique_filename() -> str:
    suffix = "".join(secrets.choice(string.ascii_lowercase + string.digits) for _ in range(13))
    return f"listing-{int(time.time() * 1000)}-{suffix}.jpg"


def _upload_to_cloudinary(data: bytes, folder: str) -> str:
    config = settings.cloudinary
    cloudinary.config(
        cloud_name=config.cloud_name,
        api_key=config.api_key,
        api_secret=config.api_secret,
        secure=True,
    )
    result = cloudinary.uploader.upload(
        io.BytesIO(data),
        folder=folder,
        resource_type="image",
        invalidate=False,
        use_filename=False,
    )
    url = result.get("secure_url") if result else None
    if not url:
        raise MediaUploadError("Upload failed: no URL returned")
    return url


def _save_locally(data: bytes, folder: str) -> str:
    upload = settings.upload
    directory = Path(upload.upload_dir) / folder
    directory.mkdir(parents=True, exist_ok=True)
    filename = _unique_filename()
    (directory / filename).write_bytes(data)
    return f"{upload.public_prefix.rstrip('/')}/{folder}/{filename}"


async def store_image(data: bytes, folder: Optional[str] = None) -> StoredImage:
    """Process ``data`` and store it, returning its public URL.

    Args:
        data: Raw uploaded bytes
        folder: Folder name, already sanitized (defaults to ``listings``)

    Raises:
        InvalidImageError: ``data`` is not an image
        MediaUploadError: the storage backend failed
    """
    folder = folder or DEFAULT_FOLDER
    processed = await run_in_threadpool(process_image, data)

    if is_cloudinary_configured():
        storage = "cloudinary"
        try:
            url = await run_in_threadpool(_upload_to_cloudinary, processed.data, folder)
        except MediaUploadError:
            raise
        except Exception as e:
            logger.error(f"Cloudinary upload failed: {e}", exc_info=True)
            raise MediaUploadError(f"Cloudinary upload failed: {e}") from e
    else:
        storage = "local"
        try:
            url = await run_in_threadpool(_save_locally, processed.data, folder)
        except OSError as e:
            logger.error(f"Saving upload locally failed: {e}", exc_info=True)
            raise MediaUploadError(f"Could not save image: {e}") from e

    logger.info(f"Stored image ({storage}) {processed.original_size} -> {processed.processed_size}: {url}")
    log_upload(storage, len(data), len(processed.data))
    return StoredImage(
        url=url,
        storage=storage,
        original_size=processed.original_size,
        processed_size=processed.processed_size,
    )

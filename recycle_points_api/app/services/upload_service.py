"""
Storage of point images on the local filesystem.

``store_image`` is called by the API layer before a create or update
runs; the services only ever see the resulting filename.  The previous
image of a point is removed with ``release_image`` from inside the
update unit of work.
"""

import logging
import re
import secrets
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from recycle_points_api.app.core.config import settings
from recycle_points_api.app.core.db import get_uploads_path
from recycle_points_api.app.core.errors import AssetReleaseFailure, PersistenceFailure, ValidationError


logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_name(original: Optional[str]) -> str:
    name = Path(original or "image").name
    name = _UNSAFE_CHARS.sub("-", name).strip("-.")
    return name or "image"


async def store_image(upload: UploadFile, location: str = "points") -> str:
    """Validate ``upload``, write it to the images directory and return its filename."""
    if upload.content_type not in settings.allowed_image_types:
        raise ValidationError("Unsupported image type.", location=location)

    # one byte past the limit is enough to tell the upload is too large
    raw = await upload.read(settings.max_image_bytes + 1)
    if not raw:
        raise ValidationError("The uploaded image is empty.", location=location)
    if len(raw) > settings.max_image_bytes:
        raise ValidationError("The uploaded image is too large.", location=location)

    filename = f"{secrets.token_hex(6)}-{_safe_name(upload.filename)}"
    directory = get_uploads_path()
    try:
        directory.mkdir(parents=True, exist_ok=True)
        (directory / filename).write_bytes(raw)
    except OSError as exc:
        logger.error("Failed to store image %s: %s", filename, exc)
        raise PersistenceFailure("The image could not be stored.", location=location) from exc
    logger.debug("Stored image %s (%d bytes)", filename, len(raw))
    return filename


def image_exists(filename: str) -> bool:
    return (get_uploads_path() / filename).is_file()


def release_image(filename: Optional[str], location: str = "update_point") -> None:
    """Delete a stored image.

    A file that is already gone counts as released.  Any other
    filesystem error raises ``AssetReleaseFailure``.
    """
    if not filename:
        return
    path = get_uploads_path() / Path(filename).name
    try:
        path.unlink()
    except FileNotFoundError:
        logger.warning("Image %s was already missing when released", filename)
    except OSError as exc:
        logger.error("Could not release image %s: %s", filename, exc)
        raise AssetReleaseFailure(location=location) from exc
    else:
        logger.info("Released image %s", filename)


def discard_image(filename: Optional[str]) -> None:
    """Remove an image stored for a request that did not go through."""
    try:
        release_image(filename, location="discard")
    except AssetReleaseFailure:
        logger.warning("Orphaned image %s left in uploads", filename)

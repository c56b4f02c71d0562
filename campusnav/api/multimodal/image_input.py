"""
Image upload validation for API adapters.

Architectural role:
- Turn raw upload bytes (HTTP multipart or a local file for the CLI) into an
  `ImagePayload` the orchestrator can forward.
- Enforce size and format constraints before anything reaches a provider.

Processing lifecycle:
1. Reject empty payloads and payloads above `MAX_IMAGE_SIZE_MB`.
2. Sniff the real format with Pillow; the client's declared content type is
   not trusted.
3. Map the format to a MIME type from `ALLOWED_FORMATS`.

Error handling strategy:
- Every rejection raises `ImageValidationError` with a user-displayable
  message. Nothing is written to disk.
"""

import io
import logging
import os

from PIL import Image, UnidentifiedImageError

from campusnav.errors import ImageValidationError
from campusnav.llm.types import ImagePayload


logger = logging.getLogger(__name__)


# ============================================================
# CONFIG
# ============================================================

MAX_IMAGE_SIZE_MB = 10
MAX_IMAGE_SIZE_BYTES = MAX_IMAGE_SIZE_MB * 1024 * 1024

ALLOWED_FORMATS = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}
ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".gif"}


# ============================================================
# PUBLIC ENTRYPOINTS
# ============================================================

def load_image(data: bytes, declared_mime: str | None = None) -> ImagePayload:
    """
    Validate raw image bytes and wrap them as an `ImagePayload`.

    Validation behavior:
    - Rejects empty and oversized payloads.
    - Rejects bytes Pillow cannot identify, and formats outside
      `ALLOWED_FORMATS`.
    """
    if not data:
        raise ImageValidationError("Empty image upload")

    if len(data) > MAX_IMAGE_SIZE_BYTES:
        raise ImageValidationError(f"Image exceeds {MAX_IMAGE_SIZE_MB} MB limit")

    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as err:
        raise ImageValidationError("Unsupported or corrupt image") from err

    mime_type = ALLOWED_FORMATS.get(image_format or "")
    if not mime_type:
        raise ImageValidationError(f"Unsupported image format: {image_format}")

    if declared_mime and declared_mime != mime_type:
        logger.debug("Declared type %s differs from detected %s", declared_mime, mime_type)

    return ImagePayload(data=data, mime_type=mime_type)


def load_image_file(path: str) -> ImagePayload:
    """
    Read and validate an image from the local filesystem (CLI `/image`).

    Validation behavior:
    - Rejects missing files and unsupported extensions before reading.
    - Size/format checks are delegated to `load_image`.
    """
    normalized = os.path.realpath(os.path.expanduser(path or ""))

    if not path or not os.path.isfile(normalized):
        raise ImageValidationError(f"Image file not found: {path}")

    _, ext = os.path.splitext(normalized)
    if ext.lower() not in ALLOWED_EXTENSIONS:
        raise ImageValidationError(f"Unsupported image file type: {ext or 'none'}")

    if os.path.getsize(normalized) > MAX_IMAGE_SIZE_BYTES:
        raise ImageValidationError(f"Image exceeds {MAX_IMAGE_SIZE_MB} MB limit")

    with open(normalized, "rb") as f:
        return load_image(f.read())

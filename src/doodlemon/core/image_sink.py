"""File-backed image sink.

Every generated image (primary, placeholder or action) is decoded from
base64, checked with Pillow, written below ``images_dir/<category>/`` and
addressed by a URL under ``images_url_prefix``. The FastAPI app mounts
``images_dir`` at that prefix, so the returned URL is directly servable.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import uuid
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from doodlemon.core.errors import ValidationError

logger = logging.getLogger(__name__)

# Pillow format name -> file extension.
_EXTENSIONS = {
    "PNG": "png",
    "JPEG": "jpg",
    "WEBP": "webp",
    "GIF": "gif",
}


def strip_data_url(data: str) -> str:
    """Remove a ``data:<mime>;base64,`` prefix if present."""
    if data.startswith("data:") and "," in data:
        return data.split(",", 1)[1]
    return data


class ImageSink:
    """Persist base64 images to disk and hand back stable URLs.

    Args:
        images_dir: Root directory for saved images.
        url_prefix: URL prefix that maps onto ``images_dir``.
    """

    def __init__(self, images_dir: Path, url_prefix: str = "/images"):
        self.images_dir = Path(images_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self.images_dir.mkdir(parents=True, exist_ok=True)

    def save(self, base64_image: str, category: str) -> str:
        """Write an image and return its URL.

        Args:
            base64_image: Image bytes as base64, optionally as a data URL.
            category: Sub-directory tag (``"primary"``, ``"placeholder"``,
                ``"action"``).

        Returns:
            URL of the saved image, e.g. ``/images/primary/<uuid>.png``.

        Raises:
            ValidationError: If the payload is not base64 or not an image.
        """
        try:
            raw = base64.b64decode(strip_data_url(base64_image), validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError("Image data is not valid base64") from e

        try:
            with Image.open(io.BytesIO(raw)) as img:
                img.verify()
                image_format = img.format or "PNG"
        except (UnidentifiedImageError, OSError) as e:
            raise ValidationError("Image data is not a readable image") from e

        extension = _EXTENSIONS.get(image_format, "png")
        filename = f"{uuid.uuid4().hex}.{extension}"

        target_dir = self.images_dir / category
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / filename).write_bytes(raw)

        url = f"{self.url_prefix}/{category}/{filename}"
        logger.debug(f"Saved {category} image: {url}")
        return url

    def resolve(self, url: str) -> Path:
        """Map a URL returned by :meth:`save` back to its file path.

        Raises:
            ValidationError: If the URL is outside this sink.
        """
        prefix = f"{self.url_prefix}/"
        if not url.startswith(prefix):
            raise ValidationError(f"Not an image URL of this sink: {url}")

        path = (self.images_dir / url[len(prefix) :]).resolve()
        if not path.is_relative_to(self.images_dir.resolve()):
            logger.warning(f"Path traversal attempt detected: {url}")
            raise ValidationError(f"Not an image URL of this sink: {url}")
        return path

    def load(self, url: str) -> bytes:
        """Read the bytes behind a URL returned by :meth:`save`."""
        return self.resolve(url).read_bytes()

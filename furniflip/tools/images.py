"""JPEG conversion for uploaded photos."""

import io
import logging
import time
import uuid

from PIL import Image, UnidentifiedImageError

from ..errors import ImageConversionError

logger = logging.getLogger(__name__)


def convert_to_jpeg(data: bytes, quality: int = 90) -> bytes:
    """Re-encode any Pillow-readable image as RGB JPEG."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            if img.mode != "RGB":
                img = img.convert("RGB")
            buf = io.BytesIO()
            img.save(buf, format="JPEG", quality=quality)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        logger.error("Error converting image to JPEG: %s", e)
        raise ImageConversionError("Failed to convert image to JPEG") from e
    return buf.getvalue()


def jpeg_filename() -> str:
    return f"{int(time.time() * 1000)}_{uuid.uuid4()}.jpg"

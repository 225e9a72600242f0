"""Pillow-backed decoder and JPEG encoder."""

import io

from PIL import Image, ImageOps

from .error_handling import with_error_handling
from .exceptions import DecodeError
from .logging_config import get_logger

JPEG_MIN_QUALITY = 1
JPEG_MAX_QUALITY = 100


def to_jpeg_quality(quality: float) -> int:
    """Map an encoder quality in ``[0, 1]`` onto Pillow's integer scale."""
    return max(JPEG_MIN_QUALITY, min(JPEG_MAX_QUALITY, int(round(quality * 100))))


class PillowCodec:
    """Decode arbitrary image bytes and encode JPEGs with Pillow."""

    @with_error_handling
    def decode(self, data: bytes) -> Image.Image:
        """
        Decode image bytes into an RGBA image.

        EXIF orientation is applied so the pixels match what a viewer shows,
        which is the space crop rectangles are drawn in.

        Raises:
            DecodeError: If the bytes are empty or not a readable image.
        """
        if not data:
            raise DecodeError("No image data to decode")

        logger = get_logger("codec")
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            logger.debug(
                f"Decoded {image.format or 'unknown'} image: "
                f"{image.size[0]}x{image.size[1]} ({image.mode})"
            )
            oriented = ImageOps.exif_transpose(image)
            return oriented.convert("RGBA")

    @with_error_handling
    def encode_jpeg(self, image: Image.Image, quality: int) -> bytes:
        """Encode ``image`` as a baseline JPEG at ``quality`` (1..100)."""
        if image.mode != "RGB":
            image = image.convert("RGB")
        output_stream = io.BytesIO()
        image.save(output_stream, format="JPEG", quality=quality)
        return output_stream.getvalue()

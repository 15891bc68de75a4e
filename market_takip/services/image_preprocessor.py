"""Downscale and re-encode product photos before they are stored."""

import asyncio
import base64
import binascii
import io
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from ..utils.exceptions import ImageDecodeError
from ..utils.logger import get_inventory_logger

DEFAULT_MAX_WIDTH = 300
DEFAULT_JPEG_QUALITY = 70  # 0.7 on a 0-1 scale


def decode_data_uri(value: str) -> bytes:
    """Return the payload bytes of a ``data:...;base64,`` URI."""
    header, sep, payload = value.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ImageDecodeError("Image string is not a base64 data URI")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Invalid base64 image payload: {str(e)}")


class ImagePreprocessor:
    """Turns an arbitrary photo into a small JPEG data URI."""

    def __init__(self, max_width: int = DEFAULT_MAX_WIDTH, quality: int = DEFAULT_JPEG_QUALITY):
        self.max_width = max_width
        self.quality = quality
        self.logger = get_inventory_logger()

    async def compress(self, image: Union[bytes, str], max_width: Optional[int] = None) -> str:
        """
        Resize an image to ``max_width`` pixels wide and re-encode it as JPEG.

        Args:
            image: Raw image bytes or a base64 data URI
            max_width: Target width (defaults to the configured width)

        Returns:
            ``data:image/jpeg;base64,...`` string

        Raises:
            ValueError: If ``max_width`` is not a positive integer
            ImageDecodeError: If the input cannot be decoded as an image
        """
        if max_width is None:
            max_width = self.max_width
        if isinstance(max_width, bool) or not isinstance(max_width, int) or max_width < 1:
            raise ValueError(f"max_width must be a positive integer, got {max_width!r}")
        return await asyncio.to_thread(self._compress, image, max_width)

    def _compress(self, image: Union[bytes, str], max_width: int) -> str:
        raw = decode_data_uri(image) if isinstance(image, str) else image

        try:
            with Image.open(io.BytesIO(raw)) as img:
                img.load()
                ratio = max_width / img.width
                size = (max_width, max(1, int(img.height * ratio)))
                resized = img.convert("RGB").resize(size, Image.LANCZOS)
        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
            raise ImageDecodeError(
                f"Could not decode image: {str(e)}",
                details={"bytes": len(raw)}
            )

        buffer = io.BytesIO()
        resized.save(buffer, format="JPEG", quality=self.quality)
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")

        self.logger.debug(f"Compressed image {len(raw)} -> {buffer.tell()} bytes at {size[0]}x{size[1]}")
        return f"data:image/jpeg;base64,{encoded}"

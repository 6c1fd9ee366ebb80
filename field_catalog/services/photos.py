"""Photo intake: validate, optionally downscale, and encode images as data URLs."""

import base64
import binascii
import io
import re
import threading
from typing import Optional, Sequence

from PIL import Image, ImageOps, UnidentifiedImageError
from pydantic import BaseModel, Field

from field_catalog.utils.config import PhotoConfig
from field_catalog.utils.errors import LimitExceeded
from field_catalog.utils.logging import get_structured_logger, timed

logger = get_structured_logger(__name__)

_pixel_limit_lock = threading.Lock()

_DATA_URL_RE = re.compile(r"^data:(?P<content_type>[\w.+-]+/[\w.+-]+);base64,(?P<payload>.*)$", re.DOTALL)


class PhotoFile(BaseModel):
    """A locally selected file awaiting intake."""
    filename: str = Field(default="", description="Original file name")
    content_type: str = Field(..., description="Declared MIME type")
    data: bytes = Field(..., description="Raw file contents")

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_image(self) -> bool:
        return self.content_type.lower().startswith("image/")


def encode_data_url(content_type: str, data: bytes) -> str:
    """Embed binary content in a self-describing data URL."""
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_url(data_url: str) -> tuple[str, bytes]:
    """Split a data URL into its content type and raw bytes."""
    match = _DATA_URL_RE.match(data_url)
    if not match:
        raise ValueError("Not a base64 data URL")
    try:
        payload = base64.b64decode(match.group("payload"), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e
    return match.group("content_type"), payload


def scaled_size(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    """Fit (width, height) within max_dimension, larger side setting the scale."""
    if width <= max_dimension and height <= max_dimension:
        return width, height
    if width > height:
        return max_dimension, max(1, round(height * max_dimension / width))
    return max(1, round(width * max_dimension / height)), max_dimension


def open_source_image(data: bytes, max_pixels: Optional[int] = None) -> Image.Image:
    """
    Open an image lazily, allowing sources up to ``max_pixels``.

    Pillow's global bomb check stops far below modern phone cameras, so it
    is lifted for the header read and replaced by our own limit. Anything
    larger raises DecompressionBombError.
    """
    max_pixels = max_pixels or PhotoConfig.MAX_SOURCE_PIXELS

    with _pixel_limit_lock:
        previous = Image.MAX_IMAGE_PIXELS
        Image.MAX_IMAGE_PIXELS = None
        try:
            image = Image.open(io.BytesIO(data))
        finally:
            Image.MAX_IMAGE_PIXELS = previous

    if image.width * image.height > max_pixels:
        image.close()
        raise Image.DecompressionBombError(
            f"Image size ({image.width * image.height} pixels) exceeds limit of {max_pixels} pixels"
        )
    return image


@timed("compress_image")
def compress_image(
    data: bytes,
    max_dimension: Optional[int] = None,
    quality: Optional[int] = None,
) -> str:
    """Decode, downscale, and re-encode an image as a JPEG data URL."""
    max_dimension = max_dimension or PhotoConfig.MAX_DIMENSION
    quality = quality or PhotoConfig.JPEG_QUALITY

    with open_source_image(data) as image:
        # JPEG decodes at a reduced scale that still covers the target
        image.draft("RGB", (max_dimension, max_dimension))
        image = ImageOps.exif_transpose(image)
        target = scaled_size(image.width, image.height, max_dimension)
        if target != image.size:
            image = image.resize(target, Image.Resampling.LANCZOS)
        if image.mode != "RGB":
            image = image.convert("RGB")

        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=quality)

    return encode_data_url("image/jpeg", buffer.getvalue())


def encode_photo(photo: PhotoFile) -> str:
    """Encode one image, compressing it first when it is over the size threshold."""
    if photo.size > PhotoConfig.COMPRESS_THRESHOLD_BYTES:
        return compress_image(photo.data)
    return encode_data_url(photo.content_type, photo.data)


def add_photos(
    current: Sequence[str],
    batch: Sequence[PhotoFile],
    max_photos: Optional[int] = None,
) -> list[str]:
    """
    Admit a batch of files after the current photos.

    The whole batch is refused with LimitExceeded if it would take the
    collection past ``max_photos``; nothing is processed in that case.
    Non-image files and images that fail to decode are skipped. Accepted
    photos keep their batch order.
    """
    max_photos = PhotoConfig.MAX_PHOTOS if max_photos is None else max_photos
    attempted = len(current) + len(batch)
    if attempted > max_photos:
        raise LimitExceeded(max_photos, attempted)

    photos = list(current)
    for photo in batch:
        if not photo.is_image:
            logger.debug("Skipping non-image file", file_name=photo.filename, content_type=photo.content_type)
            continue
        try:
            photos.append(encode_photo(photo))
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            logger.warning(
                "Skipping unreadable image",
                file_name=photo.filename,
                size_bytes=photo.size,
                error=str(e),
            )

    logger.info("Photos added", added=len(photos) - len(current), total=len(photos))
    return photos


def remove_photo(photos: Sequence[str], index: int) -> list[str]:
    """Drop the photo at ``index``; later photos shift left."""
    if index < 0 or index >= len(photos):
        raise IndexError(f"Photo index {index} out of range")
    return [photo for i, photo in enumerate(photos) if i != index]

"""
Image upload validation, resizing and object naming.
"""
import io
import time
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from .slugify import random_suffix

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}
MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB
POST_IMAGE_MAX_DIMENSION = 1920
AVATAR_MAX_DIMENSION = 500
SAVE_QUALITY = 90


class ImageValidationError(ValueError):
    pass


@dataclass(frozen=True)
class ProcessedImage:
    data: bytes
    width: int
    height: int
    resized: bool


def format_file_size(size: int) -> str:
    """Human readable size, e.g. ``2.5 MB``."""
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    index = 0
    value = float(size)
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    value = round(value, 2)
    if value == int(value):
        value = int(value)
    return f"{value} {units[index]}"


def validate_image(content_type: Optional[str], size: int, max_bytes: int = MAX_IMAGE_BYTES) -> str:
    """Check type and size of an upload and return the file extension to store it under."""
    extension = ALLOWED_CONTENT_TYPES.get((content_type or "").lower())
    if extension is None:
        raise ImageValidationError("Only JPG, PNG, GIF and WEBP images can be uploaded.")
    if size > max_bytes:
        raise ImageValidationError(f"Images can be at most {format_file_size(max_bytes)}.")
    return extension


def fit_within(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """Scale (width, height) down to fit the box, keeping the aspect ratio."""
    if width <= max_width and height <= max_height:
        return width, height
    scale = min(max_width / width, max_height / height)
    return max(1, round(width * scale)), max(1, round(height * scale))


def resize_image(
    data: bytes,
    max_width: int = POST_IMAGE_MAX_DIMENSION,
    max_height: int = POST_IMAGE_MAX_DIMENSION,
) -> ProcessedImage:
    """Shrink an image to fit the box. Images already inside it are returned untouched."""
    try:
        with Image.open(io.BytesIO(data)) as source:
            width, height = source.size
            target = fit_within(width, height, max_width, max_height)
            if target == (width, height):
                return ProcessedImage(data, width, height, resized=False)

            image_format = source.format or "PNG"
            resized = source.resize(target, Image.Resampling.LANCZOS)
            if image_format == "JPEG" and resized.mode not in ("RGB", "L"):
                resized = resized.convert("RGB")

            output = io.BytesIO()
            save_kwargs = {"quality": SAVE_QUALITY} if image_format in ("JPEG", "WEBP") else {}
            resized.save(output, format=image_format, **save_kwargs)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageValidationError(f"Could not read image: {e}")

    return ProcessedImage(output.getvalue(), target[0], target[1], resized=True)


def _millis(now: Optional[float] = None) -> int:
    return int((now if now is not None else time.time()) * 1000)


def post_image_path(extension: str, now: Optional[float] = None) -> str:
    return f"{_millis(now)}-{random_suffix(10)}.{extension}"


def avatar_path(user_id: int, extension: str, now: Optional[float] = None) -> str:
    return f"{user_id}-{_millis(now)}.{extension}"

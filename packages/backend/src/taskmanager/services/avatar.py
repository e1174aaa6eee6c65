"""Avatar upload pipeline.

Checks the upload's size and extension, then decodes it with Pillow
and re-encodes it as a fixed-size PNG. Only the normalized PNG is ever
stored.
"""

import io
import re

from PIL import Image, UnidentifiedImageError

from taskmanager.errors import ValidationError

ALLOWED_EXTENSIONS = re.compile(r"\.(jpg|jpeg|png)$", re.IGNORECASE)
EXTENSION_ERROR = (
    "Please upload an image that has one of this following formats: .jpg, .jpeg, .png"
)


def validate_upload(filename: str | None, size: int, max_bytes: int) -> None:
    if size > max_bytes:
        raise ValidationError(f"File too large (max {max_bytes} bytes)")
    if not filename or not ALLOWED_EXTENSIONS.search(filename):
        raise ValidationError(EXTENSION_ERROR)


def normalize_avatar(data: bytes, size: int = 250) -> bytes:
    """Resize to size×size and return PNG bytes."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            if img.mode not in ("RGB", "RGBA"):
                img = img.convert("RGBA")
            resized = img.resize((size, size))
    except (UnidentifiedImageError, OSError) as e:
        raise ValidationError(f"Could not read image: {e}")

    out = io.BytesIO()
    resized.save(out, format="PNG")
    return out.getvalue()

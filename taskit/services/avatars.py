"""
Avatar upload checks and image normalisation.
"""
import io
import logging
import re
from typing import Optional
from PIL import Image, ImageOps, UnidentifiedImageError

from ..core.errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = re.compile(r"\.(jpg|jpeg|png)$", re.IGNORECASE)


class AvatarProcessor:
    """Turns an uploaded image into a fixed-size PNG"""

    def __init__(self, size: int = 250, max_bytes: int = 1_000_000):
        self.size = size
        self.max_bytes = max_bytes

    def check_upload(self, filename: Optional[str], data: bytes) -> None:
        """Reject uploads by name and size before any decoding happens"""
        if not filename or not ALLOWED_EXTENSIONS.search(filename):
            raise ValidationError({"avatar": "Only upload images"}, "Only upload images")
        if not data:
            raise ValidationError({"avatar": "File is empty"}, "Only upload images")
        if len(data) > self.max_bytes:
            raise ValidationError({"avatar": f"File larger than {self.max_bytes} bytes"}, "File too large")

    def normalize(self, data: bytes) -> bytes:
        try:
            with Image.open(io.BytesIO(data)) as image:
                image.load()
                mode = "RGBA" if image.mode in ("RGBA", "LA", "P") else "RGB"
                fitted = ImageOps.fit(image.convert(mode), (self.size, self.size))
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            logger.warning(f"Rejected avatar that could not be decoded: {e}")
            raise ValidationError({"avatar": "Unsupported image format"}, "Unsupported image format")

        out = io.BytesIO()
        fitted.save(out, format="PNG")
        return out.getvalue()

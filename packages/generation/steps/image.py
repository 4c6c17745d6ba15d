"""Reference image normalization with Pillow."""

import io
from typing import Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from common.core.exceptions import ValidationError

MAX_DIMENSIONS: Tuple[int, int] = (1536, 1536)
WEBP_QUALITY = 85


def normalize_image(content: bytes, max_size: Tuple[int, int] = MAX_DIMENSIONS) -> bytes:
    """
    Re-encode an uploaded image as WebP.

    Applies the EXIF orientation, drops metadata, flattens palette and CMYK
    images to RGB(A) and shrinks the image to fit ``max_size`` keeping the
    aspect ratio. Animated images keep their first frame.

    Raises:
        ValidationError: the bytes are not a decodable image
    """
    try:
        with Image.open(io.BytesIO(content)) as src:
            src.seek(0)
            img = ImageOps.exif_transpose(src)
            if img.mode not in ("RGB", "RGBA"):
                img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
            img.thumbnail(max_size, Image.Resampling.LANCZOS)

            out = io.BytesIO()
            img.save(out, format="WEBP", quality=WEBP_QUALITY, method=4)
            return out.getvalue()
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError("Uploaded file is not a supported image") from exc

from io import BytesIO
from typing import Tuple

from PIL import Image

from models.errors import InvalidImageData


def decode_image(data: bytes) -> Image.Image:
    """Decode raw bytes into an RGB image, or raise InvalidImageData."""
    if not data:
        raise InvalidImageData()
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise InvalidImageData() from e
    return img.convert("RGB")


def downscale_image(pil_img: Image.Image, max_dimension: int) -> Tuple[Image.Image, float]:
    """Shrink so the longer side equals ``max_dimension``. Never upscales.

    Returns the image and the factor applied to both axes.
    """
    width, height = pil_img.size
    longer = max(width, height)
    if longer <= max_dimension:
        return pil_img, 1.0

    scale = max_dimension / longer
    if width >= height:
        new_size = (max_dimension, max(1, round(height * scale)))
    else:
        new_size = (max(1, round(width * scale)), max_dimension)
    return pil_img.resize(new_size, resample=Image.LANCZOS), scale


def encode_png(pil_img: Image.Image) -> bytes:
    buf = BytesIO()
    pil_img.save(buf, format="PNG")
    return buf.getvalue()

"""
Decode uploaded bytes into an RGB raster and encode rasters back to PNG.
"""
import io
import logging
import warnings

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)


class InvalidInputError(ValueError):
    """The source image could not be read. The only fatal error of a generation request."""


# Modes Pillow uses for 16-bit and 32-bit single-channel images. convert("RGB")
# clips these at 255 instead of scaling them.
_WIDE_INTEGER_MODES = ("I", "I;16", "I;16B", "I;16L", "I;16N")


def _to_8bit(img: Image.Image) -> Image.Image:
    values = np.asarray(img, dtype=np.float64)
    if img.mode == "F":
        # Float images are taken as 0..1 when they fit in it, else as 0..255.
        if values.size and values.max() <= 1.0:
            values = values * 255.0
    else:
        values = values / 257.0
    return Image.fromarray(np.clip(np.rint(values), 0, 255).astype(np.uint8))


def decode_image(data: bytes) -> np.ndarray:
    """Return an (H, W, 3) uint8 array. Transparent areas are flattened onto black."""
    if not data:
        raise InvalidInputError("Image data is empty")
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("error", Image.DecompressionBombWarning)
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                img = ImageOps.exif_transpose(img)
                if img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info):
                    rgba = img.convert("RGBA")
                    flat = Image.new("RGBA", rgba.size, (0, 0, 0, 255))
                    img = Image.alpha_composite(flat, rgba)
                if img.mode in _WIDE_INTEGER_MODES or img.mode == "F":
                    img = _to_8bit(img)
                raster = np.asarray(img.convert("RGB"), dtype=np.uint8)
    except (UnidentifiedImageError, Image.DecompressionBombError, Image.DecompressionBombWarning) as e:
        raise InvalidInputError(f"Unsupported or corrupt image: {e}") from e
    except (OSError, SyntaxError, ValueError) as e:
        raise InvalidInputError(f"Could not decode image: {e}") from e

    if raster.ndim != 3 or raster.shape[0] == 0 or raster.shape[1] == 0:
        raise InvalidInputError("Image has no pixels")
    return raster


def encode_png(raster: np.ndarray) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(np.ascontiguousarray(raster, dtype=np.uint8)).save(buf, format="PNG")
    return buf.getvalue()


def to_png(data: bytes) -> bytes:
    """Re-encode any decodable image as PNG."""
    return encode_png(decode_image(data))

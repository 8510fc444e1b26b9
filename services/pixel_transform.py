"""
Deterministic local stylization pipeline.

Runs when no remote provider produced an image. Five stages, each over the
whole buffer before the next starts:

    1. letterbox the photo into a square canvas (aspect ratio kept, black bars)
    2. linear per-pixel tint from the style's TintMatrix
    3. decorative frame, corner brackets, top chevrons and side rings (if enabled)
    4. radial vignette towards black
    5. faint "screen" wash in the style's accent colour

Identical (raster, profile, canvas size) always produce an identical buffer.
"""
import logging
from typing import Tuple

import numpy as np
from PIL import Image, ImageDraw

from .style_catalog import RGB, StyleProfile, TintMatrix

logger = logging.getLogger(__name__)

DEFAULT_CANVAS_SIZE = 1024

# Overlay geometry is laid out for a 1024px canvas and scaled to the actual size.
REFERENCE_SIZE = 1024
FRAME_MARGIN = 40
FRAME_WIDTH = 8
FRAME_ALPHA = 0.8
CORNER_MARGIN = 20
CORNER_SIZE = 40
CORNER_WIDTH = 3
CORNER_ALPHA = 0.5
MOTIF_WIDTH = 4
MOTIF_ALPHA = 0.6
CHEVRON_STEP = 30
CHEVRON_HALF_WIDTH = 10
CHEVRON_HEIGHT = 10
RING_STEP = 40
RING_RADIUS = 8
RING_INSET = 60
RING_BAND_INSET = 100

VIGNETTE_MAX_ALPHA = 0.3
ACCENT_WASH_ALPHA = 0.15


def _to_uint8(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def letterbox(raster: np.ndarray, size: int) -> np.ndarray:
    h, w = raster.shape[:2]
    scale = min(size / w, size / h)
    new_w = min(size, max(1, int(round(w * scale))))
    new_h = min(size, max(1, int(round(h * scale))))

    img = Image.fromarray(np.ascontiguousarray(raster, dtype=np.uint8))
    if (new_w, new_h) != (w, h):
        img = img.resize((new_w, new_h), Image.Resampling.BILINEAR)

    canvas = np.zeros((size, size, 3), dtype=np.uint8)
    x = (size - new_w) // 2
    y = (size - new_h) // 2
    canvas[y:y + new_h, x:x + new_w] = np.asarray(img, dtype=np.uint8)
    return canvas


def apply_tint(canvas: np.ndarray, tint: TintMatrix) -> np.ndarray:
    src = canvas.astype(np.float64)
    out = np.empty_like(src)
    # Per-channel sums, not matmul: output must not depend on the BLAS build.
    for c in range(3):
        row = tint.matrix[c]
        out[..., c] = src[..., 0] * row[0] + src[..., 1] * row[1] + src[..., 2] * row[2] + tint.offset[c]
    return _to_uint8(out)


def _rgba(color: RGB, alpha: float) -> Tuple[int, int, int, int]:
    return (color[0], color[1], color[2], int(round(alpha * 255)))


def draw_overlay(canvas: np.ndarray, accent: RGB) -> np.ndarray:
    size = canvas.shape[0]
    s = size / REFERENCE_SIZE

    def px(v: float) -> int:
        return int(round(v * s))

    def stroke(v: float) -> int:
        return max(1, px(v))

    layer = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)

    m = px(FRAME_MARGIN)
    draw.rectangle(
        [m, m, size - 1 - m, size - 1 - m],
        outline=_rgba(accent, FRAME_ALPHA),
        width=stroke(FRAME_WIDTH),
    )

    motif = _rgba(accent, MOTIF_ALPHA)
    x = px(RING_INSET)
    while x < size - px(RING_INSET):
        draw.line(
            [
                (x, px(FRAME_MARGIN + CHEVRON_HEIGHT)),
                (x + px(CHEVRON_HALF_WIDTH), px(FRAME_MARGIN)),
                (x + 2 * px(CHEVRON_HALF_WIDTH), px(FRAME_MARGIN + CHEVRON_HEIGHT)),
            ],
            fill=motif,
            width=stroke(MOTIF_WIDTH),
        )
        x += max(1, px(CHEVRON_STEP))

    r = px(RING_RADIUS)
    y = px(RING_BAND_INSET)
    while y < size - px(RING_BAND_INSET):
        for cx in (px(RING_INSET), size - px(RING_INSET)):
            draw.ellipse([cx - r, y - r, cx + r, y + r], outline=motif, width=stroke(MOTIF_WIDTH))
        y += max(1, px(RING_STEP))

    corner = _rgba(accent, CORNER_ALPHA)
    cm, cs = px(CORNER_MARGIN), px(CORNER_SIZE)
    far = size - 1 - cm
    for points in (
        [(cm, cm + cs), (cm, cm), (cm + cs, cm)],
        [(far - cs, cm), (far, cm), (far, cm + cs)],
        [(cm, far - cs), (cm, far), (cm + cs, far)],
        [(far - cs, far), (far, far), (far, far - cs)],
    ):
        draw.line(points, fill=corner, width=stroke(CORNER_WIDTH))

    base = Image.fromarray(canvas).convert("RGBA")
    return np.asarray(Image.alpha_composite(base, layer).convert("RGB"), dtype=np.uint8)


def apply_vignette(canvas: np.ndarray, max_alpha: float = VIGNETTE_MAX_ALPHA) -> np.ndarray:
    h, w = canvas.shape[:2]
    ys = np.arange(h, dtype=np.float64) + 0.5 - h / 2.0
    xs = np.arange(w, dtype=np.float64) + 0.5 - w / 2.0
    dist = np.sqrt(ys[:, None] ** 2 + xs[None, :] ** 2)
    alpha = max_alpha * np.minimum(dist / (min(h, w) / 2.0), 1.0)
    return _to_uint8(canvas.astype(np.float64) * (1.0 - alpha)[..., None])


def apply_accent_wash(canvas: np.ndarray, accent: RGB, alpha: float = ACCENT_WASH_ALPHA) -> np.ndarray:
    """Screen-blend a flat accent colour over the canvas at the given opacity."""
    base = canvas.astype(np.float64)
    color = np.asarray(accent, dtype=np.float64)
    screen = 255.0 - (255.0 - base) * (255.0 - color) / 255.0
    return _to_uint8(base + alpha * (screen - base))


class PixelTransformEngine:
    def __init__(self, canvas_size: int = DEFAULT_CANVAS_SIZE):
        if canvas_size <= 0:
            raise ValueError("canvas_size must be positive")
        self.canvas_size = canvas_size

    def apply(self, raster: np.ndarray, profile: StyleProfile) -> np.ndarray:
        canvas = letterbox(raster, self.canvas_size)
        canvas = apply_tint(canvas, profile.tint)
        if profile.frame_enabled:
            canvas = draw_overlay(canvas, profile.accent_color)
        canvas = apply_vignette(canvas)
        canvas = apply_accent_wash(canvas, profile.accent_color)
        logger.debug("Local pipeline applied style %s at %dpx", profile.label, self.canvas_size)
        return canvas

"""
Render the local fallback effect for a photo without calling any provider.
Usage: python scripts/render_local_fallback.py <input image> [style] [output.png]
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import get_settings
from services.imaging import InvalidInputError, decode_image, encode_png
from services.pixel_transform import PixelTransformEngine
from services.style_catalog import StyleCatalog


def main():
    if len(sys.argv) < 2:
        print(__doc__.strip())
        return 1

    src = sys.argv[1]
    style = sys.argv[2] if len(sys.argv) > 2 else None
    out = sys.argv[3] if len(sys.argv) > 3 else os.path.splitext(src)[0] + "_avatar.png"

    settings = get_settings()
    catalog = StyleCatalog(default_style=settings.default_style)
    profile = catalog.resolve(style)
    if style and not catalog.is_known(style):
        print(f"Unknown style {style!r}; using {profile.label}")

    with open(src, "rb") as f:
        data = f.read()
    try:
        raster = decode_image(data)
    except InvalidInputError as e:
        print("ERROR:", e)
        return 1

    engine = PixelTransformEngine(canvas_size=settings.output_canvas_size)
    with open(out, "wb") as f:
        f.write(encode_png(engine.apply(raster, profile)))
    print(f"Wrote {out} ({profile.label}, {engine.canvas_size}px)")
    return 0


if __name__ == "__main__":
    sys.exit(main())

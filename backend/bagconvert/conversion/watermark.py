"""Brand overlay for free-tier images."""
import logging
from typing import Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from bagconvert.config import WATERMARK_FONT, WATERMARK_TEXT

logger = logging.getLogger("bagconvert.watermark")

OVERLAY_SIZE: Tuple[int, int] = (200, 50)
OVERLAY_FONT_SIZE = 16
OVERLAY_MARGIN = 10
OVERLAY_FILL = (255, 255, 255, 128)


def _load_font(size: int):
    if WATERMARK_FONT:
        try:
            return ImageFont.truetype(WATERMARK_FONT, size)
        except OSError as e:
            logger.warning("Could not load watermark font %s, using default: %s", WATERMARK_FONT, e)
    return ImageFont.load_default(size=size)


def build_overlay(
    text: str = WATERMARK_TEXT,
    size: Tuple[int, int] = OVERLAY_SIZE,
    font_size: int = OVERLAY_FONT_SIZE,
) -> Image.Image:
    """
    Transparent RGBA canvas of `size` with `text` drawn semi-transparent
    white, aligned to the bottom-right corner of the canvas.
    """
    overlay = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    font = _load_font(font_size)
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    x = max(0, size[0] - (right - left) - OVERLAY_MARGIN) - left
    y = max(0, size[1] - (bottom - top) - OVERLAY_MARGIN) - top
    draw.text((x, y), text, font=font, fill=OVERLAY_FILL)
    return overlay


def apply_watermark(img: Image.Image, text: Optional[str] = None) -> Image.Image:
    """
    Composite the brand overlay onto the bottom-right corner of img.
    Images smaller than the overlay canvas get a proportionally shrunk overlay.
    Returns a new RGBA image; img is left untouched.
    """
    base = img.convert("RGBA") if img.mode != "RGBA" else img.copy()
    overlay = build_overlay(text or WATERMARK_TEXT)
    w, h = base.size
    ow, oh = overlay.size
    scale = min(w / ow, h / oh, 1.0)
    if scale < 1.0:
        new_size = (max(1, int(ow * scale)), max(1, int(oh * scale)))
        overlay = overlay.resize(new_size, Image.Resampling.LANCZOS)
    layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
    layer.paste(overlay, (w - overlay.width, h - overlay.height))
    return Image.alpha_composite(base, layer)

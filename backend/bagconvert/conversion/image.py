"""In-memory image conversion with Pillow: decode, optional watermark, re-encode."""
import logging
from io import BytesIO
from typing import Callable

from PIL import Image

from bagconvert.conversion import watermark
from bagconvert.conversion.errors import UnsupportedFormat, UnsupportedOrCorruptInput
from bagconvert.conversion.models import MediaKind, SupportedFormats, Tier
from bagconvert.conversion.policy import TierPolicy

logger = logging.getLogger("bagconvert.image")


def _rgb_or_rgba(img: Image.Image) -> Image.Image:
    if img.mode in ("RGB", "RGBA"):
        return img
    has_alpha = img.mode in ("LA", "PA") or (img.mode == "P" and "transparency" in img.info)
    return img.convert("RGBA" if has_alpha else "RGB")


def _encode_webp(img: Image.Image, policy: TierPolicy, out: BytesIO) -> None:
    _rgb_or_rgba(img).save(out, format="WEBP", quality=policy.image_quality, method=4)


def _encode_avif(img: Image.Image, policy: TierPolicy, out: BytesIO) -> None:
    _rgb_or_rgba(img).save(out, format="AVIF", quality=policy.avif_quality)


_PNG_MODES = {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}


def _encode_png(img: Image.Image, policy: TierPolicy, out: BytesIO) -> None:
    if img.mode not in _PNG_MODES:
        img = _rgb_or_rgba(img)
    img.save(out, format="PNG", compress_level=policy.png_compress_level)


def _encode_jpeg(img: Image.Image, policy: TierPolicy, out: BytesIO) -> None:
    if img.mode != "RGB":
        img = img.convert("RGB")
    img.save(out, format="JPEG", quality=policy.image_quality, optimize=True)


ENCODERS: dict[str, Callable[[Image.Image, TierPolicy, BytesIO], None]] = {
    "webp": _encode_webp,
    "avif": _encode_avif,
    "png": _encode_png,
    "jpg": _encode_jpeg,
}
SupportedFormats.check_registry(MediaKind.IMAGE, ENCODERS)


def _decode(input_bytes: bytes) -> Image.Image:
    try:
        img = Image.open(BytesIO(input_bytes))
        img.load()
    except Exception as e:
        raise UnsupportedOrCorruptInput(f"Could not decode image: {e}") from e
    return img


def convert_image(input_bytes: bytes, fmt: str, tier: Tier) -> bytes:
    """Convert one image to fmt. Free tier gets the brand overlay, premium never does."""
    encoder = ENCODERS.get(fmt)
    if encoder is None:
        raise UnsupportedFormat(fmt)
    img = _decode(input_bytes)
    policy = TierPolicy.for_tier(tier)
    if policy.watermark:
        img = watermark.apply_watermark(img)
    out = BytesIO()
    try:
        encoder(img, policy, out)
    except (KeyError, OSError, ValueError) as e:
        # Pillow raises KeyError for a format its build cannot write (e.g. no libavif)
        raise UnsupportedFormat(fmt, str(e)) from e
    data = out.getvalue()
    logger.debug("Encoded %s (%s bytes, quality=%s, watermark=%s)", fmt, len(data), policy.image_quality, policy.watermark)
    return data

"""Tier-dependent quality and watermark settings."""
from dataclasses import dataclass

from bagconvert import config
from bagconvert.conversion.models import Tier


@dataclass(frozen=True)
class TierPolicy:
    watermark: bool
    image_quality: int
    avif_quality: int
    png_compress_level: int
    mp4_crf: int
    webm_crf: int
    gif_fps: int
    gif_width: int

    @classmethod
    def for_tier(cls, tier: Tier) -> "TierPolicy":
        if Tier.resolve(tier) == Tier.PREMIUM:
            quality = config.PREMIUM_IMAGE_QUALITY
            return cls(
                watermark=False,
                image_quality=quality,
                avif_quality=max(1, quality - config.AVIF_QUALITY_OFFSET),
                png_compress_level=config.PREMIUM_PNG_COMPRESS_LEVEL,
                mp4_crf=config.PREMIUM_MP4_CRF,
                webm_crf=config.PREMIUM_WEBM_CRF,
                gif_fps=config.PREMIUM_GIF_FPS,
                gif_width=config.PREMIUM_GIF_WIDTH,
            )
        quality = config.FREE_IMAGE_QUALITY
        return cls(
            watermark=True,
            image_quality=quality,
            avif_quality=max(1, quality - config.AVIF_QUALITY_OFFSET),
            png_compress_level=config.FREE_PNG_COMPRESS_LEVEL,
            mp4_crf=config.FREE_MP4_CRF,
            webm_crf=config.FREE_WEBM_CRF,
            gif_fps=config.FREE_GIF_FPS,
            gif_width=config.FREE_GIF_WIDTH,
        )

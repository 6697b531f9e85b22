"""Conversion orchestrator: one batch of formats per request, failures isolated per format."""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from bagconvert.config import MAX_WORKERS
from bagconvert.conversion.errors import ConversionError, UnsupportedFormat
from bagconvert.conversion.image import convert_image
from bagconvert.conversion.models import (
    ConversionRequest,
    ConversionResult,
    MediaKind,
    SupportedFormats,
    Tier,
)
from bagconvert.conversion.snippets import build_result
from bagconvert.conversion.video import VideoConverter

logger = logging.getLogger("bagconvert.service")

ImageConverter = Callable[[bytes, str, Tier], bytes]
ProgressCallback = Callable[[str, float], None]


class ConversionService:
    """Drives the image and video strategies for a single upload."""

    def __init__(
        self,
        image_converter: Optional[ImageConverter] = None,
        video_converter: Optional[VideoConverter] = None,
        max_workers: int = MAX_WORKERS,
    ):
        self._image_converter = image_converter or convert_image
        self._video_converter = video_converter or VideoConverter()
        self._strategies = {
            MediaKind.IMAGE: self._run_image,
            MediaKind.VIDEO: self._run_video,
        }
        self._executor = ThreadPoolExecutor(max_workers=max_workers)
        logger.info("ConversionService initialized with max_workers=%s", max_workers)

    def _run_image(self, request: ConversionRequest, fmt: str, tier: Tier) -> bytes:
        return self._image_converter(request.input_bytes, fmt, tier)

    def _run_video(self, request: ConversionRequest, fmt: str, tier: Tier) -> bytes:
        return self._video_converter.convert(request.input_bytes, request.original_filename, fmt, tier)

    def _convert_one(
        self,
        request: ConversionRequest,
        kind: MediaKind,
        fmt: str,
        tier: Tier,
    ) -> Optional[ConversionResult]:
        try:
            if fmt not in SupportedFormats.for_kind(kind):
                raise UnsupportedFormat(fmt)
            payload = self._strategies[kind](request, fmt, tier)
            result = build_result(request, fmt, payload)
        except ConversionError as e:
            logger.warning("Skipping %s for %s: %s", fmt, request.original_filename, e)
            return None
        except Exception as e:
            logger.exception("Conversion to %s failed for %s: %s", fmt, request.original_filename, e)
            return None
        logger.info("Converted %s -> %s (%s bytes)", request.original_filename, result.filename, result.size)
        return result

    def convert(
        self,
        request: ConversionRequest,
        on_progress: Optional[ProgressCallback] = None,
        parallel: bool = False,
    ) -> list[ConversionResult]:
        """
        Convert request.input_bytes into every requested format.
        Formats that fail are left out; an empty list means nothing succeeded.
        Raises ValueError only for a malformed request, before any conversion runs.
        """
        if not request.input_bytes:
            raise ValueError("input_bytes is required")
        try:
            kind = MediaKind(request.media_kind)
        except ValueError:
            raise ValueError(f"Unsupported media kind: {request.media_kind!r}") from None
        tier = Tier.resolve(request.tier)
        formats = [(f or "").strip().lower() for f in request.formats or []]
        if not formats:
            return []

        if parallel and len(formats) > 1:
            outcomes = self._executor.map(lambda f: self._convert_one(request, kind, f, tier), formats)
        else:
            outcomes = (self._convert_one(request, kind, f, tier) for f in formats)

        results: list[ConversionResult] = []
        total = len(formats)
        for i, (fmt, result) in enumerate(zip(formats, outcomes)):
            if result is not None:
                results.append(result)
            if on_progress:
                on_progress(fmt, (i + 1) / total * 100.0)
        if not results:
            logger.warning("No formats converted for %s (requested %s)", request.original_filename, formats)
        return results


# Singleton
_conversion_service: Optional[ConversionService] = None


def get_conversion_service() -> ConversionService:
    global _conversion_service
    if _conversion_service is None:
        _conversion_service = ConversionService()
    return _conversion_service

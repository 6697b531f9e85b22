"""API routes for upload and conversion."""
import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile

from bagconvert.config import (
    IMAGE_EXTENSIONS,
    MAX_IMAGE_SIZE_BYTES,
    MAX_VIDEO_SIZE_BYTES,
    VIDEO_EXTENSIONS,
)
from bagconvert.conversion.models import ConversionRequest, MediaKind, SupportedFormats, Tier
from bagconvert.conversion.service import get_conversion_service

logger = logging.getLogger("bagconvert.api")
router = APIRouter(prefix="/api", tags=["converter"])

TIER_HEADER = "X-User-Tier"


def resolve_tier(request: Request) -> Tier:
    """Tier as resolved upstream by the identity layer; missing or unknown means free."""
    return Tier.resolve(request.headers.get(TIER_HEADER))


def _media_kind(content_type: Optional[str], filename: Optional[str]) -> Optional[MediaKind]:
    content_type = (content_type or "").lower()
    if content_type.startswith("image/"):
        return MediaKind.IMAGE
    if content_type.startswith("video/"):
        return MediaKind.VIDEO
    ext = Path(filename or "").suffix.lower()
    if ext in IMAGE_EXTENSIONS:
        return MediaKind.IMAGE
    if ext in VIDEO_EXTENSIONS:
        return MediaKind.VIDEO
    return None


def _max_upload_bytes(kind: MediaKind) -> int:
    return MAX_IMAGE_SIZE_BYTES if kind == MediaKind.IMAGE else MAX_VIDEO_SIZE_BYTES


def _parse_formats(raw: str) -> list[str]:
    """Accept a JSON array (as the web client sends) or a comma-separated list; other JSON is rejected."""
    raw = (raw or "").strip()
    if raw.startswith(("[", "{")):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            raise HTTPException(400, "formats must be a JSON array or comma-separated list")
        if not isinstance(parsed, list) or not all(isinstance(f, str) for f in parsed):
            raise HTTPException(400, "formats must be a list of strings")
        items = parsed
    else:
        items = raw.split(",")
    return [f.strip().lower() for f in items if f.strip()]


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/formats")
def get_formats():
    return {
        "image": SupportedFormats.IMAGE,
        "video": SupportedFormats.VIDEO,
    }


@router.get("/limits")
def get_limits():
    """Return upload limits for the client."""
    return {
        "max_image_size_mb": MAX_IMAGE_SIZE_BYTES // (1024 * 1024),
        "max_image_size_bytes": MAX_IMAGE_SIZE_BYTES,
        "max_video_size_mb": MAX_VIDEO_SIZE_BYTES // (1024 * 1024),
        "max_video_size_bytes": MAX_VIDEO_SIZE_BYTES,
    }


@router.post("/convert")
async def convert_upload(
    file: UploadFile = File(...),
    formats: str = Form("", description='JSON array, e.g. ["webp","png"], or comma-separated'),
    tier: Tier = Depends(resolve_tier),
):
    """Convert one uploaded image or video into the requested formats."""
    kind = _media_kind(file.content_type, file.filename)
    if kind is None:
        raise HTTPException(400, "Invalid file type. Only images and videos are supported")
    output_formats = _parse_formats(formats)
    if not output_formats:
        raise HTTPException(400, "At least one format must be selected")

    max_bytes = _max_upload_bytes(kind)
    data = bytearray()
    while chunk := await file.read(1024 * 1024):
        data.extend(chunk)
        if len(data) > max_bytes:
            raise HTTPException(413, f"File too large (max {max_bytes // (1024 * 1024)} MB for {kind.value})")
    if not data:
        raise HTTPException(400, "No file uploaded")

    conversion = ConversionRequest(
        input_bytes=bytes(data),
        original_filename=file.filename or "upload",
        media_kind=kind,
        formats=output_formats,
        tier=tier,
    )
    svc = get_conversion_service()
    try:
        results = await asyncio.to_thread(svc.convert, conversion)
    except Exception as e:
        logger.exception("Conversion failed: %s", e)
        raise HTTPException(500, "Conversion failed")
    if not results:
        raise HTTPException(422, "Conversion failed for every requested format")
    return {
        "success": True,
        "tier": tier.value,
        "results": [r.to_dict() for r in results],
    }

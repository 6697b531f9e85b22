"""Application configuration. Loads from environment and .env file."""
import logging
import os
import tempfile
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
# Load .env from cwd, then backend/.env, then project root .env
load_dotenv()
load_dotenv(BASE_DIR / ".env")
load_dotenv(BASE_DIR.parent / ".env")

# Scratch space for the video transcoder (files never outlive a conversion)
SCRATCH_DIR = Path(os.getenv("SCRATCH_DIR", tempfile.gettempdir()))
SCRATCH_PREFIX = os.getenv("SCRATCH_PREFIX", "bagconvert-")

# External transcoder
FFMPEG_BIN = os.getenv("FFMPEG_BIN", "ffmpeg")
FFMPEG_TIMEOUT = int(os.getenv("FFMPEG_TIMEOUT", "300"))

# Concurrency (per-format fan-out inside one request)
MAX_WORKERS = int(os.getenv("MAX_WORKERS", str(min(8, (os.cpu_count() or 2) + 2))))

# Branding / embed snippets
WATERMARK_TEXT = os.getenv("WATERMARK_TEXT", "putthefilesinthebag.xyz")
WATERMARK_FONT = os.getenv("WATERMARK_FONT", "").strip() or None
VIDEO_WATERMARK_FONTFILE = os.getenv("VIDEO_WATERMARK_FONTFILE", "").strip() or None
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "https://putthefilesinthebag.xyz/media")

# Tier designations from the identity service that count as premium
PREMIUM_TIERS = {
    t.strip().lower()
    for t in os.getenv("PREMIUM_TIERS", "premium,lifetime").split(",")
    if t.strip()
}

# Quality policy (lower CRF = better quality)
FREE_IMAGE_QUALITY = int(os.getenv("FREE_IMAGE_QUALITY", "85"))
PREMIUM_IMAGE_QUALITY = int(os.getenv("PREMIUM_IMAGE_QUALITY", "90"))
AVIF_QUALITY_OFFSET = int(os.getenv("AVIF_QUALITY_OFFSET", "5"))
FREE_PNG_COMPRESS_LEVEL = int(os.getenv("FREE_PNG_COMPRESS_LEVEL", "8"))
PREMIUM_PNG_COMPRESS_LEVEL = int(os.getenv("PREMIUM_PNG_COMPRESS_LEVEL", "6"))
FREE_MP4_CRF = int(os.getenv("FREE_MP4_CRF", "23"))
PREMIUM_MP4_CRF = int(os.getenv("PREMIUM_MP4_CRF", "20"))
FREE_WEBM_CRF = int(os.getenv("FREE_WEBM_CRF", "30"))
PREMIUM_WEBM_CRF = int(os.getenv("PREMIUM_WEBM_CRF", "28"))
FREE_GIF_FPS = int(os.getenv("FREE_GIF_FPS", "10"))
PREMIUM_GIF_FPS = int(os.getenv("PREMIUM_GIF_FPS", "15"))
FREE_GIF_WIDTH = int(os.getenv("FREE_GIF_WIDTH", "480"))
PREMIUM_GIF_WIDTH = int(os.getenv("PREMIUM_GIF_WIDTH", "640"))

# Upload limits (enforced by the HTTP layer, not the conversion core)
MAX_IMAGE_SIZE_MB = int(os.getenv("MAX_IMAGE_SIZE_MB", "50"))
MAX_IMAGE_SIZE_BYTES = MAX_IMAGE_SIZE_MB * 1024 * 1024
MAX_VIDEO_SIZE_MB = int(os.getenv("MAX_VIDEO_SIZE_MB", "150"))
MAX_VIDEO_SIZE_BYTES = MAX_VIDEO_SIZE_MB * 1024 * 1024

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff", ".webp", ".avif"}
VIDEO_EXTENSIONS = {".mp4", ".webm", ".mov", ".avi", ".mkv", ".m4v"}

# Server (for uvicorn)
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
# CORS: comma-separated origins, e.g. "http://localhost:3000,http://127.0.0.1:3000"
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",") if o.strip()]

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("bagconvert")

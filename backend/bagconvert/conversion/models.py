"""Conversion request/result models."""
import base64
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Optional, Union

from bagconvert.config import PREMIUM_TIERS


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class Tier(str, Enum):
    FREE = "free"
    PREMIUM = "premium"

    @classmethod
    def resolve(cls, value: Union["Tier", str, None]) -> "Tier":
        """Map a tier string from the identity service; anything not premium is free."""
        if isinstance(value, Tier):
            return value
        if value and value.strip().lower() in PREMIUM_TIERS:
            return cls.PREMIUM
        return cls.FREE


class SupportedFormats:
    IMAGE = ["webp", "avif", "png", "jpg"]
    VIDEO = ["mp4", "webm", "gif"]

    @classmethod
    def for_kind(cls, kind: MediaKind) -> list[str]:
        return cls.IMAGE if kind == MediaKind.IMAGE else cls.VIDEO

    @classmethod
    def check_registry(cls, kind: MediaKind, registry) -> None:
        """Fail at import time if a strategy registry drifts from the catalog."""
        expected = set(cls.for_kind(kind))
        actual = set(registry)
        if expected != actual:
            raise RuntimeError(
                f"{kind.value} registry does not match catalog: "
                f"missing={sorted(expected - actual)} extra={sorted(actual - expected)}"
            )


MIME_TYPES = {
    "webp": "image/webp",
    "avif": "image/avif",
    "png": "image/png",
    "jpg": "image/jpeg",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "gif": "image/gif",
}


@dataclass(frozen=True)
class EmbedSnippets:
    html: str
    react: str
    markdown: str


@dataclass
class ConversionRequest:
    """One upload to convert. Lives for a single call to the orchestrator."""

    input_bytes: bytes
    original_filename: str
    media_kind: MediaKind
    formats: list[str] = field(default_factory=list)
    tier: Union[Tier, str] = Tier.FREE
    public_base_url: Optional[str] = None

    @property
    def base_name(self) -> str:
        name = (self.original_filename or "").replace("\\", "/")
        return PurePosixPath(name).stem or "file"


@dataclass
class ConversionResult:
    format: str
    filename: str
    payload: bytes
    mime_type: str
    snippets: EmbedSnippets

    @property
    def size(self) -> int:
        return len(self.payload)

    @property
    def data_url(self) -> str:
        b64 = base64.b64encode(self.payload).decode("ascii")
        return f"data:{self.mime_type};base64,{b64}"

    def to_dict(self) -> dict:
        return {
            "format": self.format,
            "filename": self.filename,
            "size": self.size,
            "mime_type": self.mime_type,
            "data": self.data_url,
            "codeSnippet": {
                "html": self.snippets.html,
                "react": self.snippets.react,
                "markdown": self.snippets.markdown,
            },
        }

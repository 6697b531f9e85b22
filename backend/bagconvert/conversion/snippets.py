"""Embed-code snippets and result packaging."""
from html import escape
from typing import Optional
from urllib.parse import quote

from bagconvert.config import PUBLIC_BASE_URL
from bagconvert.conversion.models import (
    MIME_TYPES,
    ConversionRequest,
    ConversionResult,
    EmbedSnippets,
    MediaKind,
)

VIDEO_FALLBACK_TEXT = "Your browser does not support the video tag."


def media_url(filename: str, base_url: Optional[str] = None) -> str:
    base = (base_url or PUBLIC_BASE_URL).rstrip("/")
    return f"{base}/{quote(filename)}"


def build_snippets(
    filename: str,
    fmt: str,
    kind: MediaKind,
    base_url: Optional[str] = None,
) -> EmbedSnippets:
    url = media_url(filename, base_url)
    src = escape(url, quote=True)
    if kind == MediaKind.VIDEO:
        html = (
            f'<video controls width="640" height="360">\n'
            f'  <source src="{src}" type="video/{fmt}">\n'
            f"  {VIDEO_FALLBACK_TEXT}\n"
            f"</video>"
        )
        react = (
            f"<video controls width={{640}} height={{360}}>\n"
            f'  <source src="{src}" type="video/{fmt}" />\n'
            f"  {VIDEO_FALLBACK_TEXT}\n"
            f"</video>"
        )
        # Markdown has no video syntax, embed the markup as is
        return EmbedSnippets(html=html, react=react, markdown=html)
    img = f'<img src="{src}" alt="Image" loading="lazy" />'
    return EmbedSnippets(html=img, react=img, markdown=f"![Image]({url})")


def build_result(request: ConversionRequest, fmt: str, payload: bytes) -> ConversionResult:
    kind = MediaKind(request.media_kind)
    filename = f"{request.base_name}.{fmt}"
    return ConversionResult(
        format=fmt,
        filename=filename,
        payload=payload,
        mime_type=MIME_TYPES.get(fmt, "application/octet-stream"),
        snippets=build_snippets(filename, fmt, kind, request.public_base_url),
    )

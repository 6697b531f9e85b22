"""Video conversion through the ffmpeg binary, mediated by scratch files."""
import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Callable, Optional

from bagconvert.config import FFMPEG_BIN, FFMPEG_TIMEOUT, VIDEO_WATERMARK_FONTFILE, WATERMARK_TEXT
from bagconvert.conversion.errors import (
    TempFileIOFailure,
    TranscodeFailed,
    TranscodeProducedEmptyOutput,
    UnsupportedFormat,
)
from bagconvert.conversion.models import MediaKind, SupportedFormats, Tier
from bagconvert.conversion.policy import TierPolicy
from bagconvert.conversion.scratch import ScratchSpace, TempDirScratchSpace, scoped

logger = logging.getLogger("bagconvert.video")

Runner = Callable[[list[str], int], subprocess.CompletedProcess]

GIF_PALETTE = "split[a][b];[a]palettegen[p];[b][p]paletteuse"
_SAFE_SUFFIX = re.compile(r"\.[a-z0-9]{1,8}")
_DIAGNOSTIC_LIMIT = 2000


@dataclass(frozen=True)
class VideoFormatSpec:
    """Filters that run before the watermark, a graph tail after it, and encoder args."""

    pre_filters: Callable[[TierPolicy], list[str]]
    output_args: Callable[[TierPolicy], list[str]]
    graph_tail: Optional[str] = None


FORMAT_SPECS: dict[str, VideoFormatSpec] = {
    "mp4": VideoFormatSpec(
        # libx264 with yuv420p needs even dimensions
        pre_filters=lambda p: ["scale=trunc(iw/2)*2:trunc(ih/2)*2"],
        output_args=lambda p: [
            "-c:v", "libx264", "-preset", "medium",
            "-crf", str(p.mp4_crf), "-pix_fmt", "yuv420p",
            "-c:a", "aac", "-movflags", "+faststart",
        ],
    ),
    "webm": VideoFormatSpec(
        pre_filters=lambda p: [],
        output_args=lambda p: [
            "-c:v", "libvpx-vp9", "-crf", str(p.webm_crf), "-b:v", "0",
            "-deadline", "realtime", "-cpu-used", "8",
            "-c:a", "libopus",
        ],
    ),
    "gif": VideoFormatSpec(
        pre_filters=lambda p: [f"fps={p.gif_fps}", f"scale={p.gif_width}:-1:flags=lanczos"],
        output_args=lambda p: ["-an", "-f", "gif"],
        graph_tail=GIF_PALETTE,
    ),
}
SupportedFormats.check_registry(MediaKind.VIDEO, FORMAT_SPECS)


def _escape(value: str) -> str:
    """Escape a drawtext option value for the option parser, then for the filtergraph parser."""
    value = "".join("\\" + c if c in "\\':" else c for c in value)
    return "".join("\\" + c if c in "\\'[],;" else c for c in value)


def drawtext_filter(text: str = WATERMARK_TEXT, fontfile: Optional[str] = VIDEO_WATERMARK_FONTFILE) -> str:
    options = [f"text={_escape(text)}", "expansion=none"]
    if fontfile:
        options.append(f"fontfile={_escape(fontfile)}")
    options += [
        "x=10", "y=h-th-10", "fontsize=18", "fontcolor=white",
        "box=1", "boxcolor=black@0.6", "boxborderw=5",
    ]
    return "drawtext=" + ":".join(options)


def build_filter_chain(fmt: str, policy: TierPolicy) -> Optional[str]:
    """One composed -vf graph for fmt, or None when no filtering is needed."""
    spec = FORMAT_SPECS[fmt]
    filters = list(spec.pre_filters(policy))
    if policy.watermark:
        filters.append(drawtext_filter())
    if spec.graph_tail:
        filters.append(spec.graph_tail)
    return ",".join(filters) or None


def build_command(
    src: Path,
    dst: Path,
    fmt: str,
    policy: TierPolicy,
    ffmpeg_bin: str = FFMPEG_BIN,
) -> list[str]:
    cmd = [ffmpeg_bin, "-hide_banner", "-nostdin", "-loglevel", "error", "-y", "-i", str(src)]
    chain = build_filter_chain(fmt, policy)
    if chain:
        cmd += ["-vf", chain]
    cmd += FORMAT_SPECS[fmt].output_args(policy)
    cmd.append(str(dst))
    return cmd


def run_ffmpeg(cmd: list[str], timeout: int) -> subprocess.CompletedProcess:
    return subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        errors="replace",
        timeout=timeout,
    )


def input_suffix(original_filename: str) -> str:
    """Original extension when it looks like one; ffmpeg probes the content either way."""
    suffix = PurePosixPath((original_filename or "").replace("\\", "/")).suffix.lower()
    return suffix if _SAFE_SUFFIX.fullmatch(suffix) else ""


class VideoConverter:
    """Writes the upload to scratch, runs ffmpeg, reads the output back, cleans up."""

    def __init__(
        self,
        scratch: Optional[ScratchSpace] = None,
        runner: Optional[Runner] = None,
        ffmpeg_bin: str = FFMPEG_BIN,
        timeout: int = FFMPEG_TIMEOUT,
    ):
        self.scratch = scratch if scratch is not None else TempDirScratchSpace()
        self.runner = runner or run_ffmpeg
        self.ffmpeg_bin = ffmpeg_bin
        self.timeout = timeout

    def _transcode(self, cmd: list[str], fmt: str) -> None:
        try:
            result = self.runner(cmd, self.timeout)
        except FileNotFoundError as e:
            logger.error("ffmpeg not found. Install ffmpeg for video conversion.")
            raise TranscodeFailed(fmt, "ffmpeg not installed") from e
        except subprocess.TimeoutExpired as e:
            raise TranscodeFailed(fmt, f"timed out after {self.timeout}s") from e
        if result.returncode != 0:
            diagnostic = (result.stderr or result.stdout or "ffmpeg failed").strip()
            raise TranscodeFailed(fmt, diagnostic[-_DIAGNOSTIC_LIMIT:])

    def convert(self, input_bytes: bytes, original_filename: str, fmt: str, tier: Tier) -> bytes:
        if fmt not in FORMAT_SPECS:
            raise UnsupportedFormat(fmt)
        policy = TierPolicy.for_tier(tier)
        specs = [("input", input_suffix(original_filename)), ("output", f".{fmt}")]
        with scoped(self.scratch, *specs) as (src, dst):
            try:
                src.write_bytes(input_bytes)
            except OSError as e:
                raise TempFileIOFailure(f"Could not write scratch input {src}: {e}", fmt) from e
            cmd = build_command(src, dst, fmt, policy, self.ffmpeg_bin)
            logger.debug("Running %s", " ".join(cmd))
            self._transcode(cmd, fmt)
            try:
                data = dst.read_bytes()
            except OSError as e:
                raise TempFileIOFailure(f"Could not read scratch output {dst}: {e}", fmt) from e
            if not data:
                raise TranscodeProducedEmptyOutput(fmt)
        logger.info("Converted video %s -> %s (%s bytes)", original_filename, fmt, len(data))
        return data


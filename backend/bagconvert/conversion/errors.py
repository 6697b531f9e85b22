"""Per-format conversion errors. The orchestrator catches these one format at a time."""
from typing import Optional


class ConversionError(Exception):
    """Base class for a failure that drops a single output format."""

    def __init__(self, message: str, fmt: Optional[str] = None):
        super().__init__(message)
        self.format = fmt


class UnsupportedOrCorruptInput(ConversionError):
    """Input bytes could not be decoded."""


class UnsupportedFormat(ConversionError):
    """Requested format is not in the catalog (or the codec cannot write it)."""

    def __init__(self, fmt: str, detail: Optional[str] = None):
        message = f"Unsupported format: {fmt}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message, fmt)


class TranscodeFailed(ConversionError):
    """ffmpeg reported an error."""

    def __init__(self, fmt: str, diagnostic: str):
        super().__init__(f"Transcode to {fmt} failed: {diagnostic}", fmt)
        self.diagnostic = diagnostic


class TranscodeProducedEmptyOutput(ConversionError):
    def __init__(self, fmt: str):
        super().__init__(f"Transcode to {fmt} produced an empty file", fmt)


class TempFileIOFailure(ConversionError):
    """Writing the scratch input or reading the scratch output failed."""

"""Scratch files for the transcoder. Every path handed out is unique per call."""
import logging
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Protocol

from bagconvert.config import SCRATCH_DIR, SCRATCH_PREFIX

logger = logging.getLogger("bagconvert.scratch")


class ScratchSpace(Protocol):
    def acquire(self, suffix: str = "", kind: str = "tmp") -> Path:
        ...

    def release(self, path: Path) -> None:
        ...


class TempDirScratchSpace:
    """Hands out `<prefix><kind>-<uuid><suffix>` paths inside one directory."""

    def __init__(self, root: Optional[Path] = None, prefix: str = SCRATCH_PREFIX):
        self.root = Path(root) if root is not None else SCRATCH_DIR
        self.prefix = prefix
        self.root.mkdir(parents=True, exist_ok=True)

    def acquire(self, suffix: str = "", kind: str = "tmp") -> Path:
        return self.root / f"{self.prefix}{kind}-{uuid.uuid4().hex}{suffix}"

    def release(self, path: Path) -> None:
        """Remove a scratch file. Never raises."""
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove scratch file %s: %s", path, e)


@contextmanager
def scoped(space: ScratchSpace, *specs: tuple[str, str]) -> Iterator[tuple[Path, ...]]:
    """
    Acquire one path per (kind, suffix) spec and release all of them on exit,
    whatever the exit path.
    """
    paths: list[Path] = []
    try:
        for kind, suffix in specs:
            paths.append(space.acquire(suffix, kind=kind))
        yield tuple(paths)
    finally:
        for p in paths:
            space.release(p)

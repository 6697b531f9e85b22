"""Pytest configuration and fixtures."""
import subprocess
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from bagconvert.conversion.scratch import TempDirScratchSpace


def make_image_bytes(size=(10, 10), color=(30, 60, 90), fmt="PNG", mode="RGB") -> bytes:
    buf = BytesIO()
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


class StubRunner:
    """Stands in for the ffmpeg call. Records every command and fakes the outcome."""

    def __init__(self, mode="ok", payload=b"converted-bytes", fail_formats=()):
        self.mode = mode
        self.payload = payload
        self.fail_formats = set(fail_formats)
        self.commands: list[list[str]] = []
        self.inputs: list[tuple[Path, bool, bytes]] = []

    def __call__(self, cmd, timeout):
        self.commands.append(cmd)
        src = Path(cmd[cmd.index("-i") + 1])
        dst = Path(cmd[-1])
        self.inputs.append((src, src.exists(), src.read_bytes() if src.exists() else b""))
        if self.mode == "missing":
            raise FileNotFoundError(cmd[0])
        if self.mode == "timeout":
            raise subprocess.TimeoutExpired(cmd, timeout)
        if self.mode == "fail" or dst.suffix.lstrip(".") in self.fail_formats:
            return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="boom: invalid data")
        if self.mode == "empty":
            dst.write_bytes(b"")
        elif self.mode != "no_output":
            dst.write_bytes(self.payload)
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")


@pytest.fixture
def scratch_dir(tmp_path):
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def scratch(scratch_dir):
    return TempDirScratchSpace(root=scratch_dir, prefix="bagtest-")


@pytest.fixture
def png_bytes():
    """10x10 solid-color PNG."""
    return make_image_bytes()


@pytest.fixture
def stub_runner():
    return StubRunner()

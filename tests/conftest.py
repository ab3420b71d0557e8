"""Shared test fixtures for the re-encoder."""

import logging
import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest

from reencoder.core.subprocess_utils import ToolInvocation


class FakeProber:
    """In-memory VideoProber keyed by path string."""

    def __init__(
        self,
        codecs: dict[str, str | None] | None = None,
        framerates: dict[str, str | None] | None = None,
    ) -> None:
        self.codecs = codecs or {}
        self.framerates = framerates or {}
        self.codec_calls: list[str] = []
        self.framerate_calls: list[str] = []

    def get_video_codec(self, path: Path) -> str | None:
        self.codec_calls.append(str(path))
        return self.codecs.get(str(path))

    def get_framerate(self, path: Path) -> str | None:
        self.framerate_calls.append(str(path))
        return self.framerates.get(str(path))


class FakeEncoderRunner:
    """Stand-in for ffmpeg: writes a file of a chosen size to the output arg.

    The output size is ``ratio`` times the input size. ``returncode`` is
    returned as-is; with ``write_output=False`` nothing is written.
    """

    def __init__(
        self,
        ratio: float = 0.5,
        returncode: int = 0,
        write_output: bool = True,
    ) -> None:
        self.ratio = ratio
        self.returncode = returncode
        self.write_output = write_output
        self.invocations: list[ToolInvocation] = []

    def __call__(self, invocation: ToolInvocation) -> int:
        self.invocations.append(invocation)
        args = list(invocation.args)
        input_path = Path(args[args.index("-i") + 1])
        output_path = Path(args[-1])
        if self.write_output:
            size = int(input_path.stat().st_size * self.ratio)
            output_path.write_bytes(b"\x01" * size)
        return self.returncode


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture
def make_video(temp_dir: Path) -> Callable[..., Path]:
    """Factory creating a fake video file of a given size under temp_dir."""

    def _make(name: str, size: int, content: bytes = b"\x00") -> Path:
        path = temp_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes((content * size)[:size])
        return path

    return _make


@pytest.fixture
def fake_prober() -> FakeProber:
    return FakeProber()


@pytest.fixture
def test_logger() -> logging.Logger:
    return logging.getLogger("reencoder.tests")


@pytest.fixture
def make_prober() -> type[FakeProber]:
    """FakeProber class, for tests that need preset codecs or framerates."""
    return FakeProber


@pytest.fixture
def make_runner() -> type[FakeEncoderRunner]:
    """FakeEncoderRunner class, for tests that drive the encode step."""
    return FakeEncoderRunner

"""Unit tests for the ffprobe prober."""

import subprocess
from pathlib import Path
from unittest.mock import patch

from reencoder.introspector.ffprobe import FFprobeProber

FFPROBE = Path("/usr/bin/ffprobe")
RUN_COMMAND = "reencoder.introspector.ffprobe.run_command"


class TestFFprobeProber:
    """Tests for FFprobeProber."""

    def test_invocation(self) -> None:
        """Should query one entry of the first video stream."""
        invocation = FFprobeProber(FFPROBE).build_invocation(
            Path("/v/a b.mkv"), "codec_name"
        )

        assert invocation.argv == [
            "/usr/bin/ffprobe",
            "-v",
            "error",
            "-select_streams",
            "v:0",
            "-show_entries",
            "stream=codec_name",
            "-of",
            "default=noprint_wrappers=1:nokey=1",
            "/v/a b.mkv",
        ]

    def test_codec(self) -> None:
        """Should return the first non-empty output line."""
        with patch(RUN_COMMAND, return_value=("h264\nh264\n", "", 0)):
            assert FFprobeProber(FFPROBE).get_video_codec(Path("/v/a.mkv")) == "h264"

    def test_framerate(self) -> None:
        """Should return the raw framerate string."""
        with patch(RUN_COMMAND, return_value=("30000/1001\n", "", 0)) as mock_run:
            assert FFprobeProber(FFPROBE).get_framerate(Path("/v/a.mkv")) == (
                "30000/1001"
            )
        assert "stream=r_frame_rate" in mock_run.call_args.args[0].args

    def test_failure_is_unknown(self) -> None:
        """Should return None on a non-zero exit."""
        with patch(RUN_COMMAND, return_value=("", "Invalid data", 1)):
            assert FFprobeProber(FFPROBE).get_video_codec(Path("/v/a.mkv")) is None

    def test_empty_output_is_unknown(self) -> None:
        """Should return None when there is no video stream."""
        with patch(RUN_COMMAND, return_value=("\n", "", 0)):
            assert FFprobeProber(FFPROBE).get_video_codec(Path("/v/a.mp3")) is None

    def test_timeout_is_unknown(self) -> None:
        """Should return None when ffprobe times out."""
        with patch(
            RUN_COMMAND, side_effect=subprocess.TimeoutExpired(["ffprobe"], 60)
        ):
            assert FFprobeProber(FFPROBE).get_video_codec(Path("/v/a.mkv")) is None

    def test_without_ffprobe(self) -> None:
        """Should report unknown for everything without running anything."""
        prober = FFprobeProber(None)

        with patch(RUN_COMMAND) as mock_run:
            assert prober.get_video_codec(Path("/v/a.mkv")) is None
            assert prober.get_framerate(Path("/v/a.mkv")) is None

        assert not prober.available
        mock_run.assert_not_called()

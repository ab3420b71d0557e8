"""Unit tests for the replacement decision and transition."""

import os
from pathlib import Path

import pytest

from reencoder.cache.models import CacheEntry
from reencoder.exceptions import ReplacementFailedError, TempArtifactMissingError
from reencoder.executor.replace import (
    ReplacementAction,
    ReplacementExecutor,
    ReplacementOutcome,
    decide,
    size_reduction_percent,
)
from reencoder.scanner.selector import VideoSelection

# =============================================================================
# Decision Tests
# =============================================================================


class TestSizeReductionPercent:
    """Tests for size_reduction_percent."""

    def test_rounds_to_two_decimals(self) -> None:
        """Should round the percentage to two decimal places."""
        assert size_reduction_percent(3, 2) == 33.33

    def test_growth_is_negative(self) -> None:
        """Should report growth as a negative reduction."""
        assert size_reduction_percent(100, 150) == -50.0

    def test_empty_original(self) -> None:
        """Should treat a zero-size original as no reduction."""
        assert size_reduction_percent(0, 0) == 0.0


class TestDecide:
    """Tests for decide."""

    def test_threshold_is_inclusive(self) -> None:
        """Should replace when the reduction equals the threshold."""
        assert decide(1000, 900, True, 10.0) is ReplacementAction.REPLACE

    def test_below_threshold_falls_back(self) -> None:
        """Should fall back when the reduction is below the threshold."""
        assert decide(1000, 900, True, 11.0) is ReplacementAction.FALLBACK

    def test_growth_falls_back(self) -> None:
        """Should never replace with a larger file."""
        assert decide(1000, 1200, True, 0.0) is ReplacementAction.FALLBACK

    def test_no_replace_keeps_new(self) -> None:
        """Should keep a new file whenever replacement is not requested."""
        assert decide(1000, 100, False, 10.0) is ReplacementAction.KEEP_NEW


# =============================================================================
# ReplacementExecutor Tests
# =============================================================================


@pytest.fixture
def staged_encode(temp_dir: Path):
    """Original of 1000 bytes plus a temp output of the given size."""

    def _setup(new_size: int):
        original = temp_dir / "movie.mkv"
        original.write_bytes(b"O" * 1000)
        output = temp_dir / "movie_h265.mp4"
        temp = temp_dir / "movie_h265.mp4.tmp"
        temp.write_bytes(b"N" * new_size)
        selection = VideoSelection(str(original), 1000, "h264")
        cache = {str(original): CacheEntry(str(original), 1000, "h264")}
        return original, output, temp, selection, cache

    return _setup


class TestReplacementExecutor:
    """Tests for ReplacementExecutor.apply."""

    def test_replaces_original(self, temp_dir: Path, staged_encode) -> None:
        """Should swap the encoded file in and update the cache entry."""
        original, output, temp, selection, cache = staged_encode(900)

        result = ReplacementExecutor("hevc", 10.0).apply(
            selection, temp, output, cache, replace_requested=True
        )

        assert result.outcome is ReplacementOutcome.REPLACED
        assert result.final_path == original
        assert result.saved_bytes == 100
        assert original.read_bytes() == b"N" * 900
        assert not temp.exists()
        assert not output.exists()
        assert not list(temp_dir.glob("*.backup_*"))
        assert cache == {str(original): CacheEntry(str(original), 900, "hevc")}

    def test_fallback_keeps_original(self, temp_dir: Path, staged_encode) -> None:
        """Should keep the original byte-identical below the threshold."""
        original, output, temp, selection, cache = staged_encode(900)

        result = ReplacementExecutor("hevc", 11.0).apply(
            selection, temp, output, cache, replace_requested=True
        )

        assert result.outcome is ReplacementOutcome.FALLBACK_CREATED
        assert result.final_path == output
        assert result.saved_bytes == 0
        assert original.read_bytes() == b"O" * 1000
        assert output.read_bytes() == b"N" * 900
        assert not temp.exists()
        assert cache == {str(output): CacheEntry(str(output), 900, "hevc")}

    def test_keep_new_when_not_replacing(self, staged_encode) -> None:
        """Should write a sibling file whatever the reduction."""
        original, output, temp, selection, cache = staged_encode(100)

        result = ReplacementExecutor("hevc", 10.0).apply(
            selection, temp, output, cache, replace_requested=False
        )

        assert result.outcome is ReplacementOutcome.KEPT_AS_NEW_FILE
        assert original.read_bytes() == b"O" * 1000
        assert output.exists()
        assert str(original) not in cache
        assert cache[str(output)].codec == "hevc"

    def test_missing_temp_file(self, staged_encode) -> None:
        """Should raise TempArtifactMissingError and leave the cache alone."""
        original, output, temp, selection, cache = staged_encode(10)
        temp.unlink()

        with pytest.raises(TempArtifactMissingError):
            ReplacementExecutor("hevc", 10.0).apply(
                selection, temp, output, cache, replace_requested=True
            )

        assert original.exists()
        assert cache[str(original)].size == 1000

    def test_rolls_back_when_swap_fails(
        self, temp_dir: Path, staged_encode, monkeypatch
    ) -> None:
        """Should restore the original when moving the encode into place fails."""
        original, output, temp, selection, cache = staged_encode(500)
        real_replace = os.replace

        def failing_replace(src, dst):
            if Path(src) == temp:
                raise OSError("disk full")
            return real_replace(src, dst)

        monkeypatch.setattr(os, "replace", failing_replace)

        with pytest.raises(ReplacementFailedError) as exc_info:
            ReplacementExecutor("hevc", 10.0).apply(
                selection, temp, output, cache, replace_requested=True
            )

        assert exc_info.value.restored
        assert original.read_bytes() == b"O" * 1000
        assert not temp.exists()
        assert not list(temp_dir.glob("*.backup_*"))
        assert cache == {str(original): CacheEntry(str(original), 1000, "h264")}

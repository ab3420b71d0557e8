"""Unit tests for backup module."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from reencoder.executor.backup import (
    cleanup_backup,
    get_backup_path,
    move_to_backup,
    restore_from_backup,
    safe_restore_from_backup,
)

# =============================================================================
# get_backup_path() Tests
# =============================================================================


class TestGetBackupPath:
    """Tests for get_backup_path function."""

    def test_timestamp_suffix(self, temp_dir: Path) -> None:
        """Should append .backup_<timestamp> to the full file name."""
        original = temp_dir / "movie.mkv"

        assert get_backup_path(original, timestamp=1700000000) == (
            temp_dir / "movie.mkv.backup_1700000000"
        )

    def test_avoids_existing_backup(self, temp_dir: Path) -> None:
        """Should add a counter when the timestamped name is taken."""
        original = temp_dir / "movie.mkv"
        (temp_dir / "movie.mkv.backup_5").touch()

        assert get_backup_path(original, timestamp=5) == (
            temp_dir / "movie.mkv.backup_5_1"
        )


# =============================================================================
# move_to_backup() / restore_from_backup() Tests
# =============================================================================


class TestMoveAndRestore:
    """Tests for moving a file aside and back."""

    def test_move_to_backup(self, temp_dir: Path) -> None:
        """Should rename the original, keeping its content."""
        original = temp_dir / "movie.mkv"
        original.write_bytes(b"content")

        backup = move_to_backup(original)

        assert not original.exists()
        assert backup.read_bytes() == b"content"

    def test_restore(self, temp_dir: Path) -> None:
        """Should put the backup back in place."""
        original = temp_dir / "movie.mkv"
        original.write_bytes(b"content")
        backup = move_to_backup(original)

        restore_from_backup(backup, original)

        assert original.read_bytes() == b"content"
        assert not backup.exists()

    def test_restore_missing_backup(self, temp_dir: Path) -> None:
        """Should raise FileNotFoundError if there is no backup."""
        with pytest.raises(FileNotFoundError, match="Backup file not found"):
            restore_from_backup(temp_dir / "nope.backup_1", temp_dir / "nope")

    def test_safe_restore_reports_failure(self, temp_dir: Path) -> None:
        """Should return False instead of raising."""
        assert not safe_restore_from_backup(
            temp_dir / "nope.backup_1", temp_dir / "nope"
        )

    def test_safe_restore_success(self, temp_dir: Path) -> None:
        """Should return True after restoring."""
        original = temp_dir / "movie.mkv"
        original.write_bytes(b"x")
        backup = move_to_backup(original)

        assert safe_restore_from_backup(backup, original)
        assert original.exists()


# =============================================================================
# cleanup_backup() Tests
# =============================================================================


class TestCleanupBackup:
    """Tests for cleanup_backup function."""

    def test_removes_backup(self, temp_dir: Path) -> None:
        """Should delete the backup file."""
        backup = temp_dir / "movie.mkv.backup_1"
        backup.touch()

        cleanup_backup(backup)

        assert not backup.exists()

    def test_failure_is_logged_not_raised(self, temp_dir: Path, caplog) -> None:
        """Should log and continue when removal fails."""
        backup = temp_dir / "movie.mkv.backup_1"
        backup.touch()

        with patch.object(Path, "unlink", side_effect=PermissionError("denied")):
            cleanup_backup(backup)

        assert "Could not remove backup" in caplog.text
        assert os.path.exists(backup)

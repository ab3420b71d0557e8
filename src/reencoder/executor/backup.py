"""Backup creation, restoration, and cleanup utilities.

Backups are made by renaming the original aside (never by copying), so
taking one is cheap and the original content is never rewritten.
"""

import logging
import os
import time
from pathlib import Path

logger = logging.getLogger(__name__)

# Backup name: <original>.backup_<unix seconds>[_<n>]
BACKUP_INFIX = ".backup_"


class BackupRestorationError(Exception):
    """Raised when backup restoration fails verification."""


def get_backup_path(file_path: Path, timestamp: int | None = None) -> Path:
    """Return an unused backup path for ``file_path``.

    Args:
        file_path: Path to the original file.
        timestamp: Unix time to embed (defaults to now).

    Returns:
        ``<file>.backup_<timestamp>``, with ``_<n>`` appended if that
        name is already taken.
    """
    stamp = int(time.time()) if timestamp is None else timestamp
    candidate = file_path.with_name(f"{file_path.name}{BACKUP_INFIX}{stamp}")
    counter = 1
    while candidate.exists():
        candidate = file_path.with_name(
            f"{file_path.name}{BACKUP_INFIX}{stamp}_{counter}"
        )
        counter += 1
    return candidate


def move_to_backup(file_path: Path) -> Path:
    """Rename a file to a fresh backup path.

    Returns:
        Path of the backup.

    Raises:
        OSError: If the rename fails (the original is then untouched).
    """
    backup_path = get_backup_path(file_path)
    logger.debug(
        "Creating backup",
        extra={"source_path": str(file_path), "backup_path": str(backup_path)},
    )
    os.replace(file_path, backup_path)
    return backup_path


def restore_from_backup(backup_path: Path, original_path: Path) -> Path:
    """Rename a backup back to its original path.

    Raises:
        FileNotFoundError: If the backup file does not exist.
        OSError: If the rename fails.
        BackupRestorationError: If the original is missing after the rename.
    """
    if not backup_path.exists():
        raise FileNotFoundError(f"Backup file not found: {backup_path}")

    logger.info(
        "Restoring original file from backup",
        extra={"backup_path": str(backup_path), "target_path": str(original_path)},
    )
    os.replace(backup_path, original_path)

    if not original_path.exists():
        raise BackupRestorationError(
            f"Restoration failed: {original_path} does not exist after move"
        )
    return original_path


def safe_restore_from_backup(backup_path: Path, original_path: Path) -> bool:
    """Restore from backup, logging instead of raising.

    Use this in error handlers where a restoration failure must not mask
    the original error.

    Returns:
        True if restoration succeeded, False otherwise.
    """
    try:
        restore_from_backup(backup_path, original_path)
        return True
    except (OSError, BackupRestorationError) as e:
        logger.error(
            "Failed to restore backup %s: %s. Original is preserved at the "
            "backup path and must be restored manually.",
            backup_path,
            e,
        )
        return False


def cleanup_backup(backup_path: Path) -> None:
    """Remove a backup after a successful replacement.

    A failure is logged but not raised: the replacement already succeeded
    and the stray backup only costs disk space.
    """
    try:
        backup_path.unlink(missing_ok=True)
        logger.debug("Removed backup", extra={"backup_path": str(backup_path)})
    except OSError as e:
        logger.warning("Could not remove backup %s: %s", backup_path, e)

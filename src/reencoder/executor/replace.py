"""Replacement decision and filesystem transition.

After a successful encode the temporary output is either swapped in for
the original (backup, rename, commit or roll back) or renamed to a
sibling file next to the untouched original. The size reduction decides
which, and the cache is updated to match.
"""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from reencoder.cache.models import CacheIndex
from reencoder.cache.store import make_entry
from reencoder.core.formatting import format_mb
from reencoder.exceptions import ReplacementFailedError, TempArtifactMissingError
from reencoder.executor.backup import (
    cleanup_backup,
    move_to_backup,
    safe_restore_from_backup,
)
from reencoder.scanner.selector import VideoSelection


class ReplacementAction(enum.Enum):
    """Transition chosen for an encoded file."""

    REPLACE = "replace"
    FALLBACK = "fallback"
    """Replacement requested but the size reduction was too small."""

    KEEP_NEW = "keep_new"
    """Replacement not requested; always write a sibling file."""


class ReplacementOutcome(enum.Enum):
    """What actually happened on disk."""

    REPLACED = "replaced"
    FALLBACK_CREATED = "fallback_created"
    KEPT_AS_NEW_FILE = "kept_as_new_file"


_ACTION_OUTCOMES = {
    ReplacementAction.REPLACE: ReplacementOutcome.REPLACED,
    ReplacementAction.FALLBACK: ReplacementOutcome.FALLBACK_CREATED,
    ReplacementAction.KEEP_NEW: ReplacementOutcome.KEPT_AS_NEW_FILE,
}


def size_reduction_percent(original_size: int, new_size: int) -> float:
    """Percentage saved, rounded to two decimals.

    An empty original cannot shrink; its reduction is 0.
    """
    if original_size <= 0:
        return 0.0
    return round((original_size - new_size) / original_size * 100, 2)


def decide(
    original_size: int,
    new_size: int,
    replace_requested: bool,
    min_reduction_percent: float,
) -> ReplacementAction:
    """Choose the transition for an encoded file.

    | replace_requested | reduction >= threshold | action   |
    |-------------------|------------------------|----------|
    | True              | True                   | REPLACE  |
    | True              | False                  | FALLBACK |
    | False             | either                 | KEEP_NEW |
    """
    if not replace_requested:
        return ReplacementAction.KEEP_NEW
    if size_reduction_percent(original_size, new_size) >= min_reduction_percent:
        return ReplacementAction.REPLACE
    return ReplacementAction.FALLBACK


@dataclass(frozen=True)
class ReplacementResult:
    """Result of applying a replacement action."""

    outcome: ReplacementOutcome
    final_path: Path
    original_size: int
    new_size: int
    reduction_percent: float

    @property
    def saved_bytes(self) -> int:
        if self.outcome is ReplacementOutcome.REPLACED:
            return self.original_size - self.new_size
        return 0


class ReplacementExecutor:
    """Move an encoded temporary file into its final place."""

    def __init__(
        self,
        target_codec: str,
        min_reduction_percent: float,
        logger: logging.Logger | None = None,
    ) -> None:
        self._target_codec = target_codec
        self._min_reduction_percent = min_reduction_percent
        self._logger = logger or logging.getLogger(__name__)

    def apply(
        self,
        selection: VideoSelection,
        temp_path: Path,
        output_path: Path,
        cache: CacheIndex,
        replace_requested: bool,
    ) -> ReplacementResult:
        """Measure the encoded output, decide, and perform the transition.

        Args:
            selection: The original file.
            temp_path: Encoder output waiting to be placed.
            output_path: Sibling path used when not replacing.
            cache: Index updated to reflect the new state of the disk.
            replace_requested: Whether the original may be replaced.

        Returns:
            ReplacementResult describing the outcome.

        Raises:
            TempArtifactMissingError: If ``temp_path`` does not exist.
            ReplacementFailedError: If moving files failed. The original is
                restored and the cache is left unchanged.
        """
        try:
            new_size = temp_path.stat().st_size
        except FileNotFoundError as e:
            raise TempArtifactMissingError(temp_path) from e

        original_size = selection.size
        reduction = size_reduction_percent(original_size, new_size)
        self._logger.info(
            "Original size: %s, encoded size: %s, reduction: %.2f%%",
            format_mb(original_size),
            format_mb(new_size),
            reduction,
        )

        action = decide(
            original_size, new_size, replace_requested, self._min_reduction_percent
        )

        if action is ReplacementAction.REPLACE:
            self._logger.info(
                "Size reduction meets threshold (%.2f%%). Replacing original.",
                self._min_reduction_percent,
            )
            final_path = self._replace(selection, temp_path, new_size, cache)
        else:
            if action is ReplacementAction.FALLBACK:
                self._logger.warning(
                    "Size reduction (%.2f%%) is below the minimum threshold "
                    "(%.2f%%). "
                    "Keeping original and saving new file as %s",
                    reduction,
                    self._min_reduction_percent,
                    output_path.name,
                )
            final_path = self._keep_new(
                selection, temp_path, output_path, new_size, cache
            )

        return ReplacementResult(
            outcome=_ACTION_OUTCOMES[action],
            final_path=final_path,
            original_size=original_size,
            new_size=new_size,
            reduction_percent=reduction,
        )

    def _replace(
        self,
        selection: VideoSelection,
        temp_path: Path,
        new_size: int,
        cache: CacheIndex,
    ) -> Path:
        original = Path(selection.path)

        try:
            backup_path = move_to_backup(original)
        except OSError as e:
            self._discard_temp(temp_path)
            raise ReplacementFailedError(
                f"Could not move original aside for {original}: {e}",
                original_path=original,
                restored=original.exists(),
            ) from e

        try:
            os.replace(temp_path, original)
        except OSError as e:
            self._logger.error("Error during replacement of %s: %s", original, e)
            restored = safe_restore_from_backup(backup_path, original)
            self._discard_temp(temp_path)
            if restored:
                self._logger.info("Original file restored: %s", original)
            raise ReplacementFailedError(
                f"Could not move encoded file into place for {original}: {e}",
                original_path=original,
                restored=restored,
            ) from e

        cleanup_backup(backup_path)
        cache[selection.path] = make_entry(selection.path, new_size, self._target_codec)
        self._logger.info(
            "Original file replaced: %s (saved %s)",
            original,
            format_mb(selection.size - new_size),
        )
        return original

    def _keep_new(
        self,
        selection: VideoSelection,
        temp_path: Path,
        output_path: Path,
        new_size: int,
        cache: CacheIndex,
    ) -> Path:
        try:
            os.replace(temp_path, output_path)
        except OSError as e:
            self._discard_temp(temp_path)
            raise ReplacementFailedError(
                f"Could not save encoded file as {output_path}: {e}",
                original_path=Path(selection.path),
                restored=True,
            ) from e

        # Key the sibling like the original so rescans produce the same key
        output_key = os.path.join(os.path.dirname(selection.path), output_path.name)
        cache.pop(selection.path, None)
        cache[output_key] = make_entry(output_key, new_size, self._target_codec)
        self._logger.info(
            "New file saved: %s (original preserved: %s)",
            output_path,
            selection.path,
        )
        return output_path

    def _discard_temp(self, temp_path: Path) -> None:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError as e:
            self._logger.warning(
                "Could not remove temporary output %s: %s", temp_path, e
            )

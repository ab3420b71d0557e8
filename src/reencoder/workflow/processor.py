"""The run loop: select, plan, encode, decide, persist; repeat.

One file is processed at a time. The cache is saved after every
iteration, whatever its outcome, so a killed process loses at most the
file that was in flight. An encoder failure ends the run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from reencoder.cache.models import CacheIndex
from reencoder.cache.store import CacheStore
from reencoder.config.models import EncodingConfig
from reencoder.core.formatting import format_mb
from reencoder.exceptions import (
    EncodeFailedError,
    ReplacementFailedError,
    TempArtifactMissingError,
)
from reencoder.executor.encode import EncodeExecutor, EncodeResult, TempOutputGuard
from reencoder.executor.replace import (
    ReplacementAction,
    ReplacementExecutor,
    ReplacementOutcome,
    ReplacementResult,
    decide,
    size_reduction_percent,
)
from reencoder.introspector.interface import VideoProber
from reencoder.policy.planner import plan_encode
from reencoder.scanner.orchestrator import DirectoryScanner
from reencoder.scanner.selector import LargestFileSelector, VideoSelection

# Dry runs assume the encoder shrinks a file to 60% of its size
DRY_RUN_SIZE_RATIO = 0.6


@dataclass
class RunOptions:
    """Per-invocation options (from the CLI)."""

    root: Path
    count: int = 1
    replace: bool = True
    force_rescan: bool = False
    dry_run: bool = False


@dataclass
class RunSummary:
    """Counters for a finished run."""

    dry_run: bool = False
    processed: int = 0
    replaced: int = 0
    fallbacks: int = 0
    kept: int = 0
    skipped: int = 0
    bytes_saved: int = 0
    new_files: list[Path] = field(default_factory=list)

    def record(self, result: ReplacementResult) -> None:
        self.processed += 1
        self.bytes_saved += result.saved_bytes
        if result.outcome is ReplacementOutcome.REPLACED:
            self.replaced += 1
            return
        if result.outcome is ReplacementOutcome.FALLBACK_CREATED:
            self.fallbacks += 1
        else:
            self.kept += 1
        self.new_files.append(result.final_path)


PostRunHook = Callable[[RunSummary], None]


class ReencodeWorkflow:
    """Process the N largest eligible files of a library."""

    def __init__(
        self,
        cache_store: CacheStore,
        scanner: DirectoryScanner,
        selector: LargestFileSelector,
        prober: VideoProber,
        encoder: EncodeExecutor,
        replacer: ReplacementExecutor,
        encoding: EncodingConfig,
        post_run_hooks: Sequence[PostRunHook] = (),
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = cache_store
        self._scanner = scanner
        self._selector = selector
        self._prober = prober
        self._encoder = encoder
        self._replacer = replacer
        self._encoding = encoding
        self._post_run_hooks = list(post_run_hooks)
        self._logger = logger or logging.getLogger(__name__)

    def run(self, options: RunOptions) -> RunSummary:
        """Run up to ``options.count`` iterations.

        Returns:
            RunSummary of what was done.

        Raises:
            EncodeFailedError: If the encoder failed. The cache has been
                saved before this propagates.
        """
        summary = RunSummary(dry_run=options.dry_run)
        if options.dry_run:
            self._logger.info("DRY RUN MODE - no files or cache will be modified")

        cache = self._store.load()
        force_rescan = options.force_rescan
        # Paths not to select again during this run
        exclude: set[str] = set()

        for iteration in range(options.count):
            self._logger.info("Processing video %d of %d", iteration + 1, options.count)
            try:
                if force_rescan or not cache:
                    scanned = self._scanner.scan(options.root)
                    cache.clear()
                    cache.update(scanned)
                else:
                    self._logger.info(
                        "Using cache to find largest file. "
                        "Use --rescan to find new files."
                    )
                force_rescan = False

                selection = self._selector.select(cache, exclude)
                if selection is None:
                    self._logger.info("No more video files found to encode")
                    break

                self._process(selection, cache, options, summary, exclude)
            finally:
                if not options.dry_run:
                    self._persist(cache)

        self._log_summary(summary)
        self._run_post_hooks(summary)
        return summary

    def _process(
        self,
        selection: VideoSelection,
        cache: CacheIndex,
        options: RunOptions,
        summary: RunSummary,
        exclude: set[str],
    ) -> None:
        self._logger.info(
            "Selected %s (%s, codec: %s)",
            selection.path,
            format_mb(selection.size),
            selection.codec or "unknown",
        )
        plan = plan_encode(
            self._prober.get_framerate(Path(selection.path)), self._encoding
        )

        if options.dry_run:
            result = self._encoder.encode(selection, plan)
            self._simulate(selection, result, options.replace)
            summary.processed += 1
            exclude.add(selection.path)
            return

        _, temp_path = self._encoder.paths_for(selection)
        with TempOutputGuard(temp_path, self._logger):
            result = self._encoder.encode(selection, plan)
            if not result.success:
                raise EncodeFailedError(selection.path, result.returncode)

            try:
                replacement = self._replacer.apply(
                    selection,
                    result.temp_path,
                    result.output_path,
                    cache,
                    options.replace,
                )
            except TempArtifactMissingError as e:
                self._logger.error("%s. Skipping %s", e, selection.path)
                summary.skipped += 1
                exclude.add(selection.path)
                return
            except ReplacementFailedError as e:
                self._logger.error(
                    "Replacement failed, skipping file: %s (original restored: %s)",
                    e,
                    "yes" if e.restored else "NO",
                )
                summary.skipped += 1
                exclude.add(selection.path)
                return

        summary.record(replacement)

    def _simulate(
        self, selection: VideoSelection, result: EncodeResult, replace: bool
    ) -> None:
        simulated_size = int(selection.size * DRY_RUN_SIZE_RATIO)
        self._logger.info(
            "[DRY RUN] Estimated size: %s (%.2f%% reduction)",
            format_mb(simulated_size),
            size_reduction_percent(selection.size, simulated_size),
        )
        action = decide(
            selection.size,
            simulated_size,
            replace,
            self._encoding.min_size_reduction_percent,
        )
        if action is ReplacementAction.REPLACE:
            self._logger.info(
                "[DRY RUN] Would replace original file: %s", selection.path
            )
        else:
            self._logger.info(
                "[DRY RUN] Would create new file %s and preserve %s",
                result.output_path,
                selection.path,
            )

    def _persist(self, cache: CacheIndex) -> None:
        try:
            self._store.save(cache)
        except OSError as e:
            self._logger.error("Could not save cache to %s: %s", self._store.path, e)

    def _log_summary(self, summary: RunSummary) -> None:
        if summary.dry_run:
            self._logger.info(
                "DRY RUN COMPLETE: %d videos analyzed, no files were modified, "
                "no cache was updated",
                summary.processed,
            )
            return
        self._logger.info(
            "ENCODING COMPLETE: %d processed (%d replaced, %d fallback, %d kept), "
            "%d skipped, %s saved",
            summary.processed,
            summary.replaced,
            summary.fallbacks,
            summary.kept,
            summary.skipped,
            format_mb(summary.bytes_saved),
        )

    def _run_post_hooks(self, summary: RunSummary) -> None:
        for hook in self._post_run_hooks:
            try:
                hook(summary)
            except Exception as e:  # hooks are best-effort
                self._logger.warning("Post-run hook failed: %s", e)

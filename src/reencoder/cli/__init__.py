"""CLI entry point for the re-encoder."""

from __future__ import annotations

import dataclasses
import logging
import signal
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from reencoder.cache.store import CacheStore
from reencoder.cli.exit_codes import ExitCode
from reencoder.cli.progress import ClickScanProgress
from reencoder.config.loader import load_config
from reencoder.config.models import ReencoderConfig
from reencoder.exceptions import ConfigError, EncodeFailedError, ToolNotAvailableError
from reencoder.executor.encode import EncodeExecutor
from reencoder.executor.replace import ReplacementExecutor
from reencoder.introspector.ffprobe import FFprobeProber
from reencoder.logging import logging_session
from reencoder.scanner.orchestrator import DirectoryScanner
from reencoder.scanner.selector import LargestFileSelector
from reencoder.tools import find_tool, require_tool
from reencoder.workflow.notify import OpenFolderHook
from reencoder.workflow.processor import ReencodeWorkflow, RunOptions

logger = logging.getLogger(__name__)


@contextmanager
def _sigterm_as_exit() -> Iterator[None]:
    """Turn SIGTERM into SystemExit so cleanup handlers run."""

    def _handler(signum: int, frame: object) -> None:
        raise SystemExit(ExitCode.INTERRUPTED)

    try:
        previous = signal.signal(signal.SIGTERM, _handler)
    except ValueError:
        # Not in the main thread; leave signal handling alone
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


def _apply_cli_overrides(
    config: ReencoderConfig,
    *,
    directory: Path | None,
    gpu: bool | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> ReencoderConfig:
    library = config.library
    if directory is not None:
        library = dataclasses.replace(library, target_directory=directory)
    encoding = config.encoding
    if gpu is not None:
        encoding = dataclasses.replace(encoding, use_gpu=gpu)
    logging_config = config.logging
    overrides: dict[str, object] = {}
    if log_level is not None:
        overrides["level"] = log_level
    if log_file is not None:
        overrides["file"] = log_file
    if log_json:
        overrides["format"] = "json"
    if overrides:
        logging_config = dataclasses.replace(logging_config, **overrides)
    return dataclasses.replace(
        config, library=library, encoding=encoding, logging=logging_config
    )


def _log_startup_settings(
    config: ReencoderConfig, options: RunOptions, open_folder: bool
) -> None:
    encoding = config.encoding
    logger.info(
        "Re-encoder starting: directory=%s, videos=%d, replace=%s, rescan=%s, "
        "dry_run=%s",
        options.root,
        options.count,
        "yes" if options.replace else "no",
        "yes" if options.force_rescan else "no",
        "yes" if options.dry_run else "no",
    )
    logger.info(
        "Encoding: codec=%s, quality=%d, preset=%s, gpu=%s, "
        "min_size_reduction=%.1f%%, cache=%s, open_folder=%s",
        encoding.target_codec,
        encoding.crf,
        encoding.preset,
        "yes" if encoding.use_gpu else "no",
        encoding.min_size_reduction_percent,
        config.library.cache_file,
        "yes" if open_folder else "no",
    )


def build_workflow(
    config: ReencoderConfig,
    ffmpeg_path: Path | None,
    ffprobe_path: Path | None,
    dry_run: bool,
    open_folder: bool,
) -> ReencodeWorkflow:
    """Wire the run loop's collaborators from configuration."""
    encoding = config.encoding
    prober = FFprobeProber(ffprobe_path)
    return ReencodeWorkflow(
        cache_store=CacheStore(config.library.cache_file),
        scanner=DirectoryScanner(
            prober, config.library.video_extensions, progress=ClickScanProgress()
        ),
        selector=LargestFileSelector(prober, encoding.target_codec),
        prober=prober,
        encoder=EncodeExecutor(ffmpeg_path, encoding.target_codec, dry_run=dry_run),
        replacer=ReplacementExecutor(
            encoding.target_codec, encoding.min_size_reduction_percent
        ),
        encoding=encoding,
        post_run_hooks=[OpenFolderHook()] if open_folder and not dry_run else [],
    )


@click.command()
@click.version_option(package_name="reencoder")
@click.argument("count", type=int, required=False)
@click.option(
    "--replace/--no-replace",
    default=True,
    help="Replace originals when the size reduction meets the threshold "
    "(default), or always write a separate _h265 file.",
)
@click.option("--rescan", is_flag=True, help="Force a full filesystem rescan.")
@click.option(
    "--dryrun",
    "--dry-run",
    "dry_run",
    is_flag=True,
    help="Show what would be done without encoding or modifying files.",
)
@click.option(
    "--directory",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory to scan (default: TARGET_DIRECTORY or current directory).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="TOML config file (default: REENCODER_CONFIG).",
)
@click.option(
    "--gpu/--no-gpu",
    default=None,
    help="Use NVIDIA NVENC hardware encoding (default: USE_GPU).",
)
@click.option(
    "--open-folder",
    is_flag=True,
    help="Open folders containing new files in the file manager after the run.",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option("--log-json", is_flag=True, default=False, help="Use JSON log format.")
def main(
    count: int | None,
    replace: bool,
    rescan: bool,
    dry_run: bool,
    directory: Path | None,
    config_path: Path | None,
    gpu: bool | None,
    open_folder: bool,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Re-encode the COUNT largest non-target-codec videos in a library.

    COUNT defaults to NUM_FILES (or 1). Each file is encoded to a
    temporary output; the original is replaced only if the size shrinks
    by at least MIN_SIZE_REDUCTION percent, otherwise the result is kept
    as a separate file next to it.
    """
    try:
        config = load_config(config_path)
        config = _apply_cli_overrides(
            config,
            directory=directory,
            gpu=gpu,
            log_level=log_level,
            log_file=log_file,
            log_json=log_json,
        )
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)
    except ValueError as e:
        click.echo(f"Error: Invalid option: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    options = RunOptions(
        root=config.library.target_directory,
        count=max(1, count if count is not None else config.run.num_files),
        replace=replace,
        force_rescan=rescan,
        dry_run=dry_run,
    )

    with logging_session(config.logging), _sigterm_as_exit():
        _log_startup_settings(config, options, open_folder)

        if not options.root.is_dir():
            logger.error("Target directory not found: %s", options.root)
            sys.exit(ExitCode.TARGET_NOT_FOUND)

        try:
            ffmpeg_path = require_tool("ffmpeg", config.tools.ffmpeg)
        except ToolNotAvailableError as e:
            if not dry_run:
                logger.error("%s", e)
                sys.exit(ExitCode.TOOL_NOT_AVAILABLE)
            logger.warning("%s (continuing in dry-run mode)", e)
            ffmpeg_path = None
        ffprobe_path = find_tool("ffprobe", config.tools.ffprobe)

        workflow = build_workflow(
            config, ffmpeg_path, ffprobe_path, dry_run, open_folder
        )
        try:
            workflow.run(options)
        except EncodeFailedError as e:
            logger.error("%s. Check the ffmpeg output above for errors.", e)
            sys.exit(ExitCode.ENCODE_FAILED)
        except KeyboardInterrupt:
            logger.warning("Interrupted")
            sys.exit(ExitCode.INTERRUPTED)

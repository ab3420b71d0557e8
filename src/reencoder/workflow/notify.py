"""Post-run notification hooks."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import click

from reencoder.workflow.processor import RunSummary

logger = logging.getLogger(__name__)


class OpenFolderHook:
    """Open each directory that received a new file in the file manager."""

    def __init__(self, launch: Callable[[str], object] = click.launch) -> None:
        self._launch = launch

    def __call__(self, summary: RunSummary) -> None:
        opened: set[Path] = set()
        for path in summary.new_files:
            directory = path.parent.resolve()
            if directory in opened:
                continue
            opened.add(directory)
            logger.info("Opening %s", directory)
            self._launch(str(directory))

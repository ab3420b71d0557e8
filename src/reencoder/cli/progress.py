"""Terminal progress output for the filesystem scan."""

import click

_SPINNER = "|/-\\"


class ClickScanProgress:
    """Spinner on stderr while scanning; silent when stderr is not a TTY."""

    def __init__(self, enabled: bool | None = None) -> None:
        if enabled is None:
            enabled = click.get_text_stream("stderr").isatty()
        self.enabled = enabled
        self._ticks = 0

    def on_scan_progress(self, entries_seen: int, videos_found: int) -> None:
        if not self.enabled:
            return
        spinner = _SPINNER[self._ticks % len(_SPINNER)]
        self._ticks += 1
        click.echo(
            f"\rScanning... {spinner} {entries_seen} files, {videos_found} videos",
            nl=False,
            err=True,
        )

    def on_scan_complete(self, videos_found: int, elapsed_seconds: float) -> None:
        if not self.enabled:
            return
        click.echo(
            f"\rScanning... done: {videos_found} videos in {elapsed_seconds:.1f}s"
            + " " * 10,
            err=True,
        )

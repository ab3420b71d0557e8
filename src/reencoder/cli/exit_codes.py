"""Centralized exit codes for the CLI.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Configuration errors
    20-29: Target errors
    30-39: Tool/dependency errors
    40-49: Operation errors
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for the reencoder command."""

    SUCCESS = 0

    INTERRUPTED = 2

    CONFIG_ERROR = 11

    TARGET_NOT_FOUND = 20

    TOOL_NOT_AVAILABLE = 30

    ENCODE_FAILED = 40

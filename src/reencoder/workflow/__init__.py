"""Run loop orchestration."""

from reencoder.workflow.processor import (
    ReencodeWorkflow,
    RunOptions,
    RunSummary,
)

__all__ = ["ReencodeWorkflow", "RunOptions", "RunSummary"]

"""actiongraph Core Module - Execution engine components."""

from .runner import SignalRunner, create
from .executor import BranchExecutor, OutputPathError, accepts_completion
from .completion import (
    Completion,
    CompletionResult,
    SyncCompletion,
    AsyncCompletion,
    create_completion,
)
from .merge import merge_context

__all__ = [
    "SignalRunner",
    "create",
    "BranchExecutor",
    "OutputPathError",
    "accepts_completion",
    "Completion",
    "CompletionResult",
    "SyncCompletion",
    "AsyncCompletion",
    "create_completion",
    "merge_context",
]

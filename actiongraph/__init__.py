"""
actiongraph - Declarative Action Graph Orchestrator

actiongraph compiles a nested description of actions into an immutable
tree and runs it:
- Sequential steps run in order
- Nested lists are concurrent groups, joined before moving on
- A mapping after an action routes its named outputs to nested branches
- Every action merges its payload into one shared args mapping

Each run settles once: with a SignalRecord on success, or by raising the
error that stopped it.
"""

__version__ = "0.1.0"

from .core.runner import SignalRunner, create
from .core.executor import BranchExecutor, OutputPathError
from .core.completion import Completion, CompletionResult
from .core.merge import merge_context
from .compiler.graph_compiler import GraphCompiler, compile_graph
from .compiler.action_tree import ActionNode, ActionTree, ActionGraphError, GraphDefinitionError
from .compiler.registry import ActionRegistry, action
from .schemas.signal import SignalRecord, RunStatus
from .schemas.report import SignalReport, NodeReport

__all__ = [
    # Runner
    "create",
    "SignalRunner",
    "BranchExecutor",
    # Completion
    "Completion",
    "CompletionResult",
    "merge_context",
    # Compiler
    "GraphCompiler",
    "compile_graph",
    "ActionNode",
    "ActionTree",
    "ActionRegistry",
    "action",
    # Errors
    "ActionGraphError",
    "GraphDefinitionError",
    "OutputPathError",
    # Signal
    "SignalRecord",
    "RunStatus",
    "SignalReport",
    "NodeReport",
]

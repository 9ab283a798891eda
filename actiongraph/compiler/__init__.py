"""actiongraph Compiler Module - Graph compilation into action trees."""

from .graph_compiler import GraphCompiler, graph_compiler, compile_graph
from .action_tree import (
    ActionNode,
    ActionTree,
    ActionGraphError,
    GraphDefinitionError,
    iter_branch_nodes,
)
from .registry import ActionRegistry, action, action_display_name

__all__ = [
    "GraphCompiler",
    "graph_compiler",
    "compile_graph",
    "ActionNode",
    "ActionTree",
    "ActionGraphError",
    "GraphDefinitionError",
    "iter_branch_nodes",
    "ActionRegistry",
    "action",
    "action_display_name",
]

"""
actiongraph Action Tree

Structures produced by the graph compiler and walked by the executor.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Tuple, Union
from dataclasses import dataclass, field


# =============================================================================
# Errors
# =============================================================================

class ActionGraphError(Exception):
    """Base class for errors raised by actiongraph itself."""
    pass


class GraphDefinitionError(ActionGraphError):
    """An output entry of the graph definition is not a branch list."""

    def __init__(self, message: str, node_name: Optional[str] = None, output: Optional[str] = None):
        super().__init__(message)
        self.node_name = node_name
        self.output = output


# =============================================================================
# Action Node
# =============================================================================

PathItem = Union[int, str]


@dataclass(eq=False)
class ActionNode:
    """
    One compiled occurrence of an action in the graph.

    The structural fields are fixed at compile time. The remaining fields
    describe the latest run and are reset at the start of every run.
    """
    action_index: int
    name: str
    path: Tuple[PathItem, ...] = ()
    is_async: bool = False
    outputs: Optional[Mapping[str, Any]] = None

    # Per-run state
    args: Dict[str, Any] = field(default_factory=dict)
    output: Optional[Any] = None
    output_path: Optional[str] = None
    is_executing: bool = False
    has_executed: bool = False
    duration: float = 0

    @property
    def output_names(self) -> Tuple[str, ...]:
        """Declared output names, in definition order."""
        return tuple(self.outputs) if self.outputs else ()

    def reset(self) -> None:
        self.args = {}
        self.output = None
        self.output_path = None
        self.is_executing = False
        self.has_executed = False
        self.duration = 0

    def __repr__(self) -> str:
        kind = "async" if self.is_async else "sync"
        return f"ActionNode({self.name!r}, {kind}, path={list(self.path)})"


# A group member is a node, or a nested branch list run sequentially.
ConcurrentGroup = Tuple[Union[ActionNode, "BranchList"], ...]
BranchEntry = Union[ActionNode, ConcurrentGroup]
BranchList = Tuple[BranchEntry, ...]


def iter_branch_nodes(branches: BranchList) -> Iterator[ActionNode]:
    """Walk a branch list depth-first, descending into groups and outputs."""
    for entry in branches:
        members = (entry,) if isinstance(entry, ActionNode) else entry
        for node in members:
            if not isinstance(node, ActionNode):
                yield from iter_branch_nodes(node)
                continue
            yield node
            if node.outputs:
                for branch in node.outputs.values():
                    if isinstance(branch, tuple):
                        yield from iter_branch_nodes(branch)


# =============================================================================
# Action Tree
# =============================================================================

@dataclass
class ActionTree:
    """
    Compiled action graph.

    Holds every distinct action callable once (indexed by first occurrence)
    and the root branch list.
    """
    actions: Tuple[Callable[..., Any], ...] = ()
    names: Tuple[str, ...] = ()
    branches: BranchList = ()

    def iter_nodes(self) -> Iterator[ActionNode]:
        return iter_branch_nodes(self.branches)

    @property
    def node_count(self) -> int:
        """Number of nodes, including those in output sub-trees."""
        return sum(1 for _ in self.iter_nodes())

    def action_for(self, node: ActionNode) -> Callable[..., Any]:
        return self.actions[node.action_index]

    def reset(self) -> None:
        """Clear per-run state on every node."""
        for node in self.iter_nodes():
            node.reset()

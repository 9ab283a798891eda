"""
actiongraph Graph Compiler

Compiles a nested action graph literal into an ActionTree.

Graph literal rules:
- A callable (any non-sequence, non-mapping value) is an action.
- A nested list/tuple is a concurrent group. Each nesting level toggles
  between sequential and concurrent, starting sequential at the root.
- A mapping directly after an action declares that action's outputs:
  output name -> branch list. It is not a sibling of the action.
"""

from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
from types import MappingProxyType
import logging

from .action_tree import ActionNode, ActionTree, BranchList, PathItem
from .registry import ActionRegistry


logger = logging.getLogger(__name__)


def _is_branch_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


class GraphCompiler:
    """
    Compiles graph literals into ActionTree instances.

    Shapes are not validated here. Entries that cannot be invoked, or
    outputs that are not branch lists, fail when the run reaches them.
    """

    def compile(self, graph: Sequence[Any]) -> ActionTree:
        """Compile a graph literal. The literal itself is left untouched."""
        registry = ActionRegistry()
        branches = self._compile_branch_list(graph, (), False, registry)

        tree = ActionTree(
            actions=tuple(registry.actions),
            names=tuple(registry.names),
            branches=branches,
        )
        logger.debug(
            "Compiled action graph: %d nodes, %d distinct actions",
            tree.node_count,
            len(registry),
        )
        return tree

    def _compile_branch_list(
        self,
        items: Sequence[Any],
        path: Tuple[PathItem, ...],
        is_async: bool,
        registry: ActionRegistry,
    ) -> BranchList:
        entries: List[Any] = []
        # Last node that may still receive an outputs mapping
        owner: Optional[ActionNode] = None

        for item in items:
            if owner is not None and isinstance(item, Mapping):
                owner.outputs = self._compile_outputs(item, owner.path, registry)
                owner = None
                continue

            position = path + (len(entries),)

            if _is_branch_list(item):
                entries.append(
                    self._compile_branch_list(item, position, not is_async, registry)
                )
                owner = None
                continue

            index = registry.register(item)
            node = ActionNode(
                action_index=index,
                name=registry.name_of(index),
                path=position,
                is_async=is_async,
            )
            entries.append(node)
            owner = node

        return tuple(entries)

    def _compile_outputs(
        self,
        outputs: Mapping[str, Any],
        path: Tuple[PathItem, ...],
        registry: ActionRegistry,
    ) -> Mapping[str, Any]:
        compiled: Dict[str, Any] = {}
        for key, branch in outputs.items():
            if _is_branch_list(branch):
                compiled[key] = self._compile_branch_list(
                    branch, path + ("outputs", key), False, registry
                )
            else:
                compiled[key] = branch
        return MappingProxyType(compiled)


# Singleton instance
graph_compiler = GraphCompiler()


def compile_graph(graph: Sequence[Any]) -> ActionTree:
    """Compile a graph literal with the shared compiler."""
    return graph_compiler.compile(graph)

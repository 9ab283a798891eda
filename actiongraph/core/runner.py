"""
actiongraph Signal Runner

High-level API: compile a graph once, run it many times.

    run = create([
        load_user,
        [
            fetch_profile, {
                "success": [store_profile],
                "error": [report_error],
            },
            fetch_settings,
        ],
        finish,
    ])

    signal = await run(store, {"user_id": 1})
"""

from __future__ import annotations
from typing import Any, Mapping, Optional, Sequence
import asyncio

from ..compiler.action_tree import ActionTree
from ..compiler.graph_compiler import GraphCompiler, graph_compiler
from ..config import ExecutionSettings
from ..schemas.signal import SignalRecord
from .executor import BranchExecutor


class SignalRunner:
    """
    Callable produced by ``create``.

    The compiled tree is shared by every run: node state is reset at the
    start of each run and overwritten while it executes, so overlapping runs
    of one runner see each other's node state. The shared args and the
    returned SignalRecord are private to each run.
    """

    def __init__(
        self,
        graph: Sequence[Any],
        compiler: Optional[GraphCompiler] = None,
        settings: Optional[ExecutionSettings] = None,
    ):
        self.tree: ActionTree = (compiler or graph_compiler).compile(graph)
        self.last_signal: Optional[SignalRecord] = None
        self._settings = settings

    def __repr__(self) -> str:
        return f"SignalRunner(nodes={self.tree.node_count}, actions={list(self.tree.names)})"

    async def __call__(self, store: Any, args: Optional[Mapping[str, Any]] = None) -> SignalRecord:
        """
        Run the graph.

        Args:
            store: Opaque collaborator handed to every action
            args: Initial shared args (copied, never mutated)

        Returns:
            The SignalRecord of the run

        Raises:
            Whatever the first failing action (or output lookup) raised
        """
        self.tree.reset()
        signal = SignalRecord(args=dict(args or {}), branches=self.tree.branches)
        self.last_signal = signal

        executor = BranchExecutor(self.tree, store, signal, self._settings)
        return await executor.run()

    def run_sync(self, store: Any, args: Optional[Mapping[str, Any]] = None) -> SignalRecord:
        """Run the graph on a fresh event loop and block until it settles."""
        return asyncio.run(self(store, args))


def create(graph: Sequence[Any]) -> SignalRunner:
    """Compile ``graph`` and return a runner for it."""
    return SignalRunner(graph)

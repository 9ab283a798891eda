"""
actiongraph Branch Executor

Walks a compiled ActionTree for one run:
- Sequential entries run in order, each one fully settled (including the
  output branch it selected) before the next starts.
- Concurrent groups invoke every member, then wait for all member chains
  (completion, merge, selected output branch, async body) before advancing.
- Every completed node merges its payload into the shared args.
- The first failure anywhere rejects the run. Work already in flight is not
  cancelled; whatever it produces afterwards is discarded.
"""

from __future__ import annotations
from typing import Any, Callable, List, Optional, Set
from functools import partial
import asyncio
import inspect
import logging
import time

from ..compiler.action_tree import (
    ActionGraphError,
    ActionNode,
    ActionTree,
    BranchList,
    ConcurrentGroup,
    GraphDefinitionError,
)
from ..config import ExecutionSettings, get_config
from ..schemas.signal import RunStatus, SignalRecord
from .completion import (
    NO_RESULT,
    AsyncCompletion,
    CompletionResult,
    create_completion,
)
from .merge import merge_context


logger = logging.getLogger(__name__)


class OutputPathError(ActionGraphError):
    """An action completed with an output its node does not declare."""

    def __init__(self, node: ActionNode, output_path: str):
        available = node.output_names
        super().__init__(
            f"Action {node.name!r} at {list(node.path)} completed with output "
            f"{output_path!r}, declared outputs: {list(available)}"
        )
        self.node_name = node.name
        self.path = node.path
        self.output_path = output_path
        self.available = available


def accepts_completion(fn: Callable[..., Any]) -> bool:
    """Whether ``fn`` takes a third positional argument for its completion."""
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return True

    positional = 0
    for param in signature.parameters.values():
        if param.kind == param.VAR_POSITIONAL:
            return True
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            positional += 1
    return positional >= 3


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


class BranchExecutor:
    """Executes one run of an ActionTree against a store."""

    def __init__(
        self,
        tree: ActionTree,
        store: Any,
        signal: SignalRecord,
        settings: Optional[ExecutionSettings] = None,
    ):
        self._tree = tree
        self._store = store
        self._signal = signal

        settings = settings or get_config().execution
        self._trace = settings.trace_nodes
        self._snapshot_args = settings.snapshot_args
        self._log_failures = settings.log_failures

        self._outcome: Optional[asyncio.Future] = None
        self._started = 0.0
        # Strong references to tasks nobody else holds
        self._background: Set[asyncio.Future] = set()

    @property
    def signal(self) -> SignalRecord:
        return self._signal

    async def run(self) -> SignalRecord:
        """Drive the tree to completion; raises the first failure."""
        loop = asyncio.get_running_loop()
        self._outcome = loop.create_future()
        self._started = time.perf_counter()

        logger.info("Signal run %s started", self._signal.run_id)
        self._keep(loop.create_task(self._drive()))
        return await self._outcome

    # -------------------------------------------------------------------------
    # Run state
    # -------------------------------------------------------------------------

    async def _drive(self) -> None:
        try:
            await self._run_branch_list(self._tree.branches)
        except Exception as exc:
            self._reject(exc)
        else:
            self._resolve()

    def _settle(self, status: RunStatus) -> None:
        self._signal.duration = _elapsed_ms(self._started)
        self._signal.is_executing = False
        self._signal.status = status

    def _resolve(self) -> None:
        if self._signal.is_settled:
            return
        self._settle(RunStatus.RESOLVED)
        logger.info(
            "Signal run %s resolved in %.2fms",
            self._signal.run_id,
            self._signal.duration,
        )
        self._outcome.set_result(self._signal)

    def _reject(self, exc: BaseException) -> bool:
        """
        Reject the run with ``exc``.

        Returns True when ``exc`` is the error the run was rejected with, so
        callers keep propagating it and drop anything else.
        """
        if self._signal.is_settled:
            return self._signal.error is exc

        self._settle(RunStatus.REJECTED)
        self._signal.error = exc
        if self._log_failures:
            logger.error(
                "Signal run %s rejected: %s",
                self._signal.run_id,
                exc,
                exc_info=exc,
            )
        self._outcome.set_exception(exc)
        return True

    def _keep(self, task: asyncio.Future) -> asyncio.Future:
        self._background.add(task)
        task.add_done_callback(self._release)
        return task

    def _release(self, task: asyncio.Future) -> None:
        self._background.discard(task)
        # Failures of chains nobody awaits any more were already discarded
        # or surfaced through the outcome
        if not task.cancelled():
            task.exception()

    # -------------------------------------------------------------------------
    # Branch stepping
    # -------------------------------------------------------------------------

    async def _run_branch_list(self, branches: BranchList) -> None:
        for entry in branches:
            if self._signal.is_settled:
                return
            if isinstance(entry, ActionNode):
                await self._run_sequential(entry)
            else:
                await self._run_group(entry)

    async def _run_sequential(self, node: ActionNode) -> None:
        fn = self._tree.action_for(node)
        completion = create_completion(node, fn, concurrent=False)
        started = time.perf_counter()

        try:
            self._begin(node)
            returned = self._invoke(fn, completion)
            if inspect.isawaitable(returned):
                await returned
            result = completion._collect()
            if self._signal.is_settled:
                return
            self._complete(node, result, started)
            await self._follow_output(node, result)
        except Exception as exc:
            if not self._reject(exc):
                self._discard(node, exc)
                return
            raise

    async def _run_group(self, group: ConcurrentGroup) -> None:
        loop = asyncio.get_running_loop()
        chains: List[asyncio.Future] = []

        try:
            for member in group:
                if isinstance(member, ActionNode):
                    completion, started, body = self._dispatch(member)
                    chain = self._run_member(member, completion, started, body)
                else:
                    chain = self._run_branch_list(member)
                chains.append(self._keep(loop.create_task(chain)))
        except Exception as exc:
            # Members already dispatched keep running unobserved
            self._reject(exc)
            raise

        await asyncio.gather(*chains)

    def _dispatch(self, node: ActionNode):
        """
        Invoke a group member.

        Returns its completion, start time and, for awaitable bodies, the body
        task. The member chain waits on the completion and then on the body.
        """
        fn = self._tree.action_for(node)
        completion = create_completion(node, fn, concurrent=True)
        explicit = accepts_completion(fn)
        started = time.perf_counter()
        body: Optional[asyncio.Future] = None

        self._begin(node)
        returned = self._invoke(fn, completion, explicit)

        if inspect.isawaitable(returned):
            body = self._keep(asyncio.ensure_future(returned))
            body.add_done_callback(partial(self._on_body_done, node, completion, explicit))
        elif not explicit:
            completion._resolve(NO_RESULT)

        return completion, started, body

    def _on_body_done(
        self,
        node: ActionNode,
        completion: AsyncCompletion,
        explicit: bool,
        body: asyncio.Future,
    ) -> None:
        if body.cancelled():
            completion._fail(ActionGraphError("Action body was cancelled"))
            return
        exc = body.exception()
        if exc is not None:
            if completion._is_done():
                # Raised after completing: the member chain may already have
                # moved on, so the failure rejects the run directly
                if not self._reject(exc):
                    self._discard(node, exc)
            else:
                completion._fail(exc)
        elif not explicit:
            completion._resolve(NO_RESULT)

    async def _run_member(
        self,
        node: ActionNode,
        completion: AsyncCompletion,
        started: float,
        body: Optional[asyncio.Future] = None,
    ) -> None:
        try:
            result = await completion._wait()
            if self._signal.is_settled:
                logger.debug("Discarding result of %s, run already settled", node.name)
                return
            self._complete(node, result, started)
            await self._follow_output(node, result)
            if body is not None:
                # A body that fails after completing rejects from its callback
                await asyncio.wait({body})
        except Exception as exc:
            if not self._reject(exc):
                self._discard(node, exc)
                return
            raise

    # -------------------------------------------------------------------------
    # Node helpers
    # -------------------------------------------------------------------------

    def _invoke(self, fn: Callable[..., Any], completion, explicit: Optional[bool] = None) -> Any:
        if explicit is None:
            explicit = accepts_completion(fn)
        if explicit:
            return fn(self._signal.args, self._store, completion)
        return fn(self._signal.args, self._store)

    def _begin(self, node: ActionNode) -> None:
        node.is_executing = True
        node.args = dict(self._signal.args) if self._snapshot_args else {}
        if self._trace:
            logger.debug("Running %s at %s", node.name, list(node.path))

    def _complete(self, node: ActionNode, result: CompletionResult, started: float) -> None:
        merge_context(self._signal.args, result.payload)

        node.is_executing = False
        node.has_executed = True
        node.output = result.payload
        node.output_path = result.path
        node.duration = _elapsed_ms(started)

        if self._trace:
            logger.debug(
                "Completed %s at %s (output=%s, %.2fms)",
                node.name,
                list(node.path),
                result.path,
                node.duration,
            )

    async def _follow_output(self, node: ActionNode, result: CompletionResult) -> None:
        if result.path is None:
            return

        if not node.outputs or result.path not in node.outputs:
            raise OutputPathError(node, result.path)

        branch = node.outputs[result.path]
        if not isinstance(branch, tuple):
            raise GraphDefinitionError(
                f"Output {result.path!r} of action {node.name!r} is not a branch list",
                node_name=node.name,
                output=result.path,
            )

        await self._run_branch_list(branch)

    def _discard(self, node: ActionNode, exc: BaseException) -> None:
        logger.debug(
            "Discarding failure of %s after run %s settled: %r",
            node.name,
            self._signal.run_id,
            exc,
        )

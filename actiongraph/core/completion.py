"""
actiongraph Completion Descriptors

The completion descriptor is the third argument handed to an action. The
action calls it to report its payload and, optionally, which of its declared
outputs the run should continue with:

    def check_user(args, store, completion):
        if args.get("user"):
            completion.success({"checked": True})
        else:
            completion("missing")

    completion()                      # default output, no payload
    completion({"a": 1})              # default output with payload
    completion("error", {"a": 1})     # named output, leading string
    completion.output("error")        # named output, explicit
    completion.error({"a": 1})        # shortcut for declared outputs only
"""

from __future__ import annotations
from typing import Any, Optional, Tuple
from dataclasses import dataclass
import asyncio
import functools
import logging

from ..compiler.action_tree import ActionNode


logger = logging.getLogger(__name__)


# =============================================================================
# Completion Result
# =============================================================================

@dataclass(frozen=True)
class CompletionResult:
    """What an action reported: an optional output path and its payload."""
    path: Optional[str] = None
    payload: Optional[Any] = None
    named: bool = False

    @classmethod
    def default(cls, payload: Any = None, default_output: Optional[str] = None) -> "CompletionResult":
        return cls(path=default_output, payload=payload, named=False)

    @classmethod
    def named_output(cls, name: str, payload: Any = None) -> "CompletionResult":
        return cls(path=name, payload=payload, named=True)


NO_RESULT = CompletionResult()


# =============================================================================
# Completion Descriptors
# =============================================================================

class Completion:
    """
    Base completion descriptor bound to one node of one run.

    Declared output names are bound as instance attributes, so they shadow
    every method of the descriptor, ``complete`` and ``output`` included.
    The descriptor's own bookkeeping is kept under underscore names.
    """

    def __init__(self, node: ActionNode, default_output: Optional[str] = None):
        self._node = node
        self._default_output = default_output
        self._outputs: Tuple[str, ...] = node.output_names
        for name in self._outputs:
            if isinstance(name, str) and not name.startswith("_"):
                setattr(self, name, functools.partial(self._emit_named, name))

    def __call__(self, *args: Any) -> None:
        if args and isinstance(args[0], str):
            self._emit_named(*args)
        else:
            self._emit_default(*args)

    def complete(self, payload: Any = None) -> None:
        """Complete with the default output."""
        self._emit_default(payload)

    def output(self, name: str, payload: Any = None) -> None:
        """Complete with the named output."""
        self._emit_named(name, payload)

    def __getattr__(self, name: str):
        # Only reached for names that are neither methods nor declared outputs
        if name.startswith("_"):
            raise AttributeError(name)
        raise AttributeError(
            f"Action {self._node.name!r} has no output {name!r} "
            f"(declared: {', '.join(self._outputs) or 'none'})"
        )

    def _emit_default(self, payload: Any = None) -> None:
        self._record(CompletionResult.default(payload, self._default_output))

    def _emit_named(self, name: str, payload: Any = None) -> None:
        self._record(CompletionResult.named_output(name, payload))

    def _resolve(self, result: CompletionResult) -> None:
        """Record a prebuilt result."""
        self._record(result)

    def _record(self, result: CompletionResult) -> None:
        raise NotImplementedError


class SyncCompletion(Completion):
    """
    Completion for sequential nodes.

    The executor collects the result as soon as the action returns; the
    latest call made before that wins.
    """

    def __init__(self, node: ActionNode, default_output: Optional[str] = None):
        super().__init__(node, default_output)
        self._result: Optional[CompletionResult] = None
        self._collected = False

    def _record(self, result: CompletionResult) -> None:
        if self._collected:
            logger.debug("Ignoring late completion of sequential action %s", self._node.name)
            return
        self._result = result

    def _collect(self) -> CompletionResult:
        self._collected = True
        return self._result or NO_RESULT


class AsyncCompletion(Completion):
    """
    Completion for concurrent group members.

    Backed by a one-shot future: only the first call has any effect.
    """

    def __init__(
        self,
        node: ActionNode,
        default_output: Optional[str] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        super().__init__(node, default_output)
        loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future = loop.create_future()

    def _is_done(self) -> bool:
        return self._future.done()

    def _record(self, result: CompletionResult) -> None:
        if self._future.done():
            return
        self._future.set_result(result)

    def _fail(self, exc: BaseException) -> None:
        """Settle the completion with an error, if still pending."""
        if not self._future.done():
            self._future.set_exception(exc)

    async def _wait(self) -> CompletionResult:
        return await self._future


def create_completion(node: ActionNode, fn: Any, concurrent: bool) -> Completion:
    """Build the completion descriptor for one invocation of ``node``."""
    default_output = getattr(fn, "default_output", None)
    if concurrent:
        return AsyncCompletion(node, default_output)
    return SyncCompletion(node, default_output)

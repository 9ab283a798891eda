"""
actiongraph Action Registry

Deduplicates action callables by identity while a graph is compiled.
"""

from __future__ import annotations
from typing import Any, Callable, List, Optional
import functools


def action(name: Optional[str] = None, default_output: Optional[str] = None):
    """
    Decorator attaching graph metadata to an action function.

    Args:
        name: Display name used for the compiled nodes
        default_output: Output taken when the action completes without naming one
    """
    def decorate(fn: Callable[..., Any]) -> Callable[..., Any]:
        if name is not None:
            fn.action_name = name
        if default_output is not None:
            fn.default_output = default_output
        return fn
    return decorate


def action_display_name(fn: Any) -> str:
    """Resolve the display name of an action callable."""
    explicit = getattr(fn, "action_name", None)
    if explicit:
        return explicit

    name = getattr(fn, "__name__", None)
    if name:
        return name

    if isinstance(fn, functools.partial):
        return action_display_name(fn.func)

    return repr(fn)


class ActionRegistry:
    """
    Stable index of distinct action callables.

    Actions are compared by identity, so the same function object used in
    several places of one graph shares a single slot.
    """

    def __init__(self):
        self._actions: List[Callable[..., Any]] = []
        self._names: List[str] = []

    def register(self, fn: Callable[..., Any]) -> int:
        """Return the index of ``fn``, adding it on first sight."""
        for index, known in enumerate(self._actions):
            if known is fn:
                return index

        self._actions.append(fn)
        self._names.append(action_display_name(fn))
        return len(self._actions) - 1

    def name_of(self, index: int) -> str:
        return self._names[index]

    @property
    def actions(self) -> List[Callable[..., Any]]:
        return list(self._actions)

    @property
    def names(self) -> List[str]:
        return list(self._names)

    def __len__(self) -> int:
        return len(self._actions)

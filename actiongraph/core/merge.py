"""Shallow context merging."""

from __future__ import annotations
from typing import Any, Dict, Mapping, Optional


def merge_context(target: Dict[str, Any], source: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Copy every key of ``source`` onto ``target`` and return ``target``.

    Existing keys are overwritten, nothing is removed. A ``None`` source is
    a no-op. Non-mapping sources raise TypeError.
    """
    if source is None:
        return target
    if not isinstance(source, Mapping):
        raise TypeError(
            f"Action payload must be a mapping, got {type(source).__name__}"
        )
    for key in source:
        target[key] = source[key]
    return target

"""
actiongraph Signal Reports

Serializable views of a signal run, for debugging and introspection.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Union
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field

from ..compiler.action_tree import ActionNode
from .signal import RunStatus, SignalRecord


def to_jsonable(value: Any) -> Any:
    """Reduce arbitrary arg values to JSON-compatible data."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    return repr(value)


class EntryKind(str, Enum):
    """Kind of a branch list entry."""
    ACTION = "action"
    CONCURRENT = "concurrent"
    SEQUENCE = "sequence"


class EntryReport(BaseModel):
    """One branch entry: a node, a concurrent group or a nested sequence."""
    kind: EntryKind
    node: Optional["NodeReport"] = None
    entries: List["EntryReport"] = Field(default_factory=list)


class NodeReport(BaseModel):
    """State of a single action node after a run."""
    name: str
    path: List[Union[int, str]]
    is_async: bool = False
    is_executing: bool = False
    has_executed: bool = False
    output_path: Optional[str] = None
    duration: float = 0
    args: Dict[str, Any] = Field(default_factory=dict)
    output: Optional[Any] = None
    # None values mark outputs that are not branch lists
    outputs: Optional[Dict[str, Optional[List[EntryReport]]]] = None

    @classmethod
    def from_node(cls, node: ActionNode) -> "NodeReport":
        outputs = None
        if node.outputs is not None:
            outputs = {
                key: _entries(branch, concurrent=False) if isinstance(branch, tuple) else None
                for key, branch in node.outputs.items()
            }
        return cls(
            name=node.name,
            path=list(node.path),
            is_async=node.is_async,
            is_executing=node.is_executing,
            has_executed=node.has_executed,
            output_path=node.output_path,
            duration=node.duration,
            args=to_jsonable(node.args),
            output=to_jsonable(node.output),
            outputs=outputs,
        )


def _entries(items, concurrent: bool) -> List[EntryReport]:
    reports = []
    for item in items:
        if isinstance(item, ActionNode):
            reports.append(EntryReport(kind=EntryKind.ACTION, node=NodeReport.from_node(item)))
        elif concurrent:
            # Lists nested in a group run sequentially
            reports.append(EntryReport(kind=EntryKind.SEQUENCE, entries=_entries(item, False)))
        else:
            reports.append(EntryReport(kind=EntryKind.CONCURRENT, entries=_entries(item, True)))
    return reports


class SignalReport(BaseModel):
    """Serializable summary of a SignalRecord."""
    run_id: str
    status: RunStatus
    is_executing: bool
    duration: float
    started_at: datetime
    args: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None
    error_type: Optional[str] = None
    branches: List[EntryReport] = Field(default_factory=list)

    @classmethod
    def from_record(cls, record: SignalRecord) -> "SignalReport":
        return cls(
            run_id=record.run_id,
            status=record.status,
            is_executing=record.is_executing,
            duration=record.duration,
            started_at=record.started_at,
            args=to_jsonable(record.args),
            error=str(record.error) if record.error is not None else None,
            error_type=type(record.error).__name__ if record.error is not None else None,
            branches=_entries(record.branches, concurrent=False),
        )


EntryReport.model_rebuild()
NodeReport.model_rebuild()

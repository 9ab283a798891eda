"""
actiongraph Signal Schemas

Per-run metadata returned by a signal runner.
"""

from __future__ import annotations
from typing import Any, Dict, Iterator, Optional
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import uuid

from ..compiler.action_tree import ActionNode, BranchList, iter_branch_nodes


# =============================================================================
# Run Status
# =============================================================================

class RunStatus(str, Enum):
    """Status of a signal run."""
    RUNNING = "running"
    RESOLVED = "resolved"
    REJECTED = "rejected"


def new_run_id() -> str:
    return f"run_{uuid.uuid4().hex[:12]}"


# =============================================================================
# Signal Record
# =============================================================================

@dataclass
class SignalRecord:
    """
    Metadata of one signal run.

    ``args`` is the shared context every action merged into, ``branches`` the
    root branch list carrying each node's state for this run.
    """
    args: Dict[str, Any]
    branches: BranchList
    run_id: str = field(default_factory=new_run_id)
    started_at: datetime = field(default_factory=datetime.utcnow)
    is_executing: bool = True
    status: RunStatus = RunStatus.RUNNING
    duration: float = 0
    error: Optional[BaseException] = None

    @property
    def is_settled(self) -> bool:
        return self.status != RunStatus.RUNNING

    def iter_nodes(self) -> Iterator[ActionNode]:
        return iter_branch_nodes(self.branches)

    def executed_nodes(self):
        """Nodes that completed during this run, in tree order."""
        return [node for node in self.iter_nodes() if node.has_executed]

    def to_report(self):
        """Build a serializable report of this run."""
        from .report import SignalReport
        return SignalReport.from_record(self)

    def to_dict(self) -> Dict[str, Any]:
        return self.to_report().model_dump(mode="json")

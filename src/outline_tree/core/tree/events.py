"""Change notifications emitted by tree nodes."""

from __future__ import annotations

from enum import Enum
from typing import Callable, List, Optional

from pydantic import BaseModel, Field


class TreeEventKind(str, Enum):
    """What changed on the node that emitted the event."""

    CHILDREN_ADDED = "children_added"
    CHILDREN_REMOVED = "children_removed"
    META_UPDATED = "meta_updated"


class TreeEvent(BaseModel):
    """
    A single change on one node.

    ``node_id`` is the node whose children or meta changed, not the
    children themselves.
    """

    kind: TreeEventKind
    node_id: str
    child_ids: List[str] = Field(default_factory=list)
    index: Optional[int] = None  # insert position for add_child_by_index
    meta_keys: List[str] = Field(default_factory=list)

    def describe(self) -> str:
        """Human-readable description of this event."""
        if self.kind == TreeEventKind.META_UPDATED:
            return f"[{self.node_id}] meta updated: {', '.join(self.meta_keys)}"
        verb = "added" if self.kind == TreeEventKind.CHILDREN_ADDED else "removed"
        where = f" at {self.index}" if self.index is not None else ""
        return f"[{self.node_id}] children {verb}{where}: {', '.join(self.child_ids)}"


TreeListener = Callable[[TreeEvent], None]


__all__ = ["TreeEvent", "TreeEventKind", "TreeListener"]

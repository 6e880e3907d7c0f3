from __future__ import annotations

"""Errors raised by tree construction and structural edits."""

from typing import Iterable, Optional

from pydantic import ValidationError

from outline_tree.utils.error_formatting import format_id_list, format_validation_errors


class TreeError(Exception):
    """Base class for all tree errors."""


class DuplicateNodeIdError(TreeError, ValueError):
    """Raised when an attach would put two nodes with the same id in one tree."""

    def __init__(self, node_ids: Iterable[str]):
        self.node_ids = sorted(set(node_ids))
        super().__init__(f"Duplicate node id(s) in tree: {format_id_list(self.node_ids)}")


class TreeCycleError(TreeError, ValueError):
    """Raised when a node would be attached under itself or one of its descendants."""

    def __init__(self, node_id: str, target_id: str):
        self.node_id = node_id
        self.target_id = target_id
        super().__init__(f"Cannot attach '{node_id}' under '{target_id}': '{target_id}' is inside its subtree")


class InvalidMetaError(TreeError, ValueError):
    """Raised when meta uses a key reserved for the JSON projection."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Meta key '{key}' is reserved")


class TreeBuildError(TreeError):
    """Wraps failures while converting a JSON document into nodes."""

    def __init__(self, message: str, *, node_id: Optional[str] = None, cause: Exception | None = None):
        self.message = message
        self.node_id = node_id
        self.cause = cause
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        base = self.message
        if self.node_id:
            base = f"{base} (node '{self.node_id}')"
        if isinstance(self.cause, ValidationError):
            return f"{base}: {format_validation_errors(self.cause.errors())}"
        if self.cause:
            return f"{base}: {self.cause}"
        return base

    def __str__(self) -> str:
        return self._build_message()


__all__ = [
    "DuplicateNodeIdError",
    "InvalidMetaError",
    "TreeBuildError",
    "TreeCycleError",
    "TreeError",
]

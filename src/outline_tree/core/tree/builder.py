"""
TreeBuilder: converts a nested JSON mapping into a TreeNode tree.

Input shape (recursive)::

    {"id": "A", "name": "root", "children": [{"name": "child"}]}

- ``id`` is optional; missing or empty ids come from the id generator
- ``children`` is optional; missing or null means no children
- every other key is meta, passed through the meta handler

The input is walked depth-first in pre-order with ``map_tree``: a node is
created (and its generator/handler called) before any of its children,
and its converted children are attached with ``add_children`` once their
own subtrees are complete.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from outline_tree.core.tree.errors import TreeBuildError
from outline_tree.core.tree.models import TreeNode, describe_tree
from outline_tree.core.tree.traversal import map_tree
from outline_tree.utils.logging import log_calls

logger = logging.getLogger(__name__)

IdGenerator = Callable[[Mapping[str, Any]], str]
MetaHandler = Callable[[Dict[str, Any]], Mapping[str, Any]]


def default_id_gen(node: Mapping[str, Any]) -> str:
    """Random decimal string id; ``node`` is unused."""
    return str(uuid.uuid4().int)


def identity_meta(meta: Dict[str, Any]) -> Dict[str, Any]:
    return meta


class BuildOptions(BaseModel):
    """Pluggable behaviour for TreeBuilder."""

    id_gen_fn: IdGenerator = Field(default=default_id_gen)
    meta_handler: MetaHandler = Field(default=identity_meta)


class RawNodeSpec(BaseModel):
    """Shape of one input node; unknown keys are kept as meta."""

    id: Optional[str] = None
    children: Optional[List[Dict[str, Any]]] = Field(default=None)

    model_config = ConfigDict(extra="allow")

    def extract_meta(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class TreeBuilder:
    """Builds TreeNode trees from JSON mappings."""

    def __init__(
        self,
        options: Optional[BuildOptions] = None,
        *,
        id_gen_fn: Optional[IdGenerator] = None,
        meta_handler: Optional[MetaHandler] = None,
    ):
        overrides: Dict[str, Any] = {}
        if id_gen_fn is not None:
            overrides["id_gen_fn"] = id_gen_fn
        if meta_handler is not None:
            overrides["meta_handler"] = meta_handler
        base = options or BuildOptions()
        self.options = base.model_copy(update=overrides) if overrides else base

    @log_calls(summarize=describe_tree)
    def build(self, data: Mapping[str, Any]) -> TreeNode:
        """
        Convert ``data`` into a fully linked tree.

        Args:
            data: Root mapping; it is not modified

        Returns:
            The root TreeNode

        Raises:
            TreeBuildError: An input node has the wrong shape, or a
                generator/handler returned an unusable value
            DuplicateNodeIdError: Two input nodes share an id
        """
        if not isinstance(data, Mapping):
            raise TreeBuildError(f"Tree input must be a mapping, got {type(data).__name__}")

        root = dict(data)
        if root.get("children") is None:
            root["children"] = []

        return map_tree(root, self._create_node, _raw_children, _attach_children)

    def _create_node(self, raw: Mapping[str, Any]) -> TreeNode:
        try:
            spec = RawNodeSpec.model_validate(raw)
        except ValidationError as exc:
            raise TreeBuildError("Invalid tree node", node_id=_peek_id(raw), cause=exc) from exc

        node_id = spec.id or self._generate_id(raw)
        node = TreeNode(id=node_id)
        node.set_meta(self._handle_meta(node_id, spec.extract_meta()))
        return node

    def _generate_id(self, raw: Mapping[str, Any]) -> str:
        node_id = self.options.id_gen_fn(raw)
        if not isinstance(node_id, str) or not node_id:
            raise TreeBuildError(f"Id generator must return a non-empty string, got {node_id!r}")
        return node_id

    def _handle_meta(self, node_id: str, meta: Dict[str, Any]) -> Mapping[str, Any]:
        handled = self.options.meta_handler(meta)
        if not isinstance(handled, Mapping):
            raise TreeBuildError(
                f"Meta handler must return a mapping, got {type(handled).__name__}",
                node_id=node_id,
            )
        return handled


def build_tree(
    data: Mapping[str, Any],
    *,
    id_gen_fn: Optional[IdGenerator] = None,
    meta_handler: Optional[MetaHandler] = None,
) -> TreeNode:
    """Build a tree from ``data`` with optional id generator and meta handler."""
    return TreeBuilder(id_gen_fn=id_gen_fn, meta_handler=meta_handler).build(data)


def _raw_children(raw: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    return raw.get("children") or []


def _attach_children(parent: TreeNode, children: List[TreeNode]) -> None:
    parent.add_children(children)


def _peek_id(raw: Any) -> Optional[str]:
    if isinstance(raw, Mapping):
        node_id = raw.get("id")
        if isinstance(node_id, str):
            return node_id
    return None


__all__ = [
    "BuildOptions",
    "IdGenerator",
    "MetaHandler",
    "RawNodeSpec",
    "TreeBuilder",
    "build_tree",
    "default_id_gen",
    "identity_meta",
]

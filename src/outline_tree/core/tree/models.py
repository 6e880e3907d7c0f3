"""
Tree data models.

These models hold the editable outline tree:
- TreeNode: an identified node with a meta payload and ordered children
- NodeStore: the flat id index shared by every node of one tree

Architecture:
-------------
Nodes never hold direct references to each other. Each node keeps its
parent id and an ordered list of child ids, and resolves them through the
NodeStore of the tree it currently belongs to. Every tree has exactly one
store, so "is this id already used in this tree" is a dict lookup.

A freshly constructed node is the root of a store holding only itself.
Attaching a node moves its whole subtree into the receiving tree's store;
detaching moves the subtree out into a new store rooted at the detached
node.

    A                        A            E
    ├── B     add_children   ├── B        └── F
    │   └── D  ----------->  │   └── D
    └── C       (E, F)       ├── C
                             └── E
                                 └── F
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, Field, PrivateAttr, field_validator

from outline_tree.core.tree.errors import DuplicateNodeIdError, InvalidMetaError, TreeCycleError
from outline_tree.core.tree.events import TreeEvent, TreeEventKind, TreeListener
from outline_tree.core.tree.traversal import TraverseMode, map_tree, traverse

logger = logging.getLogger(__name__)

# Keys owned by the JSON projection; meta must not shadow them
RESERVED_META_KEYS = frozenset({"id", "children"})


class TreeNode(BaseModel):
    """
    A node in an outline tree.

    ``id`` is fixed at construction and unique within the tree. ``meta`` is
    the node's JSON-compatible payload. Parent and children links are only
    changed by ``add_children``, ``add_child_by_index`` and
    ``remove_children``.
    """

    id: str = Field(min_length=1, frozen=True)
    meta: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"validate_assignment": True}

    _store: Optional[NodeStore] = PrivateAttr(default=None)
    _parent_id: Optional[str] = PrivateAttr(default=None)
    _children_ids: List[str] = PrivateAttr(default_factory=list)
    _listeners: List[TreeListener] = PrivateAttr(default_factory=list)

    def model_post_init(self, __context: Any) -> None:
        store = NodeStore(root_id=self.id)
        store.admit([self])

    @field_validator("meta")
    @classmethod
    def validate_meta_keys(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        """Reject meta keys reserved for the JSON projection."""
        reserved = sorted(RESERVED_META_KEYS.intersection(v))
        if reserved:
            raise ValueError(f"meta key(s) reserved: {', '.join(reserved)}")
        return v

    # Nodes are entities: two nodes are equal only if they are the same node
    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    # =========================================================================
    # Structure
    # =========================================================================

    @property
    def store(self) -> NodeStore:
        """The id index of the tree this node currently belongs to."""
        return self._store

    @property
    def parent_id(self) -> Optional[str]:
        return self._parent_id

    @property
    def parent(self) -> Optional[TreeNode]:
        """The parent node, or None for a root."""
        if self._parent_id is None:
            return None
        return self._store.get(self._parent_id)

    @property
    def children(self) -> List[TreeNode]:
        """Direct children in order. The list is a copy."""
        return [self._store.nodes[child_id] for child_id in self._children_ids]

    @property
    def children_ids(self) -> List[str]:
        """Ids of the direct children, in child order."""
        return list(self._children_ids)

    @property
    def is_root(self) -> bool:
        return self._parent_id is None

    @property
    def root(self) -> TreeNode:
        """The topmost ancestor (self for a root)."""
        return self._store.root

    @property
    def all_nodes(self) -> List[TreeNode]:
        """Every node of this subtree in pre-order, starting with self."""
        nodes: List[TreeNode] = []
        traverse(self, nodes.append, _get_children)
        return nodes

    @property
    def tree_json(self) -> Dict[str, Any]:
        """
        Plain nested JSON for this subtree.

        Each node becomes ``{"id": ..., **meta, "children": [...]}``;
        ``children`` is present even when empty.
        """
        return map_tree(self, _node_to_json, _get_children, _attach_json)

    # =========================================================================
    # Queries
    # =========================================================================

    def find_node_by_id(
        self,
        node_id: str,
        filter_keys: Union[str, Sequence[str], None] = None,
    ) -> Union[TreeNode, Dict[str, Any], None]:
        """
        Breadth-first search of this subtree (self included).

        Args:
            node_id: Id to look for; falsy ids return None without searching
            filter_keys: Attribute name(s) to project from the matched node

        Returns:
            The matched node, a dict of the requested attributes when
            ``filter_keys`` is given, or None when nothing matches
        """
        logger.debug("[find_node_by_id] searching %s under %s, filter_keys=%s", node_id, self.id, filter_keys)
        if not node_id:
            return None

        found = traverse(
            self,
            lambda node: node.id == node_id,
            _get_children,
            TraverseMode.BFS,
            early_exit=True,
        )
        if found is None:
            return None

        keys = _as_list(filter_keys) if filter_keys else []
        if keys:
            return {key: getattr(found, key) for key in keys if not key.startswith("_") and hasattr(found, key)}
        return found

    def index_of_child(self, node_id: str) -> int:
        """Position of the direct child with ``node_id``, or -1."""
        if not node_id:
            return -1
        try:
            return self._children_ids.index(node_id)
        except ValueError:
            return -1

    # =========================================================================
    # Meta
    # =========================================================================

    def set_meta(self, meta: Mapping[str, Any]) -> None:
        """
        Replace the whole meta mapping.

        The emitted event lists the keys of both the old and the new
        mapping, old keys first.
        """
        new_meta = dict(meta)
        changed_keys = list(dict.fromkeys([*(self.meta or {}), *new_meta]))
        self._write_meta(new_meta, changed_keys)

    def upsert_meta(self, key: str, value: Any) -> None:
        """Set one meta key, keeping every other key."""
        meta = dict(self.meta or {})
        meta[key] = value
        self._write_meta(meta, [key])

    def _write_meta(self, meta: Dict[str, Any], changed_keys: List[str]) -> None:
        for key in meta:
            if key in RESERVED_META_KEYS:
                raise InvalidMetaError(key)
        self.meta = meta
        self._emit(TreeEvent(kind=TreeEventKind.META_UPDATED, node_id=self.id, meta_keys=changed_keys))

    # =========================================================================
    # Child Management
    # =========================================================================

    def add_children(self, node_or_nodes: Union[TreeNode, Sequence[TreeNode]]) -> None:
        """
        Append one node or a list of nodes as direct children, in order.

        A node that already has a parent is moved here.

        Raises:
            TreeCycleError: A node is self or one of self's ancestors
            DuplicateNodeIdError: A node's subtree reuses ids of this tree
        """
        added: List[str] = []
        try:
            for node in _as_list(node_or_nodes):
                self._check_attachable(node)
                _detach_from_parent(node)
                self._attach(node, None)
                added.append(node.id)
        finally:
            # Nodes attached before a failing one stay attached and are reported
            if added:
                self._emit(TreeEvent(kind=TreeEventKind.CHILDREN_ADDED, node_id=self.id, child_ids=added))

    def add_child_by_index(self, node: TreeNode, target_index: Union[int, str, None] = None) -> None:
        """
        Insert a single node among direct children.

        Behaves like ``list.insert``: the node lands before the child
        currently at ``target_index``; an index at or past the end appends.
        Without children, or without an index, the node is appended. When
        the node is moved from this same parent the index applies to the
        child list after its removal.

        Raises:
            ValueError: ``target_index`` is not numeric (nothing is changed)
        """
        index = None
        if target_index is not None and self._children_ids:
            index = _coerce_index(target_index)
        self._check_attachable(node)
        _detach_from_parent(node)

        if not self._children_ids:
            self.add_children(node)
            return

        self._attach(node, len(self._children_ids) if index is None else index)
        self._emit(
            TreeEvent(
                kind=TreeEventKind.CHILDREN_ADDED,
                node_id=self.id,
                child_ids=[node.id],
                index=self._children_ids.index(node.id),
            )
        )

    def remove_children(self, id_or_ids: Union[str, Sequence[str]]) -> None:
        """
        Detach direct children by id.

        Ids that are not direct children are ignored. Detached nodes keep
        their own subtree and become roots of a new standalone tree.
        """
        ids = _as_list(id_or_ids)
        logger.debug("[remove_children] %d children before, removing %s", len(self._children_ids), ids)

        # Remove from the highest index down so earlier indexes stay valid
        target_indexes = sorted({self.index_of_child(node_id) for node_id in ids}, reverse=True)
        removed: List[str] = []
        for index in target_indexes:
            if index == -1:
                continue
            removed.append(self._release(index).id)

        logger.debug("[remove_children] %d children after: %s", len(self._children_ids), self._children_ids)
        if removed:
            removed.reverse()
            self._emit(TreeEvent(kind=TreeEventKind.CHILDREN_REMOVED, node_id=self.id, child_ids=removed))

    def _check_attachable(self, node: TreeNode) -> None:
        if not isinstance(node, TreeNode):
            raise TypeError(f"Expected TreeNode, got {type(node).__name__}")

        ancestor: Optional[TreeNode] = self
        while ancestor is not None:
            if ancestor is node:
                raise TreeCycleError(node.id, self.id)
            ancestor = ancestor.parent

        if node._store is not self._store:
            clashes = [n.id for n in _subtree(node) if n.id in self._store]
            if clashes:
                raise DuplicateNodeIdError(clashes)

    def _attach(self, node: TreeNode, index: Optional[int]) -> None:
        if node._store is not self._store:
            subtree = _subtree(node)
            logger.debug("[attach] moving %d node(s) of %s into tree %s", len(subtree), node.id, self._store.root_id)
            node._store.evict(subtree)
            self._store.admit(subtree)

        node._parent_id = self.id
        if index is None:
            self._children_ids.append(node.id)
        else:
            self._children_ids.insert(index, node.id)

    def _release(self, index: int) -> TreeNode:
        child = self._store.nodes[self._children_ids.pop(index)]
        child._parent_id = None

        subtree = child.all_nodes
        self._store.evict(subtree)
        NodeStore(root_id=child.id).admit(subtree)
        return child

    # =========================================================================
    # Change Notification
    # =========================================================================

    def subscribe(self, listener: TreeListener) -> Callable[[], None]:
        """
        Register ``listener`` for changes on this node.

        Returns:
            A callable that unsubscribes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: TreeEvent) -> None:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("[emit] %s to %d listener(s)", event.describe(), len(self._listeners))
        for listener in list(self._listeners):
            listener(event)


class NodeStore(BaseModel):
    """
    Flat id index for one tree.

    Every node of the tree is registered under its id, so lookups and
    uniqueness checks never walk the structure.
    """

    root_id: str
    nodes: Dict[str, TreeNode] = Field(default_factory=dict)

    @property
    def root(self) -> Optional[TreeNode]:
        return self.nodes.get(self.root_id)

    def get(self, node_id: str) -> Optional[TreeNode]:
        """Get a node anywhere in the tree by id."""
        return self.nodes.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def admit(self, nodes: Iterable[TreeNode]) -> None:
        """Register nodes in this tree and point them at this store."""
        nodes = list(nodes)
        clashes = []
        for node in nodes:
            existing = self.nodes.get(node.id)
            if existing is not None and existing is not node:
                clashes.append(node.id)
        if clashes:
            raise DuplicateNodeIdError(clashes)

        for node in nodes:
            self.nodes[node.id] = node
            node._store = self

    def evict(self, nodes: Iterable[TreeNode]) -> None:
        """Drop nodes from this tree's index."""
        for node in nodes:
            self.nodes.pop(node.id, None)


def describe_tree(node: TreeNode) -> str:
    """One-line summary of a node and the tree it belongs to."""
    return f"TreeNode(id={node.id!r}, children={len(node.children_ids)}, tree_size={len(node.store)})"


def _get_children(node: TreeNode) -> List[TreeNode]:
    return node.children


def _node_to_json(node: TreeNode) -> Dict[str, Any]:
    data: Dict[str, Any] = {"id": node.id}
    data.update(copy.deepcopy(node.meta))
    return data


def _attach_json(data: Dict[str, Any], children: List[Dict[str, Any]]) -> None:
    data["children"] = children


def _subtree(node: TreeNode) -> List[TreeNode]:
    # A store's root owns every node in it, so no walk is needed
    if node._store.root_id == node.id:
        return list(node._store.nodes.values())
    return node.all_nodes


def _detach_from_parent(node: TreeNode) -> None:
    parent = node.parent
    if parent is not None:
        parent.remove_children(node.id)


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _coerce_index(value: Union[int, str]) -> int:
    if isinstance(value, str):
        return int(float(value))
    return int(value)


__all__ = ["NodeStore", "RESERVED_META_KEYS", "TreeNode", "describe_tree"]

"""
Outline tree module.

Provides an editable tree of identified nodes and its JSON conversion.

Components:
- TreeNode: Node with meta payload, ordered children and structural edits
- NodeStore: Flat id index shared by the nodes of one tree
- TreeBuilder: Builds a TreeNode tree from a nested JSON mapping
- TreeEvent: Change notification delivered to node subscribers

Example:
    from outline_tree.core.tree import build_tree

    root = build_tree({"id": "A", "name": "root", "children": [{"id": "B"}]})
    root.find_node_by_id("B").upsert_meta("name", "B-Node")
    root.tree_json
"""

from outline_tree.core.tree.builder import BuildOptions, TreeBuilder, build_tree, default_id_gen
from outline_tree.core.tree.errors import (
    DuplicateNodeIdError,
    InvalidMetaError,
    TreeBuildError,
    TreeCycleError,
    TreeError,
)
from outline_tree.core.tree.events import TreeEvent, TreeEventKind
from outline_tree.core.tree.models import NodeStore, TreeNode
from outline_tree.core.tree.traversal import TraverseMode, map_tree, traverse, walk

__all__ = [
    "TreeNode",
    "NodeStore",
    "TreeBuilder",
    "BuildOptions",
    "build_tree",
    "default_id_gen",
    "TreeEvent",
    "TreeEventKind",
    "TraverseMode",
    "map_tree",
    "traverse",
    "walk",
    "TreeError",
    "TreeBuildError",
    "TreeCycleError",
    "DuplicateNodeIdError",
    "InvalidMetaError",
]

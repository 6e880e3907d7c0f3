"""
Generic traversal primitives for node trees.

These functions work on any node type; callers supply ``get_children`` to
describe the structure:
- walk: lazy DFS pre-order or BFS iteration
- traverse: visit nodes, optionally stopping at the first truthy result
- map_tree: depth-first pre-order transform with child aggregation

Used by TreeNode for its search and flattening views, and by TreeBuilder
to turn raw JSON mappings into nodes.
"""

from __future__ import annotations

from collections import deque
from enum import Enum
from typing import Callable, Iterable, Iterator, List, Optional, Tuple, TypeVar

N = TypeVar("N")
M = TypeVar("M")

ChildrenFn = Callable[[N], Iterable[N]]

_EXHAUSTED = object()


class TraverseMode(str, Enum):
    """Order in which nodes are visited."""

    DFS = "dfs"  # pre-order: parent, then each child's subtree
    BFS = "bfs"  # level by level


def walk(root: N, get_children: ChildrenFn, mode: TraverseMode = TraverseMode.DFS) -> Iterator[N]:
    """
    Yield every node of the tree rooted at ``root``.

    Siblings are always visited in the order ``get_children`` returns them.
    Children are only requested when the walk reaches their parent, so
    closing the generator early leaves the rest of the tree untouched.
    """
    if mode == TraverseMode.BFS:
        queue = deque([root])
        while queue:
            node = queue.popleft()
            yield node
            queue.extend(get_children(node))
        return

    stack: List[N] = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(list(get_children(node))))


def traverse(
    root: N,
    visit: Callable[[N], object],
    get_children: ChildrenFn,
    mode: TraverseMode = TraverseMode.DFS,
    early_exit: bool = False,
) -> Optional[N]:
    """
    Call ``visit`` on each node in ``mode`` order.

    Args:
        root: Node to start from (visited first)
        visit: Callback for each node
        get_children: Returns the ordered children of a node
        mode: DFS pre-order or BFS
        early_exit: Stop at the first node for which ``visit`` returns truthy

    Returns:
        The node the walk stopped at, or None if it ran to completion
    """
    for node in walk(root, get_children, mode):
        if visit(node) and early_exit:
            return node
    return None


def map_tree(
    root: N,
    transform: Callable[[N], M],
    get_children: ChildrenFn,
    attach: Optional[Callable[[M, List[M]], None]] = None,
) -> M:
    """
    Map a tree depth-first, pre-order.

    ``transform`` runs on a node before any of its descendants. Once all of
    a node's children are mapped (with their own subtrees complete),
    ``attach(mapped_node, mapped_children)`` aggregates them.

    Uses an explicit stack, so tree depth is not bounded by the
    interpreter's recursion limit.
    """
    mapped_root = transform(root)
    # Each frame: (remaining children, mapped node, its mapped children so far)
    stack: List[Tuple[Iterator[N], M, List[M]]] = [(iter(get_children(root)), mapped_root, [])]
    while stack:
        pending, mapped, mapped_children = stack[-1]
        child = next(pending, _EXHAUSTED)
        if child is _EXHAUSTED:
            stack.pop()
            if attach is not None:
                attach(mapped, mapped_children)
            if stack:
                stack[-1][2].append(mapped)
            continue
        stack.append((iter(get_children(child)), transform(child), []))
    return mapped_root


__all__ = ["TraverseMode", "map_tree", "traverse", "walk"]

"""
Shared fixtures for outline tree tests.
"""

import pytest

from outline_tree.core.tree import TreeNode, build_tree


def _sample_json():
    """A -> (B -> D), C"""
    return {
        "id": "A",
        "name": "rootNode",
        "children": [
            {
                "id": "B",
                "name": "B-Node",
                "children": [{"id": "D", "name": "D-Node"}],
            },
            {"id": "C", "name": "C-Node"},
        ],
    }


@pytest.fixture
def sample_json():
    """Fresh copy of the sample input for each test."""
    return _sample_json()


@pytest.fixture
def tree(sample_json) -> TreeNode:
    """Root of the sample tree."""
    return build_tree(sample_json)


def assert_links_consistent(root: TreeNode) -> None:
    """Every child points back at its parent, and every node is indexed in the root's store."""
    for node in root.all_nodes:
        assert root.store.get(node.id) is node
        assert node.store is root.store
        for child in node.children:
            assert child.parent is node
        if node.parent is not None:
            assert node in node.parent.children
    assert len(root.store) == len(root.all_nodes)


@pytest.fixture
def check_links():
    """The link consistency assertion, for use inside tests."""
    return assert_links_consistent

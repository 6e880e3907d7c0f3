"""Tests for node-level change notification."""

import logging

import pytest

from outline_tree.core.tree import (
    DuplicateNodeIdError,
    TreeCycleError,
    TreeEvent,
    TreeEventKind,
    TreeNode,
)


@pytest.fixture
def recorder():
    class Recorder:
        def __init__(self):
            self.events = []

        def __call__(self, event):
            self.events.append(event)

    return Recorder()


class TestEvents:
    def test_add_children_event(self, tree, recorder):
        tree.subscribe(recorder)
        tree.add_children([TreeNode(id="E"), TreeNode(id="F")])

        assert recorder.events == [
            TreeEvent(kind=TreeEventKind.CHILDREN_ADDED, node_id="A", child_ids=["E", "F"]),
        ]

    @pytest.mark.parametrize(
        "make_bad_node, error",
        [
            (lambda tree: TreeNode(id="C"), DuplicateNodeIdError),
            (lambda tree: tree, TreeCycleError),
        ],
    )
    def test_partial_add_reports_attached_nodes(self, tree, recorder, make_bad_node, error):
        """Nodes attached before a failing one are still announced."""
        tree.subscribe(recorder)

        with pytest.raises(error):
            tree.add_children([TreeNode(id="E"), TreeNode(id="F"), make_bad_node(tree)])

        assert tree.children_ids == ["B", "C", "E", "F"]
        assert recorder.events == [
            TreeEvent(kind=TreeEventKind.CHILDREN_ADDED, node_id="A", child_ids=["E", "F"]),
        ]

    def test_failed_first_node_is_silent(self, tree, recorder):
        tree.subscribe(recorder)
        with pytest.raises(DuplicateNodeIdError):
            tree.add_children([TreeNode(id="B"), TreeNode(id="E")])

        assert tree.children_ids == ["B", "C"]
        assert recorder.events == []

    def test_set_meta_reports_dropped_keys(self, recorder):
        node = TreeNode(id="A", meta={"name": "x", "icon": "folder"})
        node.subscribe(recorder)
        node.set_meta({"name": "y"})

        (event,) = recorder.events
        assert event.meta_keys == ["name", "icon"]

    def test_events_logged_at_debug(self, tree, caplog):
        with caplog.at_level(logging.DEBUG, logger="outline_tree.core.tree.models"):
            tree.upsert_meta("icon", "folder")

        assert "[A] meta updated: icon" in caplog.text

    def test_add_empty_list_is_silent(self, tree, recorder):
        tree.subscribe(recorder)
        tree.add_children([])
        assert recorder.events == []

    def test_add_child_by_index_event(self, tree, recorder):
        tree.subscribe(recorder)
        tree.add_child_by_index(TreeNode(id="E"), 1)

        (event,) = recorder.events
        assert event.kind == TreeEventKind.CHILDREN_ADDED
        assert event.child_ids == ["E"]
        assert event.index == 1

    def test_remove_children_event(self, tree, recorder):
        tree.subscribe(recorder)
        tree.remove_children(["C", "nope", "B"])

        (event,) = recorder.events
        assert event.kind == TreeEventKind.CHILDREN_REMOVED
        assert event.child_ids == ["B", "C"]

    def test_remove_nothing_is_silent(self, tree, recorder):
        tree.subscribe(recorder)
        tree.remove_children("nope")
        assert recorder.events == []

    def test_move_notifies_old_parent(self, tree, recorder):
        node_b = tree.find_node_by_id("B")
        node_c = tree.find_node_by_id("C")
        node_b.subscribe(recorder)
        node_c.subscribe(recorder)

        node_c.add_children(tree.find_node_by_id("D"))

        assert [(e.kind, e.node_id, e.child_ids) for e in recorder.events] == [
            (TreeEventKind.CHILDREN_REMOVED, "B", ["D"]),
            (TreeEventKind.CHILDREN_ADDED, "C", ["D"]),
        ]

    def test_meta_events(self, tree, recorder):
        tree.subscribe(recorder)
        tree.upsert_meta("icon", "folder")
        tree.set_meta({"name": "x", "open": False})

        # set_meta reports the keys it dropped as well as the ones it wrote
        assert [e.meta_keys for e in recorder.events] == [["icon"], ["name", "icon", "open"]]
        assert all(e.kind == TreeEventKind.META_UPDATED for e in recorder.events)

    def test_events_are_node_level(self, tree, recorder):
        """A change deep in the tree does not reach the root's listeners."""
        tree.subscribe(recorder)
        tree.find_node_by_id("D").upsert_meta("open", True)
        assert recorder.events == []

    def test_unsubscribe(self, tree, recorder):
        unsubscribe = tree.subscribe(recorder)
        unsubscribe()
        unsubscribe()  # second call is harmless

        tree.upsert_meta("icon", "folder")
        assert recorder.events == []

    def test_listener_errors_propagate(self, tree):
        def boom(event):
            raise RuntimeError("listener failed")

        tree.subscribe(boom)
        with pytest.raises(RuntimeError):
            tree.upsert_meta("icon", "folder")
        # the change itself was applied before notification
        assert tree.meta["icon"] == "folder"

    def test_describe(self):
        added = TreeEvent(kind=TreeEventKind.CHILDREN_ADDED, node_id="A", child_ids=["B"], index=0)
        meta = TreeEvent(kind=TreeEventKind.META_UPDATED, node_id="A", meta_keys=["name"])

        assert added.describe() == "[A] children added at 0: B"
        assert meta.describe() == "[A] meta updated: name"

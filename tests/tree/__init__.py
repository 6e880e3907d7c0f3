"""
Tests for the outline tree.

Test organization:
- test_models.py: TreeNode views, queries, meta and child management
- test_moves.py: Reparenting, cycle and duplicate id policies, NodeStore
- test_traversal.py: walk / traverse / map_tree primitives
- test_builder.py: TreeBuilder JSON conversion and JSON round trip
- test_events.py: Change notification
"""

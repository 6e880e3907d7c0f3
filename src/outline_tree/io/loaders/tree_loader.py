from __future__ import annotations
import glob
import os
from typing import Any, Dict, Optional

import yaml

from outline_tree.core.tree.builder import IdGenerator, MetaHandler, TreeBuilder
from outline_tree.core.tree.errors import TreeError
from outline_tree.core.tree.models import TreeNode, describe_tree
from outline_tree.io.loaders.errors import LoaderError
from outline_tree.utils.logging import log_calls

TREE_FILE_PATTERNS = ("*.json", "*.yaml", "*.yml")


def _read_document(path: str) -> Any:
    # JSON documents are valid YAML, so one parser covers both formats
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


@log_calls(summarize=describe_tree)
def load_tree(
    path: str,
    *,
    id_gen_fn: Optional[IdGenerator] = None,
    meta_handler: Optional[MetaHandler] = None,
) -> TreeNode:
    """Load one tree document (JSON or YAML) and build it.

    Expected format:
    id: A
    name: rootNode
    children:
      - id: B
        name: B-Node
    """
    if not os.path.isfile(path):
        raise LoaderError(path, "Tree file not found")
    try:
        data = _read_document(path)
    except yaml.YAMLError as exc:
        raise LoaderError(path, "Malformed tree document", cause=exc) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise LoaderError(path, "Unreadable tree document", cause=exc) from exc
    if not isinstance(data, dict):
        raise LoaderError(path, f"Tree document must be a mapping, got {type(data).__name__}")

    builder = TreeBuilder(id_gen_fn=id_gen_fn, meta_handler=meta_handler)
    try:
        return builder.build(data)
    except TreeError as exc:
        raise LoaderError(path, "Failed to build tree", cause=exc) from exc


def load_trees(
    path: str,
    *,
    id_gen_fn: Optional[IdGenerator] = None,
    meta_handler: Optional[MetaHandler] = None,
) -> Dict[str, TreeNode]:
    """Load every tree document under a directory, keyed by relative path without suffix."""
    if not os.path.exists(path):
        return {}
    files = sorted(
        {fp for pattern in TREE_FILE_PATTERNS for fp in glob.glob(os.path.join(path, "**", pattern), recursive=True)}
    )
    trees: Dict[str, TreeNode] = {}
    for fp in files:
        name = os.path.splitext(os.path.relpath(fp, path))[0].replace(os.sep, "/")
        if name in trees:
            raise LoaderError(fp, f"Tree '{name}' is defined more than once")
        trees[name] = load_tree(fp, id_gen_fn=id_gen_fn, meta_handler=meta_handler)
    return trees

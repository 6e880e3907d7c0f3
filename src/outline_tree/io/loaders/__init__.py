from .errors import LoaderError
from .tree_loader import load_tree, load_trees

__all__ = ["load_tree", "load_trees", "LoaderError"]

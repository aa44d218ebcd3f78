from .errors import DimensionMismatchError, InvalidArgumentError, NullArgumentError
from .kdtree import MAX_DEPTH, MIN_BUCKET_SIZE, KdTree, build
from .kdtree_node import KdTreeNode

__all__ = [
    "DimensionMismatchError",
    "InvalidArgumentError",
    "KdTree",
    "KdTreeNode",
    "MAX_DEPTH",
    "MIN_BUCKET_SIZE",
    "NullArgumentError",
    "build",
]

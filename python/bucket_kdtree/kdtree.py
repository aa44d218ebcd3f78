from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

import numpy as np
import numpy.typing as npt

from .errors import DimensionMismatchError, InvalidArgumentError, NullArgumentError
from .kdtree_node import KdTreeNode

logger = logging.getLogger(__name__)

MAX_DEPTH = 10
MIN_BUCKET_SIZE = 3


def euclidean_distances(points: npt.NDArray, query_point: npt.NDArray) -> npt.NDArray:
    """Euclidean distance from each row of points to query_point.

    Rows are scaled by their largest absolute difference before taking the
    norm, so large but finite coordinates don't overflow to inf.
    """
    diffs = points - query_point
    scale = np.max(np.abs(diffs), axis=1)
    safe_scale = np.where(scale > 0, scale, 1.0)
    return np.linalg.norm(diffs / safe_scale[:, np.newaxis], axis=1) * scale


class KdTree:
    """Static bucket k-d tree for nearest neighbor search.

    Each split sends points whose axis value is strictly greater than the
    median to the left child and the rest, the median included, to the right
    child. Only leaves hold points.
    """

    def __init__(
        self,
        points: Sequence,
        max_depth: int = MAX_DEPTH,
        min_bucket_size: int = MIN_BUCKET_SIZE,
    ):
        if points is None:
            raise NullArgumentError("points")
        if len(points) == 0:
            raise InvalidArgumentError(
                "Points list cannot be empty. (Parameter 'points')"
            )
        if max_depth < 1:
            raise InvalidArgumentError(f"max_depth must be >= 1, got {max_depth}")
        if min_bucket_size < 0:
            raise InvalidArgumentError(
                f"min_bucket_size must be >= 0, got {min_bucket_size}"
            )

        self._max_depth = max_depth
        self._min_bucket_size = min_bucket_size

        self._points = list(points)
        self._dim = KdTree._check_dimensions(self._points)

        try:
            self._coords = np.asarray(self._points, dtype=np.float64).reshape(
                len(self._points), self._dim
            )
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(
                "Point coordinates must be convertible to float"
            ) from e

        self._root = KdTreeNode(
            data=list(self._points),
            indices=np.arange(len(self._points), dtype=np.intp),
        )
        self._build(self._root, 1)

        logger.debug(
            "Built KdTree with %d points of dimension %d into %d leaves",
            len(self._points),
            self._dim,
            sum(1 for _ in self.leaves()),
        )

    @staticmethod
    def create(
        points: Sequence,
        max_depth: int = MAX_DEPTH,
        min_bucket_size: int = MIN_BUCKET_SIZE,
    ) -> KdTree:
        return KdTree(points, max_depth, min_bucket_size)

    @staticmethod
    def _check_dimensions(points: list) -> int:
        """Check that every point has the same number of coordinates.

        Returns:
            Dimension shared by all points.
        """
        try:
            dim = len(points[0])
            for i, point in enumerate(points):
                if len(point) != dim:
                    raise InvalidArgumentError(
                        f"Point at index {i} has {len(point)} dimensions, "
                        f"but the first point has {dim} dimensions"
                    )
        except TypeError as e:
            raise InvalidArgumentError(
                "Each point must be a sequence of coordinates"
            ) from e

        if dim == 0:
            raise InvalidArgumentError("Points must have at least one dimension")

        return dim

    @property
    def root(self) -> KdTreeNode:
        return self._root

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def min_bucket_size(self) -> int:
        return self._min_bucket_size

    @property
    def dim(self) -> int:
        return self._dim

    def __len__(self) -> int:
        return len(self._points)

    def _build(self, node: KdTreeNode, depth: int):
        if depth >= self._max_depth or len(node.data) <= self._min_bucket_size:
            return

        # Select axis based on depth so that axis cycles through all dimensions.
        axis = depth % self._dim

        # Sort a copy of the axis values and choose median as pivot.
        values = self._coords[node.indices, axis]
        median = np.sort(values)[len(values) // 2]

        is_greater = values > median
        node.axis = axis
        node.split_value = float(median)
        node.left_child = KdTree._make_child(node, is_greater)
        node.right_child = KdTree._make_child(node, ~is_greater)

        # Points now live in the children.
        node.data = []
        node.indices = np.empty(0, dtype=np.intp)

        self._build(node.left_child, depth + 1)
        self._build(node.right_child, depth + 1)

    @staticmethod
    def _make_child(parent: KdTreeNode, mask: npt.NDArray[np.bool_]) -> KdTreeNode:
        return KdTreeNode(
            data=[parent.data[i] for i in np.flatnonzero(mask)],
            indices=parent.indices[mask],
        )

    def leaves(self) -> Iterator[KdTreeNode]:
        """Yield leaf nodes from left to right."""
        stack = [self._root]
        while stack:
            node = stack.pop()
            if node.is_leaf:
                yield node
            else:
                stack.append(node.right_child)
                stack.append(node.left_child)

    def nearest(self, query: Sequence):
        """Find the stored point closest to query.

        Args:
            query: Point with the same dimension as the tree points.

        Returns:
            The nearest point, as it was passed to the constructor.
        """
        point, _ = self.nearest_with_distance(query)
        return point

    def nearest_with_distance(self, query: Sequence) -> tuple:
        """Find the stored point closest to query and the Euclidean distance to it."""
        if query is None:
            raise NullArgumentError("query")

        try:
            query_point = np.asarray(query, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(
                "Query coordinates must be convertible to float"
            ) from e

        query_dim = query_point.shape[0] if query_point.ndim == 1 else query_point.size
        if query_point.ndim != 1 or query_dim != self._dim:
            raise DimensionMismatchError(query_dim, self._dim)

        # Seed with the first point.
        first_dist = float(euclidean_distances(self._coords[:1], query_point)[0])
        best_index, best_dist = self._search_nearest_neighbor(
            query_point, self._root, 0, first_dist
        )
        return self._points[best_index], best_dist

    def _search_nearest_neighbor(
        self,
        query_point: npt.NDArray,
        node: KdTreeNode,
        best_index: int,
        best_dist: float,
    ) -> tuple[int, float]:
        if len(node.indices) > 0:
            dists = euclidean_distances(self._coords[node.indices], query_point)
            i = int(np.argmin(dists))
            if dists[i] < best_dist:
                best_index, best_dist = int(node.indices[i]), float(dists[i])

        if node.is_leaf:
            return best_index, best_dist

        delta = query_point[node.axis] - node.split_value

        # Right holds values <= median, left holds values > median.
        if delta < 0:
            near, far = node.right_child, node.left_child
        else:
            near, far = node.left_child, node.right_child

        best_index, best_dist = self._search_nearest_neighbor(
            query_point, near, best_index, best_dist
        )
        if abs(delta) < best_dist:
            best_index, best_dist = self._search_nearest_neighbor(
                query_point, far, best_index, best_dist
            )

        return best_index, best_dist


def build(
    points: Sequence,
    max_depth: int = MAX_DEPTH,
    min_bucket_size: int = MIN_BUCKET_SIZE,
) -> KdTree:
    """Build a KdTree over points."""
    return KdTree.create(points, max_depth, min_bucket_size)

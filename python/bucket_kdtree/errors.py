from __future__ import annotations


class InvalidArgumentError(ValueError):
    """Raised when an argument has an unacceptable value."""


class NullArgumentError(InvalidArgumentError):
    """Raised when a required argument is None."""

    def __init__(self, name: str):
        super().__init__(f"Value cannot be null. (Parameter '{name}')")
        self.name = name


class DimensionMismatchError(InvalidArgumentError):
    """Raised when a query point's dimensionality differs from the tree's."""

    def __init__(self, query_dim: int, tree_dim: int):
        super().__init__(
            f"Query point has {query_dim} dimensions, "
            f"but tree points have {tree_dim} dimensions"
        )
        self.query_dim = query_dim
        self.tree_dim = tree_dim

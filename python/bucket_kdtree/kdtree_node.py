from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt


@dataclass
class KdTreeNode:
    # Points owned by this node. Emptied once the node is split.
    data: list = field(default_factory=list)
    # Row positions of data in the owning tree's coordinate matrix.
    indices: npt.NDArray[np.intp] = field(
        default_factory=lambda: np.empty(0, dtype=np.intp)
    )
    axis: int = -1
    split_value: float | None = None
    left_child: KdTreeNode | None = None
    right_child: KdTreeNode | None = None

    @property
    def is_leaf(self) -> bool:
        return self.left_child is None and self.right_child is None

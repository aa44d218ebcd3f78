from __future__ import annotations

import argparse
import sys

import matplotlib.patches as patches
import matplotlib.pyplot as plt
import numpy as np
import numpy.typing as npt
import rerun as rr

from .errors import InvalidArgumentError
from .kdtree import MAX_DEPTH, MIN_BUCKET_SIZE, KdTree


def brute_force_nearest_distance(points: npt.NDArray, query: npt.NDArray) -> float:
    """Return the smallest distance between query and points by linear scan."""
    return float(np.min(np.linalg.norm(points - query, axis=1)))


def plot_with_matplotlib(
    kdtree: KdTree,
    query: npt.NDArray,
    nearest: npt.NDArray,
    dist: float,
):
    ax = plt.axes()

    # Points in the same bucket share a color.
    for leaf in kdtree.leaves():
        if not leaf.data:
            continue
        bucket = np.array(leaf.data)
        plt.scatter(bucket[:, 0], bucket[:, 1])

    c = patches.Circle(
        (query[0], query[1]),
        radius=dist,
        edgecolor="green",
        facecolor="none",
        linewidth=1,
    )
    ax.add_patch(c)

    plt.scatter(query[0], query[1], marker="x", color="black")
    plt.scatter(nearest[0], nearest[1], facecolors="none", edgecolors="red", s=120)
    plt.axis("square")
    plt.show()


def log_with_rerun(kdtree: KdTree, query: npt.NDArray, nearest: npt.NDArray):
    rr.init("bucket_kdtree", spawn=True)

    for i, leaf in enumerate(kdtree.leaves()):
        if not leaf.data:
            continue
        rr.log(f"buckets/{i}", rr.Points2D(np.array(leaf.data), radii=0.02))

    rr.log("query", rr.Points2D(query.reshape(1, 2), colors=[255, 0, 0], radii=0.03))
    rr.log(
        "nearest",
        rr.Points2D(nearest.reshape(1, 2), colors=[0, 255, 0], radii=0.03),
    )


def main(argv: list[str] | None = None) -> int:
    # NOTE:
    # e.g.
    # python3 -m bucket_kdtree.main -n 1000 -d 2 -q 0.5 0.5 --plot
    parser = argparse.ArgumentParser(
        description="Build a bucket k-d tree over random points and query it"
    )
    parser.add_argument(
        "-n", "--num_points", type=int, help="Number of points", default=100
    )
    parser.add_argument(
        "-d", "--dimensions", type=int, help="Dimension of points", default=2
    )
    parser.add_argument(
        "-s", "--seed", type=int, help="Seed for random points", default=19
    )
    parser.add_argument(
        "-q",
        "--query",
        nargs="*",
        type=float,
        help="Query point. If not specified, random point is used",
        default=None,
    )
    parser.add_argument(
        "--max_depth", type=int, help="Max depth of tree", default=MAX_DEPTH
    )
    parser.add_argument(
        "--min_bucket_size",
        type=int,
        help="Nodes with this many points or fewer are not split",
        default=MIN_BUCKET_SIZE,
    )
    parser.add_argument(
        "--plot", action="store_true", help="Show with matplotlib", default=False
    )
    parser.add_argument(
        "--rerun", action="store_true", help="Show with rerun", default=False
    )
    args = parser.parse_args(argv)

    if args.num_points < 0:
        parser.error(f"--num_points must be >= 0, got {args.num_points}")
    if args.dimensions < 0:
        parser.error(f"--dimensions must be >= 0, got {args.dimensions}")

    rng = np.random.default_rng(args.seed)
    points = rng.random((args.num_points, args.dimensions))

    if args.query:
        query = np.array(args.query)
    else:
        query = rng.random(args.dimensions)

    try:
        kdtree = KdTree(points, args.max_depth, args.min_bucket_size)
        nearest, dist = kdtree.nearest_with_distance(query)
    except InvalidArgumentError as e:
        print(e)
        return 1

    expected_dist = brute_force_nearest_distance(points, query)

    print(f"Query point: {query.tolist()}")
    print(f"Nearest point: {np.asarray(nearest).tolist()}")
    print(f"Distance: {dist}")
    print(f"Brute force distance: {expected_dist}")

    if abs(dist - expected_dist) > 1e-10:
        print("Nearest point doesn't match brute force result")
        return 1

    if args.plot or args.rerun:
        if args.dimensions != 2:
            print("Only 2 dimensional points can be shown")
        elif args.plot:
            plot_with_matplotlib(kdtree, query, nearest, dist)
        else:
            log_with_rerun(kdtree, query, nearest)

    return 0


if __name__ == "__main__":
    sys.exit(main())

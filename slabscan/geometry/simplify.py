"""
Polygon simplification (Douglas-Peucker).

Reduces a point sequence so that no removed point deviates more than
``epsilon`` from the simplified line, keeping the first and last point.

The recursion is run as an explicit worklist of index ranges, so large
contours cannot overflow the call stack. Each range carries its depth; a
range reached at ``max_depth`` is kept as-is.
"""

import logging
import math
from typing import List, Sequence, TypeVar

from ..core.points import Point

logger = logging.getLogger(__name__)

P = TypeVar('P', bound=Point)

DEFAULT_MAX_DEPTH = 100


def perpendicular_distance(point: Point, line_start: Point, line_end: Point) -> float:
    """
    Distance from point to the infinite line through line_start and line_end.

    A zero-length line degrades to point-to-point distance.
    """
    dx = line_end.x - line_start.x
    dy = line_end.y - line_start.y

    if dx == 0 and dy == 0:
        return point.distance_to(line_start)

    norm = math.hypot(dx, dy)
    return abs(dy * point.x - dx * point.y +
               line_end.x * line_start.y - line_end.y * line_start.x) / norm


def simplify_polygon(points: Sequence[P], epsilon: float,
                     max_depth: int = DEFAULT_MAX_DEPTH) -> List[P]:
    """
    Simplify a polyline using the Douglas-Peucker algorithm.

    Args:
        points: Ordered points
        epsilon: Maximum allowed deviation, in the same units as the points
        max_depth: Subdivision depth after which a range is left unsimplified

    Returns:
        New list with a subset of the input points, in input order
    """
    if not math.isfinite(epsilon) or epsilon < 0:
        raise ValueError(f"epsilon must be finite and >= 0, got {epsilon}")

    n = len(points)
    if n <= 2:
        return list(points)

    keep = [False] * n
    keep[0] = True
    keep[n - 1] = True

    # (first index, last index, depth)
    stack = [(0, n - 1, 0)]
    depth_limited = 0

    while stack:
        first, last, depth = stack.pop()
        if last - first < 2:
            continue

        if depth >= max_depth:
            for i in range(first, last + 1):
                keep[i] = True
            depth_limited += 1
            continue

        start = points[first]
        end = points[last]
        max_distance = 0.0
        index = first
        for i in range(first + 1, last):
            distance = perpendicular_distance(points[i], start, end)
            if distance > max_distance:
                max_distance = distance
                index = i

        if max_distance > epsilon:
            keep[index] = True
            stack.append((index, last, depth + 1))
            stack.append((first, index, depth + 1))

    if depth_limited:
        logger.debug(f"Simplification hit max depth {max_depth} in {depth_limited} range(s)")

    return [p for p, k in zip(points, keep) if k]

"""
Contour offsetting.

Two strategies:

- offset_polygon: translates every edge along its normal. Corners are not
  joined, so the output has small gaps at convex corners and overlaps at
  concave ones. This is the baseline geometry downstream path generation
  expects.
- offset_polygon_miter: also intersects neighbouring offset edges (miter
  join, beveled past the miter limit). Must be requested explicitly.

Sign convention: the normal is the direction vector rotated +90 degrees,
i.e. the left side of the direction of travel in a Y-up frame. For a
counter-clockwise polygon in machine space a positive distance moves the
edges inward, a negative distance outward.
"""

import logging
import math
from typing import List, Sequence, Tuple, TypeVar

from ..core.points import Point

logger = logging.getLogger(__name__)

P = TypeVar('P', bound=Point)

MIN_SEGMENT_LENGTH = 0.001


def _closed(points: Sequence[P]) -> List[P]:
    """Return the points with the first point repeated at the end if needed."""
    is_closed = (points[0].x == points[-1].x and points[0].y == points[-1].y)
    return list(points) if is_closed else list(points) + [points[0]]


def _edge_normals(points: Sequence[P],
                  min_segment_length: float) -> List[Tuple[P, P, float, float]]:
    """
    Collect the non-degenerate edges of a closed polygon.

    Returns:
        List of (start, end, normal_x, normal_y) with a unit normal
    """
    working = _closed(points)
    edges = []
    skipped = 0
    for current, nxt in zip(working, working[1:]):
        dx = nxt.x - current.x
        dy = nxt.y - current.y
        length = math.hypot(dx, dy)
        if length < min_segment_length:
            skipped += 1
            continue
        # Unit direction rotated 90 degrees
        edges.append((current, nxt, -dy / length, dx / length))

    if skipped:
        logger.debug(f"Offset skipped {skipped} edge(s) shorter than {min_segment_length}")
    return edges


def offset_polygon(points: Sequence[P], distance: float,
                   min_segment_length: float = MIN_SEGMENT_LENGTH) -> List[P]:
    """
    Offset a contour by moving each edge along its normal.

    Each edge contributes its two translated endpoints; the result is closed
    by repeating its first point. Corner intersections are not resolved.

    Args:
        points: Polygon (closed or not)
        distance: Signed offset distance, positive = left of travel
        min_segment_length: Shorter edges are skipped

    Returns:
        Offset polygon, or the input unchanged if it is degenerate
    """
    if len(points) < 3:
        return list(points)

    edges = _edge_normals(points, min_segment_length)
    if not edges:
        return list(points)

    cls = type(points[0])
    result = []
    for start, end, nx, ny in edges:
        result.append(cls(start.x + nx * distance, start.y + ny * distance))
        result.append(cls(end.x + nx * distance, end.y + ny * distance))

    result.append(result[0])
    return result


def offset_polygon_miter(points: Sequence[P], distance: float,
                         miter_limit: float = 4.0,
                         min_segment_length: float = MIN_SEGMENT_LENGTH) -> List[P]:
    """
    Offset a contour with mitered corners.

    Neighbouring offset edges are extended or trimmed to their intersection.
    When the miter would reach further than ``miter_limit * |distance|`` from
    the original corner, or the edges are anti-parallel, the corner is
    beveled instead (both translated endpoints are kept).

    Self-intersections caused by offsetting inward past narrow features are
    not removed.

    Args:
        points: Polygon (closed or not)
        distance: Signed offset distance, positive = left of travel
        miter_limit: Maximum miter length as a multiple of |distance|
        min_segment_length: Shorter edges are skipped

    Returns:
        Offset polygon closed by repeating its first point
    """
    if len(points) < 3:
        return list(points)

    edges = _edge_normals(points, min_segment_length)
    if len(edges) < 2:
        return offset_polygon(points, distance, min_segment_length)

    cls = type(points[0])
    max_miter = miter_limit * abs(distance)
    result = []

    for k, (start, _, nx, ny) in enumerate(edges):
        _, prev_end, pnx, pny = edges[k - 1]

        # Offset line of the previous edge and of this edge
        p1x, p1y = prev_end.x + pnx * distance, prev_end.y + pny * distance
        p2x, p2y = start.x + nx * distance, start.y + ny * distance
        d1x, d1y = pny, -pnx      # previous direction (normal rotated back)
        d2x, d2y = ny, -nx

        det = d1x * d2y - d1y * d2x
        if abs(det) < 1e-12:
            if d1x * d2x + d1y * d2y > 0:
                # Straight continuation
                result.append(cls(p2x, p2y))
            else:
                result.append(cls(p1x, p1y))
                result.append(cls(p2x, p2y))
            continue

        t = ((p2x - p1x) * d2y - (p2y - p1y) * d2x) / det
        mx = p1x + t * d1x
        my = p1y + t * d1y

        if math.hypot(mx - start.x, my - start.y) > max_miter:
            result.append(cls(p1x, p1y))
            result.append(cls(p2x, p2y))
        else:
            result.append(cls(mx, my))

    result.append(result[0])
    return result

"""
Polygon measurement and containment.

A polygon is an ordered sequence of points, treated as implicitly closed
(the last point connects back to the first). All functions accept points of
any coordinate space and return points of the same class as their input.

Degenerate input never raises: too few points give a neutral result.
"""

import logging
import math
from typing import List, Sequence, TypeVar

import numpy as np
from scipy.spatial import ConvexHull, QhullError

from ..core.points import Point, BoundingBox

logger = logging.getLogger(__name__)

P = TypeVar('P', bound=Point)


def signed_polygon_area(points: Sequence[Point]) -> float:
    """
    Shoelace area with sign.

    Positive for counter-clockwise winding in a Y-up frame (which is
    clockwise as seen on screen in image space).
    """
    n = len(points)
    if n < 3:
        return 0.0

    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += points[i].x * points[j].y
        area -= points[j].x * points[i].y
    return area / 2.0


def polygon_area(points: Sequence[Point]) -> float:
    """Calculate the area of a polygon (Shoelace formula)."""
    area = abs(signed_polygon_area(points))
    if not math.isfinite(area) or area < 0:
        return 0.0
    return area


def polygon_perimeter(points: Sequence[Point]) -> float:
    """Sum of edge lengths including the closing edge."""
    n = len(points)
    if n < 2:
        return 0.0

    perimeter = 0.0
    for i in range(n):
        j = (i + 1) % n
        perimeter += points[i].distance_to(points[j])
    return perimeter


def _average_point(points: Sequence[P], cls: type) -> P:
    if not points:
        return cls(0.0, 0.0)
    sum_x = sum(p.x for p in points)
    sum_y = sum(p.y for p in points)
    return type(points[0])(sum_x / len(points), sum_y / len(points))


def polygon_centroid(points: Sequence[P], cls: type = Point) -> P:
    """
    Find the centroid of a polygon.

    Falls back to the average of the points for fewer than 3 points or when
    the area is zero (degenerate or self-cancelling polygons).

    Args:
        points: Polygon vertices
        cls: Point class of the (0, 0) result for an empty polygon
    """
    n = len(points)
    if n < 3:
        return _average_point(points, cls)

    cx = 0.0
    cy = 0.0
    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        cross = points[i].x * points[j].y - points[j].x * points[i].y
        cx += (points[i].x + points[j].x) * cross
        cy += (points[i].y + points[j].y) * cross
        area += cross
    area /= 2

    try:
        cx /= (6 * area)
        cy /= (6 * area)
    except ZeroDivisionError:
        cx = cy = math.nan

    if not (math.isfinite(cx) and math.isfinite(cy)):
        logger.debug("Centroid undefined for zero-area polygon, using point average")
        return _average_point(points, type(points[0]))

    return type(points[0])(cx, cy)


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """
    Check if a point is inside a polygon using ray casting (even-odd rule).

    Points exactly on an edge get whatever the crossing test yields.
    """
    n = len(polygon)
    if n < 3:
        return False

    inside = False
    j = n - 1
    for i in range(n):
        if ((polygon[i].y > point.y) != (polygon[j].y > point.y) and
            point.x < (polygon[j].x - polygon[i].x) *
            (point.y - polygon[i].y) / (polygon[j].y - polygon[i].y) +
            polygon[i].x):
            inside = not inside
        j = i

    return inside


def polygon_bounding_box(points: Sequence[Point]) -> BoundingBox:
    """Axis-aligned bounds of the points (all zero for no points)."""
    if not points:
        return BoundingBox(0, 0, 0, 0)
    return BoundingBox(
        min_x=min(p.x for p in points),
        min_y=min(p.y for p in points),
        max_x=max(p.x for p in points),
        max_y=max(p.y for p in points)
    )


def point_on_segment(point: Point, start: Point, end: Point,
                     tolerance: float = 1e-10) -> bool:
    """Check if a point lies on the segment start-end."""
    cross = ((point.y - start.y) * (end.x - start.x) -
             (point.x - start.x) * (end.y - start.y))
    if abs(cross) > tolerance:
        return False

    dot = ((point.x - start.x) * (end.x - start.x) +
           (point.y - start.y) * (end.y - start.y))
    if dot < 0:
        return False

    squared_length = (end.x - start.x) ** 2 + (end.y - start.y) ** 2
    return dot <= squared_length


def convex_hull(points: Sequence[P]) -> List[P]:
    """
    Convex hull of a point set, counter-clockwise (Y-up frame).

    Three or fewer points are returned unchanged. If all points are
    collinear the two extreme points are returned.
    """
    if len(points) <= 3:
        return list(points)

    coords = np.array([(p.x, p.y) for p in points], dtype=np.float64)
    try:
        hull = ConvexHull(coords)
    except QhullError:
        # Flat input; the hull is the segment between the extreme points
        order = np.lexsort((coords[:, 1], coords[:, 0]))
        first, last = points[int(order[0])], points[int(order[-1])]
        if first == last:
            return [first]
        return [first, last]

    return [points[int(i)] for i in hull.vertices]
